import atexit
import os

from apscheduler.schedulers.background import BackgroundScheduler
from apscheduler.triggers.interval import IntervalTrigger

JOB_ID = "fine_sweep_job"


def start_scheduler(app):
    """
    Runs the fine sweep every FINE_SWEEP_INTERVAL_MINUTES.
    Disabled when the interval is 0 and under TESTING.
    """
    minutes = int(app.config.get("FINE_SWEEP_INTERVAL_MINUTES") or 0)
    if minutes <= 0 or app.testing:
        app.logger.info("[scheduler] fine sweep scheduler disabled")
        return None

    # the debug reloader starts two processes; only the child serves requests
    if app.debug and os.environ.get("WERKZEUG_RUN_MAIN") != "true":
        app.logger.info("[scheduler] reloader parent process, scheduler skipped")
        return None

    from library_app.tasks.fine_sweep import run_fine_sweep_job

    scheduler = BackgroundScheduler(timezone="UTC")
    scheduler.add_job(
        func=run_fine_sweep_job,
        args=[app],
        trigger=IntervalTrigger(minutes=minutes),
        id=JOB_ID,
        replace_existing=True,
        max_instances=1,
        coalesce=True,
        misfire_grace_time=120,
    )
    scheduler.start()
    app.extensions["apscheduler"] = scheduler
    app.logger.info(f"[scheduler] fine sweep every {minutes} minute(s)")

    atexit.register(lambda: scheduler.shutdown(wait=False) if scheduler.running else None)
    return scheduler
