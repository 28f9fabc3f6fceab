from datetime import timedelta

from library_app.models.fine import Fine
from library_app.services.borrow_service import BorrowService
from library_app.tasks.fine_sweep import run_fine_sweep_job
from library_app.tasks.scheduler import start_scheduler
from library_app.utils.dates import utcnow


def test_scheduler_disabled_under_testing(app):
    app.config["FINE_SWEEP_INTERVAL_MINUTES"] = 5
    assert start_scheduler(app) is None
    assert "apscheduler" not in app.extensions


def test_fine_sweep_job(app, member, make_book):
    book = make_book(total=1)
    BorrowService.borrow_book(member.id, book.id, now=utcnow() - timedelta(days=16))

    assert run_fine_sweep_job(app) == (1, 0)
    assert run_fine_sweep_job(app) == (0, 0)
    assert Fine.query.count() == 1
