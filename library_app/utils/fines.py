"""Overdue fine policy.

Progressive daily rate: the first ``HIGH_RATE_THRESHOLD_DAYS`` late days
cost ``BASE_RATE`` each, every later day costs ``HIGH_RATE``. The total is
capped at ``MAX_FINE``. Both dates are compared as calendar days so the
time of day of either event does not matter.
"""
import logging

from library_app.utils.dates import to_date, utcnow

logger = logging.getLogger(__name__)

BASE_RATE = 5
HIGH_RATE = 10
HIGH_RATE_THRESHOLD_DAYS = 7
MAX_FINE = 500  # 0 disables the cap
MIN_FINE = 0


def calculate_fine(due_date, return_date=None) -> int:
    """Fine owed for returning on ``return_date`` an item due on ``due_date``.

    ``return_date`` defaults to now. Dates that cannot be parsed give a
    fine of 0 so a return is never blocked by bad data.
    """
    if return_date is None:
        return_date = utcnow()

    try:
        due = to_date(due_date)
        returned = to_date(return_date)
    except (TypeError, ValueError):
        logger.warning(
            "[calculate_fine] Invalid date provided: due_date=%r return_date=%r",
            due_date,
            return_date,
        )
        return 0

    if returned <= due:
        return 0

    days_late = (returned - due).days

    if days_late <= HIGH_RATE_THRESHOLD_DAYS:
        fine = days_late * BASE_RATE
    else:
        fine = HIGH_RATE_THRESHOLD_DAYS * BASE_RATE + (days_late - HIGH_RATE_THRESHOLD_DAYS) * HIGH_RATE

    if MAX_FINE > 0 and fine > MAX_FINE:
        fine = MAX_FINE
    if fine < MIN_FINE:
        fine = MIN_FINE

    return fine
