from datetime import datetime, timedelta
from decimal import Decimal

import pytest

from library_app.errors import ForbiddenError, InvalidArgumentError, InvalidStateError, NotFoundError
from library_app.extensions import mail
from library_app.models.fine import Fine
from library_app.models.notification_log import NotificationLog
from library_app.services.borrow_service import BorrowService
from library_app.services.fine_service import FineService

NOW = datetime(2024, 3, 1, 10, 0)


@pytest.fixture()
def late_borrow(make_book, member):
    book = make_book(title="Late Book", total=1)
    return BorrowService.borrow_book(member.id, book.id, now=NOW)


def test_sweep_creates_one_fine_per_late_borrow(late_borrow, member):
    # due Mar 15, swept Mar 20: 5 days late
    with mail.record_messages() as outbox:
        created, refreshed = FineService.sweep_overdue(now=NOW + timedelta(days=19))

    assert len(created) == 1 and refreshed == 0
    fine = created[0]
    assert fine.borrow_id == late_borrow.id
    assert fine.user_id == member.id
    assert fine.amount == Decimal("25.00")
    assert fine.status == "pending"
    assert fine.due_date == NOW + timedelta(days=26)

    assert len(outbox) == 1
    assert outbox[0].recipients == [member.email]
    assert "Late Book" in outbox[0].body


def test_sweep_is_idempotent(late_borrow):
    when = NOW + timedelta(days=19)
    FineService.sweep_overdue(now=when)
    created, refreshed = FineService.sweep_overdue(now=when)

    assert created == [] and refreshed == 0
    assert Fine.query.count() == 1
    assert NotificationLog.query.filter_by(success=True).count() == 1


def test_sweep_refreshes_unpaid_amount(late_borrow):
    FineService.sweep_overdue(now=NOW + timedelta(days=19))
    created, refreshed = FineService.sweep_overdue(now=NOW + timedelta(days=24))

    assert created == [] and refreshed == 1
    # 10 days late: 7 * 5 + 3 * 10
    assert Fine.query.one().amount == Decimal("65.00")


def test_sweep_leaves_partly_paid_fine_alone(late_borrow, member):
    created, _ = FineService.sweep_overdue(now=NOW + timedelta(days=19))
    FineService.pay_fine(created[0].id, 5, member.id, member.role)

    _, refreshed = FineService.sweep_overdue(now=NOW + timedelta(days=24))
    assert refreshed == 0
    assert Fine.query.one().amount == Decimal("25.00")


def test_sweep_ignores_returned_and_on_time_borrows(make_book, member):
    book = make_book(total=2)
    returned = BorrowService.borrow_book(member.id, book.id, now=NOW)
    BorrowService.return_book(returned.id, member.id, member.role, now=NOW + timedelta(days=20))

    created, _ = FineService.sweep_overdue(now=NOW + timedelta(days=30))
    assert created == []


def test_sweep_logs_missing_email(make_book, member):
    member.email = None
    book = make_book(total=1)
    BorrowService.borrow_book(member.id, book.id, now=NOW)

    FineService.sweep_overdue(now=NOW + timedelta(days=19))

    entry = NotificationLog.query.one()
    assert entry.success is False
    assert entry.error_message == "missing_email"


def test_partial_then_full_payment(late_borrow, member):
    fine = FineService.sweep_overdue(now=NOW + timedelta(days=19))[0][0]

    partial = FineService.pay_fine(fine.id, "10", member.id, member.role, now=NOW)
    assert partial.status == "partial"
    assert partial.remaining == Decimal("15.00")

    paid = FineService.pay_fine(fine.id, 15, member.id, member.role)
    assert paid.status == "paid"
    assert paid.payment_date is not None

    with pytest.raises(InvalidStateError):
        FineService.pay_fine(fine.id, 1, member.id, member.role)


@pytest.mark.parametrize("amount", [0, -5, "abc", None, 26])
def test_pay_rejects_bad_amount(late_borrow, member, amount):
    fine = FineService.sweep_overdue(now=NOW + timedelta(days=19))[0][0]
    with pytest.raises(InvalidArgumentError):
        FineService.pay_fine(fine.id, amount, member.id, member.role)


def test_only_owner_or_staff_pays(late_borrow, other_member, librarian):
    fine = FineService.sweep_overdue(now=NOW + timedelta(days=19))[0][0]
    with pytest.raises(ForbiddenError):
        FineService.pay_fine(fine.id, 5, other_member.id, other_member.role)
    assert FineService.pay_fine(fine.id, 5, librarian.id, librarian.role).status == "partial"


def test_waive(late_borrow):
    fine = FineService.sweep_overdue(now=NOW + timedelta(days=19))[0][0]

    waived = FineService.waive_fine(fine.id, "first offence")
    assert waived.status == "waived"
    assert waived.notes == "first offence"

    with pytest.raises(InvalidStateError):
        FineService.waive_fine(fine.id)


def test_missing_fine(app):
    with pytest.raises(NotFoundError):
        FineService.get_fine(1)


def test_listing(late_borrow, member, other_member):
    FineService.sweep_overdue(now=NOW + timedelta(days=19))
    assert len(FineService.list_user_fines(member.id)) == 1
    assert FineService.list_user_fines(other_member.id) == []
    assert len(FineService.list_all(status="pending")) == 1
    assert FineService.list_all(status="paid") == []
