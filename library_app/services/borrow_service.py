from datetime import timedelta

from flask import current_app

from library_app.errors import (
    AlreadyReturnedError,
    BorrowLimitExceededError,
    DuplicateBorrowError,
    InvalidArgumentError,
    InvalidStateError,
    NoCopiesAvailableError,
    NotFoundError,
)
from library_app.models.borrow import Borrow
from library_app.repositories.book_repo import BookRepo
from library_app.repositories.borrow_repo import BorrowRepo
from library_app.services.access_policy import AccessPolicy
from library_app.services.book_service import BookService
from library_app.utils.constants import (
    BORROW_BORROWED,
    BORROW_CANCELLED,
    BORROW_LOST,
    BORROW_RETURNED,
    DEFAULT_EXTENSION_DAYS,
    LOAN_PERIOD_DAYS,
    MAX_ACTIVE_BORROWS,
    MAX_ROW_ID,
)
from library_app.utils.dates import start_of_day, utcnow
from library_app.utils.fines import calculate_fine


class BorrowService:
    """Borrow / return / extend lifecycle.

    The caller's identity is passed in explicitly by the controllers.
    ``now`` can be supplied to make the time-dependent rules deterministic.

    The duplicate-borrow and active-borrow-limit checks are a read followed
    by a write; they hold for serialized requests only.
    """

    @staticmethod
    def _get_or_404(borrow_id) -> Borrow:
        borrow = BorrowRepo.get(borrow_id)
        if not borrow:
            raise NotFoundError("Borrow record not found")
        return borrow

    @staticmethod
    def borrow_book(user_id: int, book_id, now=None) -> Borrow:
        if book_id is None or book_id == "":
            raise InvalidArgumentError("book_id is required")
        try:
            book_id = int(book_id)
        except (TypeError, ValueError):
            raise InvalidArgumentError("book_id must be an integer")
        if not 0 < book_id <= MAX_ROW_ID:
            raise NotFoundError("Book not found")

        book = BookRepo.get(book_id)
        if not book:
            raise NotFoundError("Book not found")

        if book.available_copies is None or book.available_copies <= 0:
            raise NoCopiesAvailableError()

        if BorrowRepo.find_active(user_id, book_id):
            raise DuplicateBorrowError()

        if BorrowRepo.count_active_by_user(user_id) >= MAX_ACTIVE_BORROWS:
            raise BorrowLimitExceededError(f"Maximum active borrows reached ({MAX_ACTIVE_BORROWS})")

        now = now or utcnow()
        borrow = Borrow(
            user_id=user_id,
            book_id=book_id,
            borrow_date=now,
            due_date=now + timedelta(days=LOAN_PERIOD_DAYS),
            status=BORROW_BORROWED,
        )

        # record + stock change go out in one commit
        BorrowRepo.create(borrow, commit=False)
        BookService.reserve_copy(book_id, commit=False)
        BorrowRepo.commit()

        current_app.logger.info(
            f"[borrow] user={user_id} borrowed book={book_id} borrow={borrow.id} due={borrow.due_date:%Y-%m-%d}"
        )
        return borrow

    @staticmethod
    def return_book(borrow_id: int, actor_id: int, actor_role: str, now=None) -> Borrow:
        borrow = BorrowService._get_or_404(borrow_id)

        if borrow.status == BORROW_RETURNED:
            raise AlreadyReturnedError()

        AccessPolicy.ensure_owner_or_staff(
            borrow.user_id, actor_id, actor_role, "Not authorized to return this book"
        )

        if borrow.status in (BORROW_LOST, BORROW_CANCELLED):
            raise InvalidStateError(f"Cannot return a {borrow.status} borrow")

        borrow.return_date = now or utcnow()
        borrow.fine = calculate_fine(borrow.due_date, borrow.return_date)
        borrow.status = BORROW_RETURNED

        BookService.release_copy(borrow.book_id, commit=False)
        BorrowRepo.commit()

        current_app.logger.info(
            f"[borrow] borrow={borrow.id} returned by user={actor_id} ({actor_role}) fine={borrow.fine}"
        )
        return borrow

    @staticmethod
    def extend_due_date(borrow_id: int, days=None) -> Borrow:
        if days is None:
            days = DEFAULT_EXTENSION_DAYS
        if isinstance(days, bool):
            raise InvalidArgumentError("Extension days must be a whole number")
        try:
            days = int(days)
        except (TypeError, ValueError):
            raise InvalidArgumentError("Extension days must be a whole number")
        if days <= 0:
            raise InvalidArgumentError("Extension days must be greater than 0")

        borrow = BorrowService._get_or_404(borrow_id)

        # stored status; a late but unreturned borrow is still "borrowed" here
        if borrow.status != BORROW_BORROWED:
            raise InvalidStateError("Can only extend active borrowed books")

        try:
            borrow.due_date = borrow.due_date + timedelta(days=days)
        except OverflowError:
            raise InvalidArgumentError("Extension days out of range")
        borrow.extended = True
        borrow.extension_count = (borrow.extension_count or 0) + 1
        BorrowRepo.commit()

        current_app.logger.info(
            f"[borrow] borrow={borrow.id} extended by {days} day(s) to {borrow.due_date:%Y-%m-%d}"
        )
        return borrow

    @staticmethod
    def list_overdue(now=None):
        """``(borrow, days_overdue)`` pairs due before the start of today, earliest first."""
        now = now or utcnow()
        rows = BorrowRepo.find_overdue(start_of_day(now))
        return [(b, b.days_overdue(now)) for b in rows]

    @staticmethod
    def list_my_borrows(user_id: int):
        return BorrowRepo.list_by_user(user_id)

    @staticmethod
    def list_all():
        return BorrowRepo.list_all()

    @staticmethod
    def get_borrow(borrow_id: int, actor_id: int, actor_role: str) -> Borrow:
        borrow = BorrowService._get_or_404(borrow_id)
        AccessPolicy.ensure_owner_or_staff(
            borrow.user_id, actor_id, actor_role, "Not authorized to view this borrow"
        )
        return borrow

    @staticmethod
    def list_user_borrows(user_id: int, actor_id: int, actor_role: str):
        AccessPolicy.ensure_owner_or_staff(
            user_id, actor_id, actor_role, "Not authorized to view this user's borrow history"
        )
        return BorrowRepo.list_by_user(user_id)

    @staticmethod
    def mark_lost(borrow_id: int, notes=None) -> Borrow:
        """The copy stays out of stock."""
        borrow = BorrowService._get_or_404(borrow_id)
        if borrow.status != BORROW_BORROWED:
            raise InvalidStateError("Only borrowed books can be marked as lost")

        borrow.status = BORROW_LOST
        if notes:
            borrow.notes = str(notes)[:500]
        BorrowRepo.commit()

        current_app.logger.info(f"[borrow] borrow={borrow.id} marked lost")
        return borrow

    @staticmethod
    def cancel_borrow(borrow_id: int, notes=None) -> Borrow:
        borrow = BorrowService._get_or_404(borrow_id)
        if borrow.status != BORROW_BORROWED:
            raise InvalidStateError("Only borrowed books can be cancelled")

        borrow.status = BORROW_CANCELLED
        if notes:
            borrow.notes = str(notes)[:500]
        BookService.release_copy(borrow.book_id, commit=False)
        BorrowRepo.commit()

        current_app.logger.info(f"[borrow] borrow={borrow.id} cancelled")
        return borrow
