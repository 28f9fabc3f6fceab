from datetime import timedelta
from decimal import Decimal, InvalidOperation

from flask import current_app

from library_app.errors import InvalidArgumentError, InvalidStateError, NotFoundError
from library_app.models.fine import Fine
from library_app.repositories.borrow_repo import BorrowRepo
from library_app.repositories.fine_repo import FineRepo
from library_app.services.access_policy import AccessPolicy
from library_app.services.mail_service import MailService
from library_app.utils.constants import (
    FINE_PAID,
    FINE_PARTIAL,
    FINE_PAYMENT_WINDOW_DAYS,
    FINE_PENDING,
    FINE_STATUSES,
    FINE_WAIVED,
)
from library_app.utils.dates import utcnow
from library_app.utils.fines import calculate_fine

CENTS = Decimal("0.01")


def _money(value) -> Decimal:
    return Decimal(str(value or 0)).quantize(CENTS)


class FineService:
    @staticmethod
    def sweep_overdue(now=None, notify: bool = True):
        """
        Creates one pending Fine for every late, unreturned borrow that has none.
        An existing fine that is still pending with nothing paid follows the
        current amount. Running it again never duplicates a fine.

        return: (created_fines, refreshed_count)
        """
        now = now or utcnow()
        overdue = BorrowRepo.find_overdue(now)

        created = []
        refreshed = 0

        for borrow in overdue:
            amount = _money(calculate_fine(borrow.due_date, now))

            existing = FineRepo.get_by_borrow(borrow.id)
            if existing:
                if existing.status == FINE_PENDING and not existing.paid_amount and _money(existing.amount) != amount:
                    existing.amount = amount
                    refreshed += 1
                continue

            fine = Fine(
                borrow_id=borrow.id,
                user_id=borrow.user_id,
                amount=amount,
                paid_amount=Decimal("0.00"),
                status=FINE_PENDING,
                due_date=now + timedelta(days=FINE_PAYMENT_WINDOW_DAYS),
            )
            FineRepo.add(fine)
            created.append(fine)

        # ids are needed for the notification log
        FineRepo.flush()

        if notify:
            for fine in created:
                MailService.send_fine_notice(fine)

        FineRepo.commit()

        current_app.logger.info(
            f"[fine_sweep] overdue={len(overdue)} created={len(created)} refreshed={refreshed}"
        )
        return created, refreshed

    @staticmethod
    def get_fine(fine_id: int) -> Fine:
        fine = FineRepo.get(fine_id)
        if not fine:
            raise NotFoundError("Fine not found")
        return fine

    @staticmethod
    def list_user_fines(user_id: int):
        return FineRepo.list_by_user(user_id)

    @staticmethod
    def list_all(status=None):
        status = (status or "").strip().lower() or None
        if status and status not in FINE_STATUSES:
            raise InvalidArgumentError(f"status must be one of: {', '.join(FINE_STATUSES)}")
        return FineRepo.list_all(status=status)

    @staticmethod
    def pay_fine(fine_id: int, amount, actor_id: int, actor_role: str, now=None) -> Fine:
        try:
            amount = _money(amount)
        except (InvalidOperation, ValueError):
            raise InvalidArgumentError("amount must be a number")
        if amount <= 0:
            raise InvalidArgumentError("amount must be greater than 0")

        fine = FineService.get_fine(fine_id)
        AccessPolicy.ensure_owner_or_staff(fine.user_id, actor_id, actor_role, "Not authorized to pay this fine")

        if fine.status not in (FINE_PENDING, FINE_PARTIAL):
            raise InvalidStateError(f"Fine is already {fine.status}")

        remaining = fine.remaining
        if amount > remaining:
            raise InvalidArgumentError(f"amount exceeds the remaining balance ({remaining})")

        fine.paid_amount = _money(fine.paid_amount) + amount
        fine.status = FINE_PAID if fine.paid_amount >= _money(fine.amount) else FINE_PARTIAL
        fine.payment_date = now or utcnow()
        FineRepo.commit()

        current_app.logger.info(f"[fine] fine={fine.id} paid {amount} by user={actor_id} status={fine.status}")
        return fine

    @staticmethod
    def waive_fine(fine_id: int, notes=None) -> Fine:
        fine = FineService.get_fine(fine_id)
        if fine.status not in (FINE_PENDING, FINE_PARTIAL):
            raise InvalidStateError(f"Fine is already {fine.status}")

        fine.status = FINE_WAIVED
        if notes:
            fine.notes = str(notes)[:500]
        FineRepo.commit()

        current_app.logger.info(f"[fine] fine={fine.id} waived")
        return fine
