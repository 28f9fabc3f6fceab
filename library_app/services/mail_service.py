from __future__ import annotations

from flask import current_app
from flask_mail import Message

from library_app.extensions import mail
from library_app.models.notification_log import NotificationLog
from library_app.repositories.notification_repo import NotificationRepo
from library_app.utils.dates import utcnow

FINE_NOTICE = "fine_notice"


class MailService:
    @staticmethod
    def send_email(to_email: str, subject: str, body: str) -> tuple[bool, str | None]:
        """
        return: (success, error_text)
        """
        try:
            msg = Message(subject=subject, recipients=[to_email], body=body)
            mail.send(msg)
            return True, None
        except Exception as e:
            current_app.logger.warning(f"[MailService] Mail could not be sent to {to_email}: {e}")
            return False, str(e)

    @staticmethod
    def log_notification(
        borrow_id: int | None,
        fine_id: int | None,
        notif_type: str,
        to_email: str | None,
        message: str,
        success: bool,
        error: str | None = None,
        commit: bool = False,  # no commit inside loops
    ) -> NotificationLog:
        row = NotificationLog(
            borrow_id=borrow_id,
            fine_id=fine_id,
            type=notif_type,
            email=to_email,
            message=message,
            success=bool(success),
            error_message=error,
            sent_at=utcnow(),
        )
        return NotificationRepo.log(row, commit=commit)

    @staticmethod
    def _fine_labels(fine):
        borrow = getattr(fine, "borrow", None)
        user = getattr(fine, "user", None)
        book = getattr(borrow, "book", None) if borrow else None

        to_email = getattr(user, "email", None) if user else None
        name = getattr(user, "name", None) or getattr(user, "username", None) or "Reader"
        book_title = getattr(book, "title", None) or f"Book #{getattr(borrow, 'book_id', '-')}"
        return to_email, name, book_title

    @staticmethod
    def send_fine_notice(fine) -> bool:
        """
        Tells the borrower about a new overdue fine and records the attempt.
        Leaves the commit to the caller.
        """
        if NotificationRepo.already_sent(fine.id, FINE_NOTICE):
            return False

        to_email, name, book_title = MailService._fine_labels(fine)
        borrow_due = fine.borrow.due_date if fine.borrow else None

        subject = "Library: overdue fine issued"
        body = (
            f"Hello {name},\n\n"
            f"'{book_title}' was due on {borrow_due:%Y-%m-%d} and has not been returned.\n"
            f"A fine of {fine.amount} has been issued. Please pay it by {fine.due_date:%Y-%m-%d}.\n\n"
            f"Returning the book as soon as possible keeps the fine from growing.\n"
        )

        if not to_email:
            MailService.log_notification(
                borrow_id=fine.borrow_id,
                fine_id=fine.id,
                notif_type=FINE_NOTICE,
                to_email=None,
                message="User has no email address",
                success=False,
                error="missing_email",
            )
            return False

        ok, err = MailService.send_email(to_email, subject, body)

        MailService.log_notification(
            borrow_id=fine.borrow_id,
            fine_id=fine.id,
            notif_type=FINE_NOTICE,
            to_email=to_email,
            message=body if ok else "Mail could not be sent",
            success=ok,
            error=err,
        )
        return ok
