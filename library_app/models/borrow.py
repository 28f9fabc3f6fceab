from datetime import timedelta

from library_app.extensions import db
from library_app.utils.constants import BORROW_BORROWED, BORROW_OVERDUE, LOAN_PERIOD_DAYS
from library_app.utils.dates import start_of_day, utcnow


def _default_due_date(context):
    borrow_date = context.get_current_parameters().get("borrow_date") or utcnow()
    return borrow_date + timedelta(days=LOAN_PERIOD_DAYS)


class Borrow(db.Model):
    __tablename__ = "borrows"

    id = db.Column(db.Integer, primary_key=True)

    user_id = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=False, index=True)
    # kept as history when the book is deleted
    book_id = db.Column(db.Integer, db.ForeignKey("books.id", ondelete="SET NULL"), nullable=True, index=True)

    borrow_date = db.Column(db.DateTime, nullable=False, default=utcnow)
    due_date = db.Column(db.DateTime, nullable=False, default=_default_due_date, index=True)
    return_date = db.Column(db.DateTime, nullable=True)

    # borrowed/returned/overdue/lost/cancelled; "overdue" is read through effective_status()
    status = db.Column(db.String(20), nullable=False, default=BORROW_BORROWED, index=True)
    fine = db.Column(db.Numeric(10, 2), nullable=False, default=0)

    extended = db.Column(db.Boolean, nullable=False, default=False)
    extension_count = db.Column(db.Integer, nullable=False, default=0)
    notes = db.Column(db.String(500), nullable=True)

    created_at = db.Column(db.DateTime, nullable=False, default=utcnow)
    updated_at = db.Column(db.DateTime, nullable=False, default=utcnow, onupdate=utcnow)

    user = db.relationship("User", backref="borrows")
    book = db.relationship("Book", backref="borrows")

    __table_args__ = (
        db.Index("ix_borrows_user_status", "user_id", "status"),
        db.Index("ix_borrows_book_status", "book_id", "status"),
        db.Index("ix_borrows_status_due", "status", "due_date"),
    )

    def is_overdue(self, now=None) -> bool:
        now = now or utcnow()
        return self.status == BORROW_BORROWED and self.due_date is not None and self.due_date < now

    def effective_status(self, now=None) -> str:
        """Stored status, with a late ``borrowed`` record reported as ``overdue``."""
        if self.is_overdue(now):
            return BORROW_OVERDUE
        return self.status

    def days_overdue(self, now=None) -> int:
        if self.status != BORROW_BORROWED or not self.due_date:
            return 0
        today = start_of_day(now or utcnow())
        due = start_of_day(self.due_date)
        return max(0, (today - due).days)
