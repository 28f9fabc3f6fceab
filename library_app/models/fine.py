from decimal import Decimal

from library_app.extensions import db
from library_app.utils.constants import FINE_PENDING
from library_app.utils.dates import utcnow


class Fine(db.Model):
    __tablename__ = "fines"

    id = db.Column(db.Integer, primary_key=True)

    # one fine per borrow
    borrow_id = db.Column(db.Integer, db.ForeignKey("borrows.id"), unique=True, nullable=False, index=True)
    user_id = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=False, index=True)

    amount = db.Column(db.Numeric(10, 2), nullable=False, default=0)
    paid_amount = db.Column(db.Numeric(10, 2), nullable=False, default=0)

    status = db.Column(db.String(20), nullable=False, default=FINE_PENDING, index=True)

    # payment deadline
    due_date = db.Column(db.DateTime, nullable=False)
    payment_date = db.Column(db.DateTime, nullable=True)
    notes = db.Column(db.String(500), nullable=True)

    created_at = db.Column(db.DateTime, nullable=False, default=utcnow)
    updated_at = db.Column(db.DateTime, nullable=False, default=utcnow, onupdate=utcnow)

    borrow = db.relationship("Borrow", backref=db.backref("fine_record", uselist=False))
    user = db.relationship("User", backref="fines")

    @property
    def remaining(self) -> Decimal:
        return max(Decimal("0"), Decimal(str(self.amount or 0)) - Decimal(str(self.paid_amount or 0)))

    def is_overdue(self, now=None) -> bool:
        return self.status == FINE_PENDING and self.due_date < (now or utcnow())
