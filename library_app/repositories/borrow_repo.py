from datetime import datetime

from library_app.extensions import db
from library_app.models.borrow import Borrow
from library_app.utils.constants import BORROW_BORROWED


class BorrowRepo:
    @staticmethod
    def get(borrow_id: int):
        return db.session.get(Borrow, borrow_id)

    @staticmethod
    def list_by_user(user_id: int):
        return Borrow.query.filter_by(user_id=user_id).order_by(Borrow.borrow_date.desc(), Borrow.id.desc()).all()

    @staticmethod
    def list_all():
        return Borrow.query.order_by(Borrow.borrow_date.desc(), Borrow.id.desc()).all()

    @staticmethod
    def find_active(user_id: int, book_id: int):
        return Borrow.query.filter_by(user_id=user_id, book_id=book_id, status=BORROW_BORROWED).first()

    @staticmethod
    def count_active_by_user(user_id: int) -> int:
        return Borrow.query.filter_by(user_id=user_id, status=BORROW_BORROWED).count()

    @staticmethod
    def count_active_by_book(book_id: int) -> int:
        return Borrow.query.filter_by(book_id=book_id, status=BORROW_BORROWED).count()

    @staticmethod
    def create(borrow: Borrow, commit: bool = True):
        db.session.add(borrow)
        if commit:
            db.session.commit()
        return borrow

    @staticmethod
    def commit():
        db.session.commit()

    @staticmethod
    def find_overdue(cutoff: datetime):
        """Stored-``borrowed`` records due before ``cutoff``, earliest due first."""
        return (
            Borrow.query.filter(Borrow.status == BORROW_BORROWED, Borrow.due_date < cutoff)
            .order_by(Borrow.due_date.asc(), Borrow.id.asc())
            .all()
        )
