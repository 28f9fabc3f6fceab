from sqlalchemy import event

from library_app.extensions import db
from library_app.utils.constants import DEFAULT_CATEGORY, DEFAULT_COVER_IMAGE
from library_app.utils.dates import utcnow


class Book(db.Model):
    __tablename__ = "books"

    id = db.Column(db.Integer, primary_key=True)
    title = db.Column(db.String(200), nullable=False, index=True)
    author = db.Column(db.String(100), nullable=False, index=True)
    isbn = db.Column(db.String(13), unique=True, nullable=False, index=True)
    category = db.Column(db.String(30), nullable=False, default=DEFAULT_CATEGORY, index=True)
    publication_year = db.Column(db.Integer, nullable=False, index=True)

    total_copies = db.Column(db.Integer, nullable=False, default=1)
    available_copies = db.Column(db.Integer, nullable=False, default=1)

    cover_image = db.Column(db.String(500), nullable=False, default=DEFAULT_COVER_IMAGE)
    description = db.Column(db.String(1500), nullable=True)

    added_by_id = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=True, index=True)
    updated_by_id = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=True)

    created_at = db.Column(db.DateTime, nullable=False, default=utcnow)
    updated_at = db.Column(db.DateTime, nullable=False, default=utcnow, onupdate=utcnow)

    @property
    def is_available(self) -> bool:
        return (self.available_copies or 0) > 0


@event.listens_for(Book, "before_insert")
@event.listens_for(Book, "before_update")
def _stock_guard(_mapper, _connection, book):
    # available_copies stays within [0, total_copies] on every write
    if book.available_copies is None:
        book.available_copies = book.total_copies
    if book.total_copies is not None and book.available_copies > book.total_copies:
        book.available_copies = book.total_copies
    if book.available_copies < 0:
        book.available_copies = 0
