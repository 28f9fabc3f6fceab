from sqlalchemy import or_

from library_app.extensions import db
from library_app.models.book import Book


class BookRepo:
    @staticmethod
    def get(book_id: int):
        return db.session.get(Book, book_id)

    @staticmethod
    def get_by_isbn(isbn: str):
        return Book.query.filter_by(isbn=isbn).first()

    @staticmethod
    def search(search=None, category=None, available=None, sort_column=None, descending=False):
        q = Book.query
        if search:
            like = f"%{search}%"
            q = q.filter(or_(Book.title.ilike(like), Book.author.ilike(like), Book.isbn.ilike(like)))
        if category:
            q = q.filter(Book.category == category)
        if available is True:
            q = q.filter(Book.available_copies > 0)
        elif available is False:
            q = q.filter(Book.available_copies == 0)
        if sort_column is not None:
            q = q.order_by(sort_column.desc() if descending else sort_column.asc())
        return q

    @staticmethod
    def create(book: Book):
        db.session.add(book)
        db.session.commit()
        return book

    @staticmethod
    def update():
        db.session.commit()

    @staticmethod
    def delete(book: Book):
        db.session.delete(book)
        db.session.commit()
