import re

from flask import current_app

from library_app.errors import InvalidArgumentError, InvalidStateError, NoCopiesAvailableError, NotFoundError
from library_app.models.book import Book
from library_app.repositories.book_repo import BookRepo
from library_app.repositories.borrow_repo import BorrowRepo
from library_app.utils.constants import (
    BOOK_CATEGORIES,
    BOOK_SORT_FIELDS,
    BOOK_UPDATABLE_FIELDS,
    DEFAULT_CATEGORY,
    DEFAULT_COVER_IMAGE,
    DEFAULT_LIMIT,
    DEFAULT_PAGE,
    MAX_LIMIT,
)
from library_app.utils.dates import utcnow

ISBN_RE = re.compile(r"^(?:\d{10}|\d{13})$")
MIN_PUBLICATION_YEAR = 1000


def _to_int(value, field: str) -> int:
    if isinstance(value, bool):
        raise InvalidArgumentError(f"{field} must be an integer")
    try:
        return int(value)
    except (TypeError, ValueError):
        raise InvalidArgumentError(f"{field} must be an integer")


def _required_text(data: dict, field: str, max_length: int) -> str:
    value = (str(data.get(field) or "")).strip()
    if not value:
        raise InvalidArgumentError(f"{field} is required")
    if len(value) > max_length:
        raise InvalidArgumentError(f"{field} cannot exceed {max_length} characters")
    return value


class BookService:
    @staticmethod
    def _clean_isbn(value, book_id=None) -> str:
        isbn = (str(value or "")).strip()
        if not ISBN_RE.match(isbn):
            raise InvalidArgumentError(f"{isbn or value!r} is not a valid ISBN (10 or 13 digits)")
        existing = BookRepo.get_by_isbn(isbn)
        if existing and existing.id != book_id:
            raise InvalidArgumentError("A book with this ISBN already exists")
        return isbn

    @staticmethod
    def _clean_category(value) -> str:
        category = (str(value or "")).strip() or DEFAULT_CATEGORY
        if category not in BOOK_CATEGORIES:
            raise InvalidArgumentError(f"category must be one of: {', '.join(BOOK_CATEGORIES)}")
        return category

    @staticmethod
    def _clean_year(value) -> int:
        year = _to_int(value, "publication_year")
        max_year = utcnow().year + 2
        if year < MIN_PUBLICATION_YEAR or year > max_year:
            raise InvalidArgumentError(f"publication_year must be between {MIN_PUBLICATION_YEAR} and {max_year}")
        return year

    @staticmethod
    def _clean_total(value) -> int:
        total = _to_int(value, "total_copies")
        if total < 1:
            raise InvalidArgumentError("At least one copy is required")
        return total

    @staticmethod
    def _clean_available(value) -> int:
        available = _to_int(value, "available_copies")
        if available < 0:
            raise InvalidArgumentError("Available copies cannot be negative")
        return available

    @staticmethod
    def _clean_description(value):
        if value is None:
            return None
        text = str(value).strip()
        if len(text) > 1500:
            raise InvalidArgumentError("Description cannot exceed 1500 characters")
        return text

    @staticmethod
    def list_books(search=None, category=None, available=None, page=None, limit=None, sort="title"):
        page = max(DEFAULT_PAGE, _to_int(page or DEFAULT_PAGE, "page"))
        limit = min(MAX_LIMIT, max(1, _to_int(limit or DEFAULT_LIMIT, "limit")))

        sort = (sort or "title").strip()
        descending = sort.startswith("-")
        sort_name = sort.lstrip("-")
        if sort_name not in BOOK_SORT_FIELDS:
            raise InvalidArgumentError(f"sort must be one of: {', '.join(BOOK_SORT_FIELDS)}")

        if isinstance(available, str):
            available = available.strip().lower() == "true"

        q = BookRepo.search(
            search=(search or "").strip() or None,
            category=category,
            available=available,
            sort_column=getattr(Book, sort_name),
            descending=descending,
        )
        return q.paginate(page=page, per_page=limit, error_out=False)

    @staticmethod
    def get_book(book_id: int):
        book = BookRepo.get(book_id)
        if not book:
            raise NotFoundError("Book not found")
        return book

    @staticmethod
    def create_book(data: dict, actor_id=None):
        total = BookService._clean_total(data.get("total_copies"))
        available = data.get("available_copies")
        available = total if available is None else BookService._clean_available(available)

        if "publication_year" not in data:
            raise InvalidArgumentError("publication_year is required")

        book = Book(
            title=_required_text(data, "title", 200),
            author=_required_text(data, "author", 100),
            isbn=BookService._clean_isbn(data.get("isbn")),
            category=BookService._clean_category(data.get("category")),
            publication_year=BookService._clean_year(data.get("publication_year")),
            total_copies=total,
            available_copies=min(available, total),
            cover_image=str(data.get("cover_image") or DEFAULT_COVER_IMAGE).strip(),
            description=BookService._clean_description(data.get("description")),
            added_by_id=actor_id,
        )
        BookRepo.create(book)
        current_app.logger.info(f"[book] created id={book.id} isbn={book.isbn} by user={actor_id}")
        return book

    @staticmethod
    def update_book(book_id: int, data: dict, actor_id=None):
        book = BookService.get_book(book_id)

        cleaners = {
            "title": lambda v: _required_text({"title": v}, "title", 200),
            "author": lambda v: _required_text({"author": v}, "author", 100),
            "isbn": lambda v: BookService._clean_isbn(v, book_id=book.id),
            "category": BookService._clean_category,
            "publication_year": BookService._clean_year,
            "total_copies": BookService._clean_total,
            "available_copies": BookService._clean_available,
            "cover_image": lambda v: (str(v or "").strip() or DEFAULT_COVER_IMAGE),
            "description": BookService._clean_description,
        }

        # anything outside the allow-list is ignored
        changes = {
            field: cleaners[field](data[field])
            for field in BOOK_UPDATABLE_FIELDS
            if field in data and data[field] is not None
        }
        for field, value in changes.items():
            setattr(book, field, value)

        if book.available_copies > book.total_copies:
            book.available_copies = book.total_copies

        book.updated_by_id = actor_id
        BookRepo.update()
        return book

    @staticmethod
    def delete_book(book_id: int):
        book = BookService.get_book(book_id)
        if BorrowRepo.count_active_by_book(book.id) > 0:
            raise InvalidStateError("This book is currently borrowed. Returns must be completed first.")
        BookRepo.delete(book)
        current_app.logger.info(f"[book] deleted id={book_id}")

    @staticmethod
    def reserve_copy(book_id: int, commit: bool = True):
        book = BookRepo.get(book_id)
        if not book:
            raise NotFoundError("Book not found")
        if book.available_copies is None or book.available_copies <= 0:
            raise NoCopiesAvailableError()

        book.available_copies -= 1
        if commit:
            BookRepo.update()
        return book

    @staticmethod
    def release_copy(book_id: int, commit: bool = True):
        book = BookRepo.get(book_id)
        if not book:
            raise NotFoundError("Book not found")

        # min(total, available + 1)
        book.available_copies = min(book.total_copies, (book.available_copies or 0) + 1)
        if commit:
            BookRepo.update()
        return book
