import pytest

from library_app.errors import InvalidArgumentError, InvalidStateError, NoCopiesAvailableError, NotFoundError
from library_app.services.book_service import BookService
from library_app.services.borrow_service import BorrowService


def _payload(**overrides):
    data = {
        "title": "Dune",
        "author": "Frank Herbert",
        "isbn": "9780441013593",
        "category": "Fiction",
        "publication_year": 1965,
        "total_copies": 3,
    }
    data.update(overrides)
    return data


def test_create_defaults_available_to_total(librarian):
    book = BookService.create_book(_payload(), actor_id=librarian.id)
    assert book.available_copies == 3
    assert book.added_by_id == librarian.id


def test_create_clamps_available_to_total(app):
    book = BookService.create_book(_payload(available_copies=10))
    assert book.available_copies == 3


@pytest.mark.parametrize(
    "overrides",
    [
        {"isbn": "12345"},
        {"total_copies": 0},
        {"available_copies": -1},
        {"category": "Cooking"},
        {"publication_year": 999},
        {"title": "  "},
    ],
)
def test_create_rejects_invalid_input(app, overrides):
    with pytest.raises(InvalidArgumentError):
        BookService.create_book(_payload(**overrides))


def test_duplicate_isbn_rejected(app):
    BookService.create_book(_payload())
    with pytest.raises(InvalidArgumentError):
        BookService.create_book(_payload(title="Another"))


def test_update_ignores_unknown_fields_and_clamps(make_book):
    book = make_book(total=5, available=5)
    updated = BookService.update_book(book.id, {"total_copies": 2, "id": 999, "added_by_id": 7})
    assert updated.id == book.id
    assert updated.total_copies == 2
    assert updated.available_copies == 2
    assert updated.added_by_id is None


def test_update_invalid_value_changes_nothing(make_book):
    book = make_book(title="Original", total=2)
    with pytest.raises(InvalidArgumentError):
        BookService.update_book(book.id, {"title": "Changed", "total_copies": 0})
    assert BookService.get_book(book.id).title == "Original"


def test_release_never_exceeds_total(make_book):
    book = make_book(total=2, available=2)
    BookService.release_copy(book.id)
    assert BookService.get_book(book.id).available_copies == 2


def test_reserve_with_no_stock(make_book):
    book = make_book(total=1, available=0)
    with pytest.raises(NoCopiesAvailableError):
        BookService.reserve_copy(book.id)


def test_get_missing_book(app):
    with pytest.raises(NotFoundError):
        BookService.get_book(404)


def test_list_filters_sorts_and_paginates(make_book):
    make_book(title="Zebra Tales", author="Xavier", total=1, available=0)
    make_book(title="Apple Orchard", author="Yvonne")
    make_book(title="Mango Days", author="Zed", category="History")

    page = BookService.list_books(sort="title")
    assert [b.title for b in page.items] == ["Apple Orchard", "Mango Days", "Zebra Tales"]

    page = BookService.list_books(sort="-title", limit=2)
    assert [b.title for b in page.items] == ["Zebra Tales", "Mango Days"]
    assert page.total == 3 and page.pages == 2

    assert [b.title for b in BookService.list_books(search="orch").items] == ["Apple Orchard"]
    assert [b.title for b in BookService.list_books(category="History").items] == ["Mango Days"]
    assert len(BookService.list_books(available="true").items) == 2
    assert [b.title for b in BookService.list_books(available="false").items] == ["Zebra Tales"]


def test_list_rejects_unknown_sort(app):
    with pytest.raises(InvalidArgumentError):
        BookService.list_books(sort="password")


def test_delete_refused_while_borrowed(make_book, member):
    book = make_book(total=1)
    BorrowService.borrow_book(member.id, book.id)
    with pytest.raises(InvalidStateError):
        BookService.delete_book(book.id)


def test_delete_keeps_borrow_history(make_book, member, librarian):
    book = make_book(total=1)
    borrow = BorrowService.borrow_book(member.id, book.id)
    BorrowService.return_book(borrow.id, member.id, member.role)

    BookService.delete_book(book.id)

    kept = BorrowService.get_borrow(borrow.id, librarian.id, librarian.role)
    assert kept.book_id is None
    assert kept.status == "returned"
