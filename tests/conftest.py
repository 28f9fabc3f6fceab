import pytest

from library_app import create_app
from library_app.config import TestConfig
from library_app.extensions import db
from library_app.models.book import Book
from library_app.models.user import User
from library_app.services.auth_service import AuthService


@pytest.fixture()
def app():
    app = create_app(TestConfig)
    with app.app_context():
        yield app
        db.session.remove()
        db.drop_all()


@pytest.fixture()
def client(app):
    return app.test_client()


def _make_user(username, role, email=None, name=None):
    user = User(
        name=name or username.title(),
        username=username,
        email=email or f"{username}@example.com",
        role=role,
    )
    user.set_password("secret123")
    db.session.add(user)
    db.session.commit()
    return user


@pytest.fixture()
def member(app):
    return _make_user("alice", "member", name="Alice Reader")


@pytest.fixture()
def other_member(app):
    return _make_user("bob", "member", name="Bob Reader")


@pytest.fixture()
def librarian(app):
    return _make_user("lib", "librarian", name="Libby Rarian")


@pytest.fixture()
def admin(app):
    return _make_user("admin", "admin", name="Ada Admin")


@pytest.fixture()
def auth_header():
    def _header(user):
        return {"Authorization": f"Bearer {AuthService.issue_token(user)}"}
    return _header


@pytest.fixture()
def make_book(app):
    counter = {"n": 0}

    def _make(title=None, total=1, available=None, **extra):
        counter["n"] += 1
        book = Book(
            title=title or f"Book {counter['n']}",
            author=extra.pop("author", "Some Author"),
            isbn=extra.pop("isbn", f"{9780000000000 + counter['n']}"),
            category=extra.pop("category", "Fiction"),
            publication_year=extra.pop("publication_year", 2001),
            total_copies=total,
            available_copies=total if available is None else available,
            **extra,
        )
        db.session.add(book)
        db.session.commit()
        return book

    return _make
