from datetime import timedelta

import pytest

from library_app.errors import (
    AccountLockedError,
    AuthenticationError,
    ForbiddenError,
    InvalidArgumentError,
    ReservedNameError,
)
from library_app.extensions import db
from library_app.services.auth_service import AuthService
from library_app.services.user_service import UserService
from library_app.utils.dates import utcnow


def test_register_defaults_to_member(app):
    user = AuthService.register("Carol Reader", "Carol", "secret123", email="Carol@Example.com")
    assert user.username == "carol"
    assert user.email == "carol@example.com"
    assert user.role == "member"
    assert user.check_password("secret123")


def test_register_librarian_allowed(app):
    assert AuthService.register("Lib", "lib2", "secret123", role="librarian").role == "librarian"


def test_register_admin_refused(app):
    with pytest.raises(ForbiddenError):
        AuthService.register("Eve", "eve", "secret123", role="admin")


def test_register_reserved_name(app):
    with pytest.raises(ReservedNameError):
        AuthService.register("Eve", "Admin", "secret123")


@pytest.mark.parametrize(
    "name, username, password",
    [("", "x", "secret123"), ("X", "", "secret123"), ("X", "x", "123")],
)
def test_register_validation(app, name, username, password):
    with pytest.raises(InvalidArgumentError):
        AuthService.register(name, username, password)


def test_register_duplicate_username(member):
    with pytest.raises(InvalidArgumentError):
        AuthService.register("Other Alice", "ALICE", "secret123")


def test_login_resets_counter(member):
    member.failed_login_attempts = 3
    db.session.commit()

    token, user = AuthService.login("alice", "secret123")

    assert token
    assert user.failed_login_attempts == 0
    assert user.last_login is not None


def test_wrong_password(member):
    with pytest.raises(AuthenticationError):
        AuthService.login("alice", "wrong-password")
    assert member.failed_login_attempts == 1


def test_unknown_user(app):
    with pytest.raises(AuthenticationError):
        AuthService.login("nobody", "secret123")


def test_lockout_after_repeated_failures(member):
    now = utcnow()
    for _ in range(5):
        with pytest.raises(AuthenticationError):
            AuthService.login("alice", "bad-password", now=now)

    with pytest.raises(AccountLockedError):
        AuthService.login("alice", "secret123", now=now + timedelta(minutes=1))

    token, _ = AuthService.login("alice", "secret123", now=now + timedelta(minutes=16))
    assert token


def test_inactive_account(member):
    member.is_active = False
    db.session.commit()
    with pytest.raises(ForbiddenError):
        AuthService.login("alice", "secret123")


def test_change_password(member):
    with pytest.raises(AuthenticationError):
        UserService.change_password(member.id, "wrong", "newsecret")
    with pytest.raises(InvalidArgumentError):
        UserService.change_password(member.id, "secret123", "123")

    UserService.change_password(member.id, "secret123", "newsecret")
    assert member.check_password("newsecret")
