from flask import current_app
from flask_jwt_extended import create_access_token

from library_app.errors import AccountLockedError, AuthenticationError, ForbiddenError, InvalidArgumentError, ReservedNameError
from library_app.models.user import User
from library_app.repositories.user_repo import UserRepo
from library_app.utils.constants import (
    LOCKOUT_MINUTES,
    MIN_PASSWORD_LENGTH,
    RESERVED_USERNAMES,
    ROLE_ADMIN,
    ROLE_LIBRARIAN,
    ROLE_MEMBER,
)
from library_app.utils.dates import utcnow


class AuthService:
    @staticmethod
    def register(name: str, username: str, password: str, email=None, phone=None, bio=None, role: str = ROLE_MEMBER):
        name = (name or "").strip()
        username = (username or "").strip().lower()
        email = (email or "").strip().lower() or None

        if not name:
            raise InvalidArgumentError("Name is required")
        if not username:
            raise InvalidArgumentError("Username is required")
        if not password or len(password) < MIN_PASSWORD_LENGTH:
            raise InvalidArgumentError(f"Password must be at least {MIN_PASSWORD_LENGTH} characters")
        if username in RESERVED_USERNAMES:
            raise ReservedNameError("This username is reserved. Contact system administrator.")

        # admins are never created through registration
        role = (role or ROLE_MEMBER).strip().lower()
        if role == ROLE_ADMIN:
            raise ForbiddenError("Cannot register as admin. Contact system administrator.")
        if role not in (ROLE_MEMBER, ROLE_LIBRARIAN):
            raise ForbiddenError('Only "member" or "librarian" roles are allowed during registration.')

        if UserRepo.get_by_username(username):
            raise InvalidArgumentError("Username already taken")
        if email and UserRepo.get_by_email(email):
            raise InvalidArgumentError("Email already in use")

        user = User(
            name=name,
            username=username,
            email=email,
            phone=(phone or "").strip(),
            bio=(bio or "").strip(),
            role=role,
        )
        user.set_password(password)
        UserRepo.create(user)
        current_app.logger.info(f"[auth] registered user={user.id} username={user.username} role={user.role}")
        return user

    @staticmethod
    def issue_token(user: User) -> str:
        return create_access_token(
            identity=str(user.id),
            additional_claims={"role": user.role, "username": user.username},
        )

    @staticmethod
    def login(username: str, password: str, now=None):
        username = (username or "").strip().lower()
        if not username or not password:
            raise InvalidArgumentError("Username and password are required")

        now = now or utcnow()
        user = UserRepo.get_by_username(username)
        if not user:
            current_app.logger.info(f"[auth] login failed, unknown user {username}")
            raise AuthenticationError()

        if user.is_locked(now):
            current_app.logger.warning(f"[auth] account locked for {user.username}")
            raise AccountLockedError(f"Too many failed attempts. Try again in {LOCKOUT_MINUTES} minutes.")

        if not user.check_password(password):
            user.failed_login_attempts = (user.failed_login_attempts or 0) + 1
            user.last_failed_login = now
            UserRepo.commit()
            current_app.logger.info(
                f"[auth] password mismatch for {user.username} (attempt {user.failed_login_attempts})"
            )
            raise AuthenticationError()

        if not user.is_active:
            raise ForbiddenError("Account is deactivated")

        user.failed_login_attempts = 0
        user.last_login = now
        UserRepo.commit()

        current_app.logger.info(f"[auth] {user.username} logged in")
        return AuthService.issue_token(user), user
