from flask import current_app

from library_app.errors import AuthenticationError, ForbiddenError, InvalidArgumentError, InvalidStateError, NotFoundError
from library_app.repositories.borrow_repo import BorrowRepo
from library_app.repositories.user_repo import UserRepo
from library_app.services.access_policy import AccessPolicy
from library_app.utils.constants import MIN_PASSWORD_LENGTH, ROLES

USER_ADMIN_FIELDS = ("name", "username", "email", "phone", "profile_picture", "bio", "role", "is_active")


class UserService:
    @staticmethod
    def list_users():
        return UserRepo.list_all()

    @staticmethod
    def get_user(user_id: int, actor_id: int, actor_role: str):
        user = UserRepo.get_by_id(user_id)
        if not user:
            raise NotFoundError("User not found")
        AccessPolicy.ensure_owner_or_staff(user.id, actor_id, actor_role, "Not authorized to view this user")
        return user

    @staticmethod
    def update_user(user_id: int, data: dict, actor_role: str):
        """Direct edit by an admin, bypassing the review workflow."""
        AccessPolicy.ensure_admin(actor_role)

        user = UserRepo.get_by_id(user_id)
        if not user:
            raise NotFoundError("User not found")

        changes = {f: data[f] for f in USER_ADMIN_FIELDS if f in data and data[f] is not None}

        if "role" in changes:
            role = str(changes["role"]).strip().lower()
            if role not in ROLES:
                raise InvalidArgumentError(f"role must be one of: {', '.join(ROLES)}")
            changes["role"] = role
        if "is_active" in changes and not isinstance(changes["is_active"], bool):
            raise InvalidArgumentError("is_active must be a boolean")
        if "username" in changes:
            username = str(changes["username"]).strip().lower()
            other = UserRepo.get_by_username(username)
            if not username or (other and other.id != user.id):
                raise InvalidArgumentError("Username already taken")
            changes["username"] = username
        if "email" in changes:
            email = str(changes["email"]).strip().lower() or None
            other = UserRepo.get_by_email(email) if email else None
            if other and other.id != user.id:
                raise InvalidArgumentError("Email already in use")
            changes["email"] = email

        for field, value in changes.items():
            setattr(user, field, value)
        UserRepo.commit()
        return user

    @staticmethod
    def delete_user(user_id: int, actor_id: int, actor_role: str):
        AccessPolicy.ensure_admin(actor_role)

        user = UserRepo.get_by_id(user_id)
        if not user:
            raise NotFoundError("User not found")
        if user.id == actor_id:
            raise ForbiddenError("Cannot delete your own account")
        if BorrowRepo.list_by_user(user.id):
            raise InvalidStateError("User has borrow history; deactivate the account instead")

        UserRepo.delete(user)
        current_app.logger.info(f"[user] deleted user={user_id} by admin={actor_id}")

    @staticmethod
    def change_password(user_id: int, current_password: str, new_password: str):
        if not current_password or not new_password:
            raise InvalidArgumentError("Current password and new password are required")
        if len(new_password) < MIN_PASSWORD_LENGTH:
            raise InvalidArgumentError(f"New password must be at least {MIN_PASSWORD_LENGTH} characters")

        user = UserRepo.get_by_id(user_id)
        if not user:
            raise NotFoundError("User not found")
        if not user.check_password(current_password):
            raise AuthenticationError("Current password is incorrect")

        user.set_password(new_password)
        UserRepo.commit()
        return user
