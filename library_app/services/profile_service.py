from flask import current_app

from library_app.errors import (
    ForbiddenError,
    InvalidActionError,
    InvalidArgumentError,
    NoFieldsProvidedError,
    NoPendingRequestError,
    NotFoundError,
    ReservedNameError,
)
from library_app.repositories.user_repo import UserRepo
from library_app.services.access_policy import AccessPolicy
from library_app.utils.constants import (
    ACTION_APPROVE,
    ACTION_REJECT,
    RESERVED_USERNAMES,
    UPDATE_APPROVED,
    UPDATE_NONE,
    UPDATE_PENDING,
    UPDATE_REJECTED,
    ProfileField,
)
from library_app.utils.dates import utcnow


class ProfileService:
    """Profile edits that go through admin review.

    Non-admin edits are staged in ``pending_update`` (new values) and
    ``pending_old_values`` (values at request time). Both maps always carry
    the same keys and are emptied whenever the request is decided.
    """

    @staticmethod
    def _get_user(user_id):
        user = UserRepo.get_by_id(user_id)
        if not user:
            raise NotFoundError("User not found")
        return user

    @staticmethod
    def _ensure_unique(user, field: ProfileField, value):
        if field is ProfileField.USERNAME:
            other = UserRepo.get_by_username(value)
            if other and other.id != user.id:
                raise InvalidArgumentError("Username already taken")
        elif field is ProfileField.EMAIL and value:
            other = UserRepo.get_by_email(value)
            if other and other.id != user.id:
                raise InvalidArgumentError("Email already in use")

    @staticmethod
    def clean_fields(user, fields) -> dict:
        """Keeps the updatable fields of ``fields`` as a ProfileField -> str map."""
        if not isinstance(fields, dict):
            raise InvalidArgumentError("fields must be an object")

        updates = {}
        for field in ProfileField:
            value = fields.get(field.value)
            if value is None:
                continue
            if not isinstance(value, str):
                raise InvalidArgumentError(f"{field.value} must be a string")
            updates[field] = value

        if not updates:
            raise NoFieldsProvidedError()

        if ProfileField.USERNAME in updates:
            username = updates[ProfileField.USERNAME].strip().lower()
            if not username:
                raise InvalidArgumentError("username cannot be empty")
            # keeping a reserved name you already hold is fine
            if username in RESERVED_USERNAMES and username != (user.username or "").lower():
                raise ReservedNameError()
            updates[ProfileField.USERNAME] = username

        if ProfileField.EMAIL in updates:
            updates[ProfileField.EMAIL] = updates[ProfileField.EMAIL].strip().lower()

        for field, value in updates.items():
            ProfileService._ensure_unique(user, field, value)

        return updates

    @staticmethod
    def _clear_pending(user):
        user.pending_update = {}
        user.pending_old_values = {}
        user.update_requested_at = None

    @staticmethod
    def _assign(user, field: ProfileField, value):
        # empty email is stored as NULL so the unique index ignores it
        if field is ProfileField.EMAIL and not value:
            value = None
        setattr(user, field.value, value)

    @staticmethod
    def apply_profile_update(user, updates: dict):
        for field, value in updates.items():
            ProfileService._assign(user, field, value)

        ProfileService._clear_pending(user)
        user.update_status = UPDATE_NONE
        UserRepo.commit()

        current_app.logger.info(
            f"[profile] user={user.id} updated directly: {', '.join(f.value for f in updates)}"
        )
        return user

    @staticmethod
    def request_profile_update(user, updates: dict, now=None):
        user.pending_update = {field.value: value for field, value in updates.items()}
        user.pending_old_values = {field.value: getattr(user, field.value) or "" for field in updates}
        user.update_requested_at = now or utcnow()
        user.update_status = UPDATE_PENDING
        UserRepo.commit()

        current_app.logger.info(
            f"[profile] user={user.id} requested update: {', '.join(user.pending_update)}"
        )
        return user

    @staticmethod
    def submit_update(user_id: int, role: str, fields, now=None):
        """
        Routes a profile edit: applied at once for admins, staged for review otherwise.
        return: (user, applied)
        """
        user = ProfileService._get_user(user_id)
        updates = ProfileService.clean_fields(user, fields)

        if AccessPolicy.applies_profile_directly(role):
            return ProfileService.apply_profile_update(user, updates), True
        return ProfileService.request_profile_update(user, updates, now=now), False

    @staticmethod
    def review_update(target_user_id: int, action, reviewer_role: str):
        if not AccessPolicy.can_review_profile_updates(reviewer_role):
            raise ForbiddenError("Only admin can approve or reject profile update requests")

        action = (action or "").strip().lower() if isinstance(action, str) else action
        if action not in (ACTION_APPROVE, ACTION_REJECT):
            raise InvalidActionError()

        user = ProfileService._get_user(target_user_id)
        if user.update_status != UPDATE_PENDING:
            raise NoPendingRequestError()

        if action == ACTION_APPROVE:
            staged = [(ProfileField(key), value) for key, value in (user.pending_update or {}).items()]
            for field, value in staged:
                ProfileService._ensure_unique(user, field, value)
            for field, value in staged:
                ProfileService._assign(user, field, value)
            user.update_status = UPDATE_APPROVED
        else:
            user.update_status = UPDATE_REJECTED

        ProfileService._clear_pending(user)
        UserRepo.commit()

        current_app.logger.info(f"[profile] update request of user={user.id} {user.update_status}")
        return user

    @staticmethod
    def list_pending():
        users = UserRepo.list_pending_updates()
        return [
            {
                "id": u.id,
                "name": u.name,
                "username": u.username,
                "pending_fields": list((u.pending_update or {}).keys()),
                "pending_update": dict(u.pending_update or {}),
                "pending_old_values": dict(u.pending_old_values or {}),
                "update_requested_at": u.update_requested_at.isoformat() if u.update_requested_at else None,
                "update_status": u.update_status,
            }
            for u in users
        ]
