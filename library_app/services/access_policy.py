from library_app.errors import ForbiddenError
from library_app.utils.constants import ROLE_ADMIN, STAFF_ROLES


class AccessPolicy:
    """Role and ownership rules shared by the services."""

    @staticmethod
    def is_staff(role) -> bool:
        return (role or "").strip().lower() in STAFF_ROLES

    @staticmethod
    def is_admin(role) -> bool:
        return (role or "").strip().lower() == ROLE_ADMIN

    @staticmethod
    def is_owner_or_staff(owner_id, actor_id, role) -> bool:
        return (owner_id is not None and owner_id == actor_id) or AccessPolicy.is_staff(role)

    @staticmethod
    def ensure_owner_or_staff(owner_id, actor_id, role, message="Access denied"):
        if not AccessPolicy.is_owner_or_staff(owner_id, actor_id, role):
            raise ForbiddenError(message)

    @staticmethod
    def ensure_admin(role, message="Access denied - admin only"):
        if not AccessPolicy.is_admin(role):
            raise ForbiddenError(message)

    @staticmethod
    def applies_profile_directly(role) -> bool:
        """Admins change their own profile without review; everyone else is staged."""
        return AccessPolicy.is_admin(role)

    @staticmethod
    def can_review_profile_updates(role) -> bool:
        return AccessPolicy.is_admin(role)
