from datetime import timedelta
from urllib.parse import quote

from werkzeug.security import check_password_hash, generate_password_hash

from library_app.extensions import db
from library_app.utils.constants import (
    LOCKOUT_MINUTES,
    MAX_FAILED_LOGINS,
    ROLE_MEMBER,
    UPDATE_NONE,
)
from library_app.utils.dates import utcnow


def _default_avatar(context):
    name = context.get_current_parameters().get("name") or "User"
    return f"https://ui-avatars.com/api/?name={quote(name)}&background=random&size=128"


class User(db.Model):
    __tablename__ = "users"

    id = db.Column(db.Integer, primary_key=True)

    name = db.Column(db.String(100), nullable=False)
    username = db.Column(db.String(30), unique=True, nullable=False, index=True)
    email = db.Column(db.String(255), unique=True, nullable=True, index=True)
    password_hash = db.Column(db.String(255), nullable=False)

    role = db.Column(db.String(20), nullable=False, default=ROLE_MEMBER, index=True)
    is_active = db.Column(db.Boolean, nullable=False, default=True, index=True)

    failed_login_attempts = db.Column(db.Integer, nullable=False, default=0)
    last_failed_login = db.Column(db.DateTime, nullable=True)
    last_login = db.Column(db.DateTime, nullable=True)

    profile_picture = db.Column(db.String(500), nullable=True, default=_default_avatar)
    bio = db.Column(db.String(500), nullable=False, default="")
    phone = db.Column(db.String(20), nullable=False, default="")
    address = db.Column(db.String(200), nullable=False, default="")
    membership_since = db.Column(db.DateTime, nullable=False, default=utcnow)

    # staged profile update: field -> new value / field -> value at request time
    pending_update = db.Column(db.JSON, nullable=False, default=dict)
    pending_old_values = db.Column(db.JSON, nullable=False, default=dict)
    update_requested_at = db.Column(db.DateTime, nullable=True)
    update_status = db.Column(db.String(20), nullable=False, default=UPDATE_NONE, index=True)

    created_at = db.Column(db.DateTime, nullable=False, default=utcnow)
    updated_at = db.Column(db.DateTime, nullable=False, default=utcnow, onupdate=utcnow)

    def set_password(self, password: str) -> None:
        self.password_hash = generate_password_hash(password)

    def check_password(self, password: str) -> bool:
        return check_password_hash(self.password_hash, password)

    def is_locked(self, now=None) -> bool:
        if (self.failed_login_attempts or 0) < MAX_FAILED_LOGINS or not self.last_failed_login:
            return False
        return (now or utcnow()) - self.last_failed_login < timedelta(minutes=LOCKOUT_MINUTES)

    @property
    def initials(self) -> str:
        parts = (self.name or "").split()
        if not parts:
            return "?"
        return (parts[0][0] + (parts[1][0] if len(parts) > 1 else "")).upper()
