from functools import wraps

from flask import jsonify
from flask_jwt_extended import current_user, verify_jwt_in_request


def role_required(*roles):
    """Route guard; the role is read from the stored user, not the token claim."""
    allowed = tuple(r.strip().lower() for r in roles)

    def decorator(fn):
        @wraps(fn)
        def wrapper(*args, **kwargs):
            verify_jwt_in_request()
            role = (current_user.role or "").strip().lower()
            if role not in allowed:
                return jsonify({
                    "success": False,
                    "message": f"Access denied. Required role(s): {' or '.join(allowed)}. Your role: {role or 'none'}",
                }), 403
            return fn(*args, **kwargs)
        return wrapper
    return decorator
