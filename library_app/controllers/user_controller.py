from flask import Blueprint, jsonify
from flask_jwt_extended import current_user, jwt_required

from library_app.errors import LibraryError
from library_app.services.profile_service import ProfileService
from library_app.services.user_service import UserService
from library_app.utils.constants import ROLE_ADMIN, ROLE_LIBRARIAN
from library_app.utils.decorators import role_required
from library_app.utils.http import json_body

user_bp = Blueprint("users", __name__)


def _json_error(message, code=400):
    return jsonify({"success": False, "message": message}), code


def _iso(value):
    return value.isoformat() if value else None


def _user_json(u):
    return {
        "id": u.id,
        "name": u.name,
        "username": u.username,
        "email": u.email,
        "role": u.role,
        "is_active": bool(u.is_active),
        "phone": u.phone,
        "bio": u.bio,
        "address": u.address,
        "profile_picture": u.profile_picture,
        "initials": u.initials,
        "membership_since": _iso(u.membership_since),
        "last_login": _iso(u.last_login),
        "update_status": u.update_status,
        "pending_update": dict(u.pending_update or {}),
        "update_requested_at": _iso(u.update_requested_at),
    }


@user_bp.get("/me")
@jwt_required()
def get_me():
    return jsonify({"success": True, "data": _user_json(current_user)})


@user_bp.put("/change-password")
@jwt_required()
def change_password():
    try:
        data = json_body()
        UserService.change_password(current_user.id, data.get("current_password"), data.get("new_password"))
        return jsonify({"success": True, "message": "Password updated"})
    except LibraryError as e:
        return _json_error(e.message, e.status_code)


@user_bp.put("/request-update")
@jwt_required()
def request_update():
    try:
        data = json_body()
        # accepts {"fields": {...}} or the fields at the top level
        fields = data.get("fields", data)
        user, applied = ProfileService.submit_update(current_user.id, current_user.role, fields)
    except LibraryError as e:
        return _json_error(e.message, e.status_code)

    message = "Profile updated" if applied else "Update request submitted for admin approval"
    return jsonify({"success": True, "applied": applied, "message": message, "data": _user_json(user)})


@user_bp.get("/pending-updates")
@role_required(ROLE_ADMIN, ROLE_LIBRARIAN)
def pending_updates():
    rows = ProfileService.list_pending()
    return jsonify({"success": True, "count": len(rows), "data": rows})


@user_bp.put("/<int:user_id>/approve-update")
@jwt_required()
def approve_update(user_id: int):
    try:
        data = json_body()
        user = ProfileService.review_update(user_id, data.get("action"), current_user.role)
        return jsonify({"success": True, "message": f"Update {user.update_status}", "data": _user_json(user)})
    except LibraryError as e:
        return _json_error(e.message, e.status_code)


@user_bp.get("/")
@role_required(ROLE_ADMIN, ROLE_LIBRARIAN)
def list_users():
    return jsonify({"success": True, "data": [_user_json(u) for u in UserService.list_users()]})


@user_bp.get("/<int:user_id>")
@jwt_required()
def get_user(user_id: int):
    try:
        user = UserService.get_user(user_id, current_user.id, current_user.role)
        return jsonify({"success": True, "data": _user_json(user)})
    except LibraryError as e:
        return _json_error(e.message, e.status_code)


@user_bp.put("/<int:user_id>")
@role_required(ROLE_ADMIN)
def update_user(user_id: int):
    try:
        data = json_body()
        user = UserService.update_user(user_id, data, current_user.role)
        return jsonify({"success": True, "data": _user_json(user)})
    except LibraryError as e:
        return _json_error(e.message, e.status_code)


@user_bp.delete("/<int:user_id>")
@role_required(ROLE_ADMIN)
def delete_user(user_id: int):
    try:
        UserService.delete_user(user_id, current_user.id, current_user.role)
        return jsonify({"success": True, "message": "User deleted"})
    except LibraryError as e:
        return _json_error(e.message, e.status_code)
