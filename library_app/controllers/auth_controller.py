from flask import Blueprint, jsonify
from flask_jwt_extended import current_user, jwt_required

from library_app.errors import LibraryError
from library_app.services.auth_service import AuthService
from library_app.utils.http import json_body

auth_bp = Blueprint("auth", __name__)


def _json_error(message, code=400):
    return jsonify({"success": False, "message": message}), code


def _user_json(user):
    return {
        "id": user.id,
        "name": user.name,
        "username": user.username,
        "email": user.email,
        "role": user.role,
        "profile_picture": user.profile_picture,
    }


@auth_bp.post("/register", endpoint="auth_register")
def register():
    try:
        data = json_body()
        user = AuthService.register(
            name=data.get("name"),
            username=data.get("username"),
            password=data.get("password"),
            email=data.get("email"),
            phone=data.get("phone"),
            bio=data.get("bio"),
            role=data.get("role"),
        )
        return jsonify({
            "success": True,
            "data": {"user": _user_json(user), "token": AuthService.issue_token(user)},
        }), 201
    except LibraryError as e:
        return _json_error(e.message, e.status_code)


@auth_bp.post("/login", endpoint="auth_login")
def login():
    try:
        data = json_body()
        token, user = AuthService.login(data.get("username"), data.get("password"))
        return jsonify({"success": True, "data": {"user": _user_json(user), "token": token}})
    except LibraryError as e:
        return _json_error(e.message, e.status_code)


@auth_bp.get("/me", endpoint="auth_me")
@jwt_required()
def me():
    return jsonify({"success": True, "data": _user_json(current_user)})
