from flask import jsonify

from library_app.extensions import jwt
from library_app.repositories.user_repo import UserRepo


@jwt.user_lookup_loader
def load_user(_jwt_header, jwt_data):
    # deleted or deactivated accounts lose access immediately
    user = UserRepo.get_by_id(int(jwt_data["sub"]))
    if user is None or not user.is_active:
        return None
    return user


@jwt.user_lookup_error_loader
def user_lookup_error(_jwt_header, _jwt_data):
    return jsonify({"success": False, "message": "Not authorized - user not found"}), 401


@jwt.unauthorized_loader
def missing_token(reason):
    return jsonify({"success": False, "message": f"Not authorized - {reason}"}), 401


@jwt.invalid_token_loader
def invalid_token(reason):
    return jsonify({"success": False, "message": f"Not authorized - invalid token: {reason}"}), 401


@jwt.expired_token_loader
def expired_token(_jwt_header, _jwt_data):
    return jsonify({"success": False, "message": "Not authorized - token expired"}), 401
