from flask import Blueprint, jsonify, request
from flask_jwt_extended import current_user, jwt_required

from library_app.errors import LibraryError
from library_app.services.fine_service import FineService
from library_app.utils.constants import ROLE_ADMIN, ROLE_LIBRARIAN
from library_app.utils.decorators import role_required
from library_app.utils.http import json_body

fine_bp = Blueprint("fines", __name__)


def _json_error(message, code=400):
    return jsonify({"success": False, "message": message}), code


def _fine_json(f):
    return {
        "id": f.id,
        "borrow_id": f.borrow_id,
        "user_id": f.user_id,
        "amount": float(f.amount or 0),
        "paid_amount": float(f.paid_amount or 0),
        "remaining": float(f.remaining),
        "status": f.status,
        "is_overdue": f.is_overdue(),
        "due_date": f.due_date.isoformat() if f.due_date else None,
        "payment_date": f.payment_date.isoformat() if f.payment_date else None,
        "notes": f.notes,
        "created_at": f.created_at.isoformat() if f.created_at else None,
    }


@fine_bp.post("/sweep")
@role_required(ROLE_ADMIN, ROLE_LIBRARIAN)
def sweep():
    created, refreshed = FineService.sweep_overdue()
    return jsonify({
        "success": True,
        "data": {
            "created": len(created),
            "refreshed": refreshed,
            "fines": [_fine_json(f) for f in created],
        },
    })


@fine_bp.get("/my")
@jwt_required()
def my_fines():
    rows = FineService.list_user_fines(current_user.id)
    return jsonify({"success": True, "data": [_fine_json(f) for f in rows]})


@fine_bp.get("/")
@role_required(ROLE_ADMIN, ROLE_LIBRARIAN)
def all_fines():
    try:
        rows = FineService.list_all(status=request.args.get("status"))
    except LibraryError as e:
        return _json_error(e.message, e.status_code)
    return jsonify({"success": True, "data": [_fine_json(f) for f in rows]})


@fine_bp.post("/<int:fine_id>/pay")
@jwt_required()
def pay_fine(fine_id: int):
    try:
        data = json_body()
        f = FineService.pay_fine(fine_id, data.get("amount"), current_user.id, current_user.role)
        return jsonify({"success": True, "data": _fine_json(f)})
    except LibraryError as e:
        return _json_error(e.message, e.status_code)


@fine_bp.put("/<int:fine_id>/waive")
@role_required(ROLE_ADMIN, ROLE_LIBRARIAN)
def waive_fine(fine_id: int):
    try:
        data = json_body()
        f = FineService.waive_fine(fine_id, data.get("notes"))
        return jsonify({"success": True, "data": _fine_json(f)})
    except LibraryError as e:
        return _json_error(e.message, e.status_code)
