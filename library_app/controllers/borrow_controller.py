from flask import Blueprint, jsonify
from flask_jwt_extended import current_user, jwt_required

from library_app.errors import LibraryError
from library_app.services.borrow_service import BorrowService
from library_app.utils.constants import ROLE_ADMIN, ROLE_LIBRARIAN
from library_app.utils.dates import utcnow
from library_app.utils.decorators import role_required
from library_app.utils.http import json_body

borrow_bp = Blueprint("borrows", __name__)


def _json_error(message, code=400):
    return jsonify({"success": False, "message": message}), code


def _iso(value):
    return value.isoformat() if value else None


def _borrow_json(x, now=None):
    return {
        "id": x.id,
        "user_id": x.user_id,
        "user": x.user.username if x.user else None,
        "book_id": x.book_id,
        "book_title": x.book.title if x.book else None,
        "borrow_date": _iso(x.borrow_date),
        "due_date": _iso(x.due_date),
        "return_date": _iso(x.return_date),
        "status": x.effective_status(now),
        "fine": float(x.fine or 0),
        "extended": bool(x.extended),
        "extension_count": x.extension_count or 0,
        "notes": x.notes,
    }


@borrow_bp.post("/")
@jwt_required()
def borrow_book():
    try:
        data = json_body()
        b = BorrowService.borrow_book(current_user.id, data.get("book_id"))
        return jsonify({"success": True, "data": _borrow_json(b)}), 201
    except LibraryError as e:
        return _json_error(e.message, e.status_code)


@borrow_bp.put("/<int:borrow_id>/return")
@jwt_required()
def return_book(borrow_id: int):
    try:
        b = BorrowService.return_book(borrow_id, current_user.id, current_user.role)
        return jsonify({"success": True, "message": "Book returned", "data": _borrow_json(b)})
    except LibraryError as e:
        return _json_error(e.message, e.status_code)


@borrow_bp.put("/<int:borrow_id>/extend")
@role_required(ROLE_ADMIN, ROLE_LIBRARIAN)
def extend_borrow(borrow_id: int):
    try:
        data = json_body()
        b = BorrowService.extend_due_date(borrow_id, data.get("days"))
        return jsonify({"success": True, "data": _borrow_json(b)})
    except LibraryError as e:
        return _json_error(e.message, e.status_code)


@borrow_bp.put("/<int:borrow_id>/lost")
@role_required(ROLE_ADMIN, ROLE_LIBRARIAN)
def mark_lost(borrow_id: int):
    try:
        data = json_body()
        b = BorrowService.mark_lost(borrow_id, data.get("notes"))
        return jsonify({"success": True, "data": _borrow_json(b)})
    except LibraryError as e:
        return _json_error(e.message, e.status_code)


@borrow_bp.put("/<int:borrow_id>/cancel")
@role_required(ROLE_ADMIN, ROLE_LIBRARIAN)
def cancel_borrow(borrow_id: int):
    try:
        data = json_body()
        b = BorrowService.cancel_borrow(borrow_id, data.get("notes"))
        return jsonify({"success": True, "data": _borrow_json(b)})
    except LibraryError as e:
        return _json_error(e.message, e.status_code)


@borrow_bp.get("/overdue")
@role_required(ROLE_ADMIN, ROLE_LIBRARIAN)
def overdue_borrows():
    now = utcnow()
    rows = BorrowService.list_overdue(now)
    return jsonify({
        "success": True,
        "count": len(rows),
        "data": [dict(_borrow_json(b, now), days_overdue=days) for b, days in rows],
    })


@borrow_bp.get("/my")
@jwt_required()
def my_borrows():
    now = utcnow()
    rows = BorrowService.list_my_borrows(current_user.id)
    return jsonify({"success": True, "data": [_borrow_json(x, now) for x in rows]})


@borrow_bp.get("/")
@role_required(ROLE_ADMIN)
def all_borrows():
    now = utcnow()
    return jsonify({"success": True, "data": [_borrow_json(x, now) for x in BorrowService.list_all()]})


@borrow_bp.get("/<int:borrow_id>")
@jwt_required()
def get_borrow(borrow_id: int):
    try:
        b = BorrowService.get_borrow(borrow_id, current_user.id, current_user.role)
        return jsonify({"success": True, "data": _borrow_json(b)})
    except LibraryError as e:
        return _json_error(e.message, e.status_code)


@borrow_bp.get("/user/<int:user_id>")
@jwt_required()
def user_borrows(user_id: int):
    now = utcnow()
    try:
        rows = BorrowService.list_user_borrows(user_id, current_user.id, current_user.role)
        return jsonify({"success": True, "data": [_borrow_json(x, now) for x in rows]})
    except LibraryError as e:
        return _json_error(e.message, e.status_code)
