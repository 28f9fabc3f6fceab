from flask import Blueprint, jsonify, request
from flask_jwt_extended import current_user

from library_app.errors import LibraryError
from library_app.services.book_service import BookService
from library_app.utils.constants import ROLE_ADMIN, ROLE_LIBRARIAN
from library_app.utils.decorators import role_required
from library_app.utils.http import json_body

book_bp = Blueprint("books", __name__)


def _json_error(message, code=400):
    return jsonify({"success": False, "message": message}), code


def _book_json(b):
    return {
        "id": b.id,
        "title": b.title,
        "author": b.author,
        "isbn": b.isbn,
        "category": b.category,
        "publication_year": b.publication_year,
        "total_copies": b.total_copies,
        "available_copies": b.available_copies,
        "is_available": b.is_available,
        "cover_image": b.cover_image,
        "description": b.description,
        "created_at": b.created_at.isoformat() if b.created_at else None,
        "updated_at": b.updated_at.isoformat() if b.updated_at else None,
    }


@book_bp.get("/")
def list_books():
    args = request.args
    try:
        page = BookService.list_books(
            search=args.get("search"),
            category=args.get("category"),
            available=args.get("available"),
            page=args.get("page"),
            limit=args.get("limit"),
            sort=args.get("sort", "title"),
        )
    except LibraryError as e:
        return _json_error(e.message, e.status_code)

    return jsonify({
        "success": True,
        "data": [_book_json(b) for b in page.items],
        "pagination": {
            "page": page.page,
            "limit": page.per_page,
            "total": page.total,
            "pages": page.pages,
        },
    })


@book_bp.get("/<int:book_id>")
def get_book(book_id: int):
    try:
        return jsonify({"success": True, "data": _book_json(BookService.get_book(book_id))})
    except LibraryError as e:
        return _json_error(e.message, e.status_code)


@book_bp.post("/")
@role_required(ROLE_ADMIN, ROLE_LIBRARIAN)
def create_book():
    try:
        data = json_body()
        book = BookService.create_book(data, actor_id=current_user.id)
        return jsonify({"success": True, "data": _book_json(book)}), 201
    except LibraryError as e:
        return _json_error(e.message, e.status_code)


@book_bp.put("/<int:book_id>")
@role_required(ROLE_ADMIN, ROLE_LIBRARIAN)
def update_book(book_id: int):
    try:
        data = json_body()
        book = BookService.update_book(book_id, data, actor_id=current_user.id)
        return jsonify({"success": True, "data": _book_json(book)})
    except LibraryError as e:
        return _json_error(e.message, e.status_code)


@book_bp.delete("/<int:book_id>")
@role_required(ROLE_ADMIN)
def delete_book(book_id: int):
    try:
        BookService.delete_book(book_id)
        return jsonify({"success": True, "message": "Book deleted"})
    except LibraryError as e:
        return _json_error(e.message, e.status_code)
