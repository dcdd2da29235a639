# circulation/controllers/book_controller.py
from flask import Blueprint, jsonify, request
from flask_jwt_extended import jwt_required

from circulation.errors import CirculationError
from circulation.services.catalog_service import SEARCH_TYPES, CatalogService
from circulation.utils.decorators import STAFF, role_required
from circulation.utils.responses import error_response, json_error
from circulation.utils.serializers import book_to_dict, branch_to_dict

book_bp = Blueprint("books", __name__)


@book_bp.get("/")
@jwt_required()
def list_books():
    return jsonify({"success": True, "data": [book_to_dict(b) for b in CatalogService.list_books()]})


@book_bp.get("/search")
@jwt_required()
def search_books():
    term = (request.args.get("q") or "").strip()
    search_type = request.args.get("type", "title")
    if not term:
        return json_error("q is required", 400)
    if search_type not in SEARCH_TYPES:
        return json_error(f"type must be one of: {', '.join(SEARCH_TYPES)}", 400)
    books = CatalogService.search_books(term, search_type)
    return jsonify({"success": True, "data": [book_to_dict(b) for b in books]})


@book_bp.get("/<isbn>")
@jwt_required()
def get_book(isbn):
    try:
        return jsonify({"success": True, "data": book_to_dict(CatalogService.get_book(isbn))})
    except CirculationError as e:
        return error_response(e)


@book_bp.post("/")
@role_required(STAFF)
def create_book():
    data = request.get_json() or {}
    try:
        b = CatalogService.add_book(data)
        return jsonify({"success": True, "data": book_to_dict(b)}), 201
    except CirculationError as e:
        return error_response(e)
    except (TypeError, ValueError):
        return json_error("copies must map branch ids to integers", 400)


@book_bp.patch("/<isbn>/status")
@role_required(STAFF)
def set_status(isbn):
    data = request.get_json() or {}
    try:
        b = CatalogService.set_book_status(isbn, data.get("status"))
        return jsonify({"success": True, "data": book_to_dict(b)})
    except CirculationError as e:
        return error_response(e)


@book_bp.get("/branches")
@jwt_required()
def list_branches():
    return jsonify({"success": True, "data": [branch_to_dict(b) for b in CatalogService.list_branches()]})


@book_bp.post("/branches")
@role_required(STAFF)
def create_branch():
    data = request.get_json() or {}
    try:
        br = CatalogService.add_branch(data.get("name"), data.get("location"), data.get("contact_number"))
        return jsonify({"success": True, "data": branch_to_dict(br)}), 201
    except CirculationError as e:
        return error_response(e)
