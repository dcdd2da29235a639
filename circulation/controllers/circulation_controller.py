# circulation/controllers/circulation_controller.py
from flask import Blueprint, request
from flask_jwt_extended import jwt_required

from circulation.services.circulation_service import CirculationService
from circulation.utils.decorators import MEMBER, STAFF, acting_member_id, role_required
from circulation.utils.responses import json_error, outcome_response

circulation_bp = Blueprint("circulation", __name__)


def _member_for_request(data):
    """Members act for themselves; staff name the member in the body."""
    own_id = acting_member_id()
    if own_id is not None:
        if "member_id" in data and int(data["member_id"]) != own_id:
            return None, json_error("Members can only act for themselves", 403)
        return own_id, None
    if "member_id" not in data:
        return None, json_error("member_id is required", 400)
    return int(data["member_id"]), None


@circulation_bp.post("/borrow")
@role_required(STAFF, MEMBER)
def borrow_book():
    data = request.get_json() or {}
    try:
        member_id, error = _member_for_request(data)
        if error:
            return error
        isbn = str(data["isbn"]).strip()
        branch_id = int(data["branch_id"])
    except KeyError as e:
        return json_error(f"{e.args[0]} is required", 400)
    except (TypeError, ValueError):
        return json_error("member_id and branch_id must be integers", 400)

    outcome = CirculationService.borrow_book(member_id, isbn, branch_id)
    return outcome_response(outcome, success_code=201)


@circulation_bp.post("/return/<int:transaction_id>")
@role_required(STAFF)
def return_book(transaction_id):
    outcome = CirculationService.return_book(transaction_id)
    return outcome_response(outcome)


@circulation_bp.post("/reserve")
@role_required(STAFF, MEMBER)
def reserve_book():
    data = request.get_json() or {}
    try:
        member_id, error = _member_for_request(data)
        if error:
            return error
        isbn = str(data["isbn"]).strip()
        branch_id = int(data["branch_id"])
    except KeyError as e:
        return json_error(f"{e.args[0]} is required", 400)
    except (TypeError, ValueError):
        return json_error("member_id and branch_id must be integers", 400)

    outcome = CirculationService.reserve_book(member_id, isbn, branch_id)
    return outcome_response(outcome, success_code=201)


@circulation_bp.delete("/reservations/<int:reservation_id>")
@jwt_required()
def cancel_reservation(reservation_id):
    outcome = CirculationService.cancel_reservation(reservation_id, member_id=acting_member_id())
    return outcome_response(outcome)


@circulation_bp.post("/payments")
@role_required(STAFF, MEMBER)
def process_payment():
    data = request.get_json() or {}
    try:
        member_id, error = _member_for_request(data)
        if error:
            return error
        amount = data["amount"]
        method = str(data.get("method") or "").strip()
    except KeyError as e:
        return json_error(f"{e.args[0]} is required", 400)
    except (TypeError, ValueError):
        return json_error("member_id must be an integer", 400)

    if not method:
        return json_error("method is required", 400)

    outcome = CirculationService.process_payment(member_id, amount, method)
    return outcome_response(outcome, success_code=201)
