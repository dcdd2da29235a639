# circulation/controllers/member_controller.py
from datetime import date

from flask import Blueprint, jsonify, request

from circulation.errors import CirculationError
from circulation.services.member_service import MemberService
from circulation.utils.decorators import MEMBER, STAFF, acting_member_id, role_required
from circulation.utils.responses import error_response, json_error
from circulation.utils.serializers import (
    member_to_dict,
    payment_to_dict,
    reservation_to_dict,
    transaction_to_dict,
)

member_bp = Blueprint("members", __name__)


def _parse_date(value):
    try:
        return date.fromisoformat(value)
    except (TypeError, ValueError):
        return None


def _can_see(member_id):
    own_id = acting_member_id()
    return own_id is None or own_id == member_id


@member_bp.get("/")
@role_required(STAFF)
def list_members():
    return jsonify({"success": True, "data": [member_to_dict(m) for m in MemberService.list_members()]})


@member_bp.post("/")
@role_required(STAFF)
def enroll_member():
    data = request.get_json() or {}
    end_date = _parse_date(data.get("membership_end_date"))
    if end_date is None:
        return json_error("membership_end_date (YYYY-MM-DD) is required", 400)

    try:
        m = MemberService.enroll(
            member_type=data.get("member_type"),
            full_name=data.get("full_name"),
            email=data.get("email"),
            membership_end_date=end_date,
            phone_number=data.get("phone_number"),
            student_id=data.get("student_id"),
            employee_id=data.get("employee_id"),
            department=data.get("department"),
        )
        return jsonify({"success": True, "data": member_to_dict(m)}), 201
    except CirculationError as e:
        return error_response(e)


@member_bp.get("/<int:member_id>")
@role_required(STAFF, MEMBER)
def get_member(member_id):
    if not _can_see(member_id):
        return json_error("Forbidden", 403)
    try:
        return jsonify({"success": True, "data": member_to_dict(MemberService.get_member(member_id))})
    except CirculationError as e:
        return error_response(e)


@member_bp.post("/<int:member_id>/renew")
@role_required(STAFF)
def renew_membership(member_id):
    data = request.get_json() or {}
    end_date = _parse_date(data.get("membership_end_date"))
    if end_date is None:
        return json_error("membership_end_date (YYYY-MM-DD) is required", 400)
    try:
        m = MemberService.renew_membership(member_id, end_date)
        return jsonify({"success": True, "data": member_to_dict(m)})
    except CirculationError as e:
        return error_response(e)


@member_bp.get("/<int:member_id>/history")
@role_required(STAFF, MEMBER)
def member_history(member_id):
    if not _can_see(member_id):
        return json_error("Forbidden", 403)
    try:
        h = MemberService.history(member_id)
    except CirculationError as e:
        return error_response(e)

    return jsonify({"success": True, "data": {
        "member": member_to_dict(h["member"]),
        "current_borrowed": h["current_borrowed"],
        "unpaid_fees": float(h["unpaid_fees"]),
        "transactions": [transaction_to_dict(t) for t in h["transactions"]],
        "reservations": [reservation_to_dict(r) for r in h["reservations"]],
        "payments": [payment_to_dict(p) for p in h["payments"]],
    }})
