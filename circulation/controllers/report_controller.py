# circulation/controllers/report_controller.py
from datetime import datetime

from flask import Blueprint, jsonify, request

from circulation.errors import PersistenceFailure
from circulation.services.circulation_service import CirculationService
from circulation.services.report_service import ReportService
from circulation.utils.decorators import STAFF, role_required
from circulation.utils.responses import error_response, json_error
from circulation.utils.serializers import plain

report_bp = Blueprint("reports", __name__)


@report_bp.get("/overdue")
@role_required(STAFF)
def overdue_report():
    rows = ReportService.overdue_report()
    return jsonify({"success": True, "data": [plain(r) for r in rows]})


@report_bp.get("/most-borrowed")
@role_required(STAFF)
def most_borrowed():
    try:
        limit = int(request.args.get("limit", 10))
        since = request.args.get("since")
        since = datetime.fromisoformat(since) if since else None
    except ValueError:
        return json_error("limit must be an integer and since an ISO date", 400)
    if limit < 1:
        return json_error("limit must be positive", 400)

    return jsonify({"success": True, "data": ReportService.most_borrowed(limit=limit, since=since)})


@report_bp.get("/inventory-drift")
@role_required(STAFF)
def inventory_drift():
    return jsonify({"success": True, "data": ReportService.inventory_drift()})


@report_bp.post("/maintenance/expire-reservations")
@role_required(STAFF)
def expire_reservations():
    try:
        expired = CirculationService.expire_reservations()
    except PersistenceFailure as e:
        return error_response(e)
    return jsonify({"success": True, "expired": expired})
