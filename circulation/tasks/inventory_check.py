# circulation/tasks/inventory_check.py
from flask import current_app

from circulation.services.report_service import ReportService


def run_inventory_check_job(app):
    """Compare branch stock with the catalog-wide counts and log any drift."""
    with app.app_context():
        drift = ReportService.inventory_drift()
        current_app.logger.info(f"[inventory_check] titles_out_of_step={len(drift)}")
        return drift
