# circulation/tasks/reservation_sweep.py
from flask import current_app

from circulation.errors import PersistenceFailure
from circulation.services.circulation_service import CirculationService


def run_reservation_sweep_job(app):
    """
    PENDING/READY reservations whose expiry date has passed -> EXPIRED.
    Runs in its own unit of work; re-running it changes nothing.
    """
    with app.app_context():
        try:
            return CirculationService.expire_reservations()
        except PersistenceFailure as e:
            current_app.logger.exception(f"[reservation_sweep] Error: {e}")
            return 0
