# circulation/tasks/scheduler.py
from __future__ import annotations

import atexit
import os
import threading

from apscheduler.schedulers.background import BackgroundScheduler
from apscheduler.triggers.interval import IntervalTrigger

_start_lock = threading.Lock()


def start_scheduler(app):
    """
    Start the maintenance jobs once per app. create_app wires this to the
    first request, so CLI commands (init-db, issue-token) never start it.
    """
    if "apscheduler" in app.extensions:
        return app.extensions["apscheduler"]
    with _start_lock:
        if "apscheduler" not in app.extensions:
            app.extensions["apscheduler"] = _build_scheduler(app)
    return app.extensions["apscheduler"]


def _build_scheduler(app):
    """
    Background maintenance: reservation sweep and inventory drift check.
    - Disabled with SCHEDULER_ENABLED=0 (tests).
    - With the debug reloader only the real (child) process schedules jobs.
    """
    if not app.config.get("SCHEDULER_ENABLED", True):
        app.logger.info("[scheduler] Disabled by config.")
        return None

    if app.debug and os.environ.get("WERKZEUG_RUN_MAIN") != "true":
        app.logger.info("[scheduler] Debug reloader secondary process: scheduler skipped.")
        return None

    from circulation.tasks.inventory_check import run_inventory_check_job
    from circulation.tasks.reservation_sweep import run_reservation_sweep_job

    scheduler = BackgroundScheduler(timezone="UTC")

    def _wrap(job, name):
        def _run():
            try:
                job(app)
            except Exception as ex:
                app.logger.exception(f"[scheduler] {name} error: {ex}")
        return _run

    scheduler.add_job(
        func=_wrap(run_reservation_sweep_job, "reservation_sweep"),
        trigger=IntervalTrigger(minutes=app.config["RESERVATION_SWEEP_MINUTES"]),
        id="reservation_sweep",
        replace_existing=True,
        max_instances=1,
        coalesce=True,
        misfire_grace_time=120,
    )
    scheduler.add_job(
        func=_wrap(run_inventory_check_job, "inventory_check"),
        trigger=IntervalTrigger(minutes=app.config["INVENTORY_CHECK_MINUTES"]),
        id="inventory_check",
        replace_existing=True,
        max_instances=1,
        coalesce=True,
        misfire_grace_time=300,
    )

    scheduler.start()
    app.logger.info(
        f"[scheduler] Jobs started (reservation sweep every {app.config['RESERVATION_SWEEP_MINUTES']} min, "
        f"inventory check every {app.config['INVENTORY_CHECK_MINUTES']} min)."
    )

    atexit.register(lambda: scheduler.shutdown(wait=False) if scheduler.running else None)
    return scheduler
