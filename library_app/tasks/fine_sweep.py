from flask import current_app

from library_app.extensions import db
from library_app.services.fine_service import FineService


def run_fine_sweep_job(app):
    """Periodic overdue-fine sweep; a failed run is rolled back and logged."""
    with app.app_context():
        try:
            created, refreshed = FineService.sweep_overdue()
            return len(created), refreshed
        except Exception as e:
            db.session.rollback()
            current_app.logger.exception(f"[fine_sweep] failed: {e}")
            return 0, 0
