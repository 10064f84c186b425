"""
Database initialization module.
"""

import logging

from opnotes.models import db, Settings
from opnotes.repository.print_templates import (
    seed_print_templates,
    sync_default_print_templates,
)

logger = logging.getLogger(__name__)


def initialize_database(app):
    """
    Create missing tables, default settings and the shipped print templates.

    Must be called inside an application context.
    """
    from sqlalchemy import inspect

    inspector = inspect(db.engine)
    existing_tables = inspector.get_table_names()
    if not existing_tables:
        logger.info("Fresh database detected - creating all tables")
    db.create_all()

    Settings.get_settings()

    try:
        sync_default_print_templates()
        if app.config.get("SEED_DEFAULT_TEMPLATES", True):
            created = seed_print_templates()
            if created:
                logger.info(f"Seeded {len(created)} print templates")
    except Exception as e:
        logger.error(f"Error preparing default print templates: {e}")
        db.session.rollback()
        raise
