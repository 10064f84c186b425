"""
Shared SQLAlchemy instance and helpers for the OpNotes models.
"""

# Standard library imports
from datetime import datetime, timezone
import logging

# Third-party imports
from flask_sqlalchemy import SQLAlchemy
from sqlalchemy import MetaData

# Create a logger for this module
logger = logging.getLogger(__name__)

# Named constraints keep SQLite table rebuilds predictable
metadata = MetaData(
    naming_convention={
        "ix": "ix_%(column_0_label)s",
        "uq": "uq_%(table_name)s_%(column_0_name)s",
        "pk": "pk_%(table_name)s",
    }
)

# Initialize SQLAlchemy
db = SQLAlchemy(metadata=metadata)


def utcnow() -> datetime:
    """Return timezone-aware current datetime in UTC."""
    return datetime.now(timezone.utc)
