"""
This module defines application settings models.
"""

# Standard library imports
from datetime import datetime
import logging
from typing import Optional

# Third-party imports
from sqlalchemy import DateTime, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

# Local application imports
from .base import db, utcnow

# Create a logger for this module
logger = logging.getLogger(__name__)


class Settings(db.Model):
    """
    Hospital details printed on documents and display preferences.
    Singleton model (only one row expected).
    """

    __tablename__ = "app_settings"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)

    # Printed in template headers
    hospital: Mapped[str] = mapped_column(String(200), default="")
    subtitle: Mapped[str] = mapped_column(String(200), default="")
    unit: Mapped[str] = mapped_column(String(200), default="")
    telephone: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)

    # Timezone used to turn stored UTC timestamps into printed dates
    timezone_name: Mapped[str] = mapped_column(String(50), default="UTC")

    updated_at: Mapped[datetime] = mapped_column(
        DateTime,
        default=utcnow,
        onupdate=utcnow,
    )

    def __repr__(self) -> str:
        return f"<Settings hospital={self.hospital!r}>"

    @classmethod
    def get_settings(cls) -> "Settings":
        """
        Get or create the application settings.

        Returns:
            The settings object (singleton)
        """
        settings = cls.query.first()
        if settings is None:
            settings = cls(hospital="", subtitle="", unit="", timezone_name="UTC")
            db.session.add(settings)
            db.session.commit()
            logger.info("Default settings created")
        return settings

    def to_context(self) -> dict:
        """Return the settings record used to build a template context."""
        return {
            "hospital": self.hospital,
            "subtitle": self.subtitle,
            "unit": self.unit,
            "telephone": self.telephone,
        }
