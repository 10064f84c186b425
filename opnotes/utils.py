"""
Utility functions for the OpNotes application.
"""

# Standard library imports
import logging
from datetime import date, datetime, timezone
from typing import Any, Optional

# Third-party imports
import pytz

# Create a logger for this module
logger = logging.getLogger(__name__)


def ensure_timezone_utc(dt: datetime) -> datetime:
    """
    Make sure datetime has timezone info, defaulting to UTC if none.

    Args:
        dt: The datetime object to ensure has timezone info

    Returns:
        Timezone-aware datetime object (with UTC timezone)
    """
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt


def get_application_timezone():
    """
    Get the application timezone from settings.

    Returns:
        pytz timezone object for the configured timezone
    """
    from opnotes.models import Settings

    settings = Settings.get_settings()
    try:
        return pytz.timezone(settings.timezone_name)
    except pytz.UnknownTimeZoneError:
        logger.error(f"Unknown timezone in settings: {settings.timezone_name}")
        return pytz.utc


def to_local_timezone(dt: datetime) -> datetime:
    """
    Convert UTC datetime to local application timezone.

    Args:
        dt: Datetime object in UTC

    Returns:
        Datetime object converted to local application timezone
    """
    if dt is None:
        return None
    # Ensure datetime is UTC
    dt = ensure_timezone_utc(dt)
    # Convert to local timezone
    return dt.astimezone(get_application_timezone())


def format_datetime(date_value: datetime, show_seconds: bool = False) -> str:
    """
    Format a datetime object with time for display in local timezone.

    Args:
        date_value: The datetime object to format

    Returns:
        Formatted datetime string
    """
    date_value = to_local_timezone(date_value)

    if show_seconds:
        return date_value.strftime("%d/%m/%Y %H:%M:%S")

    return date_value.strftime("%d/%m/%Y %H:%M")


def parse_date_value(value: Any) -> Optional[Any]:
    """
    Parse an ISO date or datetime string from a request body.

    Dates become ``date`` objects, timestamps become UTC ``datetime``
    objects. Anything that does not parse is returned unchanged so that
    pre-formatted strings still reach the context.
    """
    if not value or not isinstance(value, str):
        return value
    try:
        if "T" in value:
            return ensure_timezone_utc(datetime.fromisoformat(value.replace("Z", "+00:00")))
        return date.fromisoformat(value)
    except ValueError:
        return value
