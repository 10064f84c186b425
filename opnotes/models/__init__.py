"""
Database models: print templates, their shipped defaults and the settings
printed in document headers.
"""

from .base import db, utcnow
from .print_template import DefaultPrintTemplate, PrintTemplate
from .settings import Settings

__all__ = [
    "db",
    "utcnow",
    "DefaultPrintTemplate",
    "PrintTemplate",
    "Settings",
]
