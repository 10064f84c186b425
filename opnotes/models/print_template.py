"""
Print template models for storing template block structures.
"""

from datetime import datetime
import json
import logging
from typing import Any, Dict, Optional

from sqlalchemy import Boolean, DateTime, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from .base import db, utcnow
from opnotes.templating.blocks import MalformedTemplateError, TemplateStructure

logger = logging.getLogger(__name__)


def parse_structure(text: Optional[str]) -> TemplateStructure:
    """Parse stored structure JSON, falling back to an empty structure."""
    if not text:
        return TemplateStructure()
    try:
        return TemplateStructure.from_json(text)
    except MalformedTemplateError as e:
        logger.error(f"Stored template structure could not be loaded: {e}")
        return TemplateStructure()


def parse_page_settings(text: Optional[str]) -> Optional[Dict[str, Any]]:
    if not text:
        return None
    try:
        value = json.loads(text)
    except ValueError:
        logger.error("Stored page settings are not valid JSON")
        return None
    return value if isinstance(value, dict) else None


class _TemplateColumnsMixin:
    """Columns shared by user templates and the read-only defaults."""

    name: Mapped[str] = mapped_column(
        String(200),
        nullable=False,
        comment="Template name for user reference"
    )

    type: Mapped[str] = mapped_column(
        String(20),
        nullable=False,
        index=True,
        comment="Document the template prints: 'surgery' or 'followup'"
    )

    description: Mapped[Optional[str]] = mapped_column(
        Text,
        nullable=True,
        comment="Description of what this template is for"
    )

    structure: Mapped[str] = mapped_column(
        Text,
        nullable=False,
        comment="JSON text of the template block structure"
    )

    page_settings: Mapped[Optional[str]] = mapped_column(
        Text,
        nullable=True,
        comment="JSON text of paper size, orientation and margins"
    )

    @property
    def structure_data(self) -> TemplateStructure:
        return parse_structure(self.structure)

    @structure_data.setter
    def structure_data(self, value: TemplateStructure) -> None:
        self.structure = TemplateStructure.coerce(value).to_json()

    @property
    def page_settings_data(self) -> Optional[Dict[str, Any]]:
        return parse_page_settings(self.page_settings)

    @page_settings_data.setter
    def page_settings_data(self, value: Optional[Dict[str, Any]]) -> None:
        self.page_settings = json.dumps(value) if value else None


class PrintTemplate(_TemplateColumnsMixin, db.Model):
    """
    A user-editable print template. At most one template per type is the
    default used when printing.
    """

    __tablename__ = "print_templates"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)

    is_default: Mapped[bool] = mapped_column(
        Boolean,
        default=False,
        nullable=False,
        comment="Whether this is the default template for its type"
    )

    # Timestamps
    created_at: Mapped[datetime] = mapped_column(DateTime, default=utcnow, nullable=False)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, default=utcnow, onupdate=utcnow, nullable=False
    )

    def __repr__(self):
        return f"<PrintTemplate {self.name} ({self.type})>"

    def to_dict(self) -> dict:
        """Convert template to dictionary for JSON response."""
        return {
            "id": self.id,
            "name": self.name,
            "type": self.type,
            "description": self.description,
            "structure": self.structure_data.to_dict(),
            "pageSettings": self.page_settings_data,
            "isDefault": self.is_default,
            "createdAt": self.created_at.isoformat() if self.created_at else None,
            "updatedAt": self.updated_at.isoformat() if self.updated_at else None,
        }


class DefaultPrintTemplate(_TemplateColumnsMixin, db.Model):
    """
    Read-only reference copy of a shipped template, used to restore or reset
    user templates.
    """

    __tablename__ = "default_print_templates"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)

    key: Mapped[str] = mapped_column(
        String(100),
        nullable=False,
        unique=True,
        comment="Stable identifier of the shipped template"
    )

    def __repr__(self):
        return f"<DefaultPrintTemplate {self.key}>"

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "key": self.key,
            "name": self.name,
            "type": self.type,
            "description": self.description,
            "structure": self.structure_data.to_dict(),
            "pageSettings": self.page_settings_data,
        }
