"""
Default print templates.

These structures seed the ``default_print_templates`` table and are what
"restore" and "reset to defaults" copy from. Edit them here; the database is
synchronised from this module at startup.
"""

# Standard library imports
import copy
from typing import Any, Dict, List

# Local application imports
from .blocks import TemplateType
from .fields import DEFAULT_PAGE_SETTINGS

PATIENT_INFO_TABLE = {
    "id": "table-1",
    "type": "data-table",
    "props": {
        "columns": 4,
        "rows": [
            {"label": "Name", "field": "patient.name", "colspan": 3},
            {"label": "BHT", "field": "surgery.bht"},
            {"label": "Date", "field": "surgery.date"},
            {"label": "Age/Sex", "field": "patient.age_gender"},
            {"label": "Ward", "field": "surgery.ward"},
            {"label": "DoA", "field": "surgery.doa"},
            {"label": "DoD", "field": "surgery.dod"},
        ],
        "showBorders": True,
    },
}

HEADER = {
    "id": "header-1",
    "type": "header",
    "props": {
        "showHospital": True,
        "showSubtitle": True,
        "showUnit": True,
        "showTelephone": True,
        "showLogo": False,
        "alignment": "center",
    },
}

DIVIDER = {"id": "divider-1", "type": "divider", "props": {"style": "solid", "thickness": 1}}


def _spacer(block_id: str, height: int) -> Dict[str, Any]:
    return {"id": block_id, "type": "spacer", "props": {"height": height}}


def _notes_section(key: str, field: str, title: str) -> Dict[str, Any]:
    """A rich-content section that only appears when its field has content."""
    return {
        "id": f"conditional-{key}",
        "type": "conditional",
        "props": {"field": field, "condition": "notEmpty"},
        "children": [
            {
                "id": f"{key}-1",
                "type": "rich-content",
                "props": {"field": field, "sectionTitle": title, "showIfEmpty": False},
            }
        ],
    }


DEFAULT_SURGERY_TEMPLATE = {
    "version": 1,
    "blocks": [
        HEADER,
        DIVIDER,
        PATIENT_INFO_TABLE,
        _spacer("spacer-1", 16),
        {
            "id": "title-1",
            "type": "text",
            "props": {
                "content": "{{surgery.title}}",
                "alignment": "center",
                "fontSize": "lg",
                "bold": True,
            },
        },
        _spacer("spacer-2", 12),
        {
            "id": "doctors-1",
            "type": "doctors-list",
            "props": {"type": "both", "showDesignation": True, "layout": "inline"},
        },
        _spacer("spacer-3", 16),
        _notes_section("notes", "surgery.notes", "Op Notes"),
        _notes_section("post-op-notes", "surgery.post_op_notes", "Post-Op Notes"),
        _notes_section("inward-management", "surgery.inward_management", "Inward Management"),
        _notes_section("discharge-plan", "surgery.discharge_plan", "Discharge Plan"),
        _notes_section("referral", "surgery.referral", "Referral"),
    ],
}

DEFAULT_FOLLOWUP_TEMPLATE = {
    "version": 1,
    "blocks": [
        HEADER,
        DIVIDER,
        PATIENT_INFO_TABLE,
        _spacer("spacer-1", 16),
        {
            "id": "title-1",
            "type": "text",
            "props": {
                "content": "Follow-up Notes",
                "alignment": "center",
                "fontSize": "lg",
                "bold": True,
            },
        },
        {
            "id": "followup-date",
            "type": "data-field",
            "props": {
                "field": "followup.date",
                "label": "",
                "format": "date",
                "fallback": "",
                "showLabel": False,
                "alignment": "center",
            },
        },
        _spacer("spacer-2", 16),
        _notes_section("followup-notes", "followup.notes", ""),
    ],
}

DEFAULT_TEMPLATES: List[Dict[str, Any]] = [
    {
        "key": "surgery-standard",
        "name": "Standard Surgery Notes",
        "type": TemplateType.SURGERY.value,
        "description": "Header, patient details, doctors and all surgery note sections",
        "structure": DEFAULT_SURGERY_TEMPLATE,
        "page_settings": DEFAULT_PAGE_SETTINGS,
    },
    {
        "key": "followup-standard",
        "name": "Standard Follow-up Notes",
        "type": TemplateType.FOLLOWUP.value,
        "description": "Header, patient details and follow-up notes",
        "structure": DEFAULT_FOLLOWUP_TEMPLATE,
        "page_settings": DEFAULT_PAGE_SETTINGS,
    },
]


def get_default_templates() -> List[Dict[str, Any]]:
    """Return independent copies of the default template definitions."""
    return copy.deepcopy(DEFAULT_TEMPLATES)
