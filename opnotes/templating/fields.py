"""
Field catalogue and block palette for the template builder.

``TEMPLATE_FIELDS`` lists every context path a template may reference and
``BLOCK_DEFINITIONS`` lists every block type with the props a new block starts
with.
"""

# Standard library imports
import copy
import uuid
from collections import defaultdict
from dataclasses import asdict, dataclass, field
from typing import Any, Dict, List, Optional

# Local application imports
from .blocks import Block, BlockType


@dataclass(frozen=True)
class FieldDefinition:
    path: str
    label: str
    category: str
    description: str
    example: str
    is_html: bool = False

    def to_dict(self) -> Dict[str, Any]:
        return {
            "path": self.path,
            "label": self.label,
            "category": self.category,
            "description": self.description,
            "example": self.example,
            "isHtml": self.is_html,
        }


@dataclass(frozen=True)
class BlockDefinition:
    type: str
    label: str
    icon: str
    category: str
    description: str
    default_props: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        result = asdict(self)
        result["defaultProps"] = copy.deepcopy(result.pop("default_props"))
        return result


TEMPLATE_FIELDS: List[FieldDefinition] = [
    # Patient fields
    FieldDefinition("patient.name", "Patient Name", "patient", "Full name of the patient", "John Doe"),
    FieldDefinition("patient.age", "Patient Age", "patient", "Age calculated from birth year", "45"),
    FieldDefinition("patient.gender", "Gender", "patient", "Patient gender (M/F)", "M"),
    FieldDefinition("patient.age_gender", "Age / Gender", "patient", "Combined age and gender display", "45 / M"),
    FieldDefinition("patient.phn", "PHN", "patient", "Patient hospital number", "PHN-12345"),
    FieldDefinition("patient.address", "Address", "patient", "Patient address", "123 Main St, Colombo"),
    FieldDefinition("patient.phone", "Phone", "patient", "Patient phone number", "+94 71 234 5678"),
    FieldDefinition("patient.blood_group", "Blood Group", "patient", "Patient blood group", "O+"),
    FieldDefinition("patient.allergies", "Allergies", "patient", "Known allergies", "Penicillin, Latex"),
    FieldDefinition("patient.conditions", "Medical Conditions", "patient", "Pre-existing medical conditions", "Diabetes, Hypertension"),
    FieldDefinition("patient.medications", "Current Medications", "patient", "Current medications", "Metformin, Lisinopril"),
    FieldDefinition("patient.emergency_contact", "Emergency Contact", "patient", "Emergency contact name", "Jane Doe"),
    FieldDefinition("patient.emergency_phone", "Emergency Phone", "patient", "Emergency contact phone", "+94 71 987 6543"),
    FieldDefinition("patient.remarks", "Remarks", "patient", "Additional patient remarks", "Previous surgeries: Appendectomy (2020)"),
    # Surgery fields
    FieldDefinition("surgery.title", "Surgery Title", "surgery", "Name/title of the surgery", "Laparoscopic Cholecystectomy"),
    FieldDefinition("surgery.bht", "BHT Number", "surgery", "Bed head ticket number", "BHT-2024-001"),
    FieldDefinition("surgery.ward", "Ward", "surgery", "Hospital ward", "Ward 5A"),
    FieldDefinition("surgery.date", "Surgery Date", "surgery", "Date of surgery", "15/01/2024"),
    FieldDefinition("surgery.doa", "Date of Admission", "surgery", "Date patient was admitted", "14/01/2024"),
    FieldDefinition("surgery.dod", "Date of Discharge", "surgery", "Date patient was discharged", "17/01/2024"),
    FieldDefinition("surgery.notes", "Op Notes", "surgery", "Operative notes (HTML content)", "<p>Surgery was performed under general anesthesia...</p>", True),
    FieldDefinition("surgery.inward_management", "Inward Management", "surgery", "IV drugs and medications during admission (HTML content)", "<p>IV Ceftriaxone 1g BD, IV Metronidazole...</p>", True),
    FieldDefinition("surgery.post_op_notes", "Post-Op Notes", "surgery", "Post-operative notes (HTML content)", "<p>Patient recovered well...</p>", True),
    FieldDefinition("surgery.discharge_plan", "Discharge Plan", "surgery", "Discharge plan and instructions (HTML content)", "<p>Patient may resume normal activities in 2 weeks...</p>", True),
    FieldDefinition("surgery.referral", "Referral Letter", "surgery", "Referral for wound management or follow-up care (HTML content)", "<p>Please review for wound management...</p>", True),
    FieldDefinition("surgery.doneByAsString", "Done By (Text)", "surgery", "Surgeons who performed the surgery as text", "Dr. Smith, Dr. Jones"),
    FieldDefinition("surgery.assistedByAsString", "Assisted By (Text)", "surgery", "Surgeons who assisted as text", "Dr. Brown, Dr. Wilson"),
    # Follow-up fields
    FieldDefinition("followup.date", "Follow-up Date", "followup", "Date of follow-up visit", "25/01/2024"),
    FieldDefinition("followup.notes", "Follow-up Notes", "followup", "Follow-up notes (HTML content)", "<p>Patient reports no complications...</p>", True),
    # Settings fields
    FieldDefinition("settings.hospital", "Hospital Name", "settings", "Name of the hospital", "National Cancer Institute"),
    FieldDefinition("settings.subtitle", "Subtitle", "settings", "Optional second line below hospital name", "Teaching Hospital"),
    FieldDefinition("settings.unit", "Unit/Department", "settings", "Unit or department name", "Surgical Unit A"),
    FieldDefinition("settings.telephone", "Telephone", "settings", "Hospital contact number", "+94 11 234 5678"),
]

BLOCK_DEFINITIONS: List[BlockDefinition] = [
    BlockDefinition(
        BlockType.HEADER.value, "Header", "Building2", "structure",
        "Hospital header with name, unit, and contact info",
        {
            "showHospital": True,
            "showSubtitle": True,
            "showUnit": True,
            "showTelephone": True,
            "showLogo": False,
            "alignment": "center",
        },
    ),
    BlockDefinition(
        BlockType.TEXT.value, "Text", "Type", "content",
        "Static formatted text block",
        {
            "content": "",
            "alignment": "left",
            "fontSize": "base",
            "bold": False,
            "italic": False,
            "underline": False,
        },
    ),
    BlockDefinition(
        BlockType.DATA_FIELD.value, "Data Field", "Tag", "data",
        "Display a single data value",
        {
            "field": "patient.name",
            "label": "Name",
            "format": "none",
            "fallback": "-",
            "showLabel": True,
            "alignment": "left",
        },
    ),
    BlockDefinition(
        BlockType.DATA_TABLE.value, "Data Table", "Table", "data",
        "Key-value table with multiple fields",
        {"columns": 4, "rows": [], "showBorders": True},
    ),
    BlockDefinition(
        BlockType.RICH_CONTENT.value, "Rich Content", "FileText", "content",
        "Render HTML content from a field",
        {"field": "surgery.notes", "sectionTitle": "", "showIfEmpty": False},
    ),
    BlockDefinition(
        BlockType.DIVIDER.value, "Divider", "Minus", "structure",
        "Horizontal line separator",
        {"style": "solid", "thickness": 1},
    ),
    BlockDefinition(
        BlockType.SPACER.value, "Spacer", "MoveVertical", "structure",
        "Vertical spacing",
        {"height": 16},
    ),
    BlockDefinition(
        BlockType.DOCTORS_LIST.value, "Doctors List", "Users", "data",
        "List of doctors who performed or assisted",
        {"type": "both", "showDesignation": True, "layout": "inline"},
    ),
    BlockDefinition(
        BlockType.CONDITIONAL.value, "Conditional", "GitBranch", "logic",
        "Show/hide section based on condition",
        {"field": "surgery.notes", "condition": "notEmpty"},
    ),
    BlockDefinition(
        BlockType.TWO_COLUMN.value, "Two Column", "Columns2", "structure",
        "Side-by-side layout",
        {"ratio": "50-50"},
    ),
    BlockDefinition(
        BlockType.IMAGE.value, "Image", "Image", "content",
        "Static image or logo",
        {"src": "", "width": 100, "height": 100, "alignment": "center", "altText": ""},
    ),
    BlockDefinition(
        BlockType.PAGE_BREAK.value, "Page Break", "SeparatorHorizontal", "structure",
        "Force content after this to print on a new page",
        {},
    ),
]

CATEGORY_LABELS = {
    "structure": "Structure",
    "content": "Content",
    "data": "Data",
    "logic": "Logic",
    "patient": "Patient",
    "surgery": "Surgery",
    "followup": "Follow-up",
    "settings": "Settings",
}

DEFAULT_PAGE_SETTINGS = {
    "paperSize": "a4",
    "orientation": "portrait",
    "margins": {"top": 20, "right": 20, "bottom": 20, "left": 20},
}


def _group_by_category(items):
    groups = defaultdict(list)
    for item in items:
        groups[item.category].append(item)
    return dict(groups)


FIELDS_BY_CATEGORY: Dict[str, List[FieldDefinition]] = _group_by_category(TEMPLATE_FIELDS)
BLOCKS_BY_CATEGORY: Dict[str, List[BlockDefinition]] = _group_by_category(BLOCK_DEFINITIONS)

_FIELDS_BY_PATH = {f.path: f for f in TEMPLATE_FIELDS}
_BLOCKS_BY_TYPE = {b.type: b for b in BLOCK_DEFINITIONS}


def get_field(path: str) -> Optional[FieldDefinition]:
    """Return the catalogue entry for a field path, if there is one."""
    return _FIELDS_BY_PATH.get(path)


def get_block_definition(block_type: str) -> Optional[BlockDefinition]:
    return _BLOCKS_BY_TYPE.get(block_type)


def generate_block_id(block_type: str) -> str:
    return f"{block_type}-{uuid.uuid4().hex[:12]}"


def create_block(block_type: str) -> Block:
    """
    Create a new block with a fresh id and the palette's default props.

    Args:
        block_type: One of the palette block types

    Returns:
        The new block; containers start with empty child lists

    Raises:
        ValueError: If the block type is not in the palette
    """
    definition = get_block_definition(block_type)
    if definition is None:
        raise ValueError(f"Unknown block type: {block_type}")

    block = Block(
        id=generate_block_id(block_type),
        type=block_type,
        props=copy.deepcopy(definition.default_props),
    )
    if block_type == BlockType.CONDITIONAL.value:
        block.children = []
    elif block_type == BlockType.TWO_COLUMN.value:
        block.left = []
        block.right = []
    return block
