"""
Template context construction.

The renderer only ever sees a ``TemplateContext``: plain nested dicts with a
fixed set of keys. This module builds one from raw patient, surgery, followup
and settings records, and provides sample contexts for live preview.
"""

# Standard library imports
import logging
from datetime import date, datetime, timezone
from typing import Any, Dict, List, Mapping, Optional, TypedDict

# Third-party imports
import pytz

# Local application imports
from .blocks import TemplateType

# Create a logger for this module
logger = logging.getLogger(__name__)

CONTEXT_DATE_FORMAT = "%d/%m/%Y"


class Doctor(TypedDict):
    name: str
    designation: Optional[str]


class PatientContext(TypedDict):
    name: str
    age: int
    gender: str
    age_gender: str
    phn: str
    address: Optional[str]
    phone: Optional[str]
    blood_group: Optional[str]
    allergies: Optional[str]
    conditions: Optional[str]
    medications: Optional[str]
    emergency_contact: Optional[str]
    emergency_phone: Optional[str]
    remarks: Optional[str]


class SurgeryContext(TypedDict):
    title: str
    bht: str
    ward: str
    date: Optional[str]
    doa: Optional[str]
    dod: Optional[str]
    notes: Optional[str]
    inward_management: Optional[str]
    post_op_notes: Optional[str]
    discharge_plan: Optional[str]
    referral: Optional[str]
    doneByAsString: str
    assistedByAsString: str
    doneBy: List[Doctor]
    assistedBy: List[Doctor]


class FollowupContext(TypedDict):
    date: Optional[str]
    notes: Optional[str]


class SettingsContext(TypedDict):
    hospital: str
    subtitle: str
    unit: str
    telephone: Optional[str]


class _TemplateContextBase(TypedDict):
    patient: PatientContext
    surgery: SurgeryContext
    settings: SettingsContext


class TemplateContext(_TemplateContextBase, total=False):
    followup: FollowupContext


PATIENT_OPTIONAL_FIELDS = (
    "address",
    "phone",
    "blood_group",
    "allergies",
    "conditions",
    "medications",
    "emergency_contact",
    "emergency_phone",
    "remarks",
)

SURGERY_HTML_FIELDS = (
    "notes",
    "inward_management",
    "post_op_notes",
    "discharge_plan",
    "referral",
)


def format_context_date(value: Any, tz: Optional[pytz.BaseTzInfo] = None) -> Optional[str]:
    """
    Format a date for the context as dd/mm/yyyy.

    Datetimes are converted to the given timezone first (naive values are
    taken as UTC). Strings are assumed to be formatted already.
    """
    if not value:
        return None
    if isinstance(value, str):
        return value
    if isinstance(value, datetime):
        if value.tzinfo is None:
            value = value.replace(tzinfo=timezone.utc)
        if tz is not None:
            value = value.astimezone(tz)
        return value.strftime(CONTEXT_DATE_FORMAT)
    if isinstance(value, date):
        return value.strftime(CONTEXT_DATE_FORMAT)
    logger.warning(f"Cannot format {type(value).__name__} as a date")
    return str(value)


def calculate_age(birth_year: int, today: Optional[date] = None) -> int:
    today = today or date.today()
    return today.year - int(birth_year)


def normalize_doctors(doctors: Optional[List[Mapping[str, Any]]]) -> List[Doctor]:
    return [
        {"name": d.get("name") or "", "designation": d.get("designation") or None}
        for d in doctors or []
    ]


def format_doctors(doctors: List[Doctor]) -> str:
    """Join doctors as "Name (Designation), Name"."""
    return ", ".join(
        f"{d['name']} ({d['designation']})" if d.get("designation") else d["name"]
        for d in doctors
    )


def create_template_context(
    params: Mapping[str, Any],
    timezone_name: str = "UTC",
    today: Optional[date] = None,
) -> TemplateContext:
    """
    Build a template context from raw records.

    Args:
        params: Dict with ``patient``, ``surgery``, ``settings`` and optionally
            ``followup`` records. The patient record carries ``birth_year``;
            surgery dates may be date objects or pre-formatted strings;
            ``followup.created_at`` is a UTC datetime.
        timezone_name: Timezone used to turn datetimes into local dates
        today: Reference date for the age calculation (defaults to today)

    Returns:
        The template context
    """
    try:
        tz = pytz.timezone(timezone_name or "UTC")
    except pytz.UnknownTimeZoneError:
        logger.error(f"Unknown timezone {timezone_name!r}, printing dates in UTC")
        tz = pytz.utc
    patient = params.get("patient") or {}
    surgery = params.get("surgery") or {}
    settings = params.get("settings") or {}
    followup = params.get("followup")

    birth_year = patient.get("birth_year")
    age = calculate_age(birth_year, today) if birth_year else 0
    gender = patient.get("gender") or ""

    patient_context: Dict[str, Any] = {
        "name": patient.get("name") or "",
        "age": age,
        "gender": gender,
        "age_gender": f"{age} / {gender}",
        "phn": patient.get("phn") or "",
    }
    for key in PATIENT_OPTIONAL_FIELDS:
        patient_context[key] = patient.get(key) or None

    done_by = normalize_doctors(surgery.get("doneBy"))
    assisted_by = normalize_doctors(surgery.get("assistedBy"))

    surgery_context: Dict[str, Any] = {
        "title": surgery.get("title") or "",
        "bht": surgery.get("bht") or "",
        "ward": surgery.get("ward") or "",
        "date": format_context_date(surgery.get("date"), tz),
        "doa": format_context_date(surgery.get("doa"), tz),
        "dod": format_context_date(surgery.get("dod"), tz),
    }
    for key in SURGERY_HTML_FIELDS:
        surgery_context[key] = surgery.get(key) or None
    surgery_context.update(
        {
            "doneBy": done_by,
            "assistedBy": assisted_by,
            "doneByAsString": format_doctors(done_by),
            "assistedByAsString": format_doctors(assisted_by),
        }
    )

    context: Dict[str, Any] = {
        "patient": patient_context,
        "surgery": surgery_context,
        "settings": {
            "hospital": settings.get("hospital") or "Hospital Name",
            "subtitle": settings.get("subtitle") or "",
            "unit": settings.get("unit") or "Unit Name",
            "telephone": settings.get("telephone") or None,
        },
    }

    if followup:
        context["followup"] = {
            "date": format_context_date(followup.get("created_at"), tz),
            "notes": followup.get("notes") or None,
        }

    return context


def get_sample_context(template_type: str = TemplateType.SURGERY.value) -> TemplateContext:
    """Return sample data for previewing a template of the given type."""
    context: Dict[str, Any] = {
        "patient": {
            "name": "John Doe",
            "age": 45,
            "gender": "M",
            "age_gender": "45 / M",
            "phn": "PHN-2024-12345",
            "address": "123 Main Street, Colombo 07",
            "phone": "+94 71 234 5678",
            "blood_group": "O+",
            "allergies": "Penicillin, Latex",
            "conditions": "Diabetes Type 2, Hypertension",
            "medications": "Metformin 500mg, Lisinopril 10mg",
            "emergency_contact": "Jane Doe",
            "emergency_phone": "+94 77 987 6543",
            "remarks": "Previous surgeries: Appendectomy (2018)",
        },
        "surgery": {
            "title": "Laparoscopic Cholecystectomy",
            "bht": "BHT-2024-00123",
            "ward": "Ward 5A",
            "date": "15/01/2024",
            "doa": "14/01/2024",
            "dod": "17/01/2024",
            "notes": (
                "<p>The patient was placed in supine position under general anesthesia. "
                "Standard laparoscopic ports were placed. The gallbladder was identified "
                "and dissected from the liver bed using electrocautery.</p>\n"
                "<p>The cystic duct and artery were identified, clipped, and divided. "
                "The gallbladder was removed through the umbilical port.</p>\n"
                "<p><strong>Findings:</strong></p>\n"
                "<ul>\n<li>Multiple small gallstones</li>\n"
                "<li>Mild chronic cholecystitis</li>\n<li>No bile duct stones</li>\n</ul>\n"
                "<p>Estimated blood loss: 20ml. No complications.</p>"
            ),
            "inward_management": (
                "<p><strong>IV Medications:</strong></p>\n"
                "<ul>\n<li>IV Ceftriaxone 1g BD</li>\n<li>IV Metronidazole 500mg TDS</li>\n"
                "<li>IV Paracetamol 1g QID PRN</li>\n"
                "<li>IV Normal Saline 1L over 8 hours</li>\n</ul>"
            ),
            "post_op_notes": (
                "<p><strong>Post-operative instructions:</strong></p>\n"
                "<ul>\n<li>Clear fluids for 6 hours, then progress to regular diet as tolerated</li>\n"
                "<li>Pain management with paracetamol PRN</li>\n<li>Ambulation encouraged</li>\n"
                "<li>Wound care: Keep dry for 48 hours</li>\n</ul>\n"
                "<p>Follow-up in 2 weeks.</p>"
            ),
            "discharge_plan": (
                "<p><strong>Discharge Instructions:</strong></p>\n"
                "<ul>\n<li>Resume normal diet</li>\n<li>Paracetamol 1g QID PRN for pain</li>\n"
                "<li>Avoid heavy lifting for 2 weeks</li>\n<li>Return to work in 1 week</li>\n</ul>\n"
                "<p>Review appointment: 29/01/2024</p>"
            ),
            "referral": None,
            "doneByAsString": "Dr. Sarah Smith (Consultant Surgeon), Dr. Michael Jones (Senior Registrar)",
            "assistedByAsString": "Dr. Emily Brown (Registrar)",
            "doneBy": [
                {"name": "Dr. Sarah Smith", "designation": "Consultant Surgeon"},
                {"name": "Dr. Michael Jones", "designation": "Senior Registrar"},
            ],
            "assistedBy": [{"name": "Dr. Emily Brown", "designation": "Registrar"}],
        },
        "settings": {
            "hospital": "General Hospital Colombo",
            "subtitle": "Teaching Hospital",
            "unit": "Surgical Unit A",
            "telephone": "+94 11 234 5678",
        },
    }

    if template_type == TemplateType.FOLLOWUP.value:
        context["followup"] = {
            "date": "29/01/2024",
            "notes": (
                "<p>Patient recovering well. Wound healing without complications.</p>\n"
                "<p><strong>Examination:</strong></p>\n"
                "<ul>\n<li>Port sites clean and dry</li>\n<li>No signs of infection</li>\n"
                "<li>Abdomen soft, non-tender</li>\n</ul>\n"
                "<p><strong>Plan:</strong></p>\n"
                "<ul>\n<li>Continue current medications</li>\n<li>Resume normal activities</li>\n"
                "<li>Review in 4 weeks if needed</li>\n</ul>"
            ),
        }

    return context
