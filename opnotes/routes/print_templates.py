"""
Routes for print template management, live preview and printing.
"""

# Standard library imports
import logging

# Third-party imports
from flask import Blueprint, abort, jsonify, render_template, request
from flask_babel import gettext as _
from markupsafe import Markup

# Local application imports
from opnotes.models import Settings, utcnow
from opnotes.repository import print_templates as repository
from opnotes.templating import renderer
from opnotes.templating.blocks import (
    MalformedTemplateError,
    TemplateStructure,
    TemplateType,
)
from opnotes.templating.context import create_template_context, get_sample_context
from opnotes.templating.fields import (
    BLOCK_DEFINITIONS,
    CATEGORY_LABELS,
    DEFAULT_PAGE_SETTINGS,
    TEMPLATE_FIELDS,
)
from opnotes.utils import format_datetime, parse_date_value

# Create a logger for this module
logger = logging.getLogger(__name__)

# Create a blueprint for print template routes
bp = Blueprint("print_templates", __name__, url_prefix="/print-templates")

PAPER_SIZES = {"a4": "A4", "letter": "letter", "legal": "legal"}
SURGERY_DATE_FIELDS = ("date", "doa", "dod")


def _json_body():
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        abort(400, description=_("Request body must be a JSON object"))
    return data


def _error(message, status):
    return jsonify({"success": False, "error": message}), status


def render_safely(structure, context):
    """
    Render a template, turning any failure into a visible fallback message.

    Returns:
        Tuple of (html, error message or None)
    """
    try:
        return renderer.render_template(structure, context), None
    except Exception as e:
        logger.exception(f"Error rendering print template: {e}")
        message = _("Rendering failed.")
    fallback = Markup('<div class="render-error">{}</div>').format(message)
    return str(fallback), message


def build_print_context(template_type, data):
    """Build a template context from posted records and the stored settings."""
    settings = Settings.get_settings()

    surgery = dict(data.get("surgery") or {})
    for key in SURGERY_DATE_FIELDS:
        surgery[key] = parse_date_value(surgery.get(key))

    params = {
        "patient": data.get("patient") or {},
        "surgery": surgery,
        "settings": settings.to_context(),
    }

    followup = data.get("followup")
    if template_type == TemplateType.FOLLOWUP.value and followup:
        followup = dict(followup)
        followup["created_at"] = parse_date_value(followup.get("created_at"))
        params["followup"] = followup

    return create_template_context(params, timezone_name=settings.timezone_name)


def page_css(page_settings):
    """Build the @page rule for a template's page settings."""
    page_settings = page_settings or DEFAULT_PAGE_SETTINGS
    margins = {**DEFAULT_PAGE_SETTINGS["margins"], **(page_settings.get("margins") or {})}
    size = PAPER_SIZES.get(page_settings.get("paperSize"), "A4")
    orientation = "landscape" if page_settings.get("orientation") == "landscape" else "portrait"
    return (
        f"@page {{ size: {size} {orientation}; "
        f"margin: {margins['top']}mm {margins['right']}mm "
        f"{margins['bottom']}mm {margins['left']}mm; }}"
    )


@bp.route("/", methods=["GET"])
def index():
    """List print templates, optionally filtered by type and search text."""
    templates, total = repository.list_print_templates(
        template_type=request.args.get("type") or None,
        search=request.args.get("search") or None,
    )
    return jsonify({"data": [t.to_dict() for t in templates], "total": total})


@bp.route("/", methods=["POST"])
def create():
    """Create a print template."""
    data = _json_body()
    try:
        template = repository.create_print_template(
            name=data.get("name") or "",
            template_type=data.get("type") or "",
            structure=data.get("structure") or {},
            description=data.get("description"),
            page_settings=data.get("pageSettings"),
            is_default=bool(data.get("isDefault")),
        )
    except ValueError as e:
        return _error(str(e), 400)

    return jsonify({"success": True, "template": template.to_dict()}), 201


@bp.route("/<int:template_id>", methods=["GET"])
def show(template_id):
    template = repository.get_print_template_by_id(template_id)
    if template is None:
        return _error(_("Print template not found"), 404)
    return jsonify(template.to_dict())


@bp.route("/<int:template_id>", methods=["PUT"])
def update(template_id):
    """Update the fields present in the request body."""
    data = _json_body()
    field_map = {
        "name": "name",
        "description": "description",
        "structure": "structure",
        "pageSettings": "page_settings",
        "isDefault": "is_default",
    }
    changes = {field_map[key]: value for key, value in data.items() if key in field_map}

    try:
        template = repository.update_print_template_by_id(template_id, **changes)
    except ValueError as e:
        return _error(str(e), 400)

    if template is None:
        return _error(_("Print template not found"), 404)
    return jsonify({"success": True, "template": template.to_dict()})


@bp.route("/<int:template_id>", methods=["DELETE"])
def delete(template_id):
    if not repository.delete_print_template_by_id(template_id):
        return _error(_("Print template not found"), 404)
    return jsonify({"success": True})


@bp.route("/<int:template_id>/duplicate", methods=["POST"])
def duplicate(template_id):
    data = request.get_json(silent=True) or {}
    original = repository.get_print_template_by_id(template_id)
    if original is None:
        return _error(_("Print template not found"), 404)

    new_name = data.get("name") or _("%(name)s (Copy)", name=original.name)
    template = repository.duplicate_print_template(template_id, new_name)
    return jsonify({"success": True, "template": template.to_dict()}), 201


@bp.route("/<int:template_id>/default", methods=["POST"])
def set_default(template_id):
    template = repository.get_print_template_by_id(template_id)
    if template is None:
        return _error(_("Print template not found"), 404)

    repository.set_default_print_template(template_id, template.type)
    return jsonify({"success": True})


@bp.route("/defaults", methods=["GET"])
def list_defaults():
    defaults = repository.list_default_print_templates(request.args.get("type") or None)
    return jsonify({"data": [d.to_dict() for d in defaults]})


@bp.route("/defaults/<key>/restore", methods=["POST"])
def restore_default(key):
    data = request.get_json(silent=True) or {}
    template = repository.restore_print_template_from_default(
        key,
        set_as_default=bool(data.get("setAsDefault")),
        custom_name=data.get("name"),
    )
    if template is None:
        return _error(_("Default template not found"), 404)
    return jsonify({"success": True, "template": template.to_dict()}), 201


@bp.route("/reset", methods=["POST"])
def reset():
    """Replace every print template with the shipped defaults."""
    templates = repository.reset_print_templates_to_defaults()
    return jsonify({"success": True, "data": [t.to_dict() for t in templates]})


@bp.route("/fields", methods=["GET"])
def fields():
    """Data fields a template can reference, for the template builder."""
    return jsonify(
        {
            "fields": [f.to_dict() for f in TEMPLATE_FIELDS],
            "categories": CATEGORY_LABELS,
        }
    )


@bp.route("/blocks", methods=["GET"])
def blocks():
    """Block palette for the template builder."""
    return jsonify(
        {
            "blocks": [b.to_dict() for b in BLOCK_DEFINITIONS],
            "categories": CATEGORY_LABELS,
            "pageSettings": DEFAULT_PAGE_SETTINGS,
        }
    )


@bp.route("/preview", methods=["POST"])
def preview():
    """
    Render a posted structure for the live preview.

    Uses the posted context, or sample data for the posted template type.
    """
    data = _json_body()
    template_type = data.get("type") or TemplateType.SURGERY.value
    context = data.get("context") or get_sample_context(template_type)

    try:
        structure = TemplateStructure.coerce(data.get("structure") or {})
    except MalformedTemplateError as e:
        return _error(str(e), 400)

    html, error = render_safely(structure, context)
    if error:
        return jsonify({"success": False, "html": html, "error": error})
    return jsonify({"success": True, "html": html})


@bp.route("/<int:template_id>/render", methods=["POST"])
def render(template_id):
    """Render a stored template against posted records as a printable page."""
    template = repository.get_print_template_by_id(template_id)
    if template is None:
        abort(404)

    data = _json_body()
    context = build_print_context(template.type, data)
    html, error = render_safely(template.structure_data, context)
    if error:
        logger.warning(f"Printing template {template_id} fell back to error output")

    return render_template(
        "print/document.html",
        title=template.name,
        page_css=page_css(template.page_settings_data),
        body=Markup(html),
        printed_at=format_datetime(utcnow()),
    )
