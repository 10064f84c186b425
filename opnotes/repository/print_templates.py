"""
Print template persistence.

Structures are stored as JSON text. Each template type has at most one default
template; making a template the default clears the flag on the others of the
same type.
"""

# Standard library imports
import logging
from typing import Any, Dict, List, Optional, Tuple

# Third-party imports
from sqlalchemy import or_

# Local application imports
from opnotes.models import DefaultPrintTemplate, PrintTemplate, db, utcnow
from opnotes.templating.blocks import TemplateStructure, TemplateType
from opnotes.templating.defaults import get_default_templates

# Create a logger for this module
logger = logging.getLogger(__name__)

TEMPLATE_TYPES = tuple(t.value for t in TemplateType)


def _validate_type(template_type: str) -> None:
    if template_type not in TEMPLATE_TYPES:
        raise ValueError(f"Unknown template type: {template_type}")


def _clear_defaults(template_type: str, except_id: Optional[int] = None) -> None:
    query = PrintTemplate.query.filter(PrintTemplate.type == template_type)
    if except_id is not None:
        query = query.filter(PrintTemplate.id != except_id)
    query.update({PrintTemplate.is_default: False}, synchronize_session="fetch")


def _new_print_template(name, template_type, structure, description, page_settings, is_default):
    """Validate and build a template without adding it to the session."""
    if not name or not name.strip():
        raise ValueError("Template name is required")
    _validate_type(template_type)

    template = PrintTemplate(
        name=name.strip(),
        type=template_type,
        description=description,
        is_default=bool(is_default),
    )
    template.structure_data = TemplateStructure.coerce(structure)
    template.page_settings_data = page_settings
    return template


def create_print_template(
    name: str,
    template_type: str,
    structure: Any,
    description: Optional[str] = None,
    page_settings: Optional[Dict[str, Any]] = None,
    is_default: bool = False,
) -> PrintTemplate:
    """
    Create a print template.

    Args:
        name: Template name
        template_type: 'surgery' or 'followup'
        structure: TemplateStructure, its dict form or JSON text
        description: Optional description
        page_settings: Optional paper size, orientation and margins
        is_default: Make this the default template for its type

    Returns:
        The created template

    Raises:
        ValueError: If the name is empty or the type is unknown
        MalformedTemplateError: If the structure is not a valid block tree
    """
    template = _new_print_template(
        name, template_type, structure, description, page_settings, is_default
    )

    if is_default:
        _clear_defaults(template_type)

    db.session.add(template)
    db.session.commit()
    logger.info(f"Created print template {template.id} ({template.type}): {template.name}")
    return template


def get_print_template_by_id(template_id: int) -> Optional[PrintTemplate]:
    return db.session.get(PrintTemplate, template_id)


def get_default_print_template(template_type: str) -> Optional[PrintTemplate]:
    """Return the default template for a type, if one is set."""
    return PrintTemplate.query.filter_by(type=template_type, is_default=True).first()


def update_print_template_by_id(template_id: int, **changes: Any) -> Optional[PrintTemplate]:
    """
    Update a print template.

    Accepted keyword arguments: name, description, structure, page_settings,
    is_default. Arguments that are not given are left unchanged.

    Returns:
        The updated template, or None if it does not exist
    """
    template = get_print_template_by_id(template_id)
    if template is None:
        return None

    if "name" in changes:
        name = changes["name"]
        if not name or not name.strip():
            raise ValueError("Template name is required")
        template.name = name.strip()
    if "description" in changes:
        template.description = changes["description"]
    if "structure" in changes:
        template.structure_data = TemplateStructure.coerce(changes["structure"])
    if "page_settings" in changes:
        template.page_settings_data = changes["page_settings"]
    if "is_default" in changes:
        template.is_default = bool(changes["is_default"])
        if template.is_default:
            _clear_defaults(template.type, except_id=template.id)

    template.updated_at = utcnow()
    db.session.commit()
    logger.info(f"Updated print template {template.id}")
    return template


def delete_print_template_by_id(template_id: int) -> bool:
    template = get_print_template_by_id(template_id)
    if template is None:
        return False
    db.session.delete(template)
    db.session.commit()
    logger.info(f"Deleted print template {template_id}")
    return True


def list_print_templates(
    template_type: Optional[str] = None, search: Optional[str] = None
) -> Tuple[List[PrintTemplate], int]:
    """
    List print templates, defaults first and then by name.

    Args:
        template_type: Only templates of this type
        search: Substring matched against name and description

    Returns:
        Tuple of (templates, total count)
    """
    query = PrintTemplate.query
    if template_type:
        query = query.filter(PrintTemplate.type == template_type)
    if search:
        term = f"%{search}%"
        query = query.filter(
            or_(PrintTemplate.name.ilike(term), PrintTemplate.description.ilike(term))
        )

    templates = query.order_by(PrintTemplate.is_default.desc(), PrintTemplate.name.asc()).all()
    return templates, len(templates)


def duplicate_print_template(template_id: int, new_name: str) -> Optional[PrintTemplate]:
    """Copy a template under a new name. The copy is never the default."""
    original = get_print_template_by_id(template_id)
    if original is None:
        return None

    return create_print_template(
        name=new_name,
        template_type=original.type,
        structure=original.structure_data,
        description=original.description,
        page_settings=original.page_settings_data,
        is_default=False,
    )


def set_default_print_template(template_id: int, template_type: str) -> bool:
    """
    Make a template the default for its type.

    Returns:
        False if no template with this id and type exists
    """
    template = PrintTemplate.query.filter_by(id=template_id, type=template_type).first()
    if template is None:
        return False

    _clear_defaults(template_type, except_id=template_id)
    template.is_default = True
    template.updated_at = utcnow()
    db.session.commit()
    logger.info(f"Print template {template_id} is now the default {template_type} template")
    return True


def list_default_print_templates(template_type: Optional[str] = None) -> List[DefaultPrintTemplate]:
    query = DefaultPrintTemplate.query
    if template_type:
        query = query.filter(DefaultPrintTemplate.type == template_type)
    return query.order_by(DefaultPrintTemplate.name.asc()).all()


def get_default_print_template_by_key(key: str) -> Optional[DefaultPrintTemplate]:
    return DefaultPrintTemplate.query.filter_by(key=key).first()


def restore_print_template_from_default(
    key: str, set_as_default: bool = False, custom_name: Optional[str] = None
) -> Optional[PrintTemplate]:
    """
    Create a new template from a shipped default.

    Returns:
        The created template, or None if no default has this key
    """
    default = get_default_print_template_by_key(key)
    if default is None:
        return None

    return create_print_template(
        name=custom_name or default.name,
        template_type=default.type,
        structure=default.structure_data,
        description=default.description,
        page_settings=default.page_settings_data,
        is_default=set_as_default,
    )


def reset_print_templates_to_defaults() -> List[PrintTemplate]:
    """
    Delete every print template and recreate them from the shipped defaults.
    The first default of each type becomes that type's default template.
    Nothing changes if any template cannot be recreated.
    """
    try:
        PrintTemplate.query.delete()

        seen_types = set()
        created = []
        for default in list_default_print_templates():
            is_first_of_type = default.type not in seen_types
            seen_types.add(default.type)
            template = _new_print_template(
                default.name,
                default.type,
                default.structure_data,
                default.description,
                default.page_settings_data,
                is_first_of_type,
            )
            db.session.add(template)
            created.append(template)

        db.session.commit()
    except Exception as e:
        db.session.rollback()
        logger.error(f"Reset to default print templates failed, nothing changed: {e}")
        raise

    logger.info(f"Recreated {len(created)} print templates from defaults")
    return created


def sync_default_print_templates() -> int:
    """
    Write the shipped default templates into default_print_templates.

    Existing rows are updated in place by key so restores always copy the
    current shipped version.

    Returns:
        Number of default templates written
    """
    count = 0
    for definition in get_default_templates():
        default = get_default_print_template_by_key(definition["key"])
        if default is None:
            default = DefaultPrintTemplate(key=definition["key"])
            db.session.add(default)
        default.name = definition["name"]
        default.type = definition["type"]
        default.description = definition["description"]
        default.structure_data = definition["structure"]
        default.page_settings_data = definition["page_settings"]
        count += 1

    db.session.commit()
    logger.info(f"Synchronised {count} default print templates")
    return count


def seed_print_templates() -> List[PrintTemplate]:
    """Create templates from the defaults when the table is empty."""
    if PrintTemplate.query.first() is not None:
        return []
    logger.info("No print templates found - seeding from defaults")
    return reset_print_templates_to_defaults()
