"""
HTML renderer for print templates.

``render_template`` turns a template structure and a template context into a
single HTML fragment. Each block type has its own render function and
``render_block`` dispatches on the block's type tag. Container blocks never
recurse on their own; they call the ``render_children`` function they are
handed, which is ``render_blocks`` itself.

Rendering is pure: no I/O, no shared state, inputs are never modified. Missing
data renders as nothing (or as the block's fallback) instead of raising.
"""

# Standard library imports
import logging
from typing import Any, Callable, Dict, List, Mapping, Optional, Union

# Third-party imports
from flask_babel import gettext as _

# Local application imports
from .blocks import Block, TemplateStructure
from .expressions import (
    escape_html,
    evaluate_condition,
    format_value,
    interpolate,
    is_empty,
    resolve_field,
    to_string,
)

# Create a logger for this module
logger = logging.getLogger(__name__)

RenderChildren = Callable[[List[Block], Mapping[str, Any]], str]

TWO_COLUMN_RATIOS = {
    "50-50": ("50%", "50%"),
    "33-67": ("33.33%", "66.67%"),
    "67-33": ("66.67%", "33.33%"),
    "25-75": ("25%", "75%"),
    "75-25": ("75%", "25%"),
}

IMAGE_JUSTIFY = {
    "left": "flex-start",
    "center": "center",
    "right": "flex-end",
}


def _number_prop(block: Block, name: str, default: Union[int, float]) -> Union[int, float]:
    """Read a numeric prop, falling back to the default when unset or unreadable."""
    value = block.props.get(name)
    if not value:
        return default
    if isinstance(value, bool):
        logger.warning(f"Block {block.id}: prop '{name}' is not a number: {value!r}")
        return default
    if isinstance(value, (int, float)):
        return value
    try:
        number = float(value)
    except (TypeError, ValueError):
        logger.warning(f"Block {block.id}: prop '{name}' is not a number: {value!r}")
        return default
    return int(number) if number.is_integer() else number


def _section(context: Mapping[str, Any], name: str) -> Mapping[str, Any]:
    section = context.get(name) if isinstance(context, Mapping) else None
    return section if isinstance(section, Mapping) else {}


def render_header(block: Block, context: Mapping[str, Any]) -> str:
    props = block.props
    settings = _section(context, "settings")
    alignment = props.get("alignment") or "center"

    html = f'<div class="header-section keep-together" style="text-align: {escape_html(alignment)}">'

    if props.get("showLogo") and props.get("logoSrc"):
        html += (
            f'<img src="{escape_html(props["logoSrc"])}" alt="Logo" class="header-logo" '
            'style="max-height: 60px; margin-bottom: 8px" />'
        )

    if props.get("showHospital") and not is_empty(settings.get("hospital")):
        html += f'<h1 class="text-2xl bold">{escape_html(settings["hospital"])}</h1>'

    if props.get("showSubtitle") and not is_empty(settings.get("subtitle")):
        html += f'<p class="text-base">{escape_html(settings["subtitle"])}</p>'

    if props.get("showUnit") and not is_empty(settings.get("unit")):
        html += f'<h2 class="text-lg pt-1">{escape_html(settings["unit"])}</h2>'

    if props.get("showTelephone") and not is_empty(settings.get("telephone")):
        html += f'<p class="text-sm pt-1">{_("Tel")}: {escape_html(settings["telephone"])}</p>'

    html += "</div>"
    return html


def render_text(block: Block, context: Mapping[str, Any]) -> str:
    props = block.props
    content = interpolate(props.get("content") or "", context)

    classes = [f"text-{props.get('fontSize') or 'base'}"]
    if props.get("bold"):
        classes.append("bold")
    if props.get("italic"):
        classes.append("italic")
    if props.get("underline"):
        classes.append("underline")
    classes.append("keep-together")

    alignment = props.get("alignment") or "left"
    return (
        f'<div class="{escape_html(" ".join(classes))}" '
        f'style="text-align: {escape_html(alignment)}">{content}</div>'
    )


def render_data_field(block: Block, context: Mapping[str, Any]) -> str:
    props = block.props
    value = resolve_field(context, props.get("field") or "")

    if value is None:
        display = to_string(props.get("fallback") or "")
    else:
        display = format_value(value, props.get("format") or "none")

    alignment = props.get("alignment") or "left"
    html = f'<div class="data-field keep-together" style="text-align: {escape_html(alignment)}">'
    if props.get("showLabel") and props.get("label"):
        html += f'<span class="label">{escape_html(props["label"])}:</span> '
    html += f"{escape_html(display)}</div>"
    return html


def render_data_table(block: Block, context: Mapping[str, Any]) -> str:
    """
    Lay label/value pairs into table rows.

    A table with N columns holds N / 2 pairs per physical row. A pair with a
    colspan takes that many slots and its value cell spans colspan * 2 - 1
    columns. Pairs are packed greedily: one is placed whenever the current
    row has a free slot left.
    """
    props = block.props
    rows = props.get("rows") or []
    if not isinstance(rows, list):
        logger.warning(f"Block {block.id}: rows must be a list, got {type(rows).__name__}")
        rows = []
    columns = _number_prop(block, "columns", 4)
    slots_per_row = max(columns / 2, 1)
    table_class = "info-table" if props.get("showBorders") else "info-table no-borders"

    html = f'<table class="{table_class} keep-together">'

    i = 0
    while i < len(rows):
        html += "<tr>"
        slots_used = 0

        while slots_used < slots_per_row and i < len(rows):
            row = rows[i] if isinstance(rows[i], Mapping) else {}
            value = resolve_field(context, row.get("field") or "")
            colspan = row.get("colspan") or 1
            if not isinstance(colspan, int) or isinstance(colspan, bool) or colspan < 1:
                logger.warning(f"Block {block.id}: invalid colspan {colspan!r}")
                colspan = 1

            html += f'<td class="label">{escape_html(row.get("label") or "")}:</td>'
            if colspan > 1:
                html += f'<td colspan="{colspan * 2 - 1}">{escape_html(value)}</td>'
            else:
                html += f"<td>{escape_html(value)}</td>"

            slots_used += colspan
            i += 1

        html += "</tr>"

    html += "</table>"
    return html


def render_rich_content(block: Block, context: Mapping[str, Any]) -> str:
    props = block.props
    value = resolve_field(context, props.get("field") or "")

    if not props.get("showIfEmpty") and (not value or value == ""):
        return ""

    html = '<div class="notes-section">'
    if props.get("sectionTitle"):
        html += f'<div class="section-header keep-together">{escape_html(props["sectionTitle"])}</div>'

    # Rich content is HTML from the editor and is inserted as-is
    html += f'<div class="prose">{to_string(value) if value else ""}</div>'
    html += "</div>"
    return html


def render_divider(block: Block) -> str:
    style = block.props.get("style") or "solid"
    if style not in ("solid", "dashed", "double"):
        style = "solid"
    thickness = _number_prop(block, "thickness", 1)

    if style == "double":
        border = f"{thickness * 3}px double"
    else:
        border = f"{thickness}px {style}"

    return (
        f'<hr style="border: none; border-top: {border} var(--print-border-color, #000); '
        'margin: 8px 0" />'
    )


def render_spacer(block: Block) -> str:
    height = _number_prop(block, "height", 16)
    return f'<div class="spacer" style="height: {height}px"></div>'


def _render_doctors(label: str, doctors: List[Any], props: Mapping[str, Any]) -> str:
    names = []
    for doctor in doctors:
        if not isinstance(doctor, Mapping):
            continue
        name = escape_html(doctor.get("name"))
        designation = doctor.get("designation")
        if props.get("showDesignation") and designation:
            name = f"{name} ({escape_html(designation)})"
        names.append(name)

    if props.get("layout") == "list":
        doctor_list = "<div>" + "".join(f"<div>{name}</div>" for name in names) + "</div>"
    else:
        doctor_list = "<span>" + ", ".join(names) + "</span>"

    return (
        f'<div class="doctor-row"><span class="doctor-label">{escape_html(label)}:</span> '
        f"{doctor_list}</div>"
    )


def render_doctors_list(block: Block, context: Mapping[str, Any]) -> str:
    props = block.props
    surgery = _section(context, "surgery")
    which = props.get("type")

    html = '<div class="doctors-section keep-together">'

    if which in ("doneBy", "both"):
        done_by = surgery.get("doneBy")
        if isinstance(done_by, list) and done_by:
            html += _render_doctors(_("Done By"), done_by, props)

    if which in ("assistedBy", "both"):
        assisted_by = surgery.get("assistedBy")
        if isinstance(assisted_by, list) and assisted_by:
            html += _render_doctors(_("Assisted By"), assisted_by, props)

    html += "</div>"
    return html


def render_conditional(
    block: Block, context: Mapping[str, Any], render_children: RenderChildren
) -> str:
    props = block.props
    if not evaluate_condition(
        context, props.get("field") or "", props.get("condition"), props.get("value")
    ):
        return ""
    return render_children(block.children or [], context)


def render_two_column(
    block: Block, context: Mapping[str, Any], render_children: RenderChildren
) -> str:
    left_width, right_width = TWO_COLUMN_RATIOS.get(block.props.get("ratio"), ("50%", "50%"))

    return (
        '<div class="two-column keep-together" style="display: flex; gap: 16px">'
        f'<div class="column-left" style="width: {left_width}">'
        f"{render_children(block.left or [], context)}</div>"
        f'<div class="column-right" style="width: {right_width}">'
        f"{render_children(block.right or [], context)}</div>"
        "</div>"
    )


def render_image(block: Block) -> str:
    props = block.props
    if not props.get("src"):
        return ""

    justify = IMAGE_JUSTIFY.get(props.get("alignment"), "center")
    width = _number_prop(block, "width", 100)
    height = _number_prop(block, "height", 100)

    return (
        f'<div class="image-block keep-together" style="display: flex; justify-content: {justify}">'
        f'<img src="{escape_html(props["src"])}" alt="{escape_html(props.get("altText") or "")}" '
        f'style="max-width: {width}px; max-height: {height}px; object-fit: contain" />'
        "</div>"
    )


def render_page_break(block: Block) -> str:
    return '<div class="page-break" style="page-break-before: always"></div>'


def render_block(
    block: Block, context: Mapping[str, Any], render_children: RenderChildren
) -> str:
    """
    Render a single block.

    Args:
        block: The block to render
        context: The template context
        render_children: Renders a nested block list; used by container blocks

    Returns:
        HTML fragment for the block, empty for unknown block types
    """
    block_type = block.type

    if block_type == "header":
        return render_header(block, context)
    if block_type == "text":
        return render_text(block, context)
    if block_type == "data-field":
        return render_data_field(block, context)
    if block_type == "data-table":
        return render_data_table(block, context)
    if block_type == "rich-content":
        return render_rich_content(block, context)
    if block_type == "divider":
        return render_divider(block)
    if block_type == "spacer":
        return render_spacer(block)
    if block_type == "doctors-list":
        return render_doctors_list(block, context)
    if block_type == "conditional":
        return render_conditional(block, context, render_children)
    if block_type == "two-column":
        return render_two_column(block, context, render_children)
    if block_type == "image":
        return render_image(block)
    if block_type == "page-break":
        return render_page_break(block)

    logger.warning(f"Unknown block type: {block_type}")
    return ""


def render_blocks(blocks: List[Block], context: Mapping[str, Any]) -> str:
    """Render a list of blocks in order and concatenate the results."""
    return "".join(render_block(block, context, render_blocks) for block in blocks)


def render_template(
    structure: Union[TemplateStructure, Dict[str, Any], str],
    context: Optional[Mapping[str, Any]],
) -> str:
    """
    Render a template structure against a template context.

    Args:
        structure: TemplateStructure, its dict form or its JSON text
        context: The template context (patient, surgery, followup, settings)

    Returns:
        HTML fragment wrapped in a single document element

    Raises:
        MalformedTemplateError: If the structure is not a valid block tree
    """
    structure = TemplateStructure.coerce(structure)
    html = render_blocks(structure.blocks, context or {})
    return f'<div class="document">{html}</div>'
