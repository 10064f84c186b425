"""
Field paths, conditions and value formatting for print templates.

Everything here is a pure function of its arguments. Missing data is never an
error: an unresolvable path yields ``None`` and each caller decides what to
show instead.
"""

# Standard library imports
import logging
import re
from collections.abc import Mapping
from datetime import date
from typing import Any, Optional

# Third-party imports
from babel.dates import format_date as babel_format_date
from markupsafe import escape

# Create a logger for this module
logger = logging.getLogger(__name__)

DEFAULT_DATE_LOCALE = "en_GB"

CONDITION_OPERATORS = ("exists", "notEmpty", "isEmpty", "equals")
FORMAT_MODES = ("none", "date", "age")

# {{ field.path }} with optional whitespace around the path
PLACEHOLDER_PATTERN = re.compile(r"\{\{([^}]+)\}\}")


# Returned by _lookup when a path does not exist, as opposed to holding None
_MISSING = object()


def _lookup(context: Any, path: str) -> Any:
    if not path:
        return _MISSING

    current = context
    for key in path.split("."):
        if isinstance(current, Mapping):
            current = current.get(key, _MISSING)
        elif isinstance(current, (list, tuple)) and key.isdigit():
            index = int(key)
            current = current[index] if index < len(current) else _MISSING
        else:
            return _MISSING
        if current is _MISSING:
            return _MISSING
    return current


def resolve_field(context: Any, path: str) -> Any:
    """
    Look up a dotted field path such as ``surgery.date`` in the context.

    Args:
        context: The template context (nested dicts and lists)
        path: Dot separated path into the context

    Returns:
        The value at the path, or None if any segment is missing
    """
    value = _lookup(context, path)
    return None if value is _MISSING else value


def to_string(value: Any) -> str:
    """
    Convert a context value to the text shown in a document.

    Booleans print as ``true``/``false`` and whole floats drop their
    fractional part, matching how stored templates were authored.
    """
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    if isinstance(value, (list, tuple)):
        return ",".join(to_string(item) for item in value)
    return str(value)


def is_empty(value: Any) -> bool:
    return value is None or value == ""


def evaluate_condition(
    context: Any, field: str, operator: str, compare_value: Optional[str] = None
) -> bool:
    """
    Evaluate a conditional block's condition against the context.

    Args:
        context: The template context
        field: Field path to test
        operator: One of exists, notEmpty, isEmpty, equals
        compare_value: Value to compare with for the equals operator

    Returns:
        True if the condition holds. Unknown operators return True so that
        content is shown rather than silently dropped.
    """
    if operator not in CONDITION_OPERATORS:
        logger.warning(
            f"Unknown condition operator {operator!r}, expected one of "
            f"{', '.join(CONDITION_OPERATORS)}"
        )
        return True

    raw = _lookup(context, field)
    value = None if raw is _MISSING else raw

    if operator == "exists":
        return value is not None
    if operator == "notEmpty":
        return not is_empty(value)
    if operator == "isEmpty":
        return is_empty(value)
    # equals: absent paths compare as "undefined", stored nulls as "null"
    if raw is _MISSING:
        actual = "undefined"
    elif raw is None:
        actual = "null"
    else:
        actual = to_string(raw)
    return actual == compare_value


def format_value(value: Any, mode: str = "none", locale: str = DEFAULT_DATE_LOCALE) -> str:
    """
    Format a resolved value for display.

    Args:
        value: The resolved context value
        mode: none, date or age
        locale: Locale used for date objects

    Returns:
        Formatted string, empty for None
    """
    if mode not in FORMAT_MODES:
        logger.warning(f"Unknown format mode {mode!r}, showing the plain value")
        mode = "none"

    if value is None:
        return ""

    if mode == "date":
        # Context builders pre-format dates; only real date objects are formatted here
        if isinstance(value, str):
            return value
        if isinstance(value, date):
            return babel_format_date(value, format="short", locale=locale)
        return to_string(value)
    if mode == "age":
        return f"{to_string(value)} years"
    return to_string(value)


def escape_html(value: Any) -> str:
    """Escape &, <, >, " and ' so a value cannot inject markup."""
    return str(escape(to_string(value)))


def interpolate(content: str, context: Any) -> str:
    """
    Replace ``{{ field.path }}`` placeholders with escaped context values.

    Unresolved paths become empty strings. Text outside the placeholders is
    left as written.
    """
    if not content:
        return ""

    def substitute(match: "re.Match[str]") -> str:
        value = resolve_field(context, match.group(1).strip())
        return escape_html(value) if value is not None else ""

    return PLACEHOLDER_PATTERN.sub(substitute, content)
