"""
Tests for field path resolution, conditions, value formatting and escaping.
"""

# Standard library imports
import logging
import unittest
from datetime import date

# Local application imports
from opnotes.templating.expressions import (
    escape_html,
    evaluate_condition,
    format_value,
    interpolate,
    is_empty,
    resolve_field,
    to_string,
)

logger = logging.getLogger("test_expressions")
logger.setLevel(logging.DEBUG)


CONTEXT = {
    "patient": {"name": "Jane Roe", "age": 52, "remarks": "", "allergies": None},
    "surgery": {
        "date": "15/01/2024",
        "doneBy": [{"name": "Dr. A", "designation": "Surgeon"}],
        "emergency": True,
    },
}


class TestResolveField(unittest.TestCase):
    """Test dotted field path lookup."""

    def test_nested_path(self):
        self.assertEqual(resolve_field(CONTEXT, "patient.name"), "Jane Roe")
        self.assertEqual(resolve_field(CONTEXT, "surgery.date"), "15/01/2024")

    def test_missing_segments_return_none(self):
        self.assertIsNone(resolve_field(CONTEXT, "patient.unknown"))
        self.assertIsNone(resolve_field(CONTEXT, "nothing.here.at.all"))
        self.assertIsNone(resolve_field(CONTEXT, "patient.name.first"))

    def test_empty_path(self):
        self.assertIsNone(resolve_field(CONTEXT, ""))

    def test_list_index_segments(self):
        self.assertEqual(resolve_field(CONTEXT, "surgery.doneBy.0.name"), "Dr. A")
        self.assertIsNone(resolve_field(CONTEXT, "surgery.doneBy.3.name"))
        self.assertIsNone(resolve_field(CONTEXT, "surgery.doneBy.first"))

    def test_whole_section(self):
        self.assertIs(resolve_field(CONTEXT, "patient"), CONTEXT["patient"])


class TestToString(unittest.TestCase):
    def test_conversions(self):
        self.assertEqual(to_string(None), "")
        self.assertEqual(to_string(True), "true")
        self.assertEqual(to_string(False), "false")
        self.assertEqual(to_string(45), "45")
        self.assertEqual(to_string(45.0), "45")
        self.assertEqual(to_string(1.5), "1.5")
        self.assertEqual(to_string(["a", "b"]), "a,b")

    def test_is_empty(self):
        self.assertTrue(is_empty(None))
        self.assertTrue(is_empty(""))
        self.assertFalse(is_empty(0))
        self.assertFalse(is_empty(False))
        self.assertFalse(is_empty(" "))


class TestEvaluateCondition(unittest.TestCase):
    """Test the four condition operators."""

    def test_exists(self):
        self.assertTrue(evaluate_condition(CONTEXT, "patient.remarks", "exists"))
        self.assertFalse(evaluate_condition(CONTEXT, "patient.allergies", "exists"))
        self.assertFalse(evaluate_condition(CONTEXT, "patient.missing", "exists"))

    def test_not_empty_and_is_empty_on_empty_string(self):
        self.assertFalse(evaluate_condition(CONTEXT, "patient.remarks", "notEmpty"))
        self.assertTrue(evaluate_condition(CONTEXT, "patient.remarks", "isEmpty"))

    def test_not_empty_and_is_empty_on_value(self):
        self.assertTrue(evaluate_condition(CONTEXT, "patient.name", "notEmpty"))
        self.assertFalse(evaluate_condition(CONTEXT, "patient.name", "isEmpty"))

    def test_is_empty_on_missing_field(self):
        self.assertTrue(evaluate_condition(CONTEXT, "patient.missing", "isEmpty"))

    def test_equals_compares_string_forms(self):
        self.assertTrue(evaluate_condition(CONTEXT, "patient.age", "equals", "52"))
        self.assertFalse(evaluate_condition(CONTEXT, "patient.age", "equals", "53"))
        self.assertTrue(evaluate_condition(CONTEXT, "surgery.emergency", "equals", "true"))
        self.assertTrue(evaluate_condition(CONTEXT, "patient.allergies", "equals", "null"))
        self.assertFalse(evaluate_condition(CONTEXT, "patient.name", "equals", None))

    def test_equals_tells_missing_paths_from_nulls(self):
        self.assertTrue(evaluate_condition(CONTEXT, "patient.unknown", "equals", "undefined"))
        self.assertFalse(evaluate_condition(CONTEXT, "patient.unknown", "equals", "null"))
        self.assertTrue(evaluate_condition({}, "followup.date", "equals", "undefined"))
        self.assertFalse(evaluate_condition(CONTEXT, "patient.allergies", "equals", "undefined"))
        # Paths through a null value are missing
        self.assertTrue(evaluate_condition(CONTEXT, "patient.allergies.first", "equals", "undefined"))

    def test_unknown_operator_shows_content(self):
        with self.assertLogs("opnotes.templating.expressions", level="WARNING") as logs:
            self.assertTrue(evaluate_condition(CONTEXT, "patient.name", "startsWith", "J"))
        self.assertIn("startsWith", logs.output[0])
        self.assertIn("exists, notEmpty, isEmpty, equals", logs.output[0])


class TestFormatValue(unittest.TestCase):
    def test_none_is_empty(self):
        for mode in ("none", "date", "age"):
            self.assertEqual(format_value(None, mode), "")

    def test_none_mode(self):
        self.assertEqual(format_value("Ward 5A"), "Ward 5A")
        self.assertEqual(format_value(12, "none"), "12")

    def test_date_mode_keeps_preformatted_strings(self):
        self.assertEqual(format_value("15/01/2024", "date"), "15/01/2024")

    def test_date_mode_formats_date_objects(self):
        self.assertEqual(format_value(date(2024, 1, 15), "date"), "15/01/2024")

    def test_age_mode(self):
        self.assertEqual(format_value(45, "age"), "45 years")

    def test_unknown_mode_is_plain(self):
        with self.assertLogs("opnotes.templating.expressions", level="WARNING"):
            self.assertEqual(format_value("x", "uppercase"), "x")


class TestEscapeHtml(unittest.TestCase):
    def test_five_entities(self):
        escaped = escape_html("<b>\"Tom\" & 'Jerry'</b>")
        for raw in ("<", ">", '"', "'"):
            self.assertNotIn(raw, escaped)
        self.assertIn("&amp;", escaped)
        self.assertIn("&lt;b&gt;", escaped)

    def test_non_strings(self):
        self.assertEqual(escape_html(None), "")
        self.assertEqual(escape_html(7), "7")


class TestInterpolate(unittest.TestCase):
    """Test {{ field.path }} substitution in text content."""

    def test_content_without_tokens_is_unchanged(self):
        content = "Operation performed under general anaesthesia."
        self.assertEqual(interpolate(content, CONTEXT), content)

    def test_repeated_tokens_are_all_substituted(self):
        result = interpolate("Dear {{patient.name}}, {{patient.name}} is scheduled", CONTEXT)
        self.assertEqual(result, "Dear Jane Roe, Jane Roe is scheduled")

    def test_whitespace_inside_token(self):
        self.assertEqual(interpolate("{{ surgery.date }}", CONTEXT), "15/01/2024")

    def test_unresolved_token_becomes_empty(self):
        self.assertEqual(interpolate("[{{patient.unknown}}]", CONTEXT), "[]")

    def test_substituted_values_are_escaped(self):
        context = {"patient": {"name": "<script>alert(1)</script>"}}
        result = interpolate("Name: {{patient.name}}", context)
        self.assertNotIn("<script>", result)
        self.assertIn("&lt;script&gt;", result)

    def test_malformed_token_is_left_as_text(self):
        self.assertEqual(interpolate("{{patient.name", CONTEXT), "{{patient.name")

    def test_empty_content(self):
        self.assertEqual(interpolate("", CONTEXT), "")
        self.assertEqual(interpolate(None, CONTEXT), "")


if __name__ == "__main__":
    unittest.main()
