"""
Tests for the block model, the block palette and the default templates.
"""

# Standard library imports
import json
import logging
import unittest

# Local application imports
from opnotes.templating.blocks import (
    Block,
    BlockType,
    MalformedTemplateError,
    TemplateStructure,
)
from opnotes.templating.context import get_sample_context
from opnotes.templating.defaults import DEFAULT_TEMPLATES, get_default_templates
from opnotes.templating.fields import (
    BLOCK_DEFINITIONS,
    FIELDS_BY_CATEGORY,
    TEMPLATE_FIELDS,
    create_block,
    get_block_definition,
    get_field,
)
from opnotes.templating.renderer import render_template

logger = logging.getLogger("test_blocks")
logger.setLevel(logging.DEBUG)


NESTED_STRUCTURE = {
    "version": 1,
    "blocks": [
        {
            "id": "cols",
            "type": "two-column",
            "props": {"ratio": "33-67"},
            "left": [{"id": "sp", "type": "spacer", "props": {"height": 4}}],
            "right": [
                {
                    "id": "cond",
                    "type": "conditional",
                    "props": {"field": "surgery.notes", "condition": "notEmpty"},
                    "children": [
                        {"id": "rc", "type": "rich-content", "props": {"field": "surgery.notes"}}
                    ],
                }
            ],
        },
        {"id": "pb", "type": "page-break", "props": {}},
    ],
}


class TestBlockModel(unittest.TestCase):
    """Test loading and dumping block trees."""

    def test_round_trip_keeps_container_shapes(self):
        structure = TemplateStructure.from_dict(NESTED_STRUCTURE)
        self.assertEqual(structure.to_dict(), NESTED_STRUCTURE)

        columns = structure.blocks[0]
        self.assertTrue(columns.is_container)
        self.assertIsNone(columns.children)
        self.assertEqual([b.id for b in columns.left], ["sp"])
        self.assertEqual(columns.right[0].children[0].type, BlockType.RICH_CONTENT.value)
        self.assertFalse(structure.blocks[1].is_container)

    def test_json_round_trip(self):
        structure = TemplateStructure.from_dict(NESTED_STRUCTURE)
        self.assertEqual(json.loads(structure.to_json()), NESTED_STRUCTURE)
        self.assertEqual(TemplateStructure.from_json(structure.to_json()), structure)

    def test_loading_copies_props(self):
        data = {"id": "t", "type": "text", "props": {"content": "A"}}
        block = Block.from_dict(data)
        block.props["content"] = "B"
        self.assertEqual(data["props"]["content"], "A")

    def test_unknown_types_are_kept(self):
        block = Block.from_dict({"id": "x", "type": "signature", "props": {"who": "me"}})
        self.assertEqual(block.to_dict(), {"id": "x", "type": "signature", "props": {"who": "me"}})

    def test_missing_props_and_blocks(self):
        block = Block.from_dict({"id": "pb", "type": "page-break"})
        self.assertEqual(block.props, {})
        self.assertEqual(TemplateStructure.from_dict({}).blocks, [])

    def test_iter_blocks_and_duplicate_ids(self):
        structure = TemplateStructure.from_dict(NESTED_STRUCTURE)
        self.assertEqual(
            [b.id for b in structure.iter_blocks()], ["cols", "sp", "cond", "rc", "pb"]
        )
        self.assertEqual(structure.duplicate_ids(), [])

        structure.blocks.append(Block(id="sp", type="spacer"))
        self.assertEqual(structure.duplicate_ids(), ["sp"])

    def test_coerce(self):
        structure = TemplateStructure.from_dict(NESTED_STRUCTURE)
        self.assertIs(TemplateStructure.coerce(structure), structure)
        self.assertEqual(TemplateStructure.coerce(NESTED_STRUCTURE), structure)
        self.assertEqual(TemplateStructure.coerce(json.dumps(NESTED_STRUCTURE)), structure)

    def test_malformed_structures(self):
        bad_inputs = [
            [],
            {"blocks": {"id": "a"}},
            {"blocks": ["header"]},
            {"blocks": [{"id": "a"}]},
            {"blocks": [{"id": "a", "type": "text", "props": []}]},
            {"blocks": [{"id": "a", "type": "conditional", "children": "none"}]},
            {"blocks": [{"id": "a", "type": "two-column", "left": [{"id": "b", "props": {}}]}]},
        ]
        for data in bad_inputs:
            with self.assertRaises(MalformedTemplateError, msg=repr(data)):
                TemplateStructure.from_dict(data)

    def test_malformed_json(self):
        with self.assertRaises(MalformedTemplateError):
            TemplateStructure.from_json("{not json")
        with self.assertRaises(ValueError):
            TemplateStructure.from_json("[1, 2]")

    def test_other_versions_still_load(self):
        with self.assertLogs("opnotes.templating.blocks", level="WARNING"):
            structure = TemplateStructure.from_dict({"version": 2, "blocks": []})
        self.assertEqual(structure.version, 2)


class TestBlockPalette(unittest.TestCase):
    """Test the block palette and field catalogue."""

    def test_every_block_type_has_a_definition(self):
        self.assertEqual(
            sorted(d.type for d in BLOCK_DEFINITIONS), sorted(t.value for t in BlockType)
        )

    def test_create_block_uses_default_props(self):
        block = create_block("data-field")
        self.assertTrue(block.id.startswith("data-field-"))
        self.assertEqual(block.props["fallback"], "-")
        self.assertIsNone(block.children)

        block.props["fallback"] = "n/a"
        self.assertEqual(get_block_definition("data-field").default_props["fallback"], "-")

    def test_create_container_blocks(self):
        conditional = create_block("conditional")
        self.assertEqual(conditional.children, [])
        self.assertIsNone(conditional.left)

        columns = create_block("two-column")
        self.assertEqual(columns.left, [])
        self.assertEqual(columns.right, [])
        self.assertIsNone(columns.children)

    def test_create_block_ids_are_unique(self):
        ids = {create_block("spacer").id for _ in range(50)}
        self.assertEqual(len(ids), 50)

    def test_create_unknown_block(self):
        with self.assertRaises(ValueError):
            create_block("signature")

    def test_field_catalogue(self):
        paths = [f.path for f in TEMPLATE_FIELDS]
        self.assertEqual(len(paths), len(set(paths)))
        self.assertTrue(get_field("surgery.notes").is_html)
        self.assertFalse(get_field("patient.name").is_html)
        self.assertIsNone(get_field("patient.password"))
        self.assertEqual(
            set(FIELDS_BY_CATEGORY), {"patient", "surgery", "followup", "settings"}
        )

    def test_catalogue_paths_resolve_in_sample_context(self):
        from opnotes.templating.expressions import resolve_field

        context = get_sample_context("followup")
        for definition in TEMPLATE_FIELDS:
            if definition.path == "surgery.referral":
                continue
            self.assertIsNotNone(resolve_field(context, definition.path), definition.path)

    def test_to_dict(self):
        self.assertEqual(get_field("surgery.notes").to_dict()["isHtml"], True)
        as_dict = get_block_definition("spacer").to_dict()
        self.assertEqual(as_dict["defaultProps"], {"height": 16})
        self.assertNotIn("default_props", as_dict)


class TestDefaultTemplates(unittest.TestCase):
    """Test the shipped default templates."""

    def test_defaults_load(self):
        for definition in get_default_templates():
            structure = TemplateStructure.from_dict(definition["structure"])
            self.assertTrue(structure.blocks, definition["key"])
            self.assertEqual(structure.duplicate_ids(), [], definition["key"])

    def test_get_default_templates_returns_copies(self):
        copies = get_default_templates()
        copies[0]["structure"]["blocks"].clear()
        self.assertTrue(DEFAULT_TEMPLATES[0]["structure"]["blocks"])

    def test_surgery_default_renders_sample(self):
        html = render_template(DEFAULT_TEMPLATES[0]["structure"], get_sample_context("surgery"))

        self.assertIn("General Hospital Colombo", html)
        self.assertIn("Laparoscopic Cholecystectomy", html)
        self.assertIn("Done By:", html)
        self.assertIn("Assisted By:", html)
        self.assertIn("Op Notes", html)
        self.assertIn("Discharge Plan", html)
        # referral is empty in the sample
        self.assertNotIn("Referral", html)

    def test_followup_default_renders_sample(self):
        html = render_template(DEFAULT_TEMPLATES[1]["structure"], get_sample_context("followup"))
        self.assertIn("Follow-up Notes", html)
        self.assertIn("29/01/2024", html)
        self.assertIn("Port sites clean and dry", html)


if __name__ == "__main__":
    unittest.main()
