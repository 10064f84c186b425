"""
Block model for print templates.

A template is a versioned list of blocks. Every block carries a stable ``id``,
a ``type`` tag and a ``props`` bag. Two block types are containers:
``conditional`` keeps one child list in ``children`` and ``two-column`` keeps
two independent lists in ``left`` and ``right``. All other types are leaves.

The shapes here mirror the JSON stored in the ``print_templates`` table, so
``from_dict``/``to_dict`` round-trip without losing anything the builder
wrote, including block types this version no longer knows about.
"""

# Standard library imports
import copy
import enum
import json
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Union

# Create a logger for this module
logger = logging.getLogger(__name__)

CURRENT_STRUCTURE_VERSION = 1


class MalformedTemplateError(ValueError):
    """Raised when a stored block tree does not have the expected shape."""


class BlockType(str, enum.Enum):
    """Enum for the block types the renderer knows about."""

    HEADER = "header"
    TEXT = "text"
    DATA_FIELD = "data-field"
    DATA_TABLE = "data-table"
    RICH_CONTENT = "rich-content"
    DIVIDER = "divider"
    SPACER = "spacer"
    DOCTORS_LIST = "doctors-list"
    CONDITIONAL = "conditional"
    TWO_COLUMN = "two-column"
    IMAGE = "image"
    PAGE_BREAK = "page-break"


class TemplateType(str, enum.Enum):
    """Enum for the documents a print template can produce."""

    SURGERY = "surgery"
    FOLLOWUP = "followup"


CONTAINER_TYPES = frozenset({BlockType.CONDITIONAL.value, BlockType.TWO_COLUMN.value})


@dataclass
class Block:
    """
    One node of a template tree.

    ``type`` is kept as a plain string so that templates stored with a block
    type that has since been removed still load (and render to nothing).
    """

    id: str
    type: str
    props: Dict[str, Any] = field(default_factory=dict)
    children: Optional[List["Block"]] = None
    left: Optional[List["Block"]] = None
    right: Optional[List["Block"]] = None

    @property
    def is_container(self) -> bool:
        return self.type in CONTAINER_TYPES

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Block":
        """
        Build a block (and its nested blocks) from its stored dict form.

        Raises:
            MalformedTemplateError: If the block, its props or any child list
                does not have the expected shape
        """
        if not isinstance(data, dict):
            raise MalformedTemplateError(
                f"Block must be an object, got {type(data).__name__}"
            )

        block_type = data.get("type")
        if not isinstance(block_type, str) or not block_type:
            raise MalformedTemplateError(f"Block {data.get('id')!r} has no type")

        props = data.get("props")
        if props is None:
            props = {}
        if not isinstance(props, dict):
            raise MalformedTemplateError(
                f"Block {data.get('id')!r} props must be an object"
            )

        return cls(
            id=str(data.get("id", "")),
            type=block_type,
            props=copy.deepcopy(props),
            children=_load_child_list(data, "children"),
            left=_load_child_list(data, "left"),
            right=_load_child_list(data, "right"),
        )

    def to_dict(self) -> Dict[str, Any]:
        """Convert the block to its stored dict form."""
        result: Dict[str, Any] = {
            "id": self.id,
            "type": self.type,
            "props": copy.deepcopy(self.props),
        }
        for key in ("children", "left", "right"):
            blocks = getattr(self, key)
            if blocks is not None:
                result[key] = [child.to_dict() for child in blocks]
        return result

    def iter_tree(self):
        """Yield this block followed by every nested block, depth first."""
        yield self
        for key in ("children", "left", "right"):
            for child in getattr(self, key) or []:
                yield from child.iter_tree()


def _load_child_list(data: Dict[str, Any], key: str) -> Optional[List[Block]]:
    if key not in data or data[key] is None:
        return None
    value = data[key]
    if not isinstance(value, list):
        raise MalformedTemplateError(
            f"Block {data.get('id')!r} field '{key}' must be a list"
        )
    return [Block.from_dict(item) for item in value]


@dataclass
class TemplateStructure:
    """The versioned top-level block list of one template."""

    version: int = CURRENT_STRUCTURE_VERSION
    blocks: List[Block] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "TemplateStructure":
        """
        Build a structure from its stored dict form.

        Raises:
            MalformedTemplateError: If the structure or any block is malformed
        """
        if not isinstance(data, dict):
            raise MalformedTemplateError(
                f"Template structure must be an object, got {type(data).__name__}"
            )

        blocks = data.get("blocks")
        if blocks is None:
            blocks = []
        if not isinstance(blocks, list):
            raise MalformedTemplateError("Template structure 'blocks' must be a list")

        version = data.get("version", CURRENT_STRUCTURE_VERSION)
        if version != CURRENT_STRUCTURE_VERSION:
            logger.warning(f"Loading template structure with version {version}")

        return cls(version=version, blocks=[Block.from_dict(b) for b in blocks])

    @classmethod
    def from_json(cls, text: str) -> "TemplateStructure":
        try:
            data = json.loads(text)
        except (TypeError, ValueError) as e:
            raise MalformedTemplateError(
                f"Template structure is not valid JSON: {e}"
            ) from e
        return cls.from_dict(data)

    @classmethod
    def coerce(
        cls, value: Union["TemplateStructure", Dict[str, Any], str]
    ) -> "TemplateStructure":
        """Accept a structure, its dict form or its JSON text."""
        if isinstance(value, cls):
            return value
        if isinstance(value, str):
            return cls.from_json(value)
        return cls.from_dict(value)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "version": self.version,
            "blocks": [block.to_dict() for block in self.blocks],
        }

    def to_json(self) -> str:
        return json.dumps(self.to_dict())

    def iter_blocks(self):
        """Yield every block in the tree, depth first."""
        for block in self.blocks:
            yield from block.iter_tree()

    def duplicate_ids(self) -> List[str]:
        """Return ids that appear more than once in the tree."""
        seen = set()
        duplicates = []
        for block in self.iter_blocks():
            if block.id in seen and block.id not in duplicates:
                duplicates.append(block.id)
            seen.add(block.id)
        return duplicates
