"""
Print template block model and renderer.

Templates are trees of typed blocks (see ``blocks``) rendered to HTML against
a template context (see ``context``) by ``renderer.render_template``.
"""

from .blocks import (
    Block,
    BlockType,
    MalformedTemplateError,
    TemplateStructure,
    TemplateType,
)
from .context import TemplateContext, create_template_context, get_sample_context
from .renderer import render_blocks, render_template

__all__ = [
    "Block",
    "BlockType",
    "MalformedTemplateError",
    "TemplateStructure",
    "TemplateType",
    "TemplateContext",
    "create_template_context",
    "get_sample_context",
    "render_blocks",
    "render_template",
]
