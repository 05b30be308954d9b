"""Built-in block types.

``core/freeform`` holds content outside recognized blocks and is the default
unknown-type handler; it saves its content verbatim, so it always
round-trips. ``core/paragraph`` and ``core/heading`` cover basic text.
"""

from __future__ import annotations

from collections.abc import Mapping
from html import escape
import re
from typing import Any

from .config.types import FrozenConfig
from .core.sources import ContentNode, extraction_rule, html
from .core.types import AttributeType, BlockType, FieldSpec
from .registry import BlockTypeRegistry

_HEADING_TAG = re.compile(r"^h[1-6]$")


def _save_freeform(attributes: Mapping[str, Any]) -> str:
    return attributes.get("content", "")


def _save_paragraph(attributes: Mapping[str, Any]) -> str:
    classes = []
    if attributes.get("align"):
        classes.append(f"has-text-align-{attributes['align']}")
    if attributes.get("dropCap"):
        classes.append("has-drop-cap")
    class_attr = f' class="{escape(" ".join(classes))}"' if classes else ""
    return f"<p{class_attr}>{attributes.get('content', '')}</p>"


@extraction_rule(description="heading level")
def _heading_level(node: ContentNode) -> int | None:
    heading = node.find(_HEADING_TAG)
    return None if heading is None else int(heading.name[1])


def _save_heading(attributes: Mapping[str, Any]) -> str:
    level = min(max(attributes.get("level", 2), 1), 6)
    return f"<h{level}>{attributes.get('content', '')}</h{level}>"


FREEFORM = BlockType(
    name="core/freeform",
    title="Classic",
    save=_save_freeform,
    attributes={
        "content": FieldSpec(type=AttributeType.STRING, source=html()),
    },
)

PARAGRAPH = BlockType(
    name="core/paragraph",
    title="Paragraph",
    save=_save_paragraph,
    attributes={
        "content": FieldSpec(type=AttributeType.STRING, source=html("p")),
        "align": FieldSpec(type=AttributeType.STRING),
        "dropCap": FieldSpec(type=AttributeType.BOOLEAN, default=False),
    },
)

HEADING = BlockType(
    name="core/heading",
    title="Heading",
    save=_save_heading,
    attributes={
        "content": FieldSpec(
            type=AttributeType.STRING, source=html("h1, h2, h3, h4, h5, h6")
        ),
        "level": FieldSpec(
            type=AttributeType.INTEGER, default=2, source=_heading_level
        ),
    },
)

CORE_BLOCK_TYPES = (FREEFORM, PARAGRAPH, HEADING)


def default_registry(config: FrozenConfig | None = None) -> BlockTypeRegistry:
    """Return a frozen registry holding the built-in block types.

    The unknown-type handler comes from `config`, ``core/freeform`` by default.
    """
    handler = (config or FrozenConfig()).unknown_type_handler
    return BlockTypeRegistry(CORE_BLOCK_TYPES, unknown_type_handler=handler).freeze()
