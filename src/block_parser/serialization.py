"""Serialization of blocks back to delimited markup.

`get_save_content` is the serializer the round-trip validator uses. The
document-level helpers write blocks in the delimiter syntax that
`block_parser.grammar` reads, so a serialized document parses back into the
same block list.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
import json
import logging
from typing import Any

from .core.sources import is_valid_source, parse_content_tree
from .core.types import Block, BlockType
from .exceptions import BlockParserError
from .registry import BlockTypeRegistry

logger = logging.getLogger(__name__)

# Keep attribute JSON from terminating or confusing the comment delimiter
_COMMENT_ESCAPES = (
    ("--", "\\u002d\\u002d"),
    ("<", "\\u003c"),
    (">", "\\u003e"),
)


def get_save_content(block_type: BlockType, attributes: Mapping[str, Any]) -> str:
    """Render block content from attributes using the type's save function.

    Raises:
        TypeError: If the save function does not return a string.
    """
    content = block_type.save(dict(attributes))
    if not isinstance(content, str):
        raise TypeError(
            f"save() of '{block_type.name}' returned {type(content).__name__}, expected str"
        )
    return content


def _recoverable_fields(block_type: BlockType, content: str) -> set[str]:
    """Names of sourced fields whose rule finds a value in `content`."""
    sources = {
        key: spec.source
        for key, spec in block_type.attributes.items()
        if is_valid_source(spec.source)
    }
    if not sources:
        return set()

    tree = parse_content_tree(content)
    found = set()
    for key, rule in sources.items():
        try:
            value = rule(tree)
        except Exception:
            logger.debug("Extraction rule %r failed on serialized content", rule)
            continue
        if value is not None:
            found.add(key)
    return found


def get_comment_attributes(
    block_type: BlockType,
    attributes: Mapping[str, Any],
    content: str | None = None,
) -> dict[str, Any]:
    """Return the attributes that belong in the opening delimiter.

    Values equal to the declared default are implied and left out. Sourced
    attributes are left out when they can be recovered from `content`; if
    `content` is None every sourced attribute is assumed recoverable.
    """
    recoverable = None if content is None else _recoverable_fields(block_type, content)

    result: dict[str, Any] = {}
    for key, spec in block_type.attributes.items():
        if key not in attributes:
            continue
        if is_valid_source(spec.source) and (recoverable is None or key in recoverable):
            continue
        value = attributes[key]
        if spec.has_default and spec.default == value:
            continue
        result[key] = value
    return result


def serialize_attributes(attributes: Mapping[str, Any]) -> str:
    encoded = json.dumps(dict(attributes), ensure_ascii=False, separators=(",", ":"))
    for needle, escape in _COMMENT_ESCAPES:
        encoded = encoded.replace(needle, escape)
    return encoded


def serialize_block(
    block: Block, registry: BlockTypeRegistry, *, delimit: bool = False
) -> str:
    """Serialize one block.

    Invalid blocks write their original content untouched. Blocks of the
    unknown-type handler are written without delimiters unless `delimit`
    is set.

    Raises:
        BlockParserError: If the block's type is not registered.
    """
    block_type = registry.lookup(block.name)
    if block_type is None:
        raise BlockParserError(f"Cannot serialize unregistered block '{block.name}'")

    if block.is_valid is False and block.original_content is not None:
        content = block.original_content
    else:
        content = get_save_content(block_type, block.attributes)

    if block.name == registry.unknown_type_handler_name() and not delimit:
        return content

    comment_attributes = get_comment_attributes(block_type, block.attributes, content)
    opener = f"<!-- block:{block.name} "
    if comment_attributes:
        opener += f"{serialize_attributes(comment_attributes)} "

    if not content:
        return f"{opener}/-->"
    return f"{opener}-->{content}<!-- /block -->"


def serialize(blocks: Iterable[Block], registry: BlockTypeRegistry) -> str:
    """Serialize a block list into a document, blocks separated by blank lines.

    A handler block directly after another handler block keeps its
    delimiters, otherwise the two would read back as one freeform region.
    """
    handler = registry.unknown_type_handler_name()
    parts = []
    previous_bare = False
    for block in blocks:
        bare = block.name == handler
        delimit = bare and previous_bare
        parts.append(serialize_block(block, registry, delimit=delimit))
        previous_bare = bare and not delimit
    return "\n\n".join(parts)
