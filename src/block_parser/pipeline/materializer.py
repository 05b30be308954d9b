"""Materialization of one region into a validated block."""

from __future__ import annotations

from collections.abc import Mapping
import logging
from typing import Any

from block_parser.core.types import Block
from block_parser.exceptions import ConfigurationError
from block_parser.validation import is_valid_block

from .attributes import get_block_attributes
from .context import ParseContext
from .type_resolver import resolve_type

logger = logging.getLogger(__name__)


def create_block_with_fallback(
    name: str | None,
    raw_content: str,
    inline_attrs: Mapping[str, Any] | None,
    context: ParseContext,
    *,
    source_content: str | None = None,
) -> Block | None:
    """Create a validated block, falling back to the unknown-type handler.

    Args:
        name: Declared block name, None for freeform regions.
        raw_content: Region content the block is validated against.
        inline_attrs: Attributes from the block delimiter.
        context: Registry, migrations and collaborators for this parse.
        source_content: Content for extraction rules when it differs from
            `raw_content`.

    Returns:
        The block, or None when no type could be resolved or the region is
        an empty fallback region. A block whose attributes do not serialize
        back to `raw_content` is returned invalid, carrying `raw_content` as
        its original content.
    """
    resolved_name, block_type = resolve_type(name, context)

    if block_type is None or resolved_name is None:
        logger.debug("Dropping region '%s': no block type could be resolved", name)
        return None
    if not raw_content and resolved_name == context.unknown_type_handler:
        logger.debug("Dropping empty fallback region '%s'", name)
        return None

    attributes = get_block_attributes(
        block_type.attributes,
        raw_content if source_content is None else source_content,
        inline_attrs,
    )
    block = context.factory(resolved_name, attributes)
    if not isinstance(block, Block):
        raise ConfigurationError(
            f"Block factory returned {type(block).__name__}, expected Block"
        )

    is_valid = is_valid_block(raw_content, block_type, block.attributes)
    return block.validated(is_valid=is_valid, original_content=raw_content)
