"""Attribute resolution: merge inline and sourced values, then coerce.

Values are gathered from every source first and coerced last, field by
field, against the block type's schema.
"""

from __future__ import annotations

from collections.abc import Mapping
import logging
from typing import Any

from block_parser.core.coercion import coerce_value
from block_parser.core.sources import ExtractionRule, is_valid_source, parse_content_tree
from block_parser.core.types import AttributeSchema

logger = logging.getLogger(__name__)


def get_sourced_attributes(raw_content: str, schema: AttributeSchema) -> dict[str, Any]:
    """Return the attribute values extracted from content.

    Only fields whose ``source`` is a valid extraction rule take part. The
    content is parsed once and every rule runs against the same tree. Fields
    whose rule finds nothing, or raises, get no entry.
    """
    sources: dict[str, ExtractionRule] = {
        key: spec.source for key, spec in schema.items() if is_valid_source(spec.source)
    }
    if not sources:
        return {}

    tree = parse_content_tree(raw_content)
    extracted: dict[str, Any] = {}
    for key, rule in sources.items():
        try:
            value = rule(tree)
        except Exception:
            logger.error(
                "Extraction rule %r for attribute '%s' failed", rule, key, exc_info=True
            )
            continue
        if value is not None:
            extracted[key] = value
    return extracted


def get_block_attributes(
    schema: AttributeSchema,
    raw_content: str,
    inline_attrs: Mapping[str, Any] | None = None,
) -> dict[str, Any]:
    """Resolve the final attributes of a block.

    Args:
        schema: The block type's attribute schema.
        raw_content: Content the extraction rules run against.
        inline_attrs: Attributes declared on the block delimiter.

    Returns:
        One coerced value per schema field that has an inline value, a
        sourced value or a declared default. Sourced values win over inline
        ones. Fields with none of these are omitted, and attributes not
        declared in the schema are dropped.
    """
    attributes = {
        **(inline_attrs or {}),
        **get_sourced_attributes(raw_content, schema),
    }

    result: dict[str, Any] = {}
    for key, spec in schema.items():
        if key in attributes:
            value = attributes[key]
        elif spec.has_default:
            value = spec.default
        else:
            continue
        result[key] = coerce_value(value, spec.type)
    return result
