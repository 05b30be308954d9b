"""Core data types, extraction rules and coercion for the block parser."""

from .coercion import coerce_value
from .sources import (
    ExtractionRule,
    attr,
    extraction_rule,
    html,
    is_valid_source,
    parse_content_tree,
    query,
    text,
)
from .types import (
    MISSING,
    AttributeSchema,
    AttributeType,
    Block,
    BlockType,
    FieldSpec,
    RegionNode,
)

__all__ = [
    "MISSING",
    "AttributeSchema",
    "AttributeType",
    "Block",
    "BlockType",
    "ExtractionRule",
    "FieldSpec",
    "RegionNode",
    "attr",
    "coerce_value",
    "extraction_rule",
    "html",
    "is_valid_source",
    "parse_content_tree",
    "query",
    "text",
]
