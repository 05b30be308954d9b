"""Parse delimiter-annotated documents into typed, validated blocks."""

import importlib.metadata
import logging

from block_parser.config import (
    ConfigFileError,
    FrozenConfig,
    ResolvedConfig,
    resolve_config,
)
from block_parser.core.sources import (
    ExtractionRule,
    attr,
    extraction_rule,
    html,
    is_valid_source,
    query,
    text,
)
from block_parser.core.types import (
    MISSING,
    AttributeType,
    Block,
    BlockType,
    FieldSpec,
    RegionNode,
)
from block_parser.exceptions import (
    BlockParserError,
    ConfigurationError,
    GrammarError,
    RegistrationError,
)
from block_parser.factory import create_block
from block_parser.frontdoor import parse, round_trip
from block_parser.grammar import tokenize
from block_parser.library import default_registry
from block_parser.pipeline import BlockParser, ParseContext, create_parser
from block_parser.registry import BlockTypeRegistry
from block_parser.serialization import serialize, serialize_block
from block_parser.telemetry import SimpleReporter, TelemetryContext, TelemetryReporter
from block_parser.validation import is_equivalent_markup, is_valid_block, is_well_formed

try:
    __version__ = importlib.metadata.version("block-parser")
except importlib.metadata.PackageNotFoundError:
    __version__ = "development"

# Library logging stays silent unless the application configures handlers.
logging.getLogger(__name__).addHandler(logging.NullHandler())

__all__ = [  # noqa: RUF022
    # Entry points
    "BlockParser",
    "create_parser",
    "parse",
    "round_trip",
    "ParseContext",
    # Collaborators
    "BlockTypeRegistry",
    "default_registry",
    "tokenize",
    "create_block",
    "serialize",
    "serialize_block",
    "is_valid_block",
    "is_equivalent_markup",
    "is_well_formed",
    # Types
    "Block",
    "BlockType",
    "FieldSpec",
    "AttributeType",
    "RegionNode",
    "MISSING",
    # Extraction rules
    "ExtractionRule",
    "extraction_rule",
    "is_valid_source",
    "attr",
    "html",
    "query",
    "text",
    # Configuration
    "FrozenConfig",
    "ResolvedConfig",
    "resolve_config",
    "ConfigFileError",
    # Telemetry
    "TelemetryContext",
    "TelemetryReporter",
    "SimpleReporter",
    # Exceptions
    "BlockParserError",
    "ConfigurationError",
    "GrammarError",
    "RegistrationError",
]
