"""Region-to-block resolution stages and the document parser."""

from .attributes import get_block_attributes, get_sourced_attributes
from .context import BlockFactory, ParseContext
from .document import BlockParser, Tokenizer, create_parser
from .materializer import create_block_with_fallback
from .type_resolver import apply_migrations, resolve_type

__all__ = [
    "BlockFactory",
    "BlockParser",
    "ParseContext",
    "Tokenizer",
    "apply_migrations",
    "create_block_with_fallback",
    "create_parser",
    "get_block_attributes",
    "get_sourced_attributes",
    "resolve_type",
]
