"""Convenience helpers over `BlockParser` and the serializer."""

from __future__ import annotations

from typing import TYPE_CHECKING

from block_parser.config import FrozenConfig
from block_parser.pipeline.document import create_parser
from block_parser.serialization import serialize

if TYPE_CHECKING:  # pragma: no cover - typing only
    from collections.abc import Iterable

    from block_parser.core.types import Block
    from block_parser.registry import BlockTypeRegistry
    from block_parser.telemetry import TelemetryReporter


def parse(
    text: str,
    *,
    registry: BlockTypeRegistry | None = None,
    cfg: FrozenConfig | None = None,
    reporters: Iterable[TelemetryReporter] = (),
) -> list[Block]:
    """Parse a document into blocks.

    Args:
        text: The document.
        registry: Block types to resolve against; built-in library if omitted.
        cfg: Frozen configuration. If omitted, `resolve_config()` is used.
        reporters: Telemetry reporters for migration counts and timings.

    Raises:
        GrammarError: If the document cannot be segmented.

    Example:
        ```python
        blocks = parse('<!-- block:core/heading --><h2>Hi</h2><!-- /block -->')
        assert blocks[0].attributes == {"content": "Hi", "level": 2}
        ```

    See Also:
        Build a `BlockParser` once with `create_parser()` when parsing many
        documents.
    """
    return create_parser(cfg, registry, reporters=reporters).parse(text)


def round_trip(
    text: str,
    *,
    registry: BlockTypeRegistry | None = None,
    cfg: FrozenConfig | None = None,
) -> str:
    """Parse a document and serialize the resulting blocks again."""
    parser = create_parser(cfg, registry)
    return serialize(parser.parse(text), parser.registry)
