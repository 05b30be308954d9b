"""Read-only context shared by every stage of a parse pass."""

from __future__ import annotations

from collections.abc import Callable, Mapping
import dataclasses
from types import MappingProxyType
from typing import Any, Literal

from block_parser.core.types import Block
from block_parser.factory import create_block
from block_parser.registry import BlockTypeRegistry
from block_parser.telemetry import TelemetryContext, TelemetryContextProtocol

type BlockFactory = Callable[[str, Mapping[str, Any]], Block]


@dataclasses.dataclass(frozen=True, slots=True)
class ParseContext:
    """Everything region resolution needs, passed explicitly.

    Attributes:
        registry: Block type registry; not mutated during a parse.
        unknown_type_handler: Fallback block name for unresolvable regions.
        migrations: Legacy block names mapped to their successors.
        telemetry: Sink for migration notifications and timings.
        factory: Builds unvalidated blocks from a name and attributes.
        extraction_input: Whether extraction rules see trimmed or raw content.
    """

    registry: BlockTypeRegistry
    unknown_type_handler: str | None = None
    migrations: Mapping[str, str] = dataclasses.field(default_factory=dict)
    telemetry: TelemetryContextProtocol = dataclasses.field(
        default_factory=TelemetryContext
    )
    factory: BlockFactory = create_block
    extraction_input: Literal["trimmed", "raw"] = "trimmed"

    def __post_init__(self) -> None:
        """Freeze the migration table."""
        if not isinstance(self.migrations, MappingProxyType):
            object.__setattr__(self, "migrations", MappingProxyType(dict(self.migrations)))
