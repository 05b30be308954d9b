"""Core configuration data types.

Configuration follows a resolve-once, freeze-then-flow pattern: values are
merged from every source into a `ResolvedConfig` that remembers where each
value came from, then frozen into the `FrozenConfig` the parser holds.
"""

from collections.abc import Mapping
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Literal, NamedTuple

# --- Source Tracking Types ---

ConfigOrigin = Literal["programmatic", "env", "file", "default"]
SourceMap = Mapping[str, ConfigOrigin]

_FIELD_ORDER = (
    "unknown_type_handler",
    "migrations",
    "extraction_input",
    "telemetry_enabled",
    "max_workers",
)


class ResolvedConfig(NamedTuple):
    """Configuration after resolution from all sources, before freezing.

    Carries `origin`, the audit map of where each field value came from.
    """

    unknown_type_handler: str
    migrations: Mapping[str, str]
    extraction_input: Literal["trimmed", "raw"]
    telemetry_enabled: bool
    max_workers: int

    # Audit metadata - tracks where each field value came from
    origin: SourceMap

    def to_frozen(self) -> "FrozenConfig":
        """Convert to the immutable configuration used by the parser."""
        return FrozenConfig(
            unknown_type_handler=self.unknown_type_handler,
            migrations=self.migrations,
            extraction_input=self.extraction_input,
            telemetry_enabled=self.telemetry_enabled,
            max_workers=self.max_workers,
        )

    def with_overrides(self, **overrides: object) -> "ResolvedConfig":
        """Return a copy with programmatic overrides applied.

        Unknown fields are ignored. Overridden fields are marked
        ``programmatic`` in the origin map. Values are not re-validated;
        pass overrides through `resolve_config` when they come from users.
        """
        new_values = self._asdict()
        new_origin = dict(self.origin)

        for field, value in overrides.items():
            if field in _FIELD_ORDER:
                new_values[field] = value
                new_origin[field] = "programmatic"

        new_values["origin"] = new_origin
        return ResolvedConfig(**new_values)

    def audit(self) -> str:
        """Return a human-readable report of each field's value and origin."""
        lines = []
        for field in _FIELD_ORDER:
            if field not in self.origin:
                continue
            origin = self.origin[field]
            value = getattr(self, field)
            if isinstance(value, Mapping):
                value = dict(value)
            if origin == "env":
                lines.append(f"{field}: env:BLOCK_PARSER_{field.upper()}={value}")
            else:
                lines.append(f"{field}: {origin}:{value}")
        return "\n".join(lines)


@dataclass(frozen=True)
class FrozenConfig:
    """Immutable configuration attached to a parser.

    Any attempt to modify this object raises an exception; the migration
    table is exposed as a read-only mapping.
    """

    unknown_type_handler: str = "core/freeform"
    migrations: Mapping[str, str] = field(
        default_factory=lambda: MappingProxyType({"core/text": "core/paragraph"})
    )
    extraction_input: Literal["trimmed", "raw"] = "trimmed"
    telemetry_enabled: bool = True
    max_workers: int = 1

    def __post_init__(self) -> None:
        """Freeze the migration table."""
        if not isinstance(self.migrations, MappingProxyType):
            object.__setattr__(self, "migrations", MappingProxyType(dict(self.migrations)))
