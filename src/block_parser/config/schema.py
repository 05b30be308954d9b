"""Configuration schema and validation using Pydantic.

This module defines the settings schema that validates and coerces parser
configuration from the environment, files and programmatic overrides.
"""

import json
from typing import Any, Literal

from pydantic import Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from block_parser.grammar import BLOCK_NAME_PATTERN

ExtractionInput = Literal["trimmed", "raw"]


def _check_block_name(value: str, what: str) -> str:
    if not BLOCK_NAME_PATTERN.fullmatch(value):
        raise ValueError(f"{what} must be a 'namespace/name' block name: {value!r}")
    return value


class ParserSettings(BaseSettings):
    """Pydantic settings schema for the block parser.

    Integrates with environment variables using the BLOCK_PARSER_ prefix.
    Dict-valued fields are read from the environment as JSON.
    """

    model_config = SettingsConfigDict(
        env_prefix="BLOCK_PARSER_",
        env_file=None,  # Only used when explicitly requested
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    unknown_type_handler: str = Field(
        default="core/freeform",
        description="Block type used for regions whose type cannot be resolved",
    )

    migrations: dict[str, str] = Field(
        default_factory=lambda: {"core/text": "core/paragraph"},
        description="Legacy block names rewritten to their successors",
    )

    extraction_input: ExtractionInput = Field(
        default="trimmed",
        description="Whether extraction rules see trimmed or untrimmed region content",
    )

    telemetry_enabled: bool = Field(
        default=True,
        description="Forward migration and timing events to telemetry reporters",
    )

    max_workers: int = Field(
        default=1,
        description="Worker threads used to materialize regions",
        ge=1,
    )

    # --- Validation Rules ---

    @field_validator("unknown_type_handler")
    @classmethod
    def validate_unknown_type_handler(cls, v: str) -> str:
        """Require a well-formed block name."""
        return _check_block_name(v, "unknown_type_handler")

    @field_validator("migrations", mode="before")
    @classmethod
    def parse_migrations(cls, v: Any) -> Any:
        """Accept the migration table as a JSON string (files, programmatic)."""
        if isinstance(v, str):
            try:
                return json.loads(v)
            except json.JSONDecodeError as e:
                raise ValueError(f"migrations must be a JSON object: {e.msg}") from e
        return v

    @model_validator(mode="after")
    def validate_migrations(self) -> "ParserSettings":
        """Reject malformed names and aliases that rewrite to themselves."""
        for alias, successor in self.migrations.items():
            _check_block_name(alias, "migration alias")
            _check_block_name(successor, "migration successor")
            if alias == successor:
                raise ValueError(f"Migration for '{alias}' maps the name to itself")
        return self

    @classmethod
    def defaults(cls) -> dict[str, Any]:
        """Return schema defaults without reading any environment."""
        return {
            name: field.get_default(call_default_factory=True)
            for name, field in cls.model_fields.items()
        }

    def to_dict(self) -> dict[str, Any]:
        """Convert to a plain dictionary of field values."""
        return {
            "unknown_type_handler": self.unknown_type_handler,
            "migrations": dict(self.migrations),
            "extraction_input": self.extraction_input,
            "telemetry_enabled": self.telemetry_enabled,
            "max_workers": self.max_workers,
        }
