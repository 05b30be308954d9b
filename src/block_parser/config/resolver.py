"""Configuration resolution with precedence handling.

Merges configuration from all sources according to the documented order:
Programmatic > Environment > Project file > Home file > Defaults
"""

import os
from pathlib import Path
from typing import Any

from pydantic import ValidationError

from .audit import SourceTracker
from .env_loader import EnvironmentConfigLoader
from .file_loader import ConfigFileError, FileConfigLoader
from .schema import ParserSettings
from .types import ConfigOrigin, ResolvedConfig


class ConfigResolver:
    """Resolves configuration from multiple sources with proper precedence."""

    def __init__(self) -> None:
        """Initialize the configuration resolver."""
        self.file_loader = FileConfigLoader()
        self.env_loader = EnvironmentConfigLoader()

    def resolve(
        self,
        programmatic: dict[str, Any] | None = None,
        *,
        profile: str | None = None,
        use_env_file: str | Path | None = None,
        project_root: Path | None = None,
    ) -> ResolvedConfig:
        """Resolve configuration from all sources with proper precedence.

        Args:
            programmatic: Programmatic overrides (highest precedence).
            profile: Profile name to load from files. Defaults to
                ``BLOCK_PARSER_PROFILE`` when unset.
            use_env_file: Optional .env file to read.
            project_root: Directory to search for pyproject.toml.

        Returns:
            ResolvedConfig with merged values and source tracking.

        Raises:
            ValueError: If validation fails.
            ConfigFileError: If the project file is malformed.
        """
        source_tracker = SourceTracker()
        merged_config: dict[str, Any] = {}

        if profile is None:
            profile = os.getenv("BLOCK_PARSER_PROFILE")

        def _apply(values: dict[str, Any], origin: ConfigOrigin) -> None:
            for field, value in values.items():
                if field in merged_config:  # Only override known fields
                    merged_config[field] = value
                    source_tracker.set_origin(field, origin)

        # Step 1: Schema defaults
        for field, value in ParserSettings.defaults().items():
            merged_config[field] = value
            source_tracker.set_origin(field, "default")

        # Step 2: Home file (errors are non-fatal)
        try:
            _apply(self.file_loader.load_home_config(profile=profile), "file")
        except ConfigFileError:
            pass

        # Step 3: Project file
        try:
            _apply(
                self.file_loader.load_project_config(
                    project_root=project_root, profile=profile
                ),
                "file",
            )
        except ConfigFileError:
            # A missing profile may live only in the home file
            if profile is None:
                raise

        # Step 4: Environment variables
        try:
            _apply(self.env_loader.load_env_config(env_file=use_env_file), "env")
        except (ValueError, FileNotFoundError) as e:
            raise ValueError(f"Environment configuration error: {e}") from e

        # Step 5: Programmatic overrides
        if programmatic:
            _apply(programmatic, "programmatic")

        # Step 6: Validate the merged result; model_validate skips env sources
        try:
            final_config = ParserSettings.model_validate(merged_config).to_dict()
        except ValidationError as e:
            raise ValueError(f"Configuration validation failed: {e}") from e

        return ResolvedConfig(
            **final_config,
            origin=source_tracker.get_source_map(),
        )
