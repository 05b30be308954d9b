"""Environment variable configuration loading.

Reads ``BLOCK_PARSER_*`` variables (and optionally a .env file) through the
settings schema, returning only the fields the environment actually sets.
"""

from pathlib import Path
from typing import Any

from pydantic import ValidationError
from pydantic_settings import SettingsError

from .schema import ParserSettings


class EnvironmentConfigLoader:
    """Loads configuration from environment variables."""

    def load_env_config(self, env_file: str | Path | None = None) -> dict[str, Any]:
        """Load configuration from environment variables.

        Args:
            env_file: Optional .env file read in addition to the process
                environment. Process variables win over file entries.

        Returns:
            Values for the fields set in the environment, validated and coerced.

        Raises:
            FileNotFoundError: If `env_file` does not exist.
            ValueError: If environment variables contain invalid values.
        """
        if env_file is not None and not Path(env_file).exists():
            raise FileNotFoundError(f"Environment file not found: {env_file}")

        try:
            settings = ParserSettings(_env_file=env_file)
        except (ValidationError, SettingsError) as e:
            raise ValueError(f"Invalid BLOCK_PARSER_* environment values: {e}") from e

        return {name: getattr(settings, name) for name in settings.model_fields_set}
