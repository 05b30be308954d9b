"""Public API for the configuration system."""

from pathlib import Path
from typing import Any

from .resolver import ConfigResolver
from .types import ResolvedConfig

# Global resolver instance for efficient reuse
_resolver = ConfigResolver()


def resolve_config(
    programmatic: dict[str, Any] | None = None,
    *,
    profile: str | None = None,
    use_env_file: str | Path | None = None,
    project_root: Path | None = None,
) -> ResolvedConfig:
    """Resolve configuration from all sources with proper precedence.

    Precedence: Programmatic > Environment > Project file > Home file > Defaults

    Args:
        programmatic: Overrides with the highest precedence. Unknown keys
            are ignored.
        profile: Profile name to load from configuration files. If None,
            ``BLOCK_PARSER_PROFILE`` is used when set.
        use_env_file: Optional .env file to read before the environment.
        project_root: Directory to search for pyproject.toml. If None,
            searches the current directory and parents.

    Returns:
        ResolvedConfig with merged values and source tracking for audit.

    Raises:
        ValueError: If configuration validation fails.
        ConfigFileError: If the project configuration file is malformed.

    Example:
        config = resolve_config({"unknown_type_handler": "core/html"})
        print(config.audit())
        parser = create_parser(config.to_frozen())
    """
    return _resolver.resolve(
        programmatic,
        profile=profile,
        use_env_file=use_env_file,
        project_root=project_root,
    )
