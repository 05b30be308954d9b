"""Configuration management for the block parser.

Resolve-once, freeze-then-flow:
- ResolvedConfig: merged configuration with audit metadata
- FrozenConfig: immutable configuration held by a parser
- SourceMap: where each configuration value came from
"""

from .api import resolve_config
from .file_loader import ConfigFileError
from .schema import ParserSettings
from .types import ConfigOrigin, FrozenConfig, ResolvedConfig, SourceMap

__all__ = [
    "ConfigFileError",
    "ConfigOrigin",
    "FrozenConfig",
    "ParserSettings",
    "ResolvedConfig",
    "SourceMap",
    "resolve_config",
]
