"""Resolution of a region's declared name to a registered block type."""

from __future__ import annotations

from collections.abc import Mapping
import logging

from block_parser.core.types import BlockType
from block_parser.telemetry import TelemetryContextProtocol

from .context import ParseContext

logger = logging.getLogger(__name__)


def apply_migrations(
    name: str,
    migrations: Mapping[str, str],
    telemetry: TelemetryContextProtocol,
) -> str:
    """Rewrite a legacy block name to its successor.

    Rewrites chain (``a -> b -> c``) and stop at the first repeated name.
    Each applied rewrite emits one ``block_auto_convert`` count.
    """
    seen = {name}
    while (successor := migrations.get(name)) is not None:
        telemetry.count("block_auto_convert", source=name, target=successor)
        logger.info("Converted legacy block '%s' to '%s'", name, successor)
        name = successor
        if name in seen:
            break
        seen.add(name)
    return name


def resolve_type(
    name: str | None, context: ParseContext
) -> tuple[str | None, BlockType | None]:
    """Return the final block name and its type, falling back when needed.

    A missing name becomes the unknown-type handler, legacy names are
    migrated, and a name that is still unregistered falls back to the
    unknown-type handler. The type is None only when the handler itself is
    not registered.
    """
    fallback = context.unknown_type_handler
    resolved = name or fallback
    if resolved is None:
        return None, None

    resolved = apply_migrations(resolved, context.migrations, context.telemetry)
    block_type = context.registry.lookup(resolved)
    if block_type is None:
        if resolved != fallback:
            logger.debug("Unregistered block '%s'; using fallback '%s'", resolved, fallback)
        resolved = fallback
        block_type = context.registry.lookup(fallback)
    return resolved, block_type
