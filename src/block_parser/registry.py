"""In-memory registry of block types.

The registry is populated before parsing and frozen for the duration of a
parse pass; it is passed explicitly to the parser rather than living in
module state, so tests can build isolated, synthetic registries.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable, Mapping
import logging
from typing import Any

from .core.types import BlockType, FieldSpec
from .exceptions import RegistrationError
from .grammar import BLOCK_NAME_PATTERN

logger = logging.getLogger(__name__)


class BlockTypeRegistry:
    """Maps block names to registered `BlockType` definitions.

    Also records which registered name acts as the unknown-type handler, the
    fallback used for regions whose declared type cannot be resolved.
    """

    def __init__(
        self,
        block_types: Iterable[BlockType] = (),
        *,
        unknown_type_handler: str | None = None,
    ) -> None:
        """Initialize the registry, optionally pre-populated.

        Args:
            block_types: Block types to register immediately.
            unknown_type_handler: Name of the fallback block type. It does
                not need to be registered yet.
        """
        self._types: dict[str, BlockType] = {}
        self._unknown_type_handler = unknown_type_handler
        self._frozen = False
        for block_type in block_types:
            self.register(block_type)

    def _ensure_mutable(self) -> None:
        if self._frozen:
            raise RegistrationError("Block type registry is frozen")

    def register(self, block_type: BlockType) -> BlockType:
        """Add a block type.

        Raises:
            RegistrationError: If the name is malformed or already registered,
                or the registry is frozen.
        """
        self._ensure_mutable()
        if not isinstance(block_type, BlockType):
            raise RegistrationError(
                f"Expected a BlockType, got {type(block_type).__name__}"
            )
        if not BLOCK_NAME_PATTERN.fullmatch(block_type.name):
            raise RegistrationError(
                f"Block names must be 'namespace/name' in lowercase: {block_type.name!r}"
            )
        if block_type.name in self._types:
            raise RegistrationError(f"Block '{block_type.name}' is already registered")
        self._types[block_type.name] = block_type
        logger.debug("Registered block type '%s'", block_type.name)
        return block_type

    def register_type(
        self,
        name: str,
        *,
        save: Callable[[Mapping[str, Any]], str],
        attributes: Mapping[str, FieldSpec | Mapping[str, Any]] | None = None,
        title: str | None = None,
    ) -> BlockType:
        """Build and register a block type from keyword settings."""
        try:
            block_type = BlockType(
                name=name, save=save, attributes=attributes or {}, title=title
            )
        except (TypeError, ValueError) as e:
            raise RegistrationError(f"Invalid settings for '{name}': {e}") from e
        return self.register(block_type)

    def unregister(self, name: str) -> BlockType:
        """Remove and return a block type.

        Raises:
            RegistrationError: If the name is not registered or the registry is frozen.
        """
        self._ensure_mutable()
        try:
            return self._types.pop(name)
        except KeyError:
            raise RegistrationError(f"Block '{name}' is not registered") from None

    def lookup(self, name: str | None) -> BlockType | None:
        """Return the block type registered under `name`, if any."""
        if name is None:
            return None
        return self._types.get(name)

    def names(self) -> tuple[str, ...]:
        """Return registered names in registration order."""
        return tuple(self._types)

    def unknown_type_handler_name(self) -> str | None:
        """Return the name of the fallback block type."""
        return self._unknown_type_handler

    def set_unknown_type_handler_name(self, name: str) -> None:
        """Designate the fallback block type."""
        self._ensure_mutable()
        self._unknown_type_handler = name

    def freeze(self) -> BlockTypeRegistry:
        """Make the registry read-only and return it."""
        self._frozen = True
        return self

    @property
    def frozen(self) -> bool:
        return self._frozen

    def __contains__(self, name: object) -> bool:
        return name in self._types

    def __len__(self) -> int:
        return len(self._types)
