"""Exceptions raised by the block parser."""


class BlockParserError(Exception):
    """Base exception for block parsing errors."""


class GrammarError(BlockParserError):
    """Raised when a document cannot be segmented into regions.

    Grammar failures are fatal for the whole document; no partial block list
    is returned.
    """

    def __init__(self, message: str, offset: int | None = None) -> None:
        """Initialize with a message and the character offset of the failure."""
        self.offset = offset
        if offset is not None:
            message = f"{message} (at offset {offset})"
        super().__init__(message)


class RegistrationError(BlockParserError):
    """Raised when a block type cannot be registered or the registry is frozen."""


class ConfigurationError(BlockParserError):
    """Raised when a parser is constructed with invalid collaborators."""
