"""The primary entry point: parse a document into an ordered block list.

The parser drives the grammar to get region nodes and resolves each node
independently into a block. Regions share no state, so with ``max_workers``
above one they are materialized on a thread pool; the output keeps document
order either way. Grammar errors propagate and no partial list is returned.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable
from concurrent.futures import ThreadPoolExecutor
import contextvars
import logging

from block_parser.config import FrozenConfig, resolve_config
from block_parser.core.types import Block, RegionNode
from block_parser.factory import create_block
from block_parser.grammar import tokenize
from block_parser.library import default_registry
from block_parser.registry import BlockTypeRegistry
from block_parser.telemetry import TelemetryContext, TelemetryReporter

from .context import BlockFactory, ParseContext
from .materializer import create_block_with_fallback

logger = logging.getLogger(__name__)

type Tokenizer = Callable[[str], Iterable[RegionNode]]


class BlockParser:
    """Parses documents against a fixed registry and configuration.

    The registry is frozen on construction; it must not change while
    documents are being parsed.
    """

    def __init__(
        self,
        config: FrozenConfig,
        registry: BlockTypeRegistry | None = None,
        *,
        tokenizer: Tokenizer = tokenize,
        factory: BlockFactory = create_block,
        reporters: Iterable[TelemetryReporter] = (),
    ):
        """Initialize the parser.

        Args:
            config: Frozen parser configuration.
            registry: Block types to resolve against. Defaults to the
                built-in library.
            tokenizer: Grammar turning text into ordered region nodes.
            factory: Builds unvalidated blocks.
            reporters: Telemetry reporters receiving migration counts and
                parse timings.
        """
        self.config = config
        if registry is None:
            registry = default_registry(config)
        self.registry = registry.freeze()
        self._tokenizer = tokenizer
        self._context = ParseContext(
            registry=self.registry,
            unknown_type_handler=(
                self.registry.unknown_type_handler_name() or config.unknown_type_handler
            ),
            migrations=config.migrations,
            telemetry=TelemetryContext(*reporters, enabled=config.telemetry_enabled),
            factory=factory,
            extraction_input=config.extraction_input,
        )

    @property
    def context(self) -> ParseContext:
        return self._context

    def parse(self, text: str) -> list[Block]:
        """Parse `text` into blocks in document order.

        Raises:
            GrammarError: If the document cannot be segmented.
        """
        with self._context.telemetry("parser.parse"):
            nodes = tuple(self._tokenizer(text))
            if self.config.max_workers > 1 and len(nodes) > 1:
                results = self._materialize_concurrently(nodes)
            else:
                results = [self._materialize(node) for node in nodes]

        blocks = [block for block in results if block is not None]
        logger.debug("Parsed %d regions into %d blocks", len(nodes), len(blocks))
        return blocks

    def _materialize(self, node: RegionNode) -> Block | None:
        trimmed = node.raw_content.strip()
        source_content = (
            node.raw_content if self._context.extraction_input == "raw" else trimmed
        )
        return create_block_with_fallback(
            node.name,
            trimmed,
            node.attrs,
            self._context,
            source_content=source_content,
        )

    def _materialize_concurrently(
        self, nodes: tuple[RegionNode, ...]
    ) -> list[Block | None]:
        # Each task gets its own context copy so telemetry scopes carry over
        with ThreadPoolExecutor(max_workers=self.config.max_workers) as pool:
            futures = [
                pool.submit(contextvars.copy_context().run, self._materialize, node)
                for node in nodes
            ]
            return [future.result() for future in futures]


def create_parser(
    config: FrozenConfig | None = None,
    registry: BlockTypeRegistry | None = None,
    *,
    reporters: Iterable[TelemetryReporter] = (),
) -> BlockParser:
    """Create a parser, resolving configuration when none is given.

    This is the only place where ambient configuration (environment and
    files) is resolved.
    """
    final_config = config if config is not None else resolve_config().to_frozen()
    return BlockParser(final_config, registry, reporters=reporters)
