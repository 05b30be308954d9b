"""Document parser: ordering, collaborator wiring, concurrency and telemetry."""

import pytest

from block_parser.config import FrozenConfig
from block_parser.core.types import Block, RegionNode
from block_parser.exceptions import GrammarError
from block_parser.pipeline.document import BlockParser, create_parser
from block_parser.registry import BlockTypeRegistry

pytestmark = pytest.mark.unit

DOCUMENT = (
    "intro <b>text</b>\n"
    '<!-- block:test/note {"tone":"warn"} --><aside data-tone="warn">one</aside><!-- /block -->\n'
    '<!-- block:test/memo --><aside data-tone="info">two</aside><!-- /block -->\n'
    '<!-- block:acme/gallery {"columns":3} --><div>three</div><!-- /block -->\n'
)


@pytest.fixture
def parser(frozen_config, registry, reporter):
    return BlockParser(frozen_config, registry, reporters=[reporter])


def test_blocks_follow_document_order(parser):
    blocks = parser.parse(DOCUMENT)

    assert [(b.name, dict(b.attributes)) for b in blocks] == [
        ("test/freeform", {"content": "intro <b>text</b>"}),
        ("test/note", {"body": "one", "tone": "warn"}),
        ("test/note", {"body": "two", "tone": "info"}),
        ("test/freeform", {"content": "<div>three</div>"}),
    ]
    assert all(block.is_valid for block in blocks)


def test_empty_document_gives_no_blocks(parser):
    assert parser.parse("") == []


def test_grammar_errors_propagate(parser):
    with pytest.raises(GrammarError):
        parser.parse("<!-- block:test/note --><aside>x</aside>")


def test_registry_is_frozen_on_construction(parser, registry):
    assert parser.registry is registry
    assert registry.frozen


def test_handler_comes_from_registry_before_config(registry):
    parser = BlockParser(FrozenConfig(unknown_type_handler="core/freeform"), registry)
    assert parser.context.unknown_type_handler == "test/freeform"


def test_handler_falls_back_to_config():
    parser = BlockParser(FrozenConfig(unknown_type_handler="acme/html"), BlockTypeRegistry())
    assert parser.context.unknown_type_handler == "acme/html"


def test_concurrent_materialization_matches_sequential(registry, frozen_config):
    document = "\n".join(
        f'<!-- block:test/note --><aside data-tone="info">{i}</aside><!-- /block -->\n'
        f"<p>gap {i}</p>"
        for i in range(25)
    )
    sequential = BlockParser(frozen_config, registry).parse(document)
    concurrent = BlockParser(
        FrozenConfig(
            unknown_type_handler=frozen_config.unknown_type_handler,
            migrations=frozen_config.migrations,
            max_workers=4,
        ),
        registry,
    ).parse(document)

    assert concurrent == sequential
    assert len(concurrent) == 50


def test_trimmed_content_feeds_extraction_by_default(registry, frozen_config):
    (block,) = BlockParser(frozen_config, registry).parse("   loose   ")
    assert block.attributes["content"] == "loose"


def test_raw_content_feeds_extraction_when_configured(registry):
    config = FrozenConfig(unknown_type_handler="test/freeform", extraction_input="raw")
    (block,) = BlockParser(config, registry).parse("   loose   ")
    assert block.attributes["content"] == "   loose   "
    assert block.is_valid is True


def test_migrations_are_reported_within_parse_scope(parser, reporter):
    parser.parse(DOCUMENT)

    assert "parser.parse" in reporter.timings
    ((value, metadata),) = reporter.metrics["parser.parse.block_auto_convert"]
    assert value == 1
    assert (metadata["source"], metadata["target"]) == ("test/memo", "test/note")


def test_concurrent_migrations_keep_parse_scope(registry, reporter):
    config = FrozenConfig(
        unknown_type_handler="test/freeform",
        migrations={"test/memo": "test/note"},
        max_workers=3,
    )
    BlockParser(config, registry, reporters=[reporter]).parse(DOCUMENT)
    assert len(reporter.metrics["parser.parse.block_auto_convert"]) == 1


def test_disabled_telemetry_reports_nothing(registry, reporter):
    config = FrozenConfig(
        unknown_type_handler="test/freeform",
        migrations={"test/memo": "test/note"},
        telemetry_enabled=False,
    )
    BlockParser(config, registry, reporters=[reporter]).parse(DOCUMENT)
    assert reporter.timings == {}
    assert reporter.metrics == {}


def test_custom_tokenizer_is_used(registry, frozen_config):
    def tokenizer(text):
        return [RegionNode(name="test/note", raw_content=f"<aside>{text}</aside>")]

    (block,) = BlockParser(frozen_config, registry, tokenizer=tokenizer).parse("x")
    assert block.name == "test/note"
    assert block.attributes["body"] == "x"


def test_custom_factory_is_used(registry, frozen_config):
    names = []

    def factory(name, attributes):
        names.append(name)
        return Block(name=name, attributes=attributes)

    BlockParser(frozen_config, registry, factory=factory).parse(DOCUMENT)
    assert names == ["test/freeform", "test/note", "test/note", "test/freeform"]


def test_default_registry_is_the_core_library():
    parser = BlockParser(FrozenConfig())
    assert {"core/freeform", "core/paragraph", "core/heading"} <= set(
        parser.registry.names()
    )


def test_create_parser_resolves_ambient_configuration(monkeypatch, registry):
    monkeypatch.setenv("BLOCK_PARSER_MAX_WORKERS", "3")
    monkeypatch.setenv("BLOCK_PARSER_EXTRACTION_INPUT", "raw")

    parser = create_parser(registry=registry)

    assert parser.config.max_workers == 3
    assert parser.config.extraction_input == "raw"


def test_create_parser_uses_explicit_configuration(monkeypatch, registry, frozen_config):
    monkeypatch.setenv("BLOCK_PARSER_MAX_WORKERS", "3")
    assert create_parser(frozen_config, registry).config is frozen_config
