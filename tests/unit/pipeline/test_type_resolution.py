"""Type resolution: fallback to the unknown-type handler and legacy migrations."""

import logging

import pytest

from block_parser.pipeline.context import ParseContext
from block_parser.pipeline.type_resolver import apply_migrations, resolve_type
from block_parser.telemetry import TelemetryContext

pytestmark = pytest.mark.unit


@pytest.fixture
def make_context(registry, reporter):
    def _make(migrations=None, handler="test/freeform"):
        return ParseContext(
            registry=registry,
            unknown_type_handler=handler,
            migrations=migrations or {},
            telemetry=TelemetryContext(reporter),
        )

    return _make


def test_registered_name_resolves_to_its_type(make_context, note_type, reporter):
    assert resolve_type("test/note", make_context()) == ("test/note", note_type)
    assert reporter.metrics == {}


def test_missing_name_uses_handler(make_context, freeform_type):
    assert resolve_type(None, make_context()) == ("test/freeform", freeform_type)


def test_unregistered_name_falls_back(make_context, freeform_type):
    assert resolve_type("acme/gallery", make_context()) == ("test/freeform", freeform_type)


def test_migration_rewrites_and_notifies_once(make_context, note_type, reporter):
    context = make_context({"test/memo": "test/note"})

    assert resolve_type("test/memo", context) == ("test/note", note_type)

    ((value, metadata),) = reporter.metrics["block_auto_convert"]
    assert value == 1
    assert metadata["source"] == "test/memo"
    assert metadata["target"] == "test/note"


def test_migration_to_unregistered_name_falls_back(make_context, freeform_type):
    context = make_context({"test/memo": "acme/retired"})
    assert resolve_type("test/memo", context) == ("test/freeform", freeform_type)


def test_migrations_chain(make_context, note_type, reporter):
    context = make_context({"test/older": "test/memo", "test/memo": "test/note"})

    assert resolve_type("test/older", context) == ("test/note", note_type)
    assert len(reporter.metrics["block_auto_convert"]) == 2


def test_migration_cycle_terminates(reporter):
    telemetry = TelemetryContext(reporter)
    migrations = {"test/a": "test/b", "test/b": "test/a"}

    assert apply_migrations("test/a", migrations, telemetry) == "test/a"
    assert len(reporter.metrics["block_auto_convert"]) == 2


def test_migration_is_logged(make_context, caplog):
    context = make_context({"test/memo": "test/note"})
    with caplog.at_level(logging.INFO, logger="block_parser.pipeline.type_resolver"):
        resolve_type("test/memo", context)
    assert "Converted legacy block 'test/memo' to 'test/note'" in caplog.text


def test_unregistered_handler_gives_no_type(make_context):
    context = make_context(handler="test/missing")
    assert resolve_type("acme/gallery", context) == ("test/missing", None)


def test_no_handler_and_no_name(registry):
    context = ParseContext(registry=registry)
    assert resolve_type(None, context) == (None, None)


def test_context_freezes_migrations(registry):
    migrations = {"test/memo": "test/note"}
    context = ParseContext(registry=registry, migrations=migrations)
    migrations["test/older"] = "test/memo"

    assert dict(context.migrations) == {"test/memo": "test/note"}
    with pytest.raises(TypeError):
        context.migrations["test/x"] = "test/y"  # type: ignore[index]
