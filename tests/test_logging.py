"""Tests for logging setup and formatters."""

import json
import logging

import pytest

from schema_scrape.utils.logging import (
    StandardFormatter,
    StructuredFormatter,
    get_catalog_logger,
    setup_logging,
)


@pytest.fixture(autouse=True)
def restore_root_logger():
    root = logging.getLogger()
    handlers = list(root.handlers)
    level = root.level
    yield
    for handler in root.handlers:
        if handler not in handlers:
            handler.close()
    root.handlers[:] = handlers
    root.setLevel(level)


def _record(message="Alias resolved", **context):
    record = logging.LogRecord(
        name="schema_scrape.catalog.reconciler",
        level=logging.INFO,
        pathname=__file__,
        lineno=1,
        msg=message,
        args=(),
        exc_info=None,
    )
    for name, value in context.items():
        setattr(record, name, value)
    return record


def test_structured_formatter_includes_catalog_context():
    """Catalog context fields are top-level keys of the JSON document."""
    document = json.loads(StructuredFormatter().format(_record(location="HOMEDB2E", creator="TESTXX")))

    assert document["level"] == "INFO"
    assert document["message"] == "Alias resolved"
    assert document["location"] == "HOMEDB2E"
    assert document["creator"] == "TESTXX"
    assert "catalog" not in document


def test_standard_formatter_appends_context():
    line = StandardFormatter().format(_record(catalog="snapshot", location="HOMEDB2E"))

    assert line.endswith("Alias resolved [catalog=snapshot location=HOMEDB2E]")


def test_standard_formatter_without_context():
    assert StandardFormatter().format(_record()).endswith("INFO - Alias resolved")


def test_catalog_logger_attaches_fields(caplog):
    caplog.set_level(logging.INFO, logger="schema_scrape.test")

    get_catalog_logger("schema_scrape.test", location="HOMEDB2E").info("hello")

    assert caplog.records[0].location == "HOMEDB2E"
    assert not hasattr(caplog.records[0], "creator")


def test_catalog_logger_merges_call_extra(caplog):
    """Per-call extra fields are kept alongside the logger's context."""
    caplog.set_level(logging.INFO, logger="schema_scrape.test")
    log = get_catalog_logger("schema_scrape.test", location="HOMEDB2E", creator="TESTXX")

    log.info("hello", extra={"creator": "OTHER", "table": "T1"})

    record = caplog.records[0]
    assert record.location == "HOMEDB2E"
    assert record.creator == "OTHER"
    assert record.table == "T1"


def test_setup_logging_writes_file_with_catalog(tmp_path):
    """A configured log file receives records tagged with the catalog source."""
    log_file = tmp_path / "scrape.log"

    setup_logging("DEBUG", structured=True, log_file=str(log_file), catalog="snapshot")
    logging.getLogger("schema_scrape.test").debug("to file")
    get_catalog_logger("schema_scrape.test", catalog="override").debug("tagged")
    for handler in logging.getLogger().handlers:
        handler.flush()

    lines = [json.loads(line) for line in log_file.read_text().strip().splitlines()]
    assert lines[-2]["message"] == "to file"
    assert lines[-2]["catalog"] == "snapshot"
    assert lines[-1]["catalog"] == "override"
    assert logging.getLogger().level == logging.DEBUG
