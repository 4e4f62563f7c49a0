"""Tests for the schema-scrape CLI."""

import json
import logging
import tempfile
from pathlib import Path

import pyarrow as pa
import pytest
from click.testing import CliRunner

from schema_scrape.catalog.models import ReconciledColumn, ReconciledTable
from schema_scrape.cli.scrape import (
    InventoryPrinter,
    ResultPrinter,
    _parse_filters,
    cli,
    inventory_to_json,
)


@pytest.fixture(autouse=True)
def restore_root_logger():
    """The CLI reconfigures the root logger; put it back afterwards."""
    root = logging.getLogger()
    handlers = list(root.handlers)
    level = root.level
    yield
    root.handlers[:] = handlers
    root.setLevel(level)


@pytest.fixture
def runner():
    return CliRunner()


def _json_document(output: str):
    start = output.index("[\n")
    document, _ = json.JSONDecoder().raw_decode(output[start:])
    return document


def test_databases_lists_distinct_names(runner):
    """The demo catalog holds one matching database for TESTXX."""
    result = runner.invoke(
        cli, ["databases", "--creator", "TESTXX", "--location", "HOMEDB2E", "-w", "DB1"]
    )

    assert result.exit_code == 0, result.output
    assert "| DB1    |" in result.output
    assert "1 rows" in result.output


def test_databases_without_creator_is_usage_error(runner):
    """A missing creator is reported as a usage error."""
    result = runner.invoke(cli, ["databases", "--location", "HOMEDB2E", "-w", "DB1"])

    assert result.exit_code == 2
    assert "creator" in result.output


def test_environment_databases(runner):
    """Environment discovery ignores the whitelist."""
    result = runner.invoke(
        cli, ["environment-databases", "--creator", "TESTXX", "--location", "HOMEDB2E"]
    )

    assert result.exit_code == 0, result.output
    assert "DB1" in result.output
    assert "DB2_NOT_MATCH" not in result.output


def test_row_count(runner):
    """Row counts are printed as a bare number."""
    result = runner.invoke(cli, ["row-count", "main.SYSTABLES"])

    assert result.exit_code == 0, result.output
    assert "4" in result.output.splitlines()


def test_row_count_unknown_table_prints_null(runner):
    """Tables the catalog does not know have no count."""
    result = runner.invoke(cli, ["row-count", "main.NOT_THERE"])

    assert result.exit_code == 0, result.output
    assert "NULL" in result.output.splitlines()


def test_inventory_json(runner):
    """The JSON inventory carries reconciled columns for aliases and tables."""
    result = runner.invoke(
        cli,
        [
            "inventory",
            "--creator", "TESTXX",
            "--location", "HOMEDB2E",
            "-w", "DB1",
            "--format", "json",
        ],
    )

    assert result.exit_code == 0, result.output
    document = _json_document(result.output)
    by_name = {entry["name"]: entry for entry in document}
    assert set(by_name) == {"ALIASTABLE1", "PHYSICALTABLE2"}
    assert [column["name"] for column in by_name["ALIASTABLE1"]["columns"]] == ["ALIASCOLUMN1"]
    assert by_name["ALIASTABLE1"]["resolution"] == "alias"
    assert [column["name"] for column in by_name["PHYSICALTABLE2"]["columns"]] == ["ID", "LABEL"]
    assert by_name["PHYSICALTABLE2"]["resolution"] == "physical"


def test_inventory_table(runner):
    """The table inventory groups entries under their database."""
    result = runner.invoke(
        cli, ["inventory", "--creator", "TESTXX", "--location", "HOMEDB2E", "-w", "DB1"]
    )

    assert result.exit_code == 0, result.output
    assert "Database: DB1" in result.output
    assert "Table: ALIASTABLE1 [A] -> ALIASCREATOR.ALIASTABLE1 (alias)" in result.output
    assert "- LABEL: VARCHAR NULL" in result.output


def test_inventory_filter_on_unknown_field(runner):
    """Filtering on an unmapped field fails cleanly."""
    result = runner.invoke(
        cli,
        [
            "inventory",
            "--creator", "TESTXX",
            "--location", "HOMEDB2E",
            "--filter", "owner_id=1",
        ],
    )

    assert result.exit_code == 1
    assert "error:" in result.output


def test_inventory_filter_must_be_pair(runner):
    """Filters without a value are rejected by option parsing."""
    result = runner.invoke(
        cli, ["inventory", "--creator", "TESTXX", "--location", "HOMEDB2E", "--filter", "creator"]
    )

    assert result.exit_code == 2


def test_unknown_catalog(runner):
    """Selecting a catalog that is not configured is a usage error."""
    result = runner.invoke(cli, ["--catalog", "nope", "row-count", "main.SYSTABLES"])

    assert result.exit_code == 2
    assert "Unknown catalog" in result.output


def test_config_file_selects_catalog(runner, tmp_path):
    """A configured DuckDB file is used instead of the demo catalog."""
    database_path = tmp_path / "catalog.duckdb"
    config_yaml = f"""
catalogs:
  snapshot:
    type: duckdb
    path: "{database_path}"
    read_only: false
logging:
  level: WARNING
"""
    with tempfile.NamedTemporaryFile(mode='w', suffix='.yaml', delete=False) as f:
        f.write(config_yaml)
        config_path = f.name

    try:
        result = runner.invoke(
            cli, ["-c", config_path, "databases", "--creator", "TESTXX", "--location", "HOMEDB2E"]
        )
    finally:
        Path(config_path).unlink()

    assert result.exit_code == 1
    assert "error:" in result.output
    assert "demo rows" not in result.output


def test_parse_filters():
    """Filters split on the first equals sign."""
    assert _parse_filters(("location=A=B", " creator = X ")) == {
        "location": "A=B",
        "creator": "X",
    }


def test_result_printer_renders_nulls():
    """Arrow tables print as bordered text with a row count."""
    lines = []
    table = pa.table({"DBNAME": pa.array(["DB1", None], pa.string())})

    ResultPrinter(lines.append).display(table)

    assert lines[0] == "+--------+"
    assert "| NULL   |" in lines
    assert lines[-1] == "2 rows"


def test_inventory_printer_empty():
    lines = []
    InventoryPrinter(lines.append).display_inventory({})
    assert lines == ["Inventory is empty."]


def test_inventory_to_json_is_plain_data():
    """Resolution enums and column tuples serialize to JSON values."""
    entry = ReconciledTable(
        type="T", name="T1", columns=[ReconciledColumn(name="C1", ordinal=1, type_code="INTEGER")]
    )

    document = json.loads(inventory_to_json([entry]))

    assert document[0]["resolution"] == "physical"
    assert document[0]["columns"][0] == {
        "name": "C1",
        "ordinal": 1,
        "key_sequence": None,
        "length": None,
        "type_code": "INTEGER",
        "nullable": None,
        "default": None,
        "scale": None,
    }
