"""Command line interface for catalog discovery and reconciliation."""

from __future__ import annotations

import json
from dataclasses import asdict
from typing import Any, Dict, List, Optional, Sequence, Tuple

import click
import pyarrow as pa

from ..catalog.engine import SchemaCatalogEngine
from ..catalog.errors import CatalogQueryFailure, MissingRequiredParameter
from ..catalog.models import ReconciledTable
from ..config import CatalogSourceConfig, Config, ScrapeConfig, load_config
from ..datasources.base import DataSource
from ..datasources.duckdb import DuckDBDataSource
from ..datasources.postgresql import PostgreSQLDataSource
from ..query.fragments import QueryFragmentProvider
from ..utils.logging import setup_logging


class ResultPrinter:
    """Formats Arrow tables for CLI display."""

    def __init__(self, emit):
        self.emit = emit

    def display(self, table: pa.Table) -> None:
        headers = list(table.schema.names)
        rows = self._build_rows(table)
        for line in self._format_table(headers, rows):
            self.emit(line)
        self.emit(f"{table.num_rows} rows")

    def _build_rows(self, table: pa.Table) -> List[List[object]]:
        columns = [table.column(index).to_pylist() for index in range(table.num_columns)]
        rows: List[List[object]] = []
        for row_index in range(table.num_rows):
            rows.append([column[row_index] for column in columns])
        return rows

    def _format_table(self, headers: List[str], rows: List[List[object]]) -> List[str]:
        widths = self._compute_widths(headers, rows)
        border = self._build_border(widths)
        lines: List[str] = [border, self._format_row(headers, widths), border]
        for row in rows:
            lines.append(self._format_row([self._stringify_cell(value) for value in row], widths))
        lines.append(border)
        return lines

    def _compute_widths(self, headers: List[str], rows: List[List[object]]) -> List[int]:
        widths = [len(header) for header in headers]
        for row in rows:
            for index, value in enumerate(row):
                widths[index] = max(widths[index], len(self._stringify_cell(value)))
        return widths

    def _build_border(self, widths: List[int]) -> str:
        parts = ["+"]
        for width in widths:
            parts.append("-" * (width + 2))
            parts.append("+")
        return "".join(parts)

    def _format_row(self, values: List[str], widths: List[int]) -> str:
        parts = ["|"]
        for value, width in zip(values, widths):
            parts.append(f" {value.ljust(width)} ")
            parts.append("|")
        return "".join(parts)

    def _stringify_cell(self, value: object) -> str:
        if value is None:
            return "NULL"
        return str(value)


class InventoryPrinter:
    """Prints a reconciled inventory grouped per database."""

    def __init__(self, emit):
        self.emit = emit

    def display_inventory(self, grouped: Dict[str, List[ReconciledTable]]) -> None:
        if not grouped:
            self.emit("Inventory is empty.")
            return
        for database_name, entries in grouped.items():
            header = f"\nDatabase: {database_name or '(none)'}"
            self.emit(header)
            self.emit("-" * len(header))
            for entry in entries:
                self._print_entry(entry)

    def _print_entry(self, entry: ReconciledTable) -> None:
        line = f"\nTable: {entry.name} [{entry.type}]"
        if entry.is_alias:
            line += f" -> {entry.owning_environment}.{entry.target_name}"
        self.emit(f"{line} ({entry.resolution.value})")
        if not entry.columns:
            self.emit("  (no columns)")
            return
        for column in entry.columns:
            nullable = "NULL" if column.nullable == "Y" else "NOT NULL"
            self.emit(f"    - {column.name}: {column.type_code} {nullable}")


def inventory_to_json(entries: Sequence[ReconciledTable]) -> str:
    """Serialize an inventory to a JSON document."""
    documents = []
    for entry in entries:
        document = asdict(entry)
        document["resolution"] = entry.resolution.value
        documents.append(document)
    return json.dumps(documents, indent=2)


class ScrapeRuntime:
    """Owns the catalog source and engine for one CLI invocation."""

    def __init__(self, config: Config, catalog_name: Optional[str] = None, seed_demo: bool = False):
        self.config = config
        source_config = self._select_source(catalog_name)
        self.datasource = create_datasource(source_config)
        self.datasource.connect()
        if seed_demo:
            seed_demo_catalog(self.datasource)
        provider = QueryFragmentProvider(
            tables_template=config.scrape.tables_template,
            columns_template=config.scrape.columns_template,
            paramstyle=self.datasource.paramstyle,
        )
        self.engine = SchemaCatalogEngine(
            self.datasource, provider, config.scrape.system_alias_database
        )

    def _select_source(self, catalog_name: Optional[str]) -> CatalogSourceConfig:
        if not self.config.catalogs:
            raise click.UsageError("No catalogs configured")
        if catalog_name is None:
            return next(iter(self.config.catalogs.values()))
        if catalog_name not in self.config.catalogs:
            raise click.UsageError(f"Unknown catalog: {catalog_name}")
        return self.config.catalogs[catalog_name]

    def close(self) -> None:
        self.datasource.disconnect()


def create_datasource(source_config: CatalogSourceConfig) -> DataSource:
    if source_config.type == "duckdb":
        return DuckDBDataSource(source_config.name, source_config.config)
    if source_config.type == "postgresql":
        return PostgreSQLDataSource(source_config.name, source_config.config)
    raise ValueError(f"Unsupported catalog source type: {source_config.type}")


def build_default_config() -> Config:
    config = Config()
    config.catalogs["duckdb_mem"] = CatalogSourceConfig(
        name="duckdb_mem",
        type="duckdb",
        config={"path": ":memory:", "read_only": False},
    )
    config.scrape = ScrapeConfig(
        tables_template="main.SYSTABLES",
        columns_template="main.SYSCOLUMNS",
    )
    return config


def seed_demo_catalog(datasource: DuckDBDataSource) -> None:
    connection = datasource.connection
    if connection is None:
        return
    connection.execute(
        """
        CREATE TABLE IF NOT EXISTS main.SYSTABLES (
            "NAME" VARCHAR, "CREATOR" VARCHAR, "TYPE" VARCHAR, "DBNAME" VARCHAR,
            "TBCREATOR" VARCHAR, "TBNAME" VARCHAR, "LOCATION" VARCHAR
        )
        """
    )
    connection.execute(
        """
        CREATE TABLE IF NOT EXISTS main.SYSCOLUMNS (
            "NAME" VARCHAR, "TBNAME" VARCHAR, "TBCREATOR" VARCHAR, "COLNO" INTEGER,
            "KEYSEQ" INTEGER, "LENGTH" INTEGER, "COLTYPE" VARCHAR, "NULLS" VARCHAR,
            "DEFAULT" VARCHAR, "SCALE" INTEGER
        )
        """
    )
    connection.execute("DELETE FROM main.SYSTABLES")
    connection.execute("DELETE FROM main.SYSCOLUMNS")
    connection.execute(
        """
        INSERT INTO main.SYSTABLES VALUES
        ('ALIASTABLE1', 'TESTXX', 'A', 'DB1', 'ALIASCREATOR', 'ALIASTABLE1', 'ALIASLOCATION1'),
        ('PHYSICALTABLE2', 'TESTXX', 'T', 'DB1', NULL, NULL, NULL),
        ('TABLE1', 'TESTXX', 'V', 'DB2_NOT_MATCH', NULL, NULL, NULL),
        ('GLOBALTABLE1', 'CREATOR_NOT_MATCH', 'G', 'DB3_NOT_MATCH', NULL, NULL, NULL)
        """
    )
    connection.execute(
        """
        INSERT INTO main.SYSCOLUMNS VALUES
        ('ALIASCOLUMN1', 'ALIASTABLE1', 'ALIASCREATOR', 1, 1, 10, 'VARCHAR', 'N', NULL, 0),
        ('ID', 'PHYSICALTABLE2', 'TESTXX', 1, 1, 4, 'INTEGER', 'N', NULL, 0),
        ('LABEL', 'PHYSICALTABLE2', 'TESTXX', 2, 0, 40, 'VARCHAR', 'Y', NULL, 0)
        """
    )


def _parse_filters(filters: Tuple[str, ...]) -> Dict[str, Any]:
    parsed: Dict[str, Any] = {}
    for item in filters:
        if "=" not in item:
            raise click.BadParameter(f"Expected FIELD=VALUE, got {item!r}", param_hint="--filter")
        key, value = item.split("=", 1)
        parsed[key.strip()] = value.strip()
    return parsed


def _run(ctx: click.Context, action):
    try:
        return action(ctx.obj.engine)
    except MissingRequiredParameter as exc:
        raise click.UsageError(str(exc), ctx=ctx)
    except (CatalogQueryFailure, ValueError) as exc:
        click.echo(f"error: {exc}", err=True)
        ctx.exit(1)


creator_option = click.option("--creator", default="", help="Owning schema of the tables.")
location_option = click.option("--location", default="", help="Catalog location to read.")
whitelist_option = click.option(
    "--whitelist", "-w", multiple=True, help="Database name to include; repeatable."
)


@click.group()
@click.option(
    "-c",
    "--config",
    "config_path",
    type=click.Path(exists=True, dir_okay=False, readable=True),
    help="Path to YAML config file. Defaults to an in-memory DuckDB demo catalog.",
)
@click.option("--catalog", "catalog_name", default=None, help="Configured catalog to use.")
@click.pass_context
def cli(ctx: click.Context, config_path: Optional[str], catalog_name: Optional[str]) -> None:
    """Discover databases and reconcile table definitions from a DB2 catalog."""
    if config_path:
        config = load_config(config_path)
        seed_demo = False
    else:
        config = build_default_config()
        seed_demo = True
        click.echo("Using in-memory DuckDB catalog with demo rows.", err=True)
    setup_logging(
        config.logging.level,
        config.logging.structured,
        config.logging.log_file,
        catalog=catalog_name or next(iter(config.catalogs), None),
    )
    runtime = ScrapeRuntime(config, catalog_name, seed_demo)
    ctx.obj = runtime
    ctx.call_on_close(runtime.close)


@cli.command()
@creator_option
@location_option
@whitelist_option
@click.pass_context
def databases(ctx: click.Context, creator: str, location: str, whitelist: Tuple[str, ...]) -> None:
    """List whitelisted databases holding tables owned by CREATOR."""
    found = _run(ctx, lambda engine: engine.get_databases_by_creator(creator, location, list(whitelist)))
    names = sorted(database.name for database in found)
    ResultPrinter(click.echo).display(pa.table({"DBNAME": pa.array(names, pa.string())}))


@cli.command("environment-databases")
@creator_option
@location_option
@click.pass_context
def environment_databases(ctx: click.Context, creator: str, location: str) -> None:
    """List every database holding tables owned by CREATOR."""
    found = _run(ctx, lambda engine: engine.get_logical_database_names(creator, location))
    ResultPrinter(click.echo).display(pa.table({"DBNAME": pa.array(sorted(found), pa.string())}))


@cli.command("row-count")
@click.argument("table_name")
@click.pass_context
def row_count(ctx: click.Context, table_name: str) -> None:
    """Count the rows of a catalog-exposed table."""
    count = _run(ctx, lambda engine: engine.get_row_count(table_name))
    click.echo("NULL" if count is None else str(count))


@cli.command()
@creator_option
@location_option
@whitelist_option
@click.option("--filter", "filters", multiple=True, help="Extra FIELD=VALUE table filter.")
@click.option(
    "--format",
    "output_format",
    type=click.Choice(["table", "json"]),
    default="table",
    show_default=True,
)
@click.pass_context
def inventory(
    ctx: click.Context,
    creator: str,
    location: str,
    whitelist: Tuple[str, ...],
    filters: Tuple[str, ...],
    output_format: str,
) -> None:
    """Build the reconciled table inventory for CREATOR."""
    extra_filter = _parse_filters(filters)
    entries = _run(
        ctx,
        lambda engine: engine.build_inventory(creator, location, list(whitelist), extra_filter),
    )
    if output_format == "json":
        click.echo(inventory_to_json(entries))
        return
    InventoryPrinter(click.echo).display_inventory(SchemaCatalogEngine.group_by_database(entries))
