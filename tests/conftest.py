"""Shared fixtures: an in-memory DuckDB catalog seeded with reference rows."""

import pytest

from schema_scrape.catalog.engine import SchemaCatalogEngine
from schema_scrape.datasources.duckdb import DuckDBDataSource
from schema_scrape.query.fragments import QueryFragmentProvider
from tests.helpers import COLUMN_ROWS, SYSTEM_ALIAS_DATABASE, TABLE_ROWS, CatalogFixture


@pytest.fixture
def catalog_datasource():
    """In-memory DuckDB catalog with the reference tables and columns."""
    ds = DuckDBDataSource("test_catalog", {"path": ":memory:", "read_only": False})
    ds.connect()
    fixture = CatalogFixture(ds)
    fixture.create()
    fixture.add_tables(TABLE_ROWS)
    fixture.add_columns(COLUMN_ROWS)

    yield ds

    ds.disconnect()


@pytest.fixture
def catalog(catalog_datasource):
    """Row-level access to the seeded catalog tables."""
    return CatalogFixture(catalog_datasource)


@pytest.fixture
def provider():
    """Query provider pointed at the test catalog tables."""
    return QueryFragmentProvider(
        tables_template="main.systables",
        columns_template="main.syscolumns",
        paramstyle="qmark",
    )


@pytest.fixture
def engine(catalog_datasource, provider):
    """Engine over the seeded catalog."""
    return SchemaCatalogEngine(catalog_datasource, provider, SYSTEM_ALIAS_DATABASE)
