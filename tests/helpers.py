"""Reference catalog rows and helpers shared by the tests."""

from __future__ import annotations

from typing import Iterable, Tuple

from schema_scrape.datasources.duckdb import DuckDBDataSource

MATCHING_CREATOR = "TESTXX"
MATCHING_ALIAS_CREATOR = "ALIASCREATOR"
MATCHING_LOCATION = "HOMEDB2E"
MATCHING_DATABASE = "DB1"
SYSTEM_ALIAS_DATABASE = "DSNDB06"
DATABASE_NOT_IN_DATASET = "DatabaseNameNotInOurInternalDataSet"

TABLE_ROWS = [
    # NAME, CREATOR, TYPE, DBNAME, TBCREATOR, TBNAME, LOCATION
    ("ALIASTABLE1", MATCHING_CREATOR, "A", MATCHING_DATABASE, MATCHING_ALIAS_CREATOR, "ALIASTABLE1", "ALIASLOCATION1"),
    ("PHYSICALTABLE2", MATCHING_CREATOR, "T", MATCHING_DATABASE, None, None, None),
    ("TABLE1", MATCHING_CREATOR, "TYPE_NOT_MATCH", "DB2_NOT_MATCH", None, None, None),
    ("GLOBALTABLE1", "CREATOR_NOT_MATCH", "G", "DB3_NOT_MATCH", None, None, None),
]

COLUMN_ROWS = [
    # NAME, TBNAME, TBCREATOR, COLNO, KEYSEQ, LENGTH, COLTYPE, NULLS, DEFAULT, SCALE
    ("COLUMN1", "TABLE1", MATCHING_CREATOR, 1, 1, 1, "1", "0", "0", 0),
    ("ALIASCOLUMN1", "ALIASTABLE1", MATCHING_ALIAS_CREATOR, 1, 1, 1, "1", "0", "0", 0),
]


class CatalogFixture:
    """Creates and fills the SYSTABLES and SYSCOLUMNS test tables."""

    def __init__(self, datasource: DuckDBDataSource):
        self.datasource = datasource
        self.connection = datasource.connection

    def create(self) -> None:
        self.connection.execute(
            """
            CREATE TABLE main.systables (
                "NAME" VARCHAR, "CREATOR" VARCHAR, "TYPE" VARCHAR, "DBNAME" VARCHAR,
                "TBCREATOR" VARCHAR, "TBNAME" VARCHAR, "LOCATION" VARCHAR
            )
            """
        )
        self.connection.execute(
            """
            CREATE TABLE main.syscolumns (
                "NAME" VARCHAR, "TBNAME" VARCHAR, "TBCREATOR" VARCHAR, "COLNO" INTEGER,
                "KEYSEQ" INTEGER, "LENGTH" INTEGER, "COLTYPE" VARCHAR, "NULLS" VARCHAR,
                "DEFAULT" VARCHAR, "SCALE" INTEGER
            )
            """
        )

    def add_tables(self, rows: Iterable[Tuple]) -> None:
        for row in rows:
            self.connection.execute(
                "INSERT INTO main.systables VALUES (?, ?, ?, ?, ?, ?, ?)", list(row)
            )

    def add_columns(self, rows: Iterable[Tuple]) -> None:
        for row in rows:
            self.connection.execute(
                "INSERT INTO main.syscolumns VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?)", list(row)
            )
