"""DuckDB catalog source implementation."""

from typing import Any, Dict, Sequence
import pyarrow as pa
import duckdb
import logging

from .base import CatalogSession, DataSource
from ..catalog.errors import CatalogQueryFailure, UnknownCatalogTable

logger = logging.getLogger(__name__)


class DuckDBSession(CatalogSession):
    """Session backed by a DuckDB cursor."""

    def __init__(self, name: str, cursor):
        self.name = name
        self.cursor = cursor

    def execute(self, sql: str, parameters: Sequence[Any] = ()) -> pa.Table:
        logger.debug(f"Executing query on {self.name}: {sql[:100]}...")
        try:
            result = self.cursor.execute(sql, list(parameters))
            return result.to_arrow_table()
        except duckdb.CatalogException as e:
            logger.debug(f"Catalog object missing on {self.name}: {e}")
            raise UnknownCatalogTable(f"DuckDB catalog error on {self.name}: {e}", sql) from e
        except duckdb.Error as e:
            logger.error(f"Query execution failed on {self.name}: {e}")
            raise CatalogQueryFailure(f"DuckDB query failed on {self.name}: {e}", sql) from e


class DuckDBDataSource(DataSource):
    """DuckDB catalog connector, used for local catalog snapshots and tests."""

    paramstyle = "qmark"

    def __init__(self, name: str, config: Dict[str, Any]):
        """Initialize DuckDB data source.

        Config should include:
            - path: Path to DuckDB database file (or :memory: for in-memory)
            - read_only: Whether to open in read-only mode (default: True)
        """
        super().__init__(name, config)
        self.connection = None
        self.db_path = config.get("path", ":memory:")
        self.read_only = config.get("read_only", True)

    def connect(self) -> None:
        """Establish connection to DuckDB."""
        logger.info(f"Connecting to DuckDB at '{self.db_path}'")
        try:
            self.connection = duckdb.connect(self.db_path, read_only=self.read_only)
        except duckdb.Error as e:
            logger.error(f"Failed to connect to DuckDB {self.name}: {e}")
            raise CatalogQueryFailure(f"DuckDB connection failed: {e}") from e
        self._connected = True
        logger.info(f"Successfully connected to DuckDB: {self.name}")

    def disconnect(self) -> None:
        """Close DuckDB connection."""
        if self.connection:
            self.connection.close()
            logger.info(f"Disconnected from DuckDB: {self.name}")
            self.connection = None
            self._connected = False

    def _acquire_session(self) -> DuckDBSession:
        return DuckDBSession(self.name, self.connection.cursor())

    def _release_session(self, session: DuckDBSession) -> None:
        session.cursor.close()
