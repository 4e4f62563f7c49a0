"""PostgreSQL catalog source implementation."""

from typing import List, Dict, Any, Sequence
import pyarrow as pa
import psycopg2
from psycopg2 import errors, pool
import logging

from .base import CatalogSession, DataSource
from ..catalog.errors import CatalogQueryFailure, UnknownCatalogTable

logger = logging.getLogger(__name__)


class PostgreSQLSession(CatalogSession):
    """Session holding one pooled PostgreSQL connection."""

    def __init__(self, name: str, conn):
        self.name = name
        self.conn = conn

    def execute(self, sql: str, parameters: Sequence[Any] = ()) -> pa.Table:
        try:
            with self.conn.cursor() as cursor:
                logger.debug(f"Executing query on {self.name}: {sql[:100]}...")
                cursor.execute(sql, tuple(parameters))
                columns = self._extract_column_names(cursor.description)
                rows = cursor.fetchall()
            self.conn.rollback()
        except errors.UndefinedTable as e:
            logger.debug(f"Catalog object missing on {self.name}: {e}")
            self.conn.rollback()
            raise UnknownCatalogTable(f"PostgreSQL table missing on {self.name}: {e}", sql) from e
        except psycopg2.Error as e:
            logger.error(f"Query execution failed on {self.name}: {e}")
            self.conn.rollback()
            raise CatalogQueryFailure(f"PostgreSQL query failed on {self.name}: {e}", sql) from e
        data = self._build_column_data(columns, rows)
        return pa.Table.from_pydict(data)

    def _extract_column_names(self, description) -> List[str]:
        """Extract column names from cursor description."""
        columns = []
        for desc in description or []:
            columns.append(desc[0])
        return columns

    def _build_column_data(self, columns: List[str], rows: List) -> Dict[str, List]:
        """Build column data dictionary from rows."""
        data = {}
        for col in columns:
            data[col] = []

        for row in rows:
            for i, col in enumerate(columns):
                data[col].append(row[i])

        return data


class PostgreSQLDataSource(DataSource):
    """PostgreSQL catalog connector with connection pooling.

    Intended for catalogs replicated into PostgreSQL with the SYSTABLES and
    SYSCOLUMNS column names preserved.
    """

    paramstyle = "format"

    def __init__(self, name: str, config: Dict[str, Any]):
        """Initialize PostgreSQL data source.

        Config should include:
            - host: Database host
            - port: Database port
            - database: Database name
            - user: Username
            - password: Password
            - min_connections: Minimum connections in pool (default: 1)
            - max_connections: Maximum connections in pool (default: 5)
        """
        super().__init__(name, config)
        self._pool = None
        self._min_connections = config.get("min_connections", 1)
        self._max_connections = config.get("max_connections", 5)

    def connect(self) -> None:
        """Establish connection pool to PostgreSQL."""
        try:
            logger.info(f"Connecting to PostgreSQL database '{self.config['database']}' at {self.config['host']}")
            self._pool = pool.ThreadedConnectionPool(
                self._min_connections,
                self._max_connections,
                host=self.config["host"],
                port=self.config.get("port", 5432),
                database=self.config["database"],
                user=self.config["user"],
                password=self.config["password"],
            )
            # Get a test connection to verify it works
            conn = self._pool.getconn()
            self._pool.putconn(conn)
            self.connection = conn
            self._connected = True
            logger.info(f"Successfully connected to PostgreSQL: {self.name}")
        except psycopg2.Error as e:
            logger.error(f"Failed to connect to PostgreSQL {self.name}: {e}")
            raise CatalogQueryFailure(f"PostgreSQL connection failed: {e}") from e

    def disconnect(self) -> None:
        """Close all connections in the pool."""
        if self._pool:
            self._pool.closeall()
            logger.info(f"Disconnected from PostgreSQL: {self.name}")
            self._pool = None
            self.connection = None
            self._connected = False

    def _acquire_session(self) -> PostgreSQLSession:
        if not self._pool:
            raise RuntimeError(f"Not connected to {self.name}")
        return PostgreSQLSession(self.name, self._pool.getconn())

    def _release_session(self, session: PostgreSQLSession) -> None:
        if self._pool:
            self._pool.putconn(session.conn)
