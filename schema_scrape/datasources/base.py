"""Base catalog connection interface."""

from abc import ABC, abstractmethod
from contextlib import contextmanager
from typing import Any, Dict, Iterator, List, Sequence

import pyarrow as pa

from ..query.fragments import CatalogQuery


class CatalogSession(ABC):
    """A scoped handle on an open catalog connection."""

    @abstractmethod
    def execute(self, sql: str, parameters: Sequence[Any] = ()) -> pa.Table:
        """Execute a query and return its rows as an Arrow table.

        Args:
            sql: Query text with positional placeholders
            parameters: Values for the placeholders, in order

        Returns:
            Arrow table of the result rows

        Raises:
            CatalogQueryFailure: If the query cannot be executed
        """
        pass

    def fetch_records(self, query: CatalogQuery) -> List[Dict[str, Any]]:
        """Run a built query and return one dict per row."""
        result = self.execute(query.sql, query.parameters)
        return result.to_pylist()


class DataSource(ABC):
    """Abstract base class for catalog data sources."""

    paramstyle = "qmark"

    def __init__(self, name: str, config: Dict[str, Any]):
        """Initialize data source.

        Args:
            name: Unique name for this data source
            config: Configuration dictionary
        """
        self.name = name
        self.config = config
        self.connection = None
        self._connected = False

    @abstractmethod
    def connect(self) -> None:
        """Establish connection to the data source."""
        pass

    @abstractmethod
    def disconnect(self) -> None:
        """Close connection to the data source."""
        pass

    @abstractmethod
    def _acquire_session(self) -> CatalogSession:
        pass

    @abstractmethod
    def _release_session(self, session: CatalogSession) -> None:
        pass

    @contextmanager
    def open(self) -> Iterator[CatalogSession]:
        """Acquire a session, releasing it on every exit path."""
        self.ensure_connected()
        session = self._acquire_session()
        try:
            yield session
        finally:
            self._release_session(session)

    def is_connected(self) -> bool:
        """Check if data source is connected.

        Returns:
            True if connected, False otherwise
        """
        return self._connected

    def ensure_connected(self) -> None:
        """Ensure data source is connected.

        Raises:
            CatalogQueryFailure: If connection cannot be established
        """
        if not self.is_connected():
            self.connect()
            self._connected = True

    def __enter__(self):
        """Context manager entry."""
        self.ensure_connected()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        """Context manager exit."""
        self.disconnect()
        self._connected = False
        return False

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(name={self.name})"
