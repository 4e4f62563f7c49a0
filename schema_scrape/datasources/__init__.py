"""Catalog source connectors."""

from .base import CatalogSession, DataSource
from .postgresql import PostgreSQLDataSource
from .duckdb import DuckDBDataSource

__all__ = [
    "CatalogSession",
    "DataSource",
    "PostgreSQLDataSource",
    "DuckDBDataSource",
]
