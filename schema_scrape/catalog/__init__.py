"""Catalog records and errors shared by discovery and reconciliation."""

from .errors import CatalogQueryFailure, MissingRequiredParameter, UnknownCatalogTable
from .models import (
    CatalogColumnRow,
    CatalogTableRow,
    Database,
    ReconciledColumn,
    ReconciledTable,
    Resolution,
    TableType,
)

__all__ = [
    "CatalogQueryFailure",
    "MissingRequiredParameter",
    "UnknownCatalogTable",
    "CatalogColumnRow",
    "CatalogTableRow",
    "Database",
    "ReconciledColumn",
    "ReconciledTable",
    "Resolution",
    "TableType",
]
