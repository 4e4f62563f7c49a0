"""Catalog query building."""

from .fragments import (
    CatalogQuery,
    QueryFragmentProvider,
    DEFAULT_SYSTEM_ALIAS_DATABASE,
    DEFAULT_TABLES_TEMPLATE,
    DEFAULT_COLUMNS_TEMPLATE,
    validate_identifier,
)

__all__ = [
    "CatalogQuery",
    "QueryFragmentProvider",
    "DEFAULT_SYSTEM_ALIAS_DATABASE",
    "DEFAULT_TABLES_TEMPLATE",
    "DEFAULT_COLUMNS_TEMPLATE",
    "validate_identifier",
]
