"""Facade over catalog discovery and alias reconciliation."""

import logging
from contextlib import contextmanager
from typing import Any, Dict, Iterator, List, Optional, Sequence, Set

from ..datasources.base import CatalogSession, DataSource
from ..query.fragments import DEFAULT_SYSTEM_ALIAS_DATABASE, QueryFragmentProvider
from ..utils.logging import get_catalog_logger
from .discovery import DatabaseDiscovery
from .errors import require
from .models import CatalogTableRow, Database, ReconciledTable
from .reconciler import AliasReconciler

logger = logging.getLogger(__name__)


class SchemaCatalogEngine:
    """Entry point for discovery and reconciliation against one catalog source.

    Holds only its collaborators; every call opens and releases its own
    catalog session unless the caller passes one in.
    """

    def __init__(
        self,
        datasource: DataSource,
        provider: Optional[QueryFragmentProvider] = None,
        system_alias_database: str = DEFAULT_SYSTEM_ALIAS_DATABASE,
    ):
        """Initialize engine.

        Args:
            datasource: Catalog connection to query
            provider: Query builder, defaults to one matching the datasource paramstyle
            system_alias_database: Database that records alias rows
        """
        self.datasource = datasource
        self.provider = provider or QueryFragmentProvider(paramstyle=datasource.paramstyle)
        self.system_alias_database = system_alias_database
        self.discovery = DatabaseDiscovery(self.provider, system_alias_database)
        self.reconciler = AliasReconciler(self.provider, system_alias_database)

    def get_databases_by_creator(
        self, creator: str, location: str, whitelist: Optional[Sequence[str]]
    ) -> Set[Database]:
        """Distinct whitelisted databases holding tables owned by ``creator``.

        Raises:
            MissingRequiredParameter: If creator or location is empty
            CatalogQueryFailure: If the catalog query fails
        """
        self._check_identity(creator, location)
        with self.datasource.open() as session:
            return self.discovery.get_databases_by_creator(session, creator, location, whitelist)

    def get_logical_database_names(self, creator: str, location: str) -> Set[str]:
        """Every database holding tables owned by ``creator`` at ``location``."""
        self._check_identity(creator, location)
        with self.datasource.open() as session:
            return self.discovery.get_logical_database_names(session, creator, location)

    def get_row_count(self, catalog_table_name: str) -> Optional[int]:
        """Row count of a catalog-exposed table, None when empty."""
        require("catalog_table_name", catalog_table_name)
        with self.datasource.open() as session:
            return self.discovery.get_row_count(session, catalog_table_name)

    def get_table_rows(
        self,
        creator: str,
        location: str,
        whitelist: Optional[Sequence[str]],
        extra_filter: Optional[Dict[str, Any]] = None,
    ) -> List[CatalogTableRow]:
        """Raw alias, table and global rows owned by ``creator`` inside the whitelist."""
        self._check_identity(creator, location)
        with self.datasource.open() as session:
            return self._table_rows(session, creator, location, whitelist, extra_filter)

    def reconcile(
        self,
        location: str,
        whitelist: Optional[Sequence[str]],
        entries: Sequence[ReconciledTable],
        session: Optional[CatalogSession] = None,
        extra_filter: Optional[Dict[str, Any]] = None,
    ) -> List[ReconciledTable]:
        """Resolve alias entries; returns the new master list."""
        require("location", location)
        with self._session(session) as active:
            return self.reconciler.reconcile(location, whitelist, entries, active, extra_filter)

    def resolve_physical(
        self,
        location: str,
        whitelist: Optional[Sequence[str]],
        entries: Sequence[ReconciledTable],
        session: Optional[CatalogSession] = None,
        extra_filter: Optional[Dict[str, Any]] = None,
    ) -> List[ReconciledTable]:
        """Resolve physical entries; returns the new master list."""
        require("location", location)
        with self._session(session) as active:
            return self.reconciler.resolve_physical(location, whitelist, entries, active, extra_filter)

    def build_inventory(
        self,
        creator: str,
        location: str,
        whitelist: Optional[Sequence[str]],
        extra_filter: Optional[Dict[str, Any]] = None,
    ) -> List[ReconciledTable]:
        """Build the column-populated table inventory for a creator.

        Physical tables are resolved before aliases so that their columns
        take precedence over alias targets sharing the same name.
        """
        self._check_identity(creator, location)
        with self.datasource.open() as session:
            rows = self._table_rows(session, creator, location, whitelist, extra_filter)
            entries = [ReconciledTable.from_row(row) for row in rows]
            entries = self.reconciler.resolve_physical(
                location, whitelist, entries, session, extra_filter
            )
            entries = self.reconciler.reconcile(location, whitelist, entries, session, extra_filter)
        log = get_catalog_logger(__name__, location=location, creator=creator)
        log.info(f"Built inventory of {len(entries)} tables")
        return entries

    @staticmethod
    def group_by_database(entries: Sequence[ReconciledTable]) -> Dict[str, List[ReconciledTable]]:
        """Group inventory entries per logical database, in name order."""
        grouped: Dict[str, List[ReconciledTable]] = {}
        for entry in entries:
            grouped.setdefault(entry.database_name or "", []).append(entry)
        return {name: grouped[name] for name in sorted(grouped)}

    def _table_rows(
        self,
        session: CatalogSession,
        creator: str,
        location: str,
        whitelist: Optional[Sequence[str]],
        extra_filter: Optional[Dict[str, Any]],
    ) -> List[CatalogTableRow]:
        query = self.provider.build_table_query(
            self.provider.build_table_name_for(location),
            self.provider.build_whitelist_filter(whitelist, self.system_alias_database),
            creator,
            extra_filter,
        )
        rows = []
        for record in session.fetch_records(query):
            row = CatalogTableRow.from_record(record)
            if row.table_type is None:
                logger.debug(f"Skipping {row.name}: unrecognized type {row.type}")
                continue
            rows.append(row)
        return rows

    def _check_identity(self, creator: str, location: str) -> None:
        require("creator", creator)
        require("location", location)

    @contextmanager
    def _session(self, session: Optional[CatalogSession]) -> Iterator[CatalogSession]:
        if session is not None:
            yield session
            return
        with self.datasource.open() as opened:
            yield opened

    def __repr__(self) -> str:
        return f"SchemaCatalogEngine(datasource={self.datasource.name})"
