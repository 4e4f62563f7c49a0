"""Discovery of logical databases in a catalog."""

import logging
from typing import Optional, Sequence, Set

from ..datasources.base import CatalogSession
from ..query.fragments import QueryFragmentProvider
from .errors import UnknownCatalogTable
from .models import Database

logger = logging.getLogger(__name__)


class DatabaseDiscovery:
    """Enumerates the distinct databases visible to a creator at a location."""

    def __init__(self, provider: QueryFragmentProvider, system_alias_database: str):
        self.provider = provider
        self.system_alias_database = system_alias_database

    def get_databases_by_creator(
        self,
        session: CatalogSession,
        creator: str,
        location: str,
        whitelist: Optional[Sequence[str]],
    ) -> Set[Database]:
        """Find the whitelisted databases holding tables owned by a creator.

        The system alias database is always added to the whitelist so that
        alias rows stay reachable.

        Args:
            session: Open catalog session
            creator: Owning schema of the tables
            location: Catalog location to read
            whitelist: Database names the caller allows

        Returns:
            Distinct databases, empty when nothing matches
        """
        effective = self.provider.build_whitelist_filter(whitelist, self.system_alias_database)
        query = self.provider.build_database_query(
            self.provider.build_table_name_for(location), creator, effective
        )
        names = self._collect_names(session.fetch_records(query))
        logger.debug(f"Found {len(names)} databases for {creator} at {location}")
        return {Database(name=name) for name in names}

    def get_logical_database_names(
        self, session: CatalogSession, creator: str, location: str
    ) -> Set[str]:
        """Find every database holding tables owned by a creator, unfiltered."""
        query = self.provider.build_database_query(
            self.provider.build_table_name_for(location), creator
        )
        return self._collect_names(session.fetch_records(query))

    def get_row_count(self, session: CatalogSession, catalog_table_name: str) -> Optional[int]:
        """Count the rows of a catalog-exposed table.

        Returns:
            The row count, or None when the table is empty or the catalog
            does not know it. Other query failures propagate.
        """
        query = self.provider.build_row_count_query(catalog_table_name)
        try:
            records = session.fetch_records(query)
        except UnknownCatalogTable:
            logger.debug(f"Table {catalog_table_name} is not exposed by the catalog")
            return None
        if not records:
            return None
        count = records[0].get("row_count")
        if not count:
            return None
        return int(count)

    def _collect_names(self, records) -> Set[str]:
        names = set()
        for record in records:
            name = record.get("DBNAME")
            if name is None:
                continue
            names.add(str(name).strip())
        return names

