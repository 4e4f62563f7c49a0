"""Alias and physical column reconciliation over a table master list.

Every table name converges on one column definition. A physical table's
columns always win over columns reached through an alias; among
definitions of the same kind the first one in master-list order wins.
The merge functions never mutate their input: they return a new master
list that the caller swaps in for its own.
"""

import logging
from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Optional, Sequence, Tuple

from ..datasources.base import CatalogSession
from ..query.fragments import QueryFragmentProvider
from ..utils.logging import get_catalog_logger
from .models import CatalogColumnRow, ReconciledColumn, ReconciledTable, Resolution

logger = logging.getLogger(__name__)

Target = Tuple[str, str]
ColumnsByTarget = Dict[Target, Tuple[ReconciledColumn, ...]]


@dataclass(frozen=True)
class _Definition:
    columns: Tuple[ReconciledColumn, ...]
    resolution: Resolution


def group_columns(rows: Iterable[CatalogColumnRow]) -> ColumnsByTarget:
    """Group column rows by owning table, keeping catalog order."""
    grouped: Dict[Target, List[ReconciledColumn]] = {}
    for row in rows:
        grouped.setdefault(row.owner, []).append(ReconciledColumn.from_row(row))
    return {owner: tuple(columns) for owner, columns in grouped.items()}


def _existing_definitions(entries: Sequence[ReconciledTable]) -> Dict[str, _Definition]:
    definitions: Dict[str, _Definition] = {}
    for entry in entries:
        if not entry.columns or entry.table_type is None:
            continue
        current = definitions.get(entry.name)
        if current is None or (
            current.resolution is Resolution.ALIAS and entry.resolution is Resolution.PHYSICAL
        ):
            definitions[entry.name] = _Definition(entry.columns, entry.resolution)
    return definitions


def _should_fill(entry: ReconciledTable, definition: _Definition) -> bool:
    if entry.table_type is None:
        return False
    if not entry.columns:
        return True
    return entry.resolution is Resolution.ALIAS and definition.resolution is Resolution.PHYSICAL


def _apply(
    entries: Sequence[ReconciledTable], definitions: Dict[str, _Definition]
) -> List[ReconciledTable]:
    merged = []
    for entry in entries:
        definition = definitions.get(entry.name)
        if definition is not None and _should_fill(entry, definition):
            entry = entry.with_columns(definition.columns, definition.resolution)
        merged.append(entry)
    return merged


def merge_alias_columns(
    entries: Sequence[ReconciledTable], columns_by_target: ColumnsByTarget, log=logger
) -> List[ReconciledTable]:
    """Write alias-resolved columns onto every entry sharing the alias name.

    An alias result is discarded when its name already has columns; if a
    physical table holds them, one informational event is emitted.
    """
    definitions = _existing_definitions(entries)
    for entry in entries:
        if not entry.is_alias:
            continue
        existing = definitions.get(entry.name)
        if existing is not None:
            if existing.resolution is Resolution.PHYSICAL:
                log.info(
                    f"A physical Table with existing Columns was found in the original "
                    f"TablesResultSetMasterList for {entry.name}; it takes precedence over "
                    f"alias target {entry.owning_environment}.{entry.target_name}"
                )
            else:
                log.debug(f"{entry.name} already resolved through another alias")
            continue
        resolved = columns_by_target.get(entry.target)
        if not resolved:
            log.debug(
                f"No columns found for alias {entry.name} -> "
                f"{entry.owning_environment}.{entry.target_name}"
            )
            continue
        definitions[entry.name] = _Definition(resolved, Resolution.ALIAS)
    return _apply(entries, definitions)


def merge_physical_columns(
    entries: Sequence[ReconciledTable], columns_by_target: ColumnsByTarget, log=logger
) -> List[ReconciledTable]:
    """Write physical columns onto entries, replacing alias-resolved definitions."""
    definitions = _existing_definitions(entries)
    for entry in entries:
        if entry.is_alias or entry.table_type is None:
            continue
        existing = definitions.get(entry.name)
        if existing is not None and existing.resolution is Resolution.PHYSICAL:
            continue
        resolved = columns_by_target.get(entry.target)
        if not resolved:
            continue
        if existing is not None:
            log.info(f"Physical table {entry.owning_environment}.{entry.name} replaces alias definition")
        definitions[entry.name] = _Definition(resolved, Resolution.PHYSICAL)
    return _apply(entries, definitions)


def _targets(entries: Iterable[ReconciledTable], aliases: bool) -> List[Target]:
    targets = []
    for entry in entries:
        if entry.is_alias != aliases or entry.table_type is None:
            continue
        name, owner = entry.target
        if name and owner:
            targets.append((name, owner))
    return targets


class AliasReconciler:
    """Resolves columns for master-list entries against the columns catalog."""

    def __init__(self, provider: QueryFragmentProvider, system_alias_database: str):
        self.provider = provider
        self.system_alias_database = system_alias_database

    def reconcile(
        self,
        location: str,
        whitelist: Optional[Sequence[str]],
        entries: Sequence[ReconciledTable],
        session: CatalogSession,
        extra_filter: Optional[Dict[str, Any]] = None,
    ) -> List[ReconciledTable]:
        """Resolve alias entries through their target tables.

        Args:
            location: Catalog location to read
            whitelist: Database names the caller allows
            entries: Current master list, left untouched
            session: Open catalog session
            extra_filter: Additional equality filters on table-row fields

        Returns:
            New master list with alias columns populated
        """
        entries = list(entries)
        targets = _targets(entries, aliases=True)
        columns: ColumnsByTarget = {}
        if targets:
            query = self.provider.build_alias_column_query(
                self.provider.build_column_name_for(location),
                self.provider.build_table_name_for(location),
                targets,
                self.provider.build_whitelist_filter(whitelist, self.system_alias_database),
                extra_filter,
            )
            columns = self._fetch_columns(session, query)
        log = get_catalog_logger(__name__, location=location)
        return merge_alias_columns(entries, columns, log)

    def resolve_physical(
        self,
        location: str,
        whitelist: Optional[Sequence[str]],
        entries: Sequence[ReconciledTable],
        session: CatalogSession,
        extra_filter: Optional[Dict[str, Any]] = None,
    ) -> List[ReconciledTable]:
        """Resolve Table and Global entries keyed on their own name and creator."""
        entries = list(entries)
        targets = _targets(entries, aliases=False)
        columns: ColumnsByTarget = {}
        if targets:
            query = self.provider.build_column_detail_query(
                self.provider.build_column_name_for(location),
                self.provider.build_table_name_for(location),
                targets,
                self.provider.build_whitelist_filter(whitelist, self.system_alias_database),
                extra_filter,
            )
            columns = self._fetch_columns(session, query)
        log = get_catalog_logger(__name__, location=location)
        return merge_physical_columns(entries, columns, log)

    def _fetch_columns(self, session: CatalogSession, query) -> ColumnsByTarget:
        rows = [CatalogColumnRow.from_record(record) for record in session.fetch_records(query)]
        logger.debug(f"Fetched {len(rows)} column rows")
        return group_columns(rows)
