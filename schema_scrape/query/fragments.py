"""Query text builders for the SYSTABLES and SYSCOLUMNS catalog areas.

Statements are assembled as SQLAlchemy Core expressions and compiled to
positional query text plus an ordered parameter tuple, so every catalog
connector can execute them with its own DB-API driver.
"""

import re
from dataclasses import dataclass
from typing import Any, Dict, Iterable, Optional, Sequence, Tuple

from sqlalchemy import and_, bindparam, column, func, literal_column, or_, select, table
from sqlalchemy.dialects.postgresql.base import PGDialect
from sqlalchemy.sql.elements import quoted_name

from ..catalog.models import (
    COLUMN_ROW_COLUMNS,
    TABLE_ROW_COLUMNS,
    TableType,
    catalog_column_for,
)

DEFAULT_SYSTEM_ALIAS_DATABASE = "DSNDB06"
DEFAULT_TABLES_TEMPLATE = "{location}.SYSIBM.SYSTABLES"
DEFAULT_COLUMNS_TEMPLATE = "{location}.SYSIBM.SYSCOLUMNS"

SUPPORTED_PARAMSTYLES = ("qmark", "format")

_IDENTIFIER_PART = r"[A-Za-z_#$@][A-Za-z0-9_#$@]*"
_IDENTIFIER = re.compile(rf"^{_IDENTIFIER_PART}(\.{_IDENTIFIER_PART}){{0,2}}$")

Target = Tuple[str, str]


@dataclass(frozen=True)
class CatalogQuery:
    """Ready-to-execute query text with positional parameters."""

    sql: str
    parameters: Tuple[Any, ...] = ()


def validate_identifier(identifier: str) -> str:
    """Check that a catalog table identifier is safe to emit unquoted.

    Raises:
        ValueError: If the identifier is not one to three plain name parts
    """
    if not identifier or not _IDENTIFIER.match(identifier):
        raise ValueError(f"Invalid catalog table identifier: {identifier!r}")
    return identifier


def _catalog_table(identifier: str, mapping, alias_name: Optional[str] = None):
    columns = [column(catalog_column) for _, catalog_column, _ in mapping]
    clause = table(quoted_name(validate_identifier(identifier), quote=False), *columns)
    if alias_name:
        return clause.alias(alias_name)
    return clause


def _in_list(catalog_column, values: Iterable[Any]):
    binds = [bindparam(None, value, unique=True) for value in values]
    return catalog_column.in_(binds)


class QueryFragmentProvider:
    """Builds catalog queries for a location and a connector paramstyle."""

    def __init__(
        self,
        tables_template: str = DEFAULT_TABLES_TEMPLATE,
        columns_template: str = DEFAULT_COLUMNS_TEMPLATE,
        paramstyle: str = "qmark",
    ):
        """Initialize the provider.

        Args:
            tables_template: Identifier of the tables catalog, may contain {location}
            columns_template: Identifier of the columns catalog, may contain {location}
            paramstyle: DB-API paramstyle of the executing connector
        """
        if paramstyle not in SUPPORTED_PARAMSTYLES:
            raise ValueError(f"Unsupported paramstyle: {paramstyle}")
        self.tables_template = tables_template
        self.columns_template = columns_template
        self.paramstyle = paramstyle
        self.dialect = PGDialect(paramstyle=paramstyle)

    def build_table_name_for(self, location: str) -> str:
        """Identifier of the tables catalog for a location."""
        return validate_identifier(self.tables_template.format(location=location))

    def build_column_name_for(self, location: str) -> str:
        """Identifier of the columns catalog for a location."""
        return validate_identifier(self.columns_template.format(location=location))

    def build_whitelist_filter(
        self, names: Optional[Sequence[str]], system_alias_database: str
    ) -> Tuple[str, ...]:
        """Effective whitelist: the caller's names plus the alias catalog database."""
        effective = list(names or [])
        effective.append(system_alias_database)
        return tuple(effective)

    def build_table_query(
        self,
        table_identifier: str,
        whitelist: Sequence[str],
        creator: Optional[str] = None,
        extra_filter: Optional[Dict[str, Any]] = None,
    ) -> CatalogQuery:
        """Select every recognized table row inside the whitelist."""
        t = _catalog_table(table_identifier, TABLE_ROW_COLUMNS, "t")
        conditions = [
            _in_list(t.c.TYPE, TableType.codes()),
            _in_list(t.c.DBNAME, whitelist),
        ]
        if creator is not None:
            conditions.append(t.c.CREATOR == creator)
        conditions.extend(self._extra_filter_clauses(t, extra_filter))

        statement = (
            select(*t.c)
            .where(and_(*conditions))
            .order_by(t.c.DBNAME, t.c.NAME, t.c.CREATOR)
        )
        return self._render(statement)

    def build_database_query(
        self,
        table_identifier: str,
        creator: str,
        whitelist: Optional[Sequence[str]] = None,
    ) -> CatalogQuery:
        """Select distinct database names for a creator, optionally whitelisted."""
        t = _catalog_table(table_identifier, TABLE_ROW_COLUMNS, "t")
        conditions = [
            t.c.CREATOR == creator,
            _in_list(t.c.TYPE, TableType.codes()),
        ]
        if whitelist is not None:
            conditions.append(_in_list(t.c.DBNAME, whitelist))

        statement = (
            select(t.c.DBNAME)
            .distinct()
            .where(and_(*conditions))
            .order_by(t.c.DBNAME)
        )
        return self._render(statement)

    def build_alias_column_query(
        self,
        column_table_identifier: str,
        table_identifier: str,
        targets: Sequence[Target],
        whitelist: Sequence[str],
        extra_filter: Optional[Dict[str, Any]] = None,
    ) -> CatalogQuery:
        """Select the columns of alias targets reachable through whitelisted aliases."""
        return self._column_query(
            column_table_identifier,
            table_identifier,
            targets,
            whitelist,
            extra_filter,
            types=(TableType.ALIAS.value,),
            name_column="TBNAME",
            creator_column="TBCREATOR",
        )

    def build_column_detail_query(
        self,
        column_table_identifier: str,
        table_identifier: str,
        targets: Sequence[Target],
        whitelist: Sequence[str],
        extra_filter: Optional[Dict[str, Any]] = None,
    ) -> CatalogQuery:
        """Select the columns of physical tables keyed on their own name and creator."""
        return self._column_query(
            column_table_identifier,
            table_identifier,
            targets,
            whitelist,
            extra_filter,
            types=TableType.physical_codes(),
            name_column="NAME",
            creator_column="CREATOR",
        )

    def build_row_count_query(self, table_identifier: str) -> CatalogQuery:
        """Count the rows of an arbitrary catalog-exposed table."""
        target = _catalog_table(table_identifier, ())
        statement = select(func.count().label("row_count")).select_from(target)
        return self._render(statement)

    def _column_query(
        self,
        column_table_identifier: str,
        table_identifier: str,
        targets: Sequence[Target],
        whitelist: Sequence[str],
        extra_filter: Optional[Dict[str, Any]],
        types: Sequence[str],
        name_column: str,
        creator_column: str,
    ) -> CatalogQuery:
        c = _catalog_table(column_table_identifier, COLUMN_ROW_COLUMNS, "c")
        t = _catalog_table(table_identifier, TABLE_ROW_COLUMNS, "t")

        # one (TBNAME, TBCREATOR) pair per target, never the cross product
        target_pairs = or_(
            *[
                and_(
                    c.c.TBNAME == bindparam(None, name, unique=True),
                    c.c.TBCREATOR == bindparam(None, creator, unique=True),
                )
                for name, creator in sorted(set(targets))
            ]
        )

        owner_conditions = [
            _in_list(t.c.TYPE, types),
            t.c[name_column] == c.c.TBNAME,
            t.c[creator_column] == c.c.TBCREATOR,
            _in_list(t.c.DBNAME, whitelist),
        ]
        owner_conditions.extend(self._extra_filter_clauses(t, extra_filter))
        owner_exists = (
            select(literal_column("1")).select_from(t).where(and_(*owner_conditions)).exists()
        )

        statement = (
            select(*c.c)
            .where(and_(target_pairs, owner_exists))
            .order_by(c.c.TBCREATOR, c.c.TBNAME, c.c.COLNO, c.c.NAME)
        )
        return self._render(statement)

    def _extra_filter_clauses(self, catalog_table, extra_filter: Optional[Dict[str, Any]]):
        clauses = []
        if not extra_filter:
            return clauses
        for field_name in sorted(extra_filter):
            catalog_column = catalog_column_for(TABLE_ROW_COLUMNS, field_name)
            value = extra_filter[field_name]
            clauses.append(catalog_table.c[catalog_column] == bindparam(None, value, unique=True))
        return clauses

    def _render(self, statement) -> CatalogQuery:
        compiled = statement.compile(dialect=self.dialect)
        params = compiled.params
        parameters = tuple(params[name] for name in compiled.positiontup)
        return CatalogQuery(sql=str(compiled), parameters=parameters)
