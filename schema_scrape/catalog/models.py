"""Catalog row and reconciled inventory records."""

from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Any, Callable, Dict, Optional, Tuple


class TableType(Enum):
    """Catalog entry types that take part in discovery and reconciliation."""

    ALIAS = "A"
    TABLE = "T"
    GLOBAL = "G"

    @classmethod
    def parse(cls, code: Optional[str]) -> Optional["TableType"]:
        """Map a raw catalog TYPE code to a TableType, None if unrecognized."""
        if code is None:
            return None
        code = code.strip().upper()
        for member in cls:
            if member.value == code:
                return member
        return None

    @classmethod
    def codes(cls) -> Tuple[str, ...]:
        return tuple(member.value for member in cls)

    @classmethod
    def physical_codes(cls) -> Tuple[str, ...]:
        return (cls.TABLE.value, cls.GLOBAL.value)


class Resolution(Enum):
    """How a table name got its columns."""

    UNRESOLVED = "unresolved"
    PHYSICAL = "physical"
    ALIAS = "alias"


def _optional_int(value: Any) -> Optional[int]:
    if value is None or value == "":
        return None
    return int(value)


def _optional_str(value: Any) -> Optional[str]:
    if value is None:
        return None
    return str(value).strip()


# (field name, catalog column, converter)
FieldMapping = Tuple[str, str, Callable[[Any], Any]]

TABLE_ROW_COLUMNS: Tuple[FieldMapping, ...] = (
    ("name", "NAME", _optional_str),
    ("database_name", "DBNAME", _optional_str),
    ("type", "TYPE", _optional_str),
    ("creator", "CREATOR", _optional_str),
    ("target_creator", "TBCREATOR", _optional_str),
    ("location", "LOCATION", _optional_str),
    ("target_name", "TBNAME", _optional_str),
)

COLUMN_ROW_COLUMNS: Tuple[FieldMapping, ...] = (
    ("name", "NAME", _optional_str),
    ("owning_table_name", "TBNAME", _optional_str),
    ("owning_table_creator", "TBCREATOR", _optional_str),
    ("ordinal", "COLNO", _optional_int),
    ("key_sequence", "KEYSEQ", _optional_int),
    ("length", "LENGTH", _optional_int),
    ("type_code", "COLTYPE", _optional_str),
    ("nullable", "NULLS", _optional_str),
    ("default", "DEFAULT", _optional_str),
    ("scale", "SCALE", _optional_int),
)


def catalog_column_for(mapping: Tuple[FieldMapping, ...], field_name: str) -> str:
    """Look up the catalog column backing a record field.

    Raises:
        ValueError: If the field is not part of the mapping
    """
    for name, column, _ in mapping:
        if name == field_name:
            return column
    known = ", ".join(name for name, _, _ in mapping)
    raise ValueError(f"Unknown catalog field '{field_name}' (expected one of: {known})")


def _map_record(mapping: Tuple[FieldMapping, ...], record: Dict[str, Any]) -> Dict[str, Any]:
    values = {}
    for name, column, convert in mapping:
        values[name] = convert(record.get(column))
    return values


@dataclass(frozen=True)
class CatalogTableRow:
    """One SYSTABLES entry as returned by the catalog."""

    name: str
    database_name: Optional[str]
    type: Optional[str]
    creator: Optional[str]
    target_creator: Optional[str] = None
    location: Optional[str] = None
    target_name: Optional[str] = None

    @classmethod
    def from_record(cls, record: Dict[str, Any]) -> "CatalogTableRow":
        return cls(**_map_record(TABLE_ROW_COLUMNS, record))

    @property
    def table_type(self) -> Optional[TableType]:
        return TableType.parse(self.type)


@dataclass(frozen=True)
class CatalogColumnRow:
    """One SYSCOLUMNS entry as returned by the catalog."""

    name: str
    owning_table_name: str
    owning_table_creator: str
    ordinal: Optional[int] = None
    key_sequence: Optional[int] = None
    length: Optional[int] = None
    type_code: Optional[str] = None
    nullable: Optional[str] = None
    default: Optional[str] = None
    scale: Optional[int] = None

    @classmethod
    def from_record(cls, record: Dict[str, Any]) -> "CatalogColumnRow":
        return cls(**_map_record(COLUMN_ROW_COLUMNS, record))

    @property
    def owner(self) -> Tuple[str, str]:
        return (self.owning_table_name, self.owning_table_creator)


@dataclass(frozen=True)
class Database:
    """A logical database discovered in the catalog."""

    name: str

    def __repr__(self) -> str:
        return f"Database({self.name})"


@dataclass(frozen=True)
class ReconciledColumn:
    """Column definition attached to a reconciled table."""

    name: str
    ordinal: Optional[int] = None
    key_sequence: Optional[int] = None
    length: Optional[int] = None
    type_code: Optional[str] = None
    nullable: Optional[str] = None
    default: Optional[str] = None
    scale: Optional[int] = None

    @classmethod
    def from_row(cls, row: CatalogColumnRow) -> "ReconciledColumn":
        return cls(
            name=row.name,
            ordinal=row.ordinal,
            key_sequence=row.key_sequence,
            length=row.length,
            type_code=row.type_code,
            nullable=row.nullable,
            default=row.default,
            scale=row.scale,
        )

    def __repr__(self) -> str:
        return f"ReconciledColumn({self.name}, {self.type_code})"


@dataclass(frozen=True)
class ReconciledTable:
    """Master-list entry for one catalog table, alias or physical.

    ``owning_environment`` is the creator that owns the columns: the alias
    target creator for aliases, the row creator for physical tables.
    Entries built with columns but without an explicit resolution are
    treated as already resolved, by alias or physically depending on type.
    Entries of unrecognized types stay unresolved and never take part in
    reconciliation.
    """

    type: str
    name: str
    location: Optional[str] = None
    target_name: Optional[str] = None
    owning_environment: Optional[str] = None
    database_name: Optional[str] = None
    columns: Tuple[ReconciledColumn, ...] = field(default_factory=tuple)
    resolution: Resolution = Resolution.UNRESOLVED

    def __post_init__(self):
        if not isinstance(self.columns, tuple):
            object.__setattr__(self, "columns", tuple(self.columns))
        if (
            self.columns
            and self.resolution is Resolution.UNRESOLVED
            and self.table_type is not None
        ):
            inferred = Resolution.ALIAS if self.is_alias else Resolution.PHYSICAL
            object.__setattr__(self, "resolution", inferred)

    @classmethod
    def from_row(cls, row: CatalogTableRow) -> "ReconciledTable":
        """Build an unresolved entry from a raw catalog row."""
        if row.table_type is TableType.ALIAS:
            target_name = row.target_name
            owner = row.target_creator
        else:
            target_name = row.name
            owner = row.creator
        return cls(
            type=row.type,
            name=row.name,
            location=row.location,
            target_name=target_name,
            owning_environment=owner,
            database_name=row.database_name,
        )

    @property
    def table_type(self) -> Optional[TableType]:
        return TableType.parse(self.type)

    @property
    def is_alias(self) -> bool:
        return self.table_type is TableType.ALIAS

    @property
    def target(self) -> Tuple[Optional[str], Optional[str]]:
        """Identity of the table that owns this entry's columns."""
        return (self.target_name, self.owning_environment)

    def with_columns(
        self, columns: Tuple[ReconciledColumn, ...], resolution: Resolution
    ) -> "ReconciledTable":
        return replace(self, columns=tuple(columns), resolution=resolution)

    def __repr__(self) -> str:
        return f"ReconciledTable({self.type}:{self.name}, cols={len(self.columns)})"
