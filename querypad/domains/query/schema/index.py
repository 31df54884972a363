"""Schema index: an immutable, versioned snapshot of table -> columns metadata."""

from __future__ import annotations

from collections.abc import Iterable, Iterator, Mapping, Sequence
from dataclasses import dataclass, field
from types import MappingProxyType


@dataclass(frozen=True)
class SchemaColumn:
    """A column known for a table."""

    table_name: str
    column_name: str


@dataclass(frozen=True)
class TableInfo:
    """Table metadata as returned by a schema loader."""

    table_name: str
    columns: tuple[str, ...] = ()

    @classmethod
    def from_dict(cls, data: Mapping[str, object]) -> TableInfo:
        """Create from a ``{"table_name": ..., "columns": [...]}`` mapping."""
        columns = data.get("columns") or ()
        return cls(
            table_name=str(data["table_name"]),
            columns=tuple(str(c) for c in columns),  # type: ignore[union-attr]
        )


@dataclass(frozen=True)
class SchemaIndex:
    """Snapshot of known tables and their columns.

    A new snapshot replaces the old one wholesale on every refresh, so readers
    holding a reference never see a half-loaded index. ``version`` increases
    with every refresh.
    """

    tables: Mapping[str, tuple[str, ...]] = field(default_factory=dict)
    table_list: tuple[str, ...] = ()
    version: int = 0

    def __post_init__(self) -> None:
        object.__setattr__(self, "tables", MappingProxyType(dict(self.tables)))

    @classmethod
    def empty(cls, version: int = 0) -> SchemaIndex:
        return cls(version=version)

    @classmethod
    def build(
        cls,
        table_infos: Iterable[TableInfo],
        table_list: Sequence[str] = (),
        version: int = 0,
    ) -> SchemaIndex:
        """Build a snapshot from loader output.

        Args:
            table_infos: Tables with their columns.
            table_list: Table names from the table lister (may include tables
                whose columns are unknown).
            version: Snapshot version.
        """
        tables: dict[str, tuple[str, ...]] = {}
        for info in table_infos:
            tables[info.table_name] = tuple(info.columns)
        return cls(tables=tables, table_list=tuple(table_list), version=version)

    @property
    def table_names(self) -> list[str]:
        """Table names from the lister, followed by any only known from columns."""
        names = list(self.table_list)
        known = set(names)
        names.extend(name for name in self.tables if name not in known)
        return names

    def columns_for(self, table_name: str) -> tuple[str, ...]:
        """Columns for a table; an unknown table yields an empty tuple."""
        return self.tables.get(table_name, ())

    def columns(self) -> Iterator[SchemaColumn]:
        for table_name, column_names in self.tables.items():
            for column_name in column_names:
                yield SchemaColumn(table_name=table_name, column_name=column_name)
