"""Table descriptor produced by schema introspection."""

from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field, replace
from types import MappingProxyType
from typing import Any


@dataclass(frozen=True)
class TableDescriptor:
    """
    One candidate table and the metadata requested for it.

    Attributes:
        table_name: Table name as stored in the catalog
        column_count: Number of columns, when includeColumnCount is set
        has_columns: Column name to presence, one entry per hasColumns name
        column_names: Sorted column names, when includeColumnNames is set
    """

    table_name: str
    column_count: int | None = None
    has_columns: Mapping[str, bool] = field(default_factory=lambda: MappingProxyType({}))
    column_names: tuple[str, ...] | None = None

    @classmethod
    def from_row(cls, row: Mapping[str, Any], checked_columns: Iterable[str] = ()) -> "TableDescriptor":
        """
        Build a descriptor from a catalog query row.

        A NULL has_<col> value (no matching LEFT JOIN row) means the column is absent.
        """
        column_count = row.get("column_count")
        return cls(
            table_name=row["table_name"],
            column_count=None if "column_count" not in row else int(column_count or 0),
            has_columns=MappingProxyType({name: row.get(f"has_{name}") is not None for name in checked_columns}),
        )

    def has(self, column: str) -> bool | None:
        """Whether a checked column exists; None when the column was not checked."""
        return self.has_columns.get(column)

    def with_column_names(self, names: Iterable[str]) -> "TableDescriptor":
        return replace(self, column_names=tuple(names))

    def to_dict(self) -> dict[str, Any]:
        """Flat row shape: table_name, column_count, has_<col>..., column_names."""
        data: dict[str, Any] = {"table_name": self.table_name}
        if self.column_count is not None:
            data["column_count"] = self.column_count
        for column, present in self.has_columns.items():
            data[f"has_{column}"] = present
        if self.column_names is not None:
            data["column_names"] = list(self.column_names)
        return data
