"""
Comparison results.

A strategy returns EMPTY when it found nothing, a RowSet of rows that are
new in the second database, or a SetDiff of deleted and new rows.
"""

from collections.abc import Iterable
from dataclasses import dataclass
from typing import Any


class Empty:
    """No difference found. Falsy, and has no presentation form."""

    _instance = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __bool__(self) -> bool:
        return False

    def __repr__(self) -> str:
        return "EMPTY"

    def to_jsonable(self) -> None:
        return None


EMPTY = Empty()


@dataclass(frozen=True)
class RowSet:
    """Rows reported by a strategy, in fetch order."""

    rows: tuple[dict[str, Any], ...] = ()

    @classmethod
    def of(cls, rows: Iterable[dict[str, Any]]) -> "RowSet":
        return cls(rows=tuple(rows))

    @property
    def count(self) -> int:
        return len(self.rows)

    def to_jsonable(self) -> list[dict[str, Any]]:
        return [dict(row) for row in self.rows]


@dataclass(frozen=True)
class SetDiff:
    """Rows whose key disappeared from, and appeared in, the second database."""

    deleted: RowSet
    new: RowSet

    def to_jsonable(self) -> dict[str, list[dict[str, Any]]]:
        return {"deleted": self.deleted.to_jsonable(), "new": self.new.to_jsonable()}


ComparisonResult = Empty | RowSet | SetDiff


def rows_or_empty(rows: list[dict[str, Any]]) -> ComparisonResult:
    """Wrap fetched rows, mapping no rows to EMPTY."""
    return RowSet.of(rows) if rows else EMPTY
