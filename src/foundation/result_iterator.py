"""
Buffered result set for one page of rows.

Rows are dict-like (mappings, namedtuples or sqlite3-style rows) and are
normalized to dicts once, at construction.
"""
from collections.abc import Iterable, Iterator
from typing import Any

import pandas as pd

from libb import attrdict

__all__ = ['ResultIterator']


def _row_to_dict(row: Any) -> dict[str, Any]:
    """Convert a row to a dictionary."""
    if isinstance(row, dict):
        return dict(row)
    if hasattr(row, '_asdict'):
        return row._asdict()
    if hasattr(row, 'keys') and callable(row.keys):
        return {key: row[key] for key in row.keys()}  # noqa: SIM118
    return dict(row)


class ResultIterator:
    """Forward iterable, fully buffered page of rows.

    `count()` is the number of rows actually buffered, which may be fewer
    than the page size that was asked for.
    """

    def __init__(self, rows: Iterable[Any] = (), columns: list[str] | None = None) -> None:
        self._rows = [_row_to_dict(row) for row in rows]
        if columns is None:
            columns = list(self._rows[0]) if self._rows else []
        self._columns = list(columns)

    def __repr__(self) -> str:
        return f'ResultIterator(count={self.count()}, columns={self._columns!r})'

    def count(self) -> int:
        return len(self._rows)

    def __len__(self) -> int:
        return self.count()

    def __iter__(self) -> Iterator[attrdict]:
        for row in self._rows:
            yield attrdict(row)

    def get_columns(self) -> list[str]:
        return list(self._columns)

    def has(self, index: int) -> bool:
        return 0 <= index < self.count()

    def get(self, index: int) -> attrdict:
        """Row at `index` (0-based). Negative indexes are not supported.
        """
        if not self.has(index):
            raise IndexError(f'Row {index} out of range, {self.count()} rows buffered')
        return attrdict(self._rows[index])

    def is_empty(self) -> bool:
        return self.count() == 0

    def is_first(self, index: int) -> bool:
        return index == 0 and not self.is_empty()

    def is_last(self, index: int) -> bool:
        return index == self.count() - 1 and not self.is_empty()

    def extract(self) -> list[dict[str, Any]]:
        """All rows as plain dicts.
        """
        return [dict(row) for row in self._rows]

    def slice(self, field: str) -> list[Any]:
        """Values of one column, in row order.
        """
        if self._rows and field not in self._columns:
            raise KeyError(f'Column {field!r} not in result, columns: {self._columns}')
        return [row[field] for row in self._rows]

    def to_dataframe(self) -> pd.DataFrame:
        """Rows as a pandas DataFrame.

        Always returns a DataFrame, never None, with columns preserved for
        empty results.
        """
        if not self._rows:
            return pd.DataFrame(columns=self._columns)
        return pd.DataFrame.from_records(self.extract(), columns=self._columns)
