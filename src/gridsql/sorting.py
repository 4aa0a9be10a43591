"""
Client-side sort for fetched result grids.

Values are compared numerically when both sides parse as numbers (NaN is
rejected, infinities are kept), otherwise with the current locale's collation
(locale.strcoll). LC_COLLATE must be set by the application, as the CLI does;
Python starts with the "C" locale. The sort is a stable permutation of whole
rows, so any per-cell state moves with its row.
"""

from __future__ import annotations

import locale
import math
from dataclasses import dataclass
from enum import Enum
from functools import cmp_to_key
from typing import Callable, List, Optional, Sequence, TypeVar

T = TypeVar("T")

ASCENDING_MARKER = " ▲"
DESCENDING_MARKER = " ▼"


class SortOrder(str, Enum):
    ASCENDING = "ASC"
    DESCENDING = "DESC"

    @property
    def marker(self) -> str:
        return ASCENDING_MARKER if self is SortOrder.ASCENDING else DESCENDING_MARKER


@dataclass(frozen=True)
class SortState:
    """Column and direction of the last sort; owned by the grid, not global."""
    column: Optional[int] = None
    order: SortOrder = SortOrder.ASCENDING

    def clicked(self, column: int) -> SortState:
        if column == self.column:
            flipped = SortOrder.DESCENDING if self.order is SortOrder.ASCENDING else SortOrder.ASCENDING
            return SortState(column, flipped)
        return SortState(column, SortOrder.ASCENDING)


def parse_number(text: str) -> Optional[float]:
    s = text.strip()
    if not s or "_" in s:
        return None
    try:
        value = float(s)
    except ValueError:
        return None
    if math.isnan(value):
        return None
    return value


def compare_values(a: str, b: str) -> int:
    na, nb = parse_number(a), parse_number(b)
    if na is not None and nb is not None:
        return (na > nb) - (na < nb)
    return locale.strcoll(a, b)


def sort_rows(
    rows: Sequence[Sequence[T]],
    column: int,
    order: SortOrder = SortOrder.ASCENDING,
    *,
    text: Callable[[T], str] = str,
) -> List[Sequence[T]]:
    """
    Return rows reordered by one column.

    `text` extracts the comparable string from a cell (identity for plain
    string rows). Rows shorter than `column` compare as the empty string.
    """
    def value(row: Sequence[T]) -> str:
        return text(row[column]) if column < len(row) else ""

    key = cmp_to_key(lambda r1, r2: compare_values(value(r1), value(r2)))
    return sorted(rows, key=key, reverse=order is SortOrder.DESCENDING)


def strip_sort_marker(label: str) -> str:
    for marker in (ASCENDING_MARKER, DESCENDING_MARKER):
        if label.endswith(marker):
            return label[: -len(marker)]
    return label
