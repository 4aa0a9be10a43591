from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional, Tuple

from .sorting import SortState, sort_rows, strip_sort_marker
from .types import EditIntent, QueryResult


@dataclass
class Cell:
    text: str
    committed: str  # last value known to match the database

    @classmethod
    def fetched(cls, value: str) -> Cell:
        return cls(text=value, committed=value)


class ResultGrid:
    """
    Editable, sortable view model of one query result.

    `table` is the navigation context: the table the rows were browsed from,
    or None for ad-hoc query results, which cannot be edited.
    """

    def __init__(self, columns: List[str], rows: List[List[Cell]], table: Optional[str] = None):
        self.columns = list(columns)
        self.rows = rows
        self.table = table
        self.sort_state = SortState()

    @classmethod
    def from_result(cls, result: QueryResult, table: Optional[str] = None) -> ResultGrid:
        rows = [[Cell.fetched(v) for v in row] for row in result.rows]
        return cls(result.columns, rows, table=table)

    @property
    def row_count(self) -> int:
        return len(self.rows)

    @property
    def column_count(self) -> int:
        return len(self.columns)

    def header_labels(self) -> List[str]:
        """Column labels as displayed, with the sort arrow on the sorted column."""
        labels = list(self.columns)
        col = self.sort_state.column
        if col is not None and 0 <= col < len(labels):
            labels[col] = labels[col] + self.sort_state.order.marker
        return labels

    def column_names(self) -> List[str]:
        return [strip_sort_marker(label) for label in self.header_labels()]

    def cell(self, row: int, column: int) -> Cell:
        return self.rows[row][column]

    def values(self, row: int) -> Tuple[str, ...]:
        return tuple(c.text for c in self.rows[row])

    def text_rows(self) -> List[List[str]]:
        return [[c.text for c in row] for row in self.rows]

    def edit_intent(self, row: int, column: int, new_value: str) -> EditIntent:
        """
        Record a typed-in value and describe it as an EditIntent.

        The displayed text changes immediately; the reconciler reverts it if
        the UPDATE fails.
        """
        cell = self.rows[row][column]
        cell.text = new_value
        return EditIntent(
            row_index=row,
            column_index=column,
            previous_value=cell.committed,
            new_value=new_value,
            row_values=self.values(row),
        )

    def sort_by(self, column: int) -> SortState:
        if not 0 <= column < self.column_count:
            raise IndexError(f"column {column} out of range")
        self.sort_state = self.sort_state.clicked(column)
        self.rows = [list(r) for r in sort_rows(self.rows, column, self.sort_state.order, text=_cell_text)]
        return self.sort_state


def _cell_text(cell: Cell) -> str:
    return cell.text
