"""
Turns one grid-cell edit into an UPDATE and keeps or reverts the cell.

Rows are matched by value across every column (or only `key_columns` when the
caller knows a key). Duplicate rows are all updated by the same statement;
that is the documented cost of not tracking a row identifier.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional, Sequence

from .errors import ErrorKind, Problem
from .grid import ResultGrid
from .session import Session
from .sql.dialects import SQLDialect
from .sql.emitter import emit_update, select_columns
from .sorting import strip_sort_marker
from .types import EditIntent

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class EditOutcome:
    applied: bool
    statement: Optional[str] = None   # None when nothing was sent
    problem: Optional[Problem] = None

    @property
    def message(self) -> str:
        return self.problem.text() if self.problem else ""


def build_update_statement(
    table: str,
    columns: Sequence[str],
    intent: EditIntent,
    dialect: SQLDialect,
    key_columns: Optional[Sequence[str]] = None,
) -> str:
    """
    UPDATE text for one edited cell.

    `columns` may be display labels; trailing sort arrows are stripped.
    The WHERE clause uses the pre-edit value of the edited column and the
    current values of all other columns.
    """
    names = [strip_sort_marker(c) for c in columns]
    if len(names) != len(intent.row_values):
        raise ValueError(
            f"row has {len(intent.row_values)} values but grid has {len(names)} columns"
        )
    pairs = select_columns(names, intent.where_values(), key_columns)
    return emit_update(
        dialect,
        table=table,
        set_column=names[intent.column_index],
        new_value=intent.new_value,
        where_columns=[c for c, _ in pairs],
        where_values=[v for _, v in pairs],
    )


class EditReconciler:
    def __init__(self, session: Session, key_columns: Optional[Sequence[str]] = None) -> None:
        self.session = session
        self.key_columns = list(key_columns) if key_columns else None

    def apply(self, grid: ResultGrid, row: int, column: int, new_value: str) -> EditOutcome:
        intent = grid.edit_intent(row, column, new_value)
        cell = grid.cell(row, column)

        if not grid.table:
            cell.text = cell.committed
            return EditOutcome(
                applied=False,
                problem=Problem(
                    code="GRIDSQL_NO_TARGET_TABLE",
                    kind=ErrorKind.NO_TARGET_TABLE,
                    message="No table selected; the edit cannot be saved",
                ),
            )

        try:
            statement = build_update_statement(
                grid.table, grid.header_labels(), intent, self.session.dialect, self.key_columns
            )
        except ValueError as e:
            cell.text = cell.committed
            return EditOutcome(
                applied=False,
                problem=Problem(
                    code="GRIDSQL_INVALID_EDIT",
                    kind=ErrorKind.INVALID_EDIT,
                    message="The edit cannot be turned into an UPDATE",
                    details={"driver_message": str(e), "key_columns": self.key_columns},
                ),
            )
        logger.debug("Executing query: %s", statement)

        outcome = self.session.execute(statement)
        if not outcome.ok:
            cell.text = cell.committed
            return EditOutcome(applied=False, statement=statement, problem=outcome.problem)

        cell.committed = cell.text
        return EditOutcome(applied=True, statement=statement)
