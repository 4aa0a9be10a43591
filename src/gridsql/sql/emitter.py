"""
UPDATE emission for single-cell grid edits.

The generated statement identifies the row by value-equality across the
supplied columns, because a result grid has no notion of a primary key.
If the value combination is not unique in the table, every matching row is
updated. Values are embedded as string literals with single quotes doubled;
no other escaping is applied to values or identifiers.
"""

from __future__ import annotations

from typing import List, Optional, Sequence, Tuple

from .dialects.base import SQLDialect


def quote_literal(value: str) -> str:
    return "'" + value.replace("'", "''") + "'"


def where_conjunction(
    dialect: SQLDialect,
    columns: Sequence[str],
    values: Sequence[str],
) -> str:
    if len(columns) != len(values):
        raise ValueError(
            f"column/value count mismatch: {len(columns)} columns, {len(values)} values"
        )
    terms = [f"{dialect.quote_ident(c)} = {quote_literal(v)}" for c, v in zip(columns, values)]
    return " AND ".join(terms)


def emit_update(
    dialect: SQLDialect,
    *,
    table: str,
    set_column: str,
    new_value: str,
    where_columns: Sequence[str],
    where_values: Sequence[str],
) -> str:
    if not table:
        raise ValueError("table is required to emit an UPDATE")
    if not where_columns:
        raise ValueError("at least one WHERE column is required")
    return (
        f"UPDATE {dialect.quote_ident(table)} "
        f"SET {dialect.quote_ident(set_column)} = {quote_literal(new_value)} "
        f"WHERE {where_conjunction(dialect, where_columns, where_values)}"
    )


def select_columns(
    columns: Sequence[str],
    values: Sequence[str],
    key_columns: Optional[Sequence[str]] = None,
) -> List[Tuple[str, str]]:
    """
    Pairs (column, value) used in the WHERE clause.

    With key_columns, only those columns are kept (in grid order); unknown key
    names raise ValueError.
    """
    pairs = list(zip(columns, values))
    if not key_columns:
        return pairs
    known = set(columns)
    missing = [k for k in key_columns if k not in known]
    if missing:
        raise ValueError(f"key columns not present in the grid: {', '.join(missing)}")
    wanted = set(key_columns)
    return [(c, v) for c, v in pairs if c in wanted]
