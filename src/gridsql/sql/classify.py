from __future__ import annotations

from typing import Tuple

from ..types import StatementKind

MUTATION_PREFIXES: Tuple[str, ...] = ("UPDATE", "INSERT", "DELETE")


def classify_statement(statement: str) -> StatementKind:
    """
    Classify by leading keyword only.

    The check is a plain prefix test on the trimmed, upper-cased text, so
    comments or a leading WITH clause make a mutation look like a read.
    """
    head = (statement or "").strip().upper()
    if head.startswith(MUTATION_PREFIXES):
        return StatementKind.MUTATION
    return StatementKind.READ


def is_mutation(statement: str) -> bool:
    return classify_statement(statement) is StatementKind.MUTATION
