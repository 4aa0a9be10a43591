from __future__ import annotations
from dataclasses import dataclass, replace
from enum import Enum
from typing import List, Optional, Tuple

from .errors import Problem


class StatementKind(str, Enum):
    READ = "READ"
    MUTATION = "MUTATION"


@dataclass(frozen=True)
class ConnectionParams:
    driver: str    # driver identifier, e.g. "mysql", "postgres"
    host: str
    port: int
    database: str
    user: str
    password: str = ""

    def is_valid(self) -> bool:
        return (
            bool(self.driver)
            and bool(self.host)
            and bool(self.database)
            and bool(self.user)
            and 0 < self.port < 65536
        )

    def with_database(self, database: str) -> ConnectionParams:
        return replace(self, database=database)

    def describe(self) -> str:
        # password deliberately left out; used in log lines
        return f"{self.driver}://{self.user}@{self.host}:{self.port}/{self.database}"


@dataclass(frozen=True)
class QueryResult:
    columns: List[str]
    rows: List[List[str]]  # each row aligned with columns by index
    rows_affected: int = -1

    @classmethod
    def empty(cls) -> QueryResult:
        return cls(columns=[], rows=[])

    def column_values(self, index: int) -> List[str]:
        return [row[index] for row in self.rows]


@dataclass(frozen=True)
class EditIntent:
    row_index: int
    column_index: int
    previous_value: str
    new_value: str
    # every cell's displayed value in the row at edit time
    row_values: Tuple[str, ...]

    def where_values(self) -> Tuple[str, ...]:
        """Row values as they are believed to exist in the table before the edit."""
        values = list(self.row_values)
        values[self.column_index] = self.previous_value
        return tuple(values)


@dataclass(frozen=True)
class ExecutionResult:
    """
    Outcome of one Session.execute call.

    Timing is not part of it; read Session.last_execution_ms after the call.
    """
    ok: bool
    statement_kind: StatementKind
    result: Optional[QueryResult] = None
    problem: Optional[Problem] = None

    @property
    def error_text(self) -> str:
        return self.problem.text() if self.problem else ""
