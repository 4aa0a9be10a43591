from __future__ import annotations

from dataclasses import dataclass, asdict, field
from enum import Enum
from typing import Any, Dict, Optional


class ExitCode(int, Enum):
    OK = 0
    CONFIG_INVALID = 10
    CONNECT_FAILED = 20
    QUERY_FAILED = 30
    DEPENDENCY_ERROR = 40
    INTERNAL_ERROR = 50


class ErrorKind(str, Enum):
    INVALID_PARAMS = "invalid_params"
    CONNECT_FAILED = "connect_failed"
    NOT_CONNECTED = "not_connected"
    TRANSACTION_BEGIN_FAILED = "transaction_begin_failed"
    STATEMENT_FAILED = "statement_failed"
    COMMIT_FAILED = "commit_failed"
    NO_TARGET_TABLE = "no_target_table"
    INVALID_EDIT = "invalid_edit"
    CONFIG = "config"


@dataclass(frozen=True)
class Problem:
    code: str                 # stable machine code, e.g. "GRIDSQL_COMMIT_FAILED"
    kind: ErrorKind
    message: str              # short human message
    details: Dict[str, Any] = field(default_factory=dict)  # driver_message etc.

    @property
    def driver_message(self) -> str:
        return str(self.details.get("driver_message") or "")

    def text(self) -> str:
        """Message suitable for a status bar or a message box."""
        if self.driver_message:
            return f"{self.message}: {self.driver_message}"
        return self.message


class GridSQLException(Exception):
    def __init__(
        self,
        problem: Problem,
        exit_code: ExitCode,
        *,
        cause: Optional[BaseException] = None,
    ) -> None:
        super().__init__(problem.message)
        self.problem = problem
        self.exit_code = exit_code
        self.__cause__ = cause


def problem_to_dict(p: Problem) -> Dict[str, Any]:
    d = asdict(p)
    d["kind"] = p.kind.value
    return d


def config_problem(code: str, message: str, **details: Any) -> Problem:
    return Problem(code=code, kind=ErrorKind.CONFIG, message=message, details=details)
