"""Data-access and edit-safety core for an interactive SQL browser."""

from .errors import ErrorKind, ExitCode, GridSQLException, Problem
from .grid import Cell, ResultGrid
from .reconciler import EditOutcome, EditReconciler, build_update_statement
from .session import Session
from .settings_store import ConnectionStore
from .sorting import SortOrder, SortState, compare_values, sort_rows
from .types import ConnectionParams, EditIntent, ExecutionResult, QueryResult, StatementKind

__version__ = "0.1.0"

__all__ = [
    "Cell",
    "ConnectionParams",
    "ConnectionStore",
    "EditIntent",
    "EditOutcome",
    "EditReconciler",
    "ErrorKind",
    "ExecutionResult",
    "ExitCode",
    "GridSQLException",
    "Problem",
    "QueryResult",
    "ResultGrid",
    "Session",
    "SortOrder",
    "SortState",
    "StatementKind",
    "build_update_statement",
    "compare_values",
    "sort_rows",
]
