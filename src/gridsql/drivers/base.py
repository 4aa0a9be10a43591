from __future__ import annotations

from typing import Any, List, Optional, Protocol, Tuple, Type

from ..types import QueryResult


class DriverError(Exception):
    """A DB-API error raised by a driver; str() is the driver's own message."""


class DriverUnavailable(DriverError):
    """The module backing a driver cannot be imported."""


def render_value(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, (bytes, bytearray, memoryview)):
        return bytes(value).decode("utf-8", errors="replace")
    return str(value)


class DriverConnection(Protocol):
    def begin(self) -> None: ...
    def commit(self) -> None: ...
    def rollback(self) -> None: ...
    def execute(self, statement: str) -> QueryResult: ...
    def tables(self) -> List[str]: ...
    def close(self) -> None: ...


class Driver(Protocol):
    name: str
    module: str  # importable module backing the driver, checked by available_drivers()

    def connect(
        self,
        *,
        host: str,
        port: int,
        database: str,
        user: str,
        password: str,
        connect_timeout: Optional[int] = None,
    ) -> DriverConnection: ...


class DBAPIConnection:
    """
    DriverConnection over a DB-API 2.0 connection kept in autocommit mode.

    Reads run outside any transaction; begin() opens one explicitly and
    commit()/rollback() return the connection to autocommit.
    Subclasses provide the transaction calls and the catalog query.
    """

    tables_sql = ""

    def __init__(self, raw: Any, error_types: Tuple[Type[BaseException], ...]) -> None:
        self._raw = raw
        self._errors = error_types

    def begin(self) -> None:
        self._guard(self._begin)

    def commit(self) -> None:
        self._guard(self._commit)

    def rollback(self) -> None:
        self._guard(self._rollback)

    def close(self) -> None:
        self._guard(self._raw.close)

    def execute(self, statement: str) -> QueryResult:
        try:
            cursor = self._raw.cursor()
            try:
                cursor.execute(statement)
                if cursor.description is None:
                    return QueryResult(columns=[], rows=[], rows_affected=cursor.rowcount)
                columns = [str(d[0]) for d in cursor.description]
                rows = [[render_value(v) for v in row] for row in cursor.fetchall()]
                return QueryResult(columns=columns, rows=rows, rows_affected=cursor.rowcount)
            finally:
                cursor.close()
        except self._errors as e:
            raise DriverError(str(e).strip()) from e

    def tables(self) -> List[str]:
        return [row[0] for row in self.execute(self.tables_sql).rows]

    def _guard(self, fn) -> None:
        try:
            fn()
        except self._errors as e:
            raise DriverError(str(e).strip()) from e

    def _begin(self) -> None:
        raise NotImplementedError

    def _commit(self) -> None:
        self._raw.commit()

    def _rollback(self) -> None:
        self._raw.rollback()
