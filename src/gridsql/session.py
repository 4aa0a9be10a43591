"""
Single-connection session with transaction-wrapped execution.

Execution protocol (per call):
- Not open: fail with NOT_CONNECTED, nothing is sent.
- Mutations (leading UPDATE/INSERT/DELETE) are bracketed by begin and
  commit-or-rollback. A commit failure forces a rollback and turns the call
  into a failure even though the statement itself succeeded.
- Reads run without a transaction; the driver's verdict is final.
- Elapsed time is always recorded and read through last_execution_ms.

No session error is fatal: the session stays open and reusable afterwards.
"""

from __future__ import annotations

import logging
import time
import weakref
from typing import List, Optional

from . import drivers
from .drivers import DriverConnection, DriverError, DriverUnavailable
from .errors import ErrorKind, Problem
from .sql import dialects
from .sql.classify import classify_statement
from .sql.dialects import SQLDialect
from .types import ConnectionParams, ExecutionResult, StatementKind

logger = logging.getLogger(__name__)


def _problem(kind: ErrorKind, message: str, driver_message: str = "", **details) -> Problem:
    if driver_message:
        details["driver_message"] = driver_message
    return Problem(code=f"GRIDSQL_{kind.name}", kind=kind, message=message, details=details)


def _release(connection_name: str) -> None:
    """Close and unregister whatever handle a dropped Session left open."""
    conn = drivers.remove_connection(connection_name)
    if conn is None:
        return
    logger.info("Closing %s left open by a discarded session", connection_name)
    try:
        conn.close()
    except DriverError as e:
        logger.warning("Error while closing %s: %s", connection_name, e)


class Session:
    def __init__(self) -> None:
        self.connection_name = f"DBConnection-{id(self)}"
        # must not reference self, or the session would never be collected
        self._finalizer = weakref.finalize(self, _release, self.connection_name)
        self.params: Optional[ConnectionParams] = None
        self.last_error: Optional[Problem] = None
        self.last_execution_ms: float = 0.0
        self._conn: Optional[DriverConnection] = None

    def __enter__(self) -> Session:
        return self

    def __exit__(self, *exc) -> None:
        self.close()

    def __repr__(self) -> str:
        target = self.params.describe() if self.params else "-"
        state = "open" if self.is_open() else "closed"
        return f"<Session {self.connection_name} {target} {state}>"

    # ------------------------------------------------------------------ lifecycle
    @property
    def dialect(self) -> SQLDialect:
        return dialects.resolve(self.params.driver if self.params else "")

    def is_open(self) -> bool:
        return self._conn is not None

    def open(self, params: ConnectionParams) -> bool:
        if not params.is_valid():
            self.last_error = _problem(
                ErrorKind.INVALID_PARAMS,
                "Connection parameters are incomplete",
                driver=params.driver,
                host=params.host,
                port=params.port,
                database=params.database,
            )
            return False

        self.close()

        self.params = params
        dialect = dialects.resolve(params.driver)
        host = dialect.normalize_host(params.host)
        logger.info(
            "Connecting to %s port %s database %s user %s using driver %s",
            host, params.port, params.database, params.user, params.driver,
        )

        try:
            driver = drivers.get_driver(params.driver)
            conn = driver.connect(
                host=host,
                port=params.port,
                database=params.database,
                user=params.user,
                password=params.password,
                connect_timeout=dialect.connect_timeout,
            )
        except KeyError as e:
            self.last_error = _problem(
                ErrorKind.CONNECT_FAILED, "Could not connect to server", str(e.args[0]),
                driver=params.driver,
            )
        except DriverUnavailable as e:
            self.last_error = Problem(
                code="GRIDSQL_DRIVER_UNAVAILABLE",
                kind=ErrorKind.CONNECT_FAILED,
                message="Could not connect to server",
                details={"driver_message": str(e), "driver": params.driver},
            )
        except DriverError as e:
            self.last_error = _problem(ErrorKind.CONNECT_FAILED, "Could not connect to server", str(e))
        else:
            drivers.add_connection(self.connection_name, conn)
            self._conn = conn
            self.last_error = None
            return True

        logger.warning("Connection error: %s", self.last_error.driver_message)
        return False

    def close(self) -> None:
        conn, self._conn = self._conn, None
        if conn is not None:
            try:
                conn.close()
            except DriverError as e:
                logger.warning("Error while closing %s: %s", self.connection_name, e)
        drivers.remove_connection(self.connection_name)

    def switch_database(self, name: str) -> bool:
        if not self.is_open() or self.params is None:
            self.last_error = _problem(ErrorKind.NOT_CONNECTED, "Not connected")
            return False
        if self.open(self.params.with_database(name)):
            return True
        self.close()
        return False

    # ------------------------------------------------------------------ execution
    @property
    def last_execution_time(self) -> str:
        return f"{int(round(self.last_execution_ms))} ms"

    def execute(self, statement: str) -> ExecutionResult:
        kind = classify_statement(statement)
        if self._conn is None:
            self.last_execution_ms = 0.0
            return self._fail(kind, _problem(ErrorKind.NOT_CONNECTED, "Not connected"))

        conn = self._conn
        mutation = kind is StatementKind.MUTATION
        started = time.perf_counter()
        try:
            if mutation:
                try:
                    conn.begin()
                except DriverError as e:
                    return self._fail(
                        kind, _problem(ErrorKind.TRANSACTION_BEGIN_FAILED, "Failed to start transaction", str(e))
                    )

            try:
                result = conn.execute(statement)
            except DriverError as e:
                if mutation:
                    self._rollback(conn)
                return self._fail(kind, _problem(ErrorKind.STATEMENT_FAILED, "Query failed", str(e)))

            if mutation:
                try:
                    conn.commit()
                except DriverError as e:
                    self._rollback(conn)
                    return self._fail(
                        kind, _problem(ErrorKind.COMMIT_FAILED, "Failed to commit transaction", str(e))
                    )
        finally:
            self.last_execution_ms = (time.perf_counter() - started) * 1000.0

        self.last_error = None
        return ExecutionResult(ok=True, statement_kind=kind, result=result)

    def _fail(self, kind: StatementKind, problem: Problem) -> ExecutionResult:
        self.last_error = problem
        logger.warning("%s", problem.text())
        return ExecutionResult(ok=False, statement_kind=kind, problem=problem)

    def _rollback(self, conn: DriverConnection) -> None:
        try:
            conn.rollback()
        except DriverError as e:
            logger.warning("Rollback failed on %s: %s", self.connection_name, e)

    # ------------------------------------------------------------------ introspection
    def list_databases(self) -> List[str]:
        if self._conn is None:
            return []
        sql = self.dialect.database_listing_sql
        if not sql:
            return []
        try:
            result = self._conn.execute(sql)
        except DriverError as e:
            self.last_error = _problem(ErrorKind.STATEMENT_FAILED, "Could not list databases", str(e))
            logger.warning("%s", self.last_error.text())
            return []
        return [row[0] for row in result.rows if row]

    def list_tables(self) -> List[str]:
        if self._conn is None:
            return []
        try:
            return self._conn.tables()
        except DriverError as e:
            self.last_error = _problem(ErrorKind.STATEMENT_FAILED, "Could not list tables", str(e))
            logger.warning("%s", self.last_error.text())
            return []

    def browse_table(self, table: str) -> ExecutionResult:
        """SELECT * from one table, quoted for the current dialect."""
        return self.execute(f"SELECT * FROM {self.dialect.quote_ident(table)}")
