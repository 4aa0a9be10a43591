from __future__ import annotations

from typing import Any, Optional

from .base import DBAPIConnection, DriverError, DriverUnavailable
from .registry import register_driver


class PostgresConnection(DBAPIConnection):
    tables_sql = (
        "SELECT table_name FROM information_schema.tables "
        "WHERE table_schema NOT IN ('pg_catalog', 'information_schema') "
        "AND table_type = 'BASE TABLE' "
        "ORDER BY table_name"
    )

    # psycopg2 opens the transaction implicitly on the next statement once
    # autocommit is off.
    def _begin(self) -> None:
        self._raw.autocommit = False

    def _commit(self) -> None:
        self._raw.commit()
        self._raw.autocommit = True

    def _rollback(self) -> None:
        self._raw.rollback()
        self._raw.autocommit = True


class PostgresDriver:
    name = "postgres"
    module = "psycopg2"

    def connect(
        self,
        *,
        host: str,
        port: int,
        database: str,
        user: str,
        password: str,
        connect_timeout: Optional[int] = None,
    ) -> PostgresConnection:
        try:
            import psycopg2
        except ImportError as exc:
            raise DriverUnavailable(
                "psycopg2 is required for PostgreSQL: pip install psycopg2-binary"
            ) from exc

        kwargs: dict[str, Any] = dict(host=host, port=port, dbname=database, user=user, password=password)
        if connect_timeout is not None:
            kwargs["connect_timeout"] = connect_timeout
        try:
            raw = psycopg2.connect(**kwargs)
            raw.autocommit = True
        except psycopg2.Error as e:
            raise DriverError(str(e).strip()) from e
        return PostgresConnection(raw, (psycopg2.Error,))


register_driver(PostgresDriver())
