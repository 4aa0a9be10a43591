from __future__ import annotations

from typing import Any, Optional

from .base import DBAPIConnection, DriverError, DriverUnavailable
from .registry import register_driver


class MySQLConnection(DBAPIConnection):
    tables_sql = "SHOW TABLES"

    def _begin(self) -> None:
        self._raw.start_transaction()


class MySQLDriver:
    name = "mysql"
    module = "mysql.connector"

    def connect(
        self,
        *,
        host: str,
        port: int,
        database: str,
        user: str,
        password: str,
        connect_timeout: Optional[int] = None,
    ) -> MySQLConnection:
        try:
            import mysql.connector
        except ImportError as exc:
            raise DriverUnavailable(
                "mysql-connector-python is required for MySQL: pip install mysql-connector-python"
            ) from exc

        kwargs: dict[str, Any] = dict(host=host, port=port, database=database, user=user, password=password)
        if connect_timeout is not None:
            kwargs["connection_timeout"] = connect_timeout
        try:
            raw = mysql.connector.connect(**kwargs)
            raw.autocommit = True
        except mysql.connector.Error as e:
            raise DriverError(str(e).strip()) from e
        return MySQLConnection(raw, (mysql.connector.Error,))


register_driver(MySQLDriver())
