import sqlite3
from typing import List, Optional

import pytest

from gridsql.drivers import DBAPIConnection, DriverError, get_driver, register_driver, unregister_driver
from gridsql.types import ConnectionParams


class SQLiteTestConnection(DBAPIConnection):
    tables_sql = "SELECT name FROM sqlite_master WHERE type = 'table' ORDER BY name"

    def __init__(self, raw, driver: "SQLiteTestDriver") -> None:
        super().__init__(raw, (sqlite3.Error,))
        self.driver = driver

    def execute(self, statement):
        self.driver.events.append(("execute", statement))
        return super().execute(statement)

    def close(self) -> None:
        self.driver.events.append("close")
        super().close()

    def _begin(self) -> None:
        if self.driver.fail_begin:
            raise sqlite3.OperationalError("cannot start a transaction within a transaction")
        self.driver.events.append("begin")
        self._raw.execute("BEGIN")

    def _commit(self) -> None:
        self.driver.events.append("commit")
        if self.driver.fail_commit:
            raise sqlite3.OperationalError("disk I/O error")
        self._raw.execute("COMMIT")

    def _rollback(self) -> None:
        self.driver.events.append("rollback")
        self._raw.execute("ROLLBACK")


class SQLiteTestDriver:
    """In-memory sqlite3 databases shared across connections, with failure switches."""

    module = "sqlite3"

    def __init__(self, name: str = "sqlitetest") -> None:
        self.name = name
        self.events: List[object] = []
        self.connect_calls: List[dict] = []
        self.fail_begin = False
        self.fail_commit = False
        self.fail_connect: Optional[str] = None
        self._anchors = {}

    def _uri(self, database: str) -> str:
        return f"file:gridsql_{id(self)}_{database}?mode=memory&cache=shared"

    def connect(self, *, host, port, database, user, password, connect_timeout=None):
        self.connect_calls.append(
            dict(host=host, port=port, database=database, user=user, connect_timeout=connect_timeout)
        )
        if self.fail_connect:
            raise DriverError(self.fail_connect)
        uri = self._uri(database)
        if database not in self._anchors:
            # keeps the shared in-memory database alive between sessions
            self._anchors[database] = sqlite3.connect(uri, uri=True)
        raw = sqlite3.connect(uri, uri=True, isolation_level=None)
        return SQLiteTestConnection(raw, self)

    def seed(self, database: str, script: str) -> None:
        if database not in self._anchors:
            self._anchors[database] = sqlite3.connect(self._uri(database), uri=True)
        conn = self._anchors[database]
        conn.executescript(script)
        conn.commit()

    def query(self, database: str, sql: str) -> list:
        return self._anchors[database].execute(sql).fetchall()

    def statements(self) -> List[str]:
        return [e[1] for e in self.events if isinstance(e, tuple)]

    def close_anchors(self) -> None:
        for conn in self._anchors.values():
            conn.close()
        self._anchors.clear()


@pytest.fixture
def install_driver():
    installed = []

    def _install(name: str = "sqlitetest") -> SQLiteTestDriver:
        try:
            previous = get_driver(name)
        except KeyError:
            previous = None
        d = SQLiteTestDriver(name)
        register_driver(d)
        installed.append((d, previous))
        return d

    yield _install

    for d, previous in reversed(installed):
        if previous is not None and previous.name.lower() == d.name.lower():
            register_driver(previous)
        else:
            unregister_driver(d.name)
        d.close_anchors()


@pytest.fixture
def driver(install_driver) -> SQLiteTestDriver:
    return install_driver()


def make_params(**overrides) -> ConnectionParams:
    defaults = dict(
        driver="sqlitetest",
        host="db.local",
        port=3306,
        database="main",
        user="app",
        password="secret",
    )
    defaults.update(overrides)
    return ConnectionParams(**defaults)
