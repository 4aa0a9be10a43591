import sqlite3
import sys
import types

import pytest

from gridsql import drivers
from gridsql.drivers import DBAPIConnection, DriverError, DriverUnavailable, render_value
from gridsql.drivers.mysql import MySQLConnection, MySQLDriver
from gridsql.drivers.postgres import PostgresConnection, PostgresDriver


class FakeError(Exception):
    pass


class FakeCursor:
    def __init__(self, raw):
        self.raw = raw
        self.description = None
        self.rowcount = -1

    def execute(self, statement):
        self.raw.statements.append(statement)
        self.description = [("table_name",)]

    def fetchall(self):
        return self.raw.rows

    def close(self):
        pass


class FakeRaw:
    def __init__(self, **kwargs):
        self.kwargs = kwargs
        self.autocommit = False
        self.calls = []
        self.statements = []
        self.rows = []

    def cursor(self):
        return FakeCursor(self)

    def start_transaction(self):
        self.calls.append("start_transaction")

    def commit(self):
        self.calls.append(("commit", self.autocommit))

    def rollback(self):
        self.calls.append(("rollback", self.autocommit))

    def close(self):
        self.calls.append("close")


def _fake_mysql(monkeypatch, fail=None):
    connector = types.ModuleType("mysql.connector")
    connector.Error = FakeError

    def connect(**kwargs):
        if fail:
            raise FakeError(fail)
        return FakeRaw(**kwargs)

    connector.connect = connect
    package = types.ModuleType("mysql")
    package.connector = connector
    monkeypatch.setitem(sys.modules, "mysql", package)
    monkeypatch.setitem(sys.modules, "mysql.connector", connector)


def _fake_psycopg2(monkeypatch):
    module = types.ModuleType("psycopg2")
    module.Error = FakeError
    module.connect = lambda **kwargs: FakeRaw(**kwargs)
    monkeypatch.setitem(sys.modules, "psycopg2", module)


def test_render_value():
    assert render_value(None) == ""
    assert render_value(42) == "42"
    assert render_value(b"caf\xc3\xa9") == "café"
    assert render_value(b"\xff") == "�"


def test_builtin_drivers_registered():
    assert isinstance(drivers.get_driver("mysql"), MySQLDriver)
    assert isinstance(drivers.get_driver("QPSQL"), PostgresDriver)


def test_unknown_driver():
    with pytest.raises(KeyError, match="Unknown driver 'oracle'"):
        drivers.get_driver("oracle")


def test_mysql_connect_arguments(monkeypatch):
    _fake_mysql(monkeypatch)
    conn = MySQLDriver().connect(
        host="127.0.0.1", port=3306, database="shop", user="app", password="pw", connect_timeout=20
    )
    assert isinstance(conn, MySQLConnection)
    assert conn._raw.kwargs == dict(
        host="127.0.0.1", port=3306, database="shop", user="app", password="pw", connection_timeout=20
    )
    assert conn._raw.autocommit is True
    conn.begin()
    assert conn._raw.calls == ["start_transaction"]


def test_mysql_connect_error_keeps_driver_message(monkeypatch):
    _fake_mysql(monkeypatch, fail="Access denied for user 'app'@'localhost'\n")
    with pytest.raises(DriverError) as exc:
        MySQLDriver().connect(host="h", port=3306, database="d", user="app", password="")
    assert str(exc.value) == "Access denied for user 'app'@'localhost'"


def test_mysql_missing_module(monkeypatch):
    monkeypatch.setitem(sys.modules, "mysql", None)
    monkeypatch.setitem(sys.modules, "mysql.connector", None)
    with pytest.raises(DriverUnavailable, match="mysql-connector-python"):
        MySQLDriver().connect(host="h", port=3306, database="d", user="u", password="")


def test_postgres_connect_arguments(monkeypatch):
    _fake_psycopg2(monkeypatch)
    conn = PostgresDriver().connect(host="localhost", port=5432, database="shop", user="app", password="pw")
    assert isinstance(conn, PostgresConnection)
    assert conn._raw.kwargs == dict(host="localhost", port=5432, dbname="shop", user="app", password="pw")
    assert conn._raw.autocommit is True


def test_postgres_transaction_restores_autocommit(monkeypatch):
    _fake_psycopg2(monkeypatch)
    conn = PostgresDriver().connect(host="h", port=5432, database="d", user="u", password="")
    conn.begin()
    assert conn._raw.autocommit is False
    conn.commit()
    assert conn._raw.autocommit is True
    conn.begin()
    conn.rollback()
    assert conn._raw.calls == [("commit", False), ("rollback", False)]
    assert conn._raw.autocommit is True


def test_postgres_missing_module(monkeypatch):
    monkeypatch.setitem(sys.modules, "psycopg2", None)
    with pytest.raises(DriverUnavailable, match="psycopg2-binary"):
        PostgresDriver().connect(host="h", port=5432, database="d", user="u", password="")


class _SQLiteConnection(DBAPIConnection):
    tables_sql = "SELECT name FROM sqlite_master WHERE type = 'table' ORDER BY name"


def test_dbapi_connection_execute_and_errors():
    conn = _SQLiteConnection(sqlite3.connect(":memory:", isolation_level=None), (sqlite3.Error,))
    done = conn.execute("CREATE TABLE t (a INTEGER, b BLOB)")
    assert done.columns == [] and done.rows == []
    conn.execute("INSERT INTO t VALUES (1, NULL)")
    res = conn.execute("SELECT a, b FROM t")
    assert res.columns == ["a", "b"]
    assert res.rows == [["1", ""]]
    assert conn.tables() == ["t"]
    with pytest.raises(DriverError, match="no such table"):
        conn.execute("SELECT * FROM nope")
    with pytest.raises(NotImplementedError):
        conn.begin()
    conn.close()


def test_available_drivers_skip_unimportable(monkeypatch):
    monkeypatch.setattr(drivers.registry, "_importable", lambda module: module == "psycopg2")
    assert drivers.available_drivers() == ["postgres"]


def test_mysql_postgres_filter():
    names = ["QSQLITE", "QMYSQL", "QPSQL", "QODBC", "postgres"]
    assert drivers.mysql_postgres_drivers(names) == ["QMYSQL", "QPSQL", "postgres"]


def test_connection_registry():
    name = "DBConnection-test"
    drivers.add_connection(name, object())
    try:
        assert drivers.contains(name)
        with pytest.raises(ValueError, match="already registered"):
            drivers.add_connection(name, object())
    finally:
        assert drivers.remove_connection(name) is not None
    assert not drivers.contains(name)
    assert drivers.remove_connection(name) is None


def test_postgres_tables_cover_all_user_schemas(monkeypatch):
    _fake_psycopg2(monkeypatch)
    conn = PostgresDriver().connect(host="h", port=5432, database="d", user="u", password="")
    conn._raw.rows = [("orders",), ("events",)]
    assert conn.tables() == ["orders", "events"]
    sql = conn._raw.statements[-1]
    assert "NOT IN ('pg_catalog', 'information_schema')" in sql
    assert "current_schema()" not in sql
