import pytest

from gridsql.types import ConnectionParams, EditIntent

from conftest import make_params


def test_complete_params_are_valid():
    assert make_params().is_valid()


@pytest.mark.parametrize("field", ["driver", "host", "database", "user"])
def test_missing_required_field_is_invalid(field):
    assert not make_params(**{field: ""}).is_valid()


def test_password_may_be_empty():
    assert make_params(password="").is_valid()


@pytest.mark.parametrize("port,ok", [(0, False), (-1, False), (1, True), (65535, True), (65536, False)])
def test_port_range(port, ok):
    assert make_params(port=port).is_valid() is ok


def test_with_database_keeps_credentials():
    p = make_params()
    q = p.with_database("other")
    assert q.database == "other"
    assert (q.driver, q.host, q.port, q.user, q.password) == (p.driver, p.host, p.port, p.user, p.password)
    assert p.database == "main"


def test_describe_never_contains_password():
    p = ConnectionParams("mysql", "db", 3306, "shop", "app", "hunter2")
    assert "hunter2" not in p.describe()
    assert p.describe() == "mysql://app@db:3306/shop"


def test_edit_intent_where_values_use_previous_value():
    intent = EditIntent(row_index=0, column_index=1, previous_value="Alice", new_value="Bob",
                        row_values=("1", "Bob"))
    assert intent.where_values() == ("1", "Alice")
