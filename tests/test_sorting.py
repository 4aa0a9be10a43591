import locale

import pytest

from gridsql.grid import ResultGrid
from gridsql.sorting import (
    SortOrder,
    SortState,
    compare_values,
    parse_number,
    sort_rows,
    strip_sort_marker,
)
from gridsql.types import QueryResult


@pytest.fixture(autouse=True)
def c_collation(monkeypatch):
    monkeypatch.setattr(locale, "strcoll", lambda a, b: (a > b) - (a < b))


@pytest.mark.parametrize("text,value", [
    ("10", 10.0),
    (" -2.5 ", -2.5),
    ("1e3", 1000.0),
    ("inf", float("inf")),
])
def test_parse_number(text, value):
    assert parse_number(text) == value


@pytest.mark.parametrize("text", ["", "  ", "abc", "1_000", "nan", "1.2.3"])
def test_parse_number_rejects(text):
    assert parse_number(text) is None


def test_numbers_compare_numerically():
    assert compare_values("9", "10") < 0
    assert compare_values("10", "10.0") == 0
    assert compare_values("-1", "-2") > 0


def test_mixed_values_compare_as_text():
    assert compare_values("10", "9a") < 0
    assert compare_values("apple", "banana") < 0


def test_sort_rows_numeric_column():
    rows = [["a", "10"], ["b", "9"], ["c", "100"]]
    out = sort_rows(rows, 1)
    assert [r[0] for r in out] == ["b", "a", "c"]


def test_sort_rows_descending():
    rows = [["a", "10"], ["b", "9"], ["c", "100"]]
    out = sort_rows(rows, 1, SortOrder.DESCENDING)
    assert [r[0] for r in out] == ["c", "a", "b"]


def test_sort_is_stable_both_ways():
    rows = [["x", "1"], ["y", "1"], ["z", "0"]]
    assert [r[0] for r in sort_rows(rows, 1)] == ["z", "x", "y"]
    assert [r[0] for r in sort_rows(rows, 1, SortOrder.DESCENDING)] == ["x", "y", "z"]


def test_sort_uses_locale_collation(monkeypatch):
    monkeypatch.setattr(locale, "strcoll", lambda a, b: (a.lower() > b.lower()) - (a.lower() < b.lower()))
    out = sort_rows([["b"], ["A"], ["c"]], 0)
    assert [r[0] for r in out] == ["A", "b", "c"]


def test_sort_state_toggles_on_same_column():
    s = SortState().clicked(2)
    assert (s.column, s.order) == (2, SortOrder.ASCENDING)
    s = s.clicked(2)
    assert s.order is SortOrder.DESCENDING
    s = s.clicked(2)
    assert s.order is SortOrder.ASCENDING


def test_sort_state_resets_on_new_column():
    s = SortState(1, SortOrder.DESCENDING).clicked(0)
    assert (s.column, s.order) == (0, SortOrder.ASCENDING)


def test_strip_sort_marker():
    assert strip_sort_marker("name ▲") == "name"
    assert strip_sort_marker("name ▼") == "name"
    assert strip_sort_marker("name") == "name"
    assert strip_sort_marker("▲ name") == "▲ name"


def _grid():
    return ResultGrid.from_result(
        QueryResult(columns=["id", "name"], rows=[["2", "b"], ["10", "a"], ["1", "c"]]),
        table="t",
    )


def test_grid_header_shows_one_arrow():
    g = _grid()
    g.sort_by(0)
    assert g.header_labels() == ["id ▲", "name"]
    g.sort_by(1)
    assert g.header_labels() == ["id", "name ▲"]
    g.sort_by(1)
    assert g.header_labels() == ["id", "name ▼"]
    assert g.column_names() == ["id", "name"]


def test_grid_sort_moves_whole_rows_with_cell_state():
    g = _grid()
    g.cell(1, 1).committed = "a"
    g.edit_intent(1, 1, "pending")
    g.sort_by(0)
    assert g.text_rows() == [["1", "c"], ["2", "b"], ["10", "pending"]]
    assert g.cell(2, 1).committed == "a"


def test_grid_sort_state_is_per_grid():
    a, b = _grid(), _grid()
    a.sort_by(0)
    assert b.sort_state.column is None
    b.sort_by(0)
    assert b.sort_state.order is SortOrder.ASCENDING


def test_grid_sort_rejects_bad_column():
    with pytest.raises(IndexError):
        _grid().sort_by(5)


def test_grid_numeric_column_sorts_by_value():
    g = ResultGrid.from_result(QueryResult(columns=["n"], rows=[["10"], ["2"], ["1"]]), table="t")
    g.sort_by(0)
    assert [r[0] for r in g.text_rows()] == ["1", "2", "10"]
    g.sort_by(0)
    assert [r[0] for r in g.text_rows()] == ["10", "2", "1"]


def test_infinity_compares_as_a_number():
    assert compare_values("inf", "1e308") > 0
    assert compare_values("-inf", "-5") < 0
