# src/gridsql/cli.py
from __future__ import annotations

import argparse
import json
import locale
import logging
import sys
from typing import Any, Dict, List, Tuple

from .config import GridConfig, resolve_config
from .drivers import available_drivers, mysql_postgres_drivers
from .errors import ErrorKind, ExitCode, GridSQLException, Problem, config_problem, problem_to_dict
from .grid import Cell, ResultGrid
from .reconciler import EditReconciler, build_update_statement
from .session import Session
from .settings_store import ConnectionStore
from .sql import dialects
from .types import ConnectionParams

logger = logging.getLogger(__name__)


# =============================================================================
# Helpers: output, store/config access, sessions
# =============================================================================

def _print_payload(payload: Dict[str, Any], fmt: str) -> None:
    if fmt == "json":
        print(json.dumps(payload, indent=2, ensure_ascii=False, sort_keys=True, default=str))
    elif fmt == "jsonl":
        print(json.dumps(payload, ensure_ascii=False, sort_keys=True, default=str))
    else:
        # "text": caller prints human-friendly output
        pass


def _is_structured(args: argparse.Namespace) -> bool:
    return getattr(args, "format", "text") in ("json", "jsonl")


def _config(args: argparse.Namespace) -> GridConfig:
    try:
        return resolve_config(getattr(args, "config", None))
    except FileNotFoundError as e:
        raise GridSQLException(
            config_problem("GRIDSQL_CONFIG_NOT_FOUND", f"Config not found: {e.filename}", path=e.filename),
            ExitCode.CONFIG_INVALID,
            cause=e,
        )
    except ValueError as e:
        raise GridSQLException(
            config_problem("GRIDSQL_CONFIG_INVALID", str(e), path=getattr(args, "config", None)),
            ExitCode.CONFIG_INVALID,
            cause=e,
        )


def _store(args: argparse.Namespace) -> ConnectionStore:
    path = getattr(args, "store", None) or _config(args).store_path
    return ConnectionStore(path)


def _default_driver(args: argparse.Namespace, store: ConnectionStore) -> str:
    return _config(args).default_driver or store.default_driver


def _open_session(args: argparse.Namespace) -> Session:
    params = _store(args).load(args.server)
    if getattr(args, "database", None):
        params = params.with_database(args.database)
    session = Session()
    if not session.open(params):
        problem = session.last_error or Problem(
            code="GRIDSQL_CONNECT_FAILED", kind=ErrorKind.CONNECT_FAILED, message="Could not connect to server"
        )
        raise GridSQLException(problem, ExitCode.CONNECT_FAILED)
    return session


def _parse_row(pairs: List[str]) -> Tuple[List[str], List[str]]:
    columns: List[str] = []
    values: List[str] = []
    for item in pairs:
        if "=" not in item:
            raise GridSQLException(
                config_problem(
                    "GRIDSQL_ROW_VALUE_INVALID",
                    f"--row expects COLUMN=VALUE, got '{item}'",
                    value=item,
                ),
                ExitCode.CONFIG_INVALID,
            )
        col, value = item.split("=", 1)
        columns.append(col)
        values.append(value)
    return columns, values


def _print_grid(grid: ResultGrid) -> None:
    print("\t".join(grid.header_labels()))
    for row in grid.text_rows():
        print("\t".join(row))


# =============================================================================
# Commands
# =============================================================================

def cmd_drivers(args: argparse.Namespace) -> int:
    names = mysql_postgres_drivers() if args.sql_only else available_drivers()
    if _is_structured(args):
        _print_payload({"ok": True, "drivers": names}, args.format)
    else:
        for name in names:
            print(name)
    return 0


def cmd_servers_list(args: argparse.Namespace) -> int:
    names = _store(args).list()
    if _is_structured(args):
        _print_payload({"ok": True, "servers": names}, args.format)
    else:
        for name in names:
            print(name)
    return 0


def cmd_servers_add(args: argparse.Namespace) -> int:
    store = _store(args)
    driver = args.driver or _default_driver(args, store)
    port = args.port if args.port is not None else dialects.port_for_driver(None, driver)
    params = ConnectionParams(
        driver=driver,
        host=args.host,
        port=int(port or 0),
        database=args.database,
        user=args.user,
        password=args.password or "",
    )
    if not params.is_valid():
        raise GridSQLException(
            config_problem(
                "GRIDSQL_INVALID_PARAMS",
                "Server needs a driver, host, database, user and a port between 1 and 65535",
                server=args.name,
                port=params.port,
            ),
            ExitCode.CONFIG_INVALID,
        )
    if args.rename_from:
        store.rename(args.rename_from, args.name, params)
    else:
        store.save(args.name, params)

    if _is_structured(args):
        _print_payload({"ok": True, "server": args.name}, args.format)
    else:
        print(f"Saved server: {args.name}")
    return 0


def cmd_servers_remove(args: argparse.Namespace) -> int:
    _store(args).remove(args.name)
    if _is_structured(args):
        _print_payload({"ok": True, "removed": args.name}, args.format)
    else:
        print(f"Removed server: {args.name}")
    return 0


def cmd_servers_show(args: argparse.Namespace) -> int:
    params = _store(args).load(args.name)
    shown = {
        "driver": params.driver,
        "host": params.host,
        "port": params.port,
        "database": params.database,
        "user": params.user,
        "password": "***" if params.password else "",
    }
    if _is_structured(args):
        _print_payload({"ok": True, "server": args.name, "params": shown}, args.format)
    else:
        for k, v in shown.items():
            print(f"{k}: {v}")
    return 0


def cmd_servers_test(args: argparse.Namespace) -> int:
    args.server = args.name
    session = _open_session(args)
    session.close()
    if _is_structured(args):
        _print_payload({"ok": True, "server": args.name}, args.format)
    else:
        print("Connection successful!")
    return 0


def cmd_settings(args: argparse.Namespace) -> int:
    store = _store(args)
    if args.default_driver:
        store.default_driver = args.default_driver
    driver = store.default_driver
    if _is_structured(args):
        _print_payload({"ok": True, "default_driver": driver}, args.format)
    else:
        print(f"default_driver: {driver}")
    return 0


def cmd_databases(args: argparse.Namespace) -> int:
    with _open_session(args) as session:
        names = session.list_databases()
    if _is_structured(args):
        _print_payload({"ok": True, "databases": names}, args.format)
    else:
        for name in names:
            print(name)
    return 0


def cmd_tables(args: argparse.Namespace) -> int:
    with _open_session(args) as session:
        names = session.list_tables()
    if _is_structured(args):
        _print_payload({"ok": True, "tables": names}, args.format)
    else:
        for name in names:
            print(name)
    return 0


def cmd_query(args: argparse.Namespace) -> int:
    with _open_session(args) as session:
        outcome = session.execute(args.sql)
        elapsed = session.last_execution_time

    if not outcome.ok:
        raise GridSQLException(outcome.problem, ExitCode.QUERY_FAILED)

    grid = ResultGrid.from_result(outcome.result)
    if args.sort_column is not None:
        column = _column_index(grid, args.sort_column)
        grid.sort_by(column)
        if args.descending:
            grid.sort_by(column)

    if _is_structured(args):
        _print_payload(
            {
                "ok": True,
                "columns": grid.columns,
                "rows": grid.text_rows(),
                "rows_affected": outcome.result.rows_affected,
                "elapsed": elapsed,
            },
            args.format,
        )
    else:
        if grid.columns:
            _print_grid(grid)
        print(f"-- {elapsed}", file=sys.stderr)
    return 0


def _column_index(grid: ResultGrid, ref: str) -> int:
    if ref in grid.columns:
        return grid.columns.index(ref)
    try:
        index = int(ref)
    except ValueError:
        index = -1
    if not 0 <= index < grid.column_count:
        raise GridSQLException(
            config_problem("GRIDSQL_SORT_COLUMN_INVALID", f"Unknown sort column: {ref}", column=ref),
            ExitCode.CONFIG_INVALID,
        )
    return index


def cmd_edit_cell(args: argparse.Namespace) -> int:
    columns, values = _parse_row(args.row)
    if args.column not in columns:
        raise GridSQLException(
            config_problem(
                "GRIDSQL_EDIT_COLUMN_INVALID",
                f"--column {args.column} must be one of the --row columns",
                column=args.column,
                columns=columns,
            ),
            ExitCode.CONFIG_INVALID,
        )
    column = columns.index(args.column)
    unknown_keys = [k for k in (args.key or []) if k not in columns]
    if unknown_keys:
        raise GridSQLException(
            config_problem(
                "GRIDSQL_EDIT_KEY_INVALID",
                f"--key must name --row columns, got: {', '.join(unknown_keys)}",
                keys=unknown_keys,
                columns=columns,
            ),
            ExitCode.CONFIG_INVALID,
        )
    grid = ResultGrid(columns, [[Cell.fetched(v) for v in values]], table=args.table)

    if args.dry_run:
        params = _store(args).load(args.server)
        intent = grid.edit_intent(0, column, args.value)
        statement = build_update_statement(
            args.table, grid.header_labels(), intent, dialects.resolve(params.driver), args.key
        )
        if _is_structured(args):
            _print_payload({"ok": True, "statement": statement, "executed": False}, args.format)
        else:
            print(statement)
        return 0

    with _open_session(args) as session:
        outcome = EditReconciler(session, key_columns=args.key).apply(grid, 0, column, args.value)

    if not outcome.applied:
        invalid = outcome.problem.kind is ErrorKind.INVALID_EDIT
        code = ExitCode.CONFIG_INVALID if invalid else ExitCode.QUERY_FAILED
        raise GridSQLException(outcome.problem, code)
    if _is_structured(args):
        _print_payload({"ok": True, "statement": outcome.statement, "executed": True}, args.format)
    else:
        print(outcome.statement)
        print("Row updated")
    return 0


# =============================================================================
# Parser + entry point
# =============================================================================

def build_parser() -> argparse.ArgumentParser:
    common = argparse.ArgumentParser(add_help=False)
    common.add_argument("--format", choices=("text", "json", "jsonl"), default="text")

    parser = argparse.ArgumentParser(prog="gridsql", description="Browse and edit MySQL/Postgres data.")
    parser.add_argument("--config", help="YAML/JSON config file (default: $GRIDSQL_CONFIG)")
    parser.add_argument("--store", help="server store file (overrides config store_path)")
    parser.add_argument("--log-level", help="logging level, e.g. DEBUG or INFO")
    sub = parser.add_subparsers(dest="cmd")

    p = sub.add_parser("drivers", parents=[common], help="list drivers importable here")
    p.add_argument("--sql-only", action="store_true", help="only MySQL/Postgres family drivers")
    p.set_defaults(func=cmd_drivers)

    servers = sub.add_parser("servers", help="manage saved servers")
    ssub = servers.add_subparsers(dest="servers_cmd")

    p = ssub.add_parser("list", parents=[common])
    p.set_defaults(func=cmd_servers_list)

    p = ssub.add_parser("add", parents=[common], help="add or replace a saved server")
    p.add_argument("name")
    p.add_argument("--driver")
    p.add_argument("--host", required=True)
    p.add_argument("--port", type=int)
    p.add_argument("--database", required=True)
    p.add_argument("--user", required=True)
    p.add_argument("--password", default="")
    p.add_argument("--rename-from", help="existing server name to replace")
    p.set_defaults(func=cmd_servers_add)

    p = ssub.add_parser("remove", parents=[common])
    p.add_argument("name")
    p.set_defaults(func=cmd_servers_remove)

    p = ssub.add_parser("show", parents=[common])
    p.add_argument("name")
    p.set_defaults(func=cmd_servers_show)

    p = ssub.add_parser("test", parents=[common], help="open and close a connection")
    p.add_argument("name")
    p.set_defaults(func=cmd_servers_test)

    p = sub.add_parser("settings", parents=[common], help="show or change application settings")
    p.add_argument("--default-driver")
    p.set_defaults(func=cmd_settings)

    p = sub.add_parser("databases", parents=[common], help="list databases on a saved server")
    p.add_argument("server")
    p.set_defaults(func=cmd_databases)

    p = sub.add_parser("tables", parents=[common], help="list tables in a database")
    p.add_argument("server")
    p.add_argument("--database")
    p.set_defaults(func=cmd_tables)

    p = sub.add_parser("query", parents=[common], help="run one statement")
    p.add_argument("server")
    p.add_argument("sql")
    p.add_argument("--database")
    p.add_argument("--sort-column", help="column name or index to sort the result by")
    p.add_argument("--descending", action="store_true")
    p.set_defaults(func=cmd_query)

    p = sub.add_parser("edit-cell", parents=[common], help="update one cell of a displayed row")
    p.add_argument("server")
    p.add_argument("table")
    p.add_argument("--column", required=True, help="column being edited")
    p.add_argument("--value", required=True, help="new value")
    p.add_argument("--row", action="append", required=True, metavar="COLUMN=VALUE",
                   help="current row value; repeat for every column in the row")
    p.add_argument("--key", action="append", metavar="COLUMN",
                   help="restrict the WHERE clause to key columns")
    p.add_argument("--database")
    p.add_argument("--dry-run", action="store_true", help="print the UPDATE without executing it")
    p.set_defaults(func=cmd_edit_cell)

    return parser


def _configure_collation() -> None:
    # sort_rows compares text with locale.strcoll; use the user's collation
    try:
        locale.setlocale(locale.LC_COLLATE, "")
    except locale.Error as e:
        logger.warning("Could not apply the environment collation locale: %s", e)


def _configure_logging(args: argparse.Namespace) -> None:
    level = getattr(args, "log_level", None)
    if not level:
        try:
            level = _config(args).log_level
        except GridSQLException:
            level = "WARNING"
    logging.basicConfig(
        level=getattr(logging, str(level).upper(), logging.WARNING),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def main(argv: list[str] | None = None) -> int:
    """
    Entry point used by the console script: `from gridsql.cli import main`.
    """
    return _main(argv)


def _main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    if not getattr(args, "func", None):
        parser.print_help()
        return 2

    _configure_logging(args)
    _configure_collation()

    try:
        return int(args.func(args))
    except GridSQLException as e:
        payload = {"ok": False, "error": problem_to_dict(e.problem), "exit_code": int(e.exit_code)}
        fmt = getattr(args, "format", "text")
        if fmt in ("json", "jsonl"):
            _print_payload(payload, fmt)
        else:
            err = payload["error"]
            print(f"ERROR[{err.get('code', 'GRIDSQL_ERROR')}]: {e.problem.text()}", file=sys.stderr)
            print(f"DETAILS: {err.get('details', {})}", file=sys.stderr)
        return int(e.exit_code)
    except Exception as e:
        logger.exception("Unhandled error")
        payload = {
            "ok": False,
            "error": {"code": "GRIDSQL_INTERNAL_ERROR", "message": repr(e)},
            "exit_code": int(ExitCode.INTERNAL_ERROR),
        }
        fmt = getattr(args, "format", "text")
        if fmt in ("json", "jsonl"):
            _print_payload(payload, fmt)
        else:
            print(f"ERROR[GRIDSQL_INTERNAL_ERROR]: {e!r}", file=sys.stderr)
        return int(ExitCode.INTERNAL_ERROR)


if __name__ == "__main__":
    sys.exit(main())
