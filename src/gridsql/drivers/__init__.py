"""DB-API driver adapters and the per-session connection registry."""

from . import mysql, postgres  # noqa: F401  (registers the built-in drivers)
from .base import DBAPIConnection, Driver, DriverConnection, DriverError, DriverUnavailable, render_value
from .registry import (
    add_connection,
    available_drivers,
    connection_names,
    contains,
    get_driver,
    mysql_postgres_drivers,
    register_driver,
    remove_connection,
    unregister_driver,
)

__all__ = [
    "DBAPIConnection",
    "Driver",
    "DriverConnection",
    "DriverError",
    "DriverUnavailable",
    "add_connection",
    "available_drivers",
    "connection_names",
    "contains",
    "get_driver",
    "mysql_postgres_drivers",
    "register_driver",
    "remove_connection",
    "render_value",
    "unregister_driver",
]
