from __future__ import annotations

from .base import QuotingDialect
from .registry import register

LOOPBACK_V4 = "127.0.0.1"


class MySQLDialect(QuotingDialect):
    name = "mysql"
    aliases = ("mariadb", "qmysql", "mysql-connector")
    quote_char = "`"
    default_port = 3306
    connect_timeout = 20
    database_listing_sql = "SHOW DATABASES"

    def normalize_host(self, host: str) -> str:
        # Only this dialect rewrites localhost; the others pass the host through.
        if host.lower() == "localhost":
            return LOOPBACK_V4
        return host


register(MySQLDialect())
