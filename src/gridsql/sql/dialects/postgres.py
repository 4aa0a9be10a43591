from __future__ import annotations

from .base import QuotingDialect
from .registry import register


class PostgresDialect(QuotingDialect):
    name = "postgres"
    aliases = ("postgresql", "psql", "qpsql", "psycopg2")
    quote_char = '"'
    default_port = 5432
    database_listing_sql = "SELECT datname FROM pg_database WHERE datistemplate = false"


register(PostgresDialect())
