from __future__ import annotations

import os
from contextlib import contextmanager
from typing import Iterator

import psycopg
from psycopg import sql


def get_database_url() -> str:
    url = os.environ.get("DATABASE_URL")
    if not url:
        raise RuntimeError("DATABASE_URL is not set")
    return url


@contextmanager
def db_conn(schema: str | None = None) -> Iterator[psycopg.Connection]:
    """Yield a database connection, optionally scoped to *schema*.

    *schema* defaults to ``FAMTREE_DB_SCHEMA``; when neither is set the
    server's default ``search_path`` is used.
    """
    schema = schema or os.environ.get("FAMTREE_DB_SCHEMA") or None
    with psycopg.connect(get_database_url()) as conn:
        if schema:
            conn.execute(sql.SQL("SET search_path TO {}, public").format(sql.Identifier(schema)))
        yield conn
