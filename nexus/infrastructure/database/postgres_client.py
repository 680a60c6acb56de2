"""PostgreSQL access for local development and self-hosted deployments.

Enabled with ``USE_LOCAL_DB=1``. Connection settings come from ``DATABASE_URL``
when set, otherwise from the individual ``POSTGRES_*`` variables.
"""
from __future__ import annotations

import os
from contextlib import contextmanager
from typing import Any, Generator

import psycopg2
from psycopg2 import pool
from psycopg2.extras import RealDictCursor

from nexus.infrastructure.database.schema import SCHEMA_SQL


def _connection_kwargs() -> dict[str, Any]:
    dsn = os.getenv("DATABASE_URL")
    if dsn:
        return {"dsn": dsn}
    return {
        "host": os.getenv("POSTGRES_HOST", "localhost"),
        "port": int(os.getenv("POSTGRES_PORT", "5432")),
        "database": os.getenv("POSTGRES_DB", "nexus"),
        "user": os.getenv("POSTGRES_USER", "nexus"),
        "password": os.getenv("POSTGRES_PASSWORD", "nexus_dev_password"),
    }


class PostgresClient:
    """Pooled connections plus small query helpers returning dict rows."""

    def __init__(self, minconn: int = 1, maxconn: int = 10) -> None:
        try:
            self._pool = pool.SimpleConnectionPool(
                minconn=minconn, maxconn=maxconn, **_connection_kwargs()
            )
        except psycopg2.Error as exc:  # pragma: no cover - needs a server
            raise RuntimeError(f"Failed to initialize PostgreSQL connection pool: {exc}") from exc

    @contextmanager
    def transaction(self) -> Generator[Any, None, None]:
        """Borrow a connection; commit on success, roll back on error."""
        conn = self._pool.getconn()
        try:
            yield conn
            conn.commit()
        except Exception:
            conn.rollback()
            raise
        finally:
            self._pool.putconn(conn)

    @contextmanager
    def cursor(self) -> Generator[Any, None, None]:
        with self.transaction() as conn:
            cur = conn.cursor(cursor_factory=RealDictCursor)
            try:
                yield cur
            finally:
                cur.close()

    def fetch_one(self, query: str, params: tuple = ()) -> dict[str, Any] | None:
        with self.cursor() as cur:
            cur.execute(query, params)
            row = cur.fetchone()
            return dict(row) if row else None

    def fetch_all(self, query: str, params: tuple = ()) -> list[dict[str, Any]]:
        with self.cursor() as cur:
            cur.execute(query, params)
            return [dict(row) for row in cur.fetchall()]

    def insert_returning(self, query: str, params: tuple = ()) -> dict[str, Any]:
        """Run an INSERT/UPDATE ... RETURNING * and hand back the row.

        Raises:
            RuntimeError: If the statement produced no row.
        """
        row = self.fetch_one(query, params)
        if row is None:
            raise RuntimeError("Statement did not return a row")
        return row

    def ensure_schema(self) -> None:
        with self.cursor() as cur:
            cur.execute(SCHEMA_SQL)

    def close(self) -> None:
        self._pool.closeall()


_POSTGRES_CLIENT: PostgresClient | None = None


def get_postgres_client() -> PostgresClient | None:
    """Shared client when ``USE_LOCAL_DB=1``, otherwise None."""
    global _POSTGRES_CLIENT
    if os.getenv("USE_LOCAL_DB", "0") != "1":
        return None
    if _POSTGRES_CLIENT is None:
        _POSTGRES_CLIENT = PostgresClient()
    return _POSTGRES_CLIENT


def close_postgres_client() -> None:
    global _POSTGRES_CLIENT
    if _POSTGRES_CLIENT is not None:
        _POSTGRES_CLIENT.close()
        _POSTGRES_CLIENT = None
