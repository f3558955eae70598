"""PostgreSQL database client for local development.

Provides a connection pool and helpers for keeping image records in a local
PostgreSQL database instead of a Supabase table. Each image is one row; its
versions live in a JSONB column so that appending a version is a single upsert.
"""
from __future__ import annotations

import logging
import os
from contextlib import contextmanager
from typing import Any, Generator

import psycopg2
from psycopg2 import pool
from psycopg2.extras import RealDictCursor

from src.domain.errors import StorageError

logger = logging.getLogger(__name__)

SCHEMA_SQL = """
    CREATE TABLE IF NOT EXISTS images (
        id TEXT PRIMARY KEY,
        description TEXT,
        link TEXT,
        created_at TIMESTAMPTZ NOT NULL,
        versions JSONB NOT NULL
    )
"""


class PostgresClient:
    """PostgreSQL database client with connection pooling."""

    def __init__(self) -> None:
        """Initialize PostgreSQL connection pool."""
        self.enabled = os.getenv("USE_LOCAL_DB", "0") == "1"
        self._pool: Any = None

        if self.enabled:
            try:
                self._pool = pool.SimpleConnectionPool(
                    minconn=1,
                    maxconn=10,
                    host=os.getenv("POSTGRES_HOST", "localhost"),
                    port=int(os.getenv("POSTGRES_PORT", "5432")),
                    database=os.getenv("POSTGRES_DB", "cropkit"),
                    user=os.getenv("POSTGRES_USER", "cropkit"),
                    password=os.getenv("POSTGRES_PASSWORD", "cropkit_dev_password"),
                )
            except psycopg2.Error as exc:  # pragma: no cover
                raise StorageError(f"Failed to initialize PostgreSQL connection pool: {exc}") from exc
            logger.info("PostgreSQL connection pool ready")

    @contextmanager
    def get_connection(self) -> Generator[Any, None, None]:
        """Get a database connection from the pool.

        Yields:
            Database connection with automatic return to pool on exit.

        Raises:
            StorageError: If local database is not enabled.
        """
        if not self.enabled or self._pool is None:
            raise StorageError("Local PostgreSQL database is not enabled")

        conn = None
        try:
            conn = self._pool.getconn()
            yield conn
            conn.commit()
        except Exception:
            if conn:
                conn.rollback()
            raise
        finally:
            if conn:
                self._pool.putconn(conn)

    @contextmanager
    def get_cursor(self, dict_cursor: bool = True) -> Generator[Any, None, None]:
        with self.get_connection() as conn:
            cursor_factory = RealDictCursor if dict_cursor else None
            cursor = conn.cursor(cursor_factory=cursor_factory)
            try:
                yield cursor
            finally:
                cursor.close()

    def ensure_schema(self) -> None:
        """Create the images table if it does not exist."""
        with self.get_cursor(dict_cursor=False) as cursor:
            cursor.execute(SCHEMA_SQL)

    def execute_one(self, query: str, params: tuple = ()) -> dict[str, Any] | None:
        """Execute a query and return a single result.

        Args:
            query: SQL query string.
            params: Query parameters.

        Returns:
            Single row as dictionary or None if no results.
        """
        with self.get_cursor() as cursor:
            cursor.execute(query, params)
            result = cursor.fetchone()
            return dict(result) if result else None

    def execute_update(self, query: str, params: tuple = ()) -> int:
        """Execute an INSERT or UPDATE query.

        Returns:
            Number of rows affected.
        """
        with self.get_cursor(dict_cursor=False) as cursor:
            cursor.execute(query, params)
            return cursor.rowcount


# Singleton instance
_POSTGRES_CLIENT: PostgresClient | None = None


def get_postgres_client() -> PostgresClient | None:
    """Get PostgreSQL client singleton, creating its schema on first use.

    Returns:
        PostgresClient instance if enabled, None otherwise.
    """
    global _POSTGRES_CLIENT
    if os.getenv("USE_LOCAL_DB", "0") != "1":
        return None
    if _POSTGRES_CLIENT is None:
        _POSTGRES_CLIENT = PostgresClient()
        _POSTGRES_CLIENT.ensure_schema()
    return _POSTGRES_CLIENT
