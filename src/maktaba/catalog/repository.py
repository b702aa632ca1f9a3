"""SQLite-backed category stores exposing count/fetch primitives."""

from __future__ import annotations

from pathlib import Path
import sqlite3
import threading

from maktaba.catalog.query import RawRecord, SearchPredicate
from maktaba.catalog.registry import CategoryDescriptor
from maktaba.catalog.schema import apply_runtime_pragmas, ensure_schema
from maktaba.catalog.text import casefold_text
from maktaba.errors import StorageError


class ContentRepository:
    """Thin read layer over one SQLite database holding a table per category.

    Each thread reads through its own connection, so a slow category query
    never holds up the others (the database runs in WAL mode). Text columns
    come back as raw bytes so that rows with corrupt encodings reach the
    normalizer instead of failing inside the driver. Every storage failure is
    raised as :class:`StorageError` tagged with the category.
    """

    def __init__(self, db_path: str | Path, *, create_schema: bool = False) -> None:
        self._db_path = Path(db_path)
        self._local = threading.local()
        self._connections_lock = threading.Lock()
        self._connections: list[sqlite3.Connection] = []
        self._closed = False
        if create_schema:
            ensure_schema(self.connection)

    @property
    def connection(self) -> sqlite3.Connection:
        """Connection owned by the calling thread, opened on first use."""

        connection = getattr(self._local, "connection", None)
        if connection is None:
            connection = self._connect()
            self._local.connection = connection
        return connection

    def _connect(self) -> sqlite3.Connection:
        if self._closed:
            raise sqlite3.ProgrammingError("Cannot operate on a closed repository")
        connection = sqlite3.connect(str(self._db_path), check_same_thread=False)
        connection.row_factory = sqlite3.Row
        connection.text_factory = bytes
        connection.create_function("casefold", 1, casefold_text, deterministic=True)
        apply_runtime_pragmas(connection)
        with self._connections_lock:
            self._connections.append(connection)
        return connection

    def close(self) -> None:
        with self._connections_lock:
            connections, self._connections = self._connections, []
            self._closed = True
        for connection in connections:
            connection.close()

    def __enter__(self) -> "ContentRepository":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def count(self, descriptor: CategoryDescriptor, predicate: SearchPredicate) -> int:
        where_sql, params = predicate.to_sql()
        rows = self._query(
            descriptor,
            f"SELECT COUNT(*) AS total FROM {descriptor.name} WHERE {where_sql}",
            params,
        )
        return int(rows[0]["total"]) if rows else 0

    def fetch(
        self,
        descriptor: CategoryDescriptor,
        predicate: SearchPredicate,
        *,
        offset: int,
        limit: int,
    ) -> list[RawRecord]:
        if offset < 0:
            raise ValueError("offset cannot be negative")
        if limit <= 0:
            raise ValueError("limit must be positive")

        where_sql, params = predicate.to_sql()
        return self._query(
            descriptor,
            f"""
            SELECT *
            FROM {descriptor.name}
            WHERE {where_sql}
            ORDER BY {descriptor.order_field} DESC, id DESC
            LIMIT ? OFFSET ?
            """,
            (*params, limit, offset),
        )

    def fetch_by_id(self, descriptor: CategoryDescriptor, item_id: int) -> RawRecord | None:
        rows = self._query(
            descriptor,
            f"SELECT * FROM {descriptor.name} WHERE id = ?",
            (item_id,),
        )
        return rows[0] if rows else None

    def _query(self, descriptor: CategoryDescriptor, sql: str, params: tuple[object, ...]) -> list[sqlite3.Row]:
        try:
            return self.connection.execute(sql, params).fetchall()
        except sqlite3.Error as exc:
            raise StorageError(descriptor.name, str(exc)) from exc
