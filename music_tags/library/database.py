"""
Thread-safe SQLite library store for music-tags.

Holds the tracks, albums and artists of a scanned music collection
together with each item's tag list. It implements the LibraryService
protocol used by the processing core.

Schema:
    items:          One row per track, album or artist (tags as JSON array)
    item_artists:   Junction table (track_id, artist_id, position)

Usage:
    db = LibraryDatabase(config.library.database)

    db.upsert_item(item)                       # scanner
    tracks = db.query_items(ItemQuery(ItemKind.TRACK))
    db.update_item(track)                      # persists the tag list
"""

import json
import sqlite3
import threading
from contextlib import contextmanager
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Generator

from music_tags.core.exceptions import LibraryError, PersistenceError
from music_tags.core.logger import get_logger
from music_tags.library.models import Item, ItemKind, ItemQuery


logger = get_logger(__name__)


DATABASE_VERSION = 1


_SCHEMA_SQL = """
CREATE TABLE IF NOT EXISTS schema_version (
    version INTEGER PRIMARY KEY
);

CREATE TABLE IF NOT EXISTS items (
    id TEXT PRIMARY KEY,
    kind TEXT NOT NULL,
    name TEXT,
    path TEXT UNIQUE,
    album_id TEXT,
    tags TEXT NOT NULL DEFAULT '[]',  -- JSON array
    created_at TEXT,
    updated_at TEXT
);

CREATE TABLE IF NOT EXISTS item_artists (
    track_id TEXT NOT NULL,
    artist_id TEXT NOT NULL,
    position INTEGER NOT NULL,
    FOREIGN KEY (track_id) REFERENCES items(id) ON DELETE CASCADE,
    FOREIGN KEY (artist_id) REFERENCES items(id) ON DELETE CASCADE,
    UNIQUE(track_id, artist_id)
);

CREATE INDEX IF NOT EXISTS idx_items_kind ON items(kind);
CREATE INDEX IF NOT EXISTS idx_items_album ON items(album_id);
CREATE INDEX IF NOT EXISTS idx_item_artists_artist ON item_artists(artist_id);
"""


class LibraryDatabase:
    """
    Thread-safe SQLite library store.

    Uses a single persistent connection with thread locking for safety.
    All public methods acquire self._lock before executing.

    Raises:
        LibraryError: On open, schema and query failures.
        PersistenceError: When update_item() cannot write an item.
    """

    def __init__(self, db_path: Path) -> None:
        self.db_path = db_path
        self._lock = threading.Lock()
        self._conn: sqlite3.Connection | None = None

        if not db_path.parent.exists():
            raise LibraryError(
                f"Parent directory does not exist: {db_path.parent}",
                details={"path": str(db_path.parent)}
            )

        try:
            self._init_database()
        except sqlite3.Error as e:
            raise LibraryError(
                f"Failed to initialize library database: {e}",
                details={"path": str(db_path)}
            ) from e

    @contextmanager
    def _get_connection(self) -> Generator[sqlite3.Connection, None, None]:
        """
        Get the persistent database connection as a context manager.

        The connection is created once and reused for all operations.
        """
        if self._conn is None:
            self._conn = sqlite3.connect(
                str(self.db_path),
                timeout=30.0,
                check_same_thread=False  # We handle thread safety with _lock
            )
            self._conn.row_factory = sqlite3.Row
            self._conn.execute("PRAGMA foreign_keys = ON")
            self._conn.execute("PRAGMA journal_mode = WAL")
        yield self._conn

    def close(self) -> None:
        """Close the database connection."""
        with self._lock:
            if self._conn is not None:
                self._conn.close()
                self._conn = None

    def __enter__(self) -> "LibraryDatabase":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()

    def _init_database(self) -> None:
        with self._get_connection() as conn:
            conn.executescript(_SCHEMA_SQL)

            cursor = conn.execute("SELECT version FROM schema_version LIMIT 1")
            row = cursor.fetchone()

            if row is None:
                conn.execute("INSERT INTO schema_version (version) VALUES (?)", (DATABASE_VERSION,))
            elif row[0] != DATABASE_VERSION:
                raise LibraryError(
                    f"Database version mismatch: expected {DATABASE_VERSION}, got {row[0]}",
                    details={"expected": DATABASE_VERSION, "actual": row[0]}
                )
            conn.commit()

    def _now_iso(self) -> str:
        return datetime.now(timezone.utc).isoformat()

    def _row_to_item(self, conn: sqlite3.Connection, row: sqlite3.Row) -> Item:
        """Convert an items row to an Item, loading artist links for tracks."""
        try:
            tags = json.loads(row["tags"]) if row["tags"] else []
        except (json.JSONDecodeError, TypeError):
            logger.warning(f"Unreadable tag list for item {row['id']}, treating as empty")
            tags = []

        kind = ItemKind(row["kind"])
        artist_ids: list[str] = []
        if kind is ItemKind.TRACK:
            cursor = conn.execute(
                "SELECT artist_id FROM item_artists WHERE track_id = ? ORDER BY position",
                (row["id"],)
            )
            artist_ids = [r[0] for r in cursor.fetchall()]

        return Item(
            id=row["id"],
            name=row["name"] or "",
            kind=kind,
            path=Path(row["path"]) if row["path"] else None,
            album_id=row["album_id"],
            artist_ids=artist_ids,
            tags=list(tags),
        )

    # =========================================================================
    # Library Service
    # =========================================================================

    def query_items(self, query: ItemQuery) -> list[Item]:
        """
        Return every item matching the query, fully materialized.

        Raises:
            LibraryError: If the query fails.
        """
        sql = "SELECT i.* FROM items i"
        params: list[Any] = []
        where = ["i.kind = ?"]
        params.append(query.kind.value)

        if query.artist_id is not None:
            sql += " JOIN item_artists a ON a.track_id = i.id"
            where.append("a.artist_id = ?")
            params.append(query.artist_id)
        if query.parent_id is not None:
            where.append("i.album_id = ?")
            params.append(query.parent_id)

        sql += " WHERE " + " AND ".join(where) + " ORDER BY i.name, i.id"

        with self._lock:
            try:
                with self._get_connection() as conn:
                    cursor = conn.execute(sql, params)
                    return [self._row_to_item(conn, row) for row in cursor.fetchall()]
            except sqlite3.Error as e:
                raise LibraryError(
                    f"Library query failed: {e}",
                    details={"query": repr(query), "original_error": str(e)}
                ) from e

    def update_item(self, item: Item) -> None:
        """
        Persist the item's tag list.

        Raises:
            PersistenceError: If the item does not exist or the write fails.
        """
        with self._lock:
            try:
                with self._get_connection() as conn:
                    cursor = conn.execute(
                        "UPDATE items SET tags = ?, updated_at = ? WHERE id = ?",
                        (json.dumps(item.tags), self._now_iso(), item.id)
                    )
                    conn.commit()
            except sqlite3.Error as e:
                raise PersistenceError(
                    f"Failed to update item {item.id}: {e}",
                    details={"item_id": item.id, "original_error": str(e)}
                ) from e

            if cursor.rowcount == 0:
                raise PersistenceError(
                    f"Item not found in library: {item.id}",
                    details={"item_id": item.id}
                )

    # =========================================================================
    # Item Registry
    # =========================================================================

    def upsert_item(self, item: Item) -> None:
        """
        Insert an item or refresh its name, path, album and artist links.

        An existing item keeps its tag list, so rescanning never undoes
        extraction or propagation.
        """
        now = self._now_iso()
        with self._lock:
            try:
                with self._get_connection() as conn:
                    conn.execute("""
                        INSERT INTO items (id, kind, name, path, album_id, tags, created_at, updated_at)
                        VALUES (?, ?, ?, ?, ?, ?, ?, ?)
                        ON CONFLICT(id) DO UPDATE SET
                            name = excluded.name,
                            path = excluded.path,
                            album_id = excluded.album_id,
                            updated_at = excluded.updated_at
                    """, (
                        item.id,
                        item.kind.value,
                        item.name,
                        str(item.path) if item.path else None,
                        item.album_id,
                        json.dumps(item.tags),
                        now,
                        now,
                    ))

                    if item.kind is ItemKind.TRACK:
                        conn.execute("DELETE FROM item_artists WHERE track_id = ?", (item.id,))
                        conn.executemany(
                            "INSERT OR IGNORE INTO item_artists (track_id, artist_id, position) VALUES (?, ?, ?)",
                            [(item.id, artist_id, pos) for pos, artist_id in enumerate(item.artist_ids)]
                        )
                    conn.commit()
            except sqlite3.Error as e:
                raise LibraryError(
                    f"Failed to store item {item.id}: {e}",
                    details={"item_id": item.id, "original_error": str(e)}
                ) from e

    def get_item(self, item_id: str) -> Item | None:
        with self._lock:
            with self._get_connection() as conn:
                cursor = conn.execute("SELECT * FROM items WHERE id = ?", (item_id,))
                row = cursor.fetchone()
                return self._row_to_item(conn, row) if row else None

    def get_stats(self) -> dict[str, int]:
        """Get item counts per kind and the number of tagged items."""
        with self._lock:
            with self._get_connection() as conn:
                stats = {kind.value + "s": 0 for kind in ItemKind}

                cursor = conn.execute("SELECT kind, COUNT(*) FROM items GROUP BY kind")
                for kind, count in cursor.fetchall():
                    stats[kind + "s"] = count

                cursor = conn.execute("SELECT COUNT(*) FROM items WHERE tags != '[]'")
                stats["tagged_items"] = cursor.fetchone()[0]

                return stats
