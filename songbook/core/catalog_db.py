"""
Song catalog record store: schema + access layer.

Goals:
- Minimal and testable.
- SQLite + aiosqlite, async/await friendly.
- Keep schema small, but leave room to evolve (via user_version migrations).

This module is intentionally independent of the web layer.

Note:
- Models/DTOs and validation helpers live in `songbook.core.db.models`
- Schema/migrations live in `songbook.core.db.schema`
- Query functions live in `songbook.core.db.queries_songs`
- `CatalogDb` remains the public facade used by the rest of the codebase
"""

from __future__ import annotations

import logging
import uuid
from pathlib import Path

import aiosqlite

from songbook.core import StoreUnavailableError
from songbook.core.db import queries_songs
from songbook.core.db.models import NewSong, SongFilters, SongPatch, SongRow, utc_now_iso
from songbook.core.db.ordering import DEFAULT_SONGS_ORDER_BY
from songbook.core.db.schema import ensure_schema as ensure_schema_sql

logger = logging.getLogger(__name__)


class CatalogDb:
    """
    Async access layer for the song catalog DB.

    Usage:
        db = CatalogDb("songbook.sqlite3")
        await db.open()
        await db.ensure_schema()
        ... queries ...
        await db.close()

    Notes:
    - This class is designed to be injected into other components.
    - Connections are not pooled; we keep a single connection. aiosqlite
      serializes calls on its worker thread, and every write commits before
      returning.
    """

    def __init__(self, db_path: str | Path) -> None:
        self._db_path = str(db_path)
        self._conn: aiosqlite.Connection | None = None

    @property
    def is_open(self) -> bool:
        return self._conn is not None

    @property
    def db_path(self) -> str:
        return self._db_path

    async def open(self) -> None:
        if self._conn is not None:
            return
        self._conn = await aiosqlite.connect(self._db_path)
        self._conn.row_factory = aiosqlite.Row

        await self._conn.execute("PRAGMA journal_mode = WAL;")
        await self._conn.execute("PRAGMA synchronous = NORMAL;")
        logger.info("Opened catalog store at %s", self._db_path)

    async def close(self) -> None:
        if self._conn is None:
            return
        await self._conn.close()
        self._conn = None
        logger.info("Closed catalog store at %s", self._db_path)

    def _require_conn(self) -> aiosqlite.Connection:
        if self._conn is None:
            raise StoreUnavailableError("CatalogDb is not open. Call await db.open() first.")
        return self._conn

    async def ensure_schema(self) -> None:
        """Create or migrate schema to current version."""
        await ensure_schema_sql(self._require_conn())

    # ===========================================================================
    # Reads
    # ===========================================================================

    async def get_song(self, song_id: str) -> SongRow | None:
        return await queries_songs.get_song_by_id(self._require_conn(), song_id)

    async def list_songs(
        self,
        *,
        filters: SongFilters | None = None,
        limit: int = 10,
        offset: int = 0,
        order_by: str = DEFAULT_SONGS_ORDER_BY,
        descending: bool = True,
    ) -> list[SongRow]:
        return await queries_songs.list_songs(
            self._require_conn(),
            filters=filters,
            limit=limit,
            offset=offset,
            order_by=order_by,
            descending=descending,
        )

    async def count_songs(self, *, filters: SongFilters | None = None) -> int:
        return await queries_songs.count_songs(self._require_conn(), filters=filters)

    async def list_all_songs(self) -> list[SongRow]:
        return await queries_songs.list_all_songs(self._require_conn())

    # ===========================================================================
    # Writes
    # ===========================================================================

    async def create_song(self, song: NewSong) -> SongRow:
        """Insert a song, assigning its identifier and timestamps."""
        conn = self._require_conn()
        song_id = uuid.uuid4().hex
        await queries_songs.insert_song(conn, song_id, song, timestamp=utc_now_iso())
        await conn.commit()

        row = await queries_songs.get_song_by_id(conn, song_id)
        if row is None:
            raise RuntimeError("Insert failed: song row not found after insert.")
        return row

    async def update_song(self, song_id: str, patch: SongPatch) -> SongRow | None:
        """
        Merge `patch` into an existing song and return the merged row.

        Returns None if no song has this id. `updated_at` never moves
        backwards, even if the wall clock does.
        """
        conn = self._require_conn()
        current = await queries_songs.get_song_by_id(conn, song_id)
        if current is None:
            return None

        updated_at = max(utc_now_iso(), current.updated_at)
        await queries_songs.update_song(conn, song_id, patch.changes, updated_at=updated_at)
        await conn.commit()
        return await queries_songs.get_song_by_id(conn, song_id)

    async def delete_song(self, song_id: str) -> bool:
        conn = self._require_conn()
        deleted = await queries_songs.delete_song(conn, song_id)
        await conn.commit()
        return deleted
