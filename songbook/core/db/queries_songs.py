"""
Song DB queries used by `songbook.core.catalog_db.CatalogDb`.

Design:
- Functions are *pure DB helpers*: they take an open `aiosqlite.Connection`
  and return materialized dataclasses.
- Ordering is centralized via `songbook.core.db.ordering.songs_order_clause`.
- These functions assume `conn.row_factory = aiosqlite.Row`.
- Callers own the transaction; nothing here commits.

Important:
- Do NOT interpolate user input into SQL. The only dynamic SQL here is the
  ORDER BY clause from a whitelist and WHERE clauses built from the fixed
  filter column names in `SongFilters`.
"""

from __future__ import annotations

from typing import Any

import aiosqlite

from songbook.core.db.models import SQLITE_MAX_INTEGER, NewSong, SongFilters, SongRow
from songbook.core.db.ordering import songs_order_clause

# Columns that `update_song` may write.
_UPDATABLE_COLUMNS = frozenset(
    {"title", "artist", "album", "genre", "release_date", "play_count"}
)


def _row_to_song(row: aiosqlite.Row) -> SongRow:
    """Convert an aiosqlite Row to a SongRow dataclass."""
    play_count = row["play_count"]
    return SongRow(
        id=str(row["id"]),
        title=row["title"],
        artist=row["artist"],
        album=row["album"],
        genre=row["genre"],
        release_date=row["release_date"],
        play_count=int(play_count) if play_count is not None else None,
        created_at=row["created_at"],
        updated_at=row["updated_at"],
    )


def _where_clause(filters: SongFilters | None) -> tuple[str, list[Any]]:
    if filters is None:
        return "", []
    columns = filters.as_columns()
    if not columns:
        return "", []
    parts = [f"s.{name} = ?" for name in columns]
    return "WHERE " + " AND ".join(parts), list(columns.values())


# ---------------------------------------------------------------------------
# Basic get/list/count
# ---------------------------------------------------------------------------


async def get_song_by_id(conn: aiosqlite.Connection, song_id: str) -> SongRow | None:
    cursor = await conn.execute("SELECT * FROM songs WHERE id = ?;", (song_id,))
    row = await cursor.fetchone()
    return _row_to_song(row) if row else None


async def list_songs(
    conn: aiosqlite.Connection,
    *,
    filters: SongFilters | None,
    limit: int,
    offset: int,
    order_by: str,
    descending: bool,
) -> list[SongRow]:
    where, params = _where_clause(filters)
    order_clause = songs_order_clause(order_by, descending=descending)
    cursor = await conn.execute(
        f"""
        SELECT * FROM songs s
        {where}
        {order_clause}
        LIMIT ? OFFSET ?;
        """,
        (*params, min(int(limit), SQLITE_MAX_INTEGER), min(int(offset), SQLITE_MAX_INTEGER)),
    )
    rows = await cursor.fetchall()
    return [_row_to_song(r) for r in rows]


async def count_songs(conn: aiosqlite.Connection, *, filters: SongFilters | None = None) -> int:
    where, params = _where_clause(filters)
    cursor = await conn.execute(f"SELECT COUNT(*) AS c FROM songs s {where};", params)
    row = await cursor.fetchone()
    return int(row["c"]) if row else 0


async def list_all_songs(conn: aiosqlite.Connection) -> list[SongRow]:
    """Every song in insertion order. Used by the statistics pipelines."""
    cursor = await conn.execute("SELECT * FROM songs s ORDER BY s.rowid ASC;")
    rows = await cursor.fetchall()
    return [_row_to_song(r) for r in rows]


# ---------------------------------------------------------------------------
# Writes
# ---------------------------------------------------------------------------


async def insert_song(
    conn: aiosqlite.Connection, song_id: str, song: NewSong, *, timestamp: str
) -> None:
    await conn.execute(
        """
        INSERT INTO songs(
            id, title, artist, album, genre,
            release_date, play_count,
            created_at, updated_at
        ) VALUES (
            :id, :title, :artist, :album, :genre,
            :release_date, :play_count,
            :created_at, :updated_at
        )
        """,
        {
            "id": song_id,
            "title": song.title,
            "artist": song.artist,
            "album": song.album,
            "genre": song.genre,
            "release_date": song.release_date,
            "play_count": song.play_count,
            "created_at": timestamp,
            "updated_at": timestamp,
        },
    )


async def update_song(
    conn: aiosqlite.Connection,
    song_id: str,
    changes: dict[str, Any],
    *,
    updated_at: str,
) -> bool:
    """Apply column changes to one song. Returns True if a row matched."""
    unknown = set(changes) - _UPDATABLE_COLUMNS
    if unknown:
        raise ValueError(f"Cannot update columns: {sorted(unknown)}")

    assignments = [f"{name} = :{name}" for name in changes]
    assignments.append("updated_at = :updated_at")
    cursor = await conn.execute(
        f"UPDATE songs SET {', '.join(assignments)} WHERE id = :song_id;",
        {**changes, "updated_at": updated_at, "song_id": song_id},
    )
    return cursor.rowcount > 0


async def delete_song(conn: aiosqlite.Connection, song_id: str) -> bool:
    """Delete a song by id. Returns True if deleted, False if not found."""
    cursor = await conn.execute("DELETE FROM songs WHERE id = ?;", (song_id,))
    return cursor.rowcount > 0
