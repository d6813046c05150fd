"""
ORDER BY clause helpers for song list queries.

These helpers translate the public sort field names (camelCase, as used in the
JSON API) into static SQL fragments.

Important:
- The returned strings are *static SQL fragments* selected from a small
  whitelist. Do NOT concatenate user input into ORDER BY.
- Unknown fields fall back to `createdAt`.
"""

from __future__ import annotations

from typing import Final

DEFAULT_SONGS_ORDER_BY: Final[str] = "createdAt"

SONG_SORT_COLUMNS: Final[dict[str, str]] = {
    "createdAt": "s.created_at",
    "updatedAt": "s.updated_at",
    "title": "s.title",
    "artist": "s.artist",
    "album": "s.album",
    "genre": "s.genre",
    "releaseDate": "s.release_date",
    "playCount": "s.play_count",
}


def songs_order_clause(order_by: str, *, descending: bool) -> str:
    """
    Return an ORDER BY clause for song list queries.

    Insertion order (rowid ascending) is always the final tie-breaker so
    repeated page requests over unchanged data return the same windows.
    """
    column = SONG_SORT_COLUMNS.get(order_by, SONG_SORT_COLUMNS[DEFAULT_SONGS_ORDER_BY])
    direction = "DESC" if descending else "ASC"
    return f"ORDER BY {column} {direction}, s.rowid ASC"
