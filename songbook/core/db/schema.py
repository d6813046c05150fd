"""
Database schema + migrations for Songbook.

- Connection management and the public `CatalogDb` facade live in `catalog_db.py`
- Schema creation, schema versioning, and forward-only migrations live here

Design notes:
- We use SQLite `PRAGMA user_version` as the schema version.
- Migrations are forward-only (no downgrade support).
"""

from __future__ import annotations

import logging
from typing import Final

import aiosqlite

logger = logging.getLogger(__name__)

# Bump when you change the schema and add a migration in `migrate()`.
SCHEMA_VERSION: Final[int] = 2


async def ensure_schema(conn: aiosqlite.Connection) -> None:
    """
    Create or migrate schema to current version.

    This function assumes:
    - `conn` is an open aiosqlite connection
    - `conn.row_factory` is configured by the caller if desired
    """
    cursor = await conn.execute("PRAGMA user_version;")
    row = await cursor.fetchone()
    current = int(row[0]) if row is not None else 0

    if current > SCHEMA_VERSION:
        raise RuntimeError(
            f"Database schema version {current} is newer than supported {SCHEMA_VERSION}."
        )

    if current == SCHEMA_VERSION:
        return

    logger.info("Migrating catalog schema from v%d to v%d", current, SCHEMA_VERSION)
    await migrate(conn, from_version=current, to_version=SCHEMA_VERSION)
    await conn.execute(f"PRAGMA user_version = {SCHEMA_VERSION};")
    await conn.commit()


async def migrate(conn: aiosqlite.Connection, *, from_version: int, to_version: int) -> None:
    """Perform forward-only migrations."""
    # v0 -> v1
    if from_version == 0 and to_version >= 1:
        # `id` is the public identifier; the implicit rowid keeps insertion
        # order for stable tie-breaks.
        await conn.execute(
            """
            CREATE TABLE IF NOT EXISTS songs (
                id TEXT PRIMARY KEY,

                title TEXT NOT NULL,
                artist TEXT NOT NULL,
                album TEXT NOT NULL,
                genre TEXT NOT NULL,

                release_date TEXT,

                created_at TEXT NOT NULL,
                updated_at TEXT NOT NULL
            )
            """
        )

        # Indexes: exact-match filters and the default sort.
        await conn.execute("CREATE INDEX IF NOT EXISTS idx_songs_artist ON songs(artist);")
        await conn.execute("CREATE INDEX IF NOT EXISTS idx_songs_album ON songs(album);")
        await conn.execute("CREATE INDEX IF NOT EXISTS idx_songs_genre ON songs(genre);")
        await conn.execute("CREATE INDEX IF NOT EXISTS idx_songs_created ON songs(created_at);")
        await conn.commit()
        from_version = 1

    # v1 -> v2
    if from_version == 1 and to_version >= 2:
        await conn.execute("ALTER TABLE songs ADD COLUMN play_count INTEGER;")
        await conn.commit()
        from_version = 2
