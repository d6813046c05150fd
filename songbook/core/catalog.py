from __future__ import annotations

import logging
from typing import Any, Mapping

from songbook.core import CoreError, NotFoundError
from songbook.core.catalog_db import CatalogDb
from songbook.core.db.models import (
    SongFilters,
    SongRow,
    normalize_text,
    validate_new_song,
    validate_song_patch,
)
from songbook.core.db.ordering import SONG_SORT_COLUMNS
from songbook.core.paging import DEFAULT_SONG_SORT, PageResult, list_page_request
from songbook.core.stats import StatsService

logger = logging.getLogger(__name__)


class SongCatalogError(CoreError):
    """Base error for SongCatalog operations."""


class SongCatalogNotReadyError(SongCatalogError):
    """Raised when operations are attempted before the catalog is initialized."""


def build_filters(
    genre: str | None = None, artist: str | None = None, album: str | None = None
) -> SongFilters:
    """Empty or blank filter values impose no constraint."""
    return SongFilters(
        genre=normalize_text(genre),
        artist=normalize_text(artist),
        album=normalize_text(album),
    )


class SongCatalog:
    """
    High-level facade for the song catalog.

    Translates requests into record store operations and raises the core
    error taxonomy (`NotFoundError`, `ValidationError`) for the web layer to
    map onto responses. Nothing is retried.

    Dependencies:
    - `CatalogDb` for persistence
    - `StatsService` for the aggregate views
    """

    def __init__(self, *, db: CatalogDb) -> None:
        self._db = db
        self._stats = StatsService(db)
        self._initialized = False

    @property
    def initialized(self) -> bool:
        return self._initialized

    @property
    def db(self) -> CatalogDb:
        return self._db

    @property
    def stats(self) -> StatsService:
        self._require_initialized()
        return self._stats

    async def initialize(self) -> None:
        """
        Prepare the catalog.

        Contract:
        - `CatalogDb` must already be open.
        - schema/migrations are ensured here for convenience.
        """
        if not self._db.is_open:
            raise SongCatalogError("CatalogDb is not open. Open it before initializing SongCatalog.")

        await self._db.ensure_schema()
        self._initialized = True

    # ---- Reads ----

    async def list_songs(
        self,
        filters: SongFilters | None = None,
        *,
        page: Any = None,
        limit: Any = None,
        sort: str | None = None,
    ) -> PageResult[SongRow]:
        """
        One page of songs matching `filters` exactly.

        `total` counts the filtered set, not the whole catalog.
        """
        self._require_initialized()
        request = list_page_request(
            page,
            limit,
            sort,
            default_sort=DEFAULT_SONG_SORT,
            allowed_fields=SONG_SORT_COLUMNS,
        )
        total = await self._db.count_songs(filters=filters)
        if request.skip >= total:
            return PageResult(page=request.page, limit=request.limit, total=total, data=())
        rows = await self._db.list_songs(
            filters=filters,
            limit=request.take,
            offset=request.skip,
            order_by=request.sort.field,
            descending=request.sort.descending,
        )
        return PageResult(page=request.page, limit=request.limit, total=total, data=tuple(rows))

    async def get_song(self, song_id: str) -> SongRow:
        self._require_initialized()
        row = await self._db.get_song(song_id)
        if row is None:
            raise NotFoundError(f"Song not found: {song_id}")
        return row

    # ---- Writes ----

    async def create_song(self, payload: Mapping[str, Any]) -> SongRow:
        self._require_initialized()
        song = validate_new_song(payload)
        row = await self._db.create_song(song)
        logger.info("Created song %s (%s - %s)", row.id, row.artist, row.title)
        return row

    async def update_song(self, song_id: str, payload: Mapping[str, Any]) -> SongRow:
        """Merge the provided fields into the song and return the merged record."""
        self._require_initialized()
        patch = validate_song_patch(payload, song_id)
        row = await self._db.update_song(song_id, patch)
        if row is None:
            raise NotFoundError(f"Song not found: {song_id}")
        logger.info("Updated song %s (%s)", song_id, ", ".join(sorted(patch.changes)) or "no fields")
        return row

    async def delete_song(self, song_id: str) -> None:
        """Delete a song. A second delete of the same id raises NotFoundError."""
        self._require_initialized()
        if not await self._db.delete_song(song_id):
            raise NotFoundError(f"Song not found: {song_id}")
        logger.info("Deleted song %s", song_id)

    def _require_initialized(self) -> None:
        if not self._initialized:
            raise SongCatalogNotReadyError(
                "SongCatalog is not initialized. Call await SongCatalog.initialize() first."
            )
