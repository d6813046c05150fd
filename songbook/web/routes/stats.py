"""
Statistics routes.

- GET /song/stats                                 global snapshot
- GET /song/artists, /song/songs-per-artist       songs grouped by artist
- GET /song/albums, /song/album, /song/songs-per-album
- GET /song/genres, /song/genre

Group views take `page`, `limit`, `sortField` and `sortOrder` query
parameters. Invalid values fall back to defaults; nothing is rejected.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from fastapi import APIRouter, Query, Request

from songbook.core.paging import PageResult

if TYPE_CHECKING:
    from fastapi import FastAPI

    from songbook.core.catalog import SongCatalog
    from songbook.core.stats import StatsService

logger = logging.getLogger(__name__)

router = APIRouter(tags=["stats"])


def register_stats_routes(app: FastAPI, catalog: SongCatalog, prefix: str = "/song") -> None:
    """Register statistics routes with the FastAPI app."""
    app.state.catalog = catalog
    app.include_router(router, prefix=prefix)


def _stats(request: Request) -> StatsService:
    catalog: SongCatalog = request.app.state.catalog
    return catalog.stats


def _group_page(result: PageResult[Any], total_key: str) -> dict[str, Any]:
    return {
        "page": result.page,
        "limit": result.limit,
        "total": result.total,
        total_key: result.total,
        "totalPages": result.total_pages,
        "data": [item.to_dict() for item in result.data],
    }


@router.get("/stats")
async def global_stats(request: Request) -> dict[str, Any]:
    snapshot = await _stats(request).compute_global_stats()
    return snapshot.to_dict()


@router.get("/artists")
@router.get("/songs-per-artist")
async def songs_per_artist(
    request: Request,
    page: str | None = None,
    limit: str | None = None,
    sort_field: str | None = Query(None, alias="sortField"),
    sort_order: str | None = Query(None, alias="sortOrder"),
) -> dict[str, Any]:
    result = await _stats(request).list_by_artist(page, limit, sort_field, sort_order)
    return _group_page(result, "totalArtists")


@router.get("/albums")
@router.get("/album")
@router.get("/songs-per-album")
async def songs_per_album(
    request: Request,
    page: str | None = None,
    limit: str | None = None,
    sort_field: str | None = Query(None, alias="sortField"),
    sort_order: str | None = Query(None, alias="sortOrder"),
) -> dict[str, Any]:
    result = await _stats(request).list_by_album(page, limit, sort_field, sort_order)
    return _group_page(result, "totalAlbums")


@router.get("/genres")
@router.get("/genre")
async def songs_per_genre(
    request: Request,
    page: str | None = None,
    limit: str | None = None,
    sort_field: str | None = Query(None, alias="sortField"),
    sort_order: str | None = Query(None, alias="sortOrder"),
) -> dict[str, Any]:
    result = await _stats(request).list_by_genre(page, limit, sort_field, sort_order)
    return _group_page(result, "totalGenres")
