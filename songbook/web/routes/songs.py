"""
Song CRUD routes.

- GET    /song/            paginated, filtered, sorted song list
- GET    /song/{song_id}   one song
- POST   /song/            create
- PATCH  /song/{song_id}   partial update (PUT is accepted as well)
- DELETE /song/{song_id}   delete

Core errors (`NotFoundError`, `ValidationError`) propagate to the exception
handlers installed by `WebServer`.
"""

from __future__ import annotations

import json
import logging
from typing import TYPE_CHECKING, Any

from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse

from songbook.core import ValidationError
from songbook.core.catalog import build_filters

if TYPE_CHECKING:
    from fastapi import FastAPI

    from songbook.core.catalog import SongCatalog

logger = logging.getLogger(__name__)

router = APIRouter(tags=["songs"])


def register_song_routes(app: FastAPI, catalog: SongCatalog, prefix: str = "/song") -> None:
    """
    Register song CRUD routes with the FastAPI app.

    Must be registered after the statistics routes so that `/stats`,
    `/artists` etc. are not captured by `/{song_id}`.
    """
    app.state.catalog = catalog
    app.include_router(router, prefix=prefix)


def get_catalog(request: Request) -> SongCatalog:
    return request.app.state.catalog


async def read_json_body(request: Request) -> Any:
    """Decode the request body, reporting malformed JSON as a validation error."""
    raw = await request.body()
    if not raw:
        return {}
    try:
        return json.loads(raw)
    except ValueError as e:
        raise ValidationError({"body": "Request body must be valid JSON"}) from e


@router.get("/")
async def list_songs(
    request: Request,
    page: str | None = None,
    limit: str | None = None,
    sort: str | None = None,
    genre: str | None = None,
    artist: str | None = None,
    album: str | None = None,
) -> dict[str, Any]:
    """List songs matching the optional exact-match filters."""
    result = await get_catalog(request).list_songs(
        build_filters(genre=genre, artist=artist, album=album),
        page=page,
        limit=limit,
        sort=sort,
    )
    return {
        "data": [song.to_dict() for song in result.data],
        "pagination": result.pagination(),
    }


@router.get("/{song_id}")
async def get_song(request: Request, song_id: str) -> dict[str, Any]:
    song = await get_catalog(request).get_song(song_id)
    return song.to_dict()


@router.post("/", status_code=201)
async def create_song(request: Request) -> JSONResponse:
    payload = await read_json_body(request)
    song = await get_catalog(request).create_song(payload)
    return JSONResponse(status_code=201, content=song.to_dict())


@router.api_route("/{song_id}", methods=["PATCH", "PUT"])
async def update_song(request: Request, song_id: str) -> dict[str, Any]:
    """Merge the body into the song; returns the updated record."""
    payload = await read_json_body(request)
    song = await get_catalog(request).update_song(song_id, payload)
    return song.to_dict()


@router.delete("/{song_id}")
async def delete_song(request: Request, song_id: str) -> dict[str, str]:
    await get_catalog(request).delete_song(song_id)
    return {"message": "Song deleted successfully"}
