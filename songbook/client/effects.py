"""
Effect handlers: one async function per request lifecycle.

Each handler takes the `SongsApi` and a `*Start` action, performs the HTTP
call and returns the matching `*Success` or `*Failure` action. Handlers never
raise for API or transport errors; those become the failure message.
"""

from __future__ import annotations

import logging
from typing import Awaitable, Callable

import httpx

from songbook.client.api import ApiError, SongsApi
from songbook.client.state import (
    Action,
    CreateSongFailure,
    CreateSongStart,
    CreateSongSuccess,
    DeleteSongFailure,
    DeleteSongStart,
    DeleteSongSuccess,
    FetchSongsFailure,
    FetchSongsStart,
    FetchSongsSuccess,
    Pagination,
    UpdateSongFailure,
    UpdateSongStart,
    UpdateSongSuccess,
)

logger = logging.getLogger(__name__)

Effect = Callable[[SongsApi, Action], Awaitable[Action]]


def _failure_message(error: Exception, fallback: str) -> str:
    message = str(error)
    logger.debug("Effect failed: %s", message or fallback)
    return message or fallback


async def fetch_songs_effect(api: SongsApi, action: FetchSongsStart) -> Action:
    try:
        body = await api.fetch_songs(action.page, action.limit, action.filters, action.sort)
    except (ApiError, httpx.HTTPError) as e:
        return FetchSongsFailure(message=_failure_message(e, "Failed to fetch songs"))
    return FetchSongsSuccess(
        data=tuple(body.get("data", ())),
        pagination=Pagination.from_dict(body.get("pagination", {})),
    )


async def create_song_effect(api: SongsApi, action: CreateSongStart) -> Action:
    try:
        song = await api.create_song(action.fields)
    except (ApiError, httpx.HTTPError) as e:
        return CreateSongFailure(message=_failure_message(e, "Failed to create song"))
    return CreateSongSuccess(song=song)


async def update_song_effect(api: SongsApi, action: UpdateSongStart) -> Action:
    try:
        song = await api.update_song(action.song_id, action.fields)
    except (ApiError, httpx.HTTPError) as e:
        return UpdateSongFailure(message=_failure_message(e, "Failed to update song"))
    return UpdateSongSuccess(song=song)


async def delete_song_effect(api: SongsApi, action: DeleteSongStart) -> Action:
    try:
        await api.delete_song(action.song_id)
    except (ApiError, httpx.HTTPError) as e:
        return DeleteSongFailure(message=_failure_message(e, "Failed to delete song"))
    return DeleteSongSuccess(song_id=action.song_id)


EFFECTS: dict[type[Action], Effect] = {
    FetchSongsStart: fetch_songs_effect,  # type: ignore[dict-item]
    CreateSongStart: create_song_effect,  # type: ignore[dict-item]
    UpdateSongStart: update_song_effect,  # type: ignore[dict-item]
    DeleteSongStart: delete_song_effect,  # type: ignore[dict-item]
}
