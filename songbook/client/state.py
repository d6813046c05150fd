"""
Client-side songs state: actions and a pure reducer.

Four request lifecycles (fetch, create, update, delete) each follow
`Start -> Success | Failure`. Mutations are applied only once the server has
confirmed them; a failure records the message and keeps the last-known-good
song list.

Songs are kept as the JSON dicts returned by the API.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Any, Mapping

Song = Mapping[str, Any]


@dataclass(frozen=True)
class Pagination:
    total: int = 0
    page: int = 1
    limit: int = 10
    total_pages: int = 0

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> Pagination:
        return cls(
            total=int(data.get("total", 0)),
            page=int(data.get("page", 1)),
            limit=int(data.get("limit", 10)),
            total_pages=int(data.get("totalPages", 0)),
        )


@dataclass(frozen=True)
class SongsState:
    songs: tuple[Song, ...] = ()
    pagination: Pagination | None = None
    loading: bool = False
    error: str | None = None


def song_id(song: Song) -> str | None:
    """Identifier of a song dict (`_id` or `id`)."""
    return song.get("_id") or song.get("id")


# =============================================================================
# Actions
# =============================================================================


@dataclass(frozen=True)
class Action:
    """Base class for all actions."""

    action_type: str = ""
    # Request lifecycle this action belongs to (fetch/create/update/delete)
    category: str = ""


@dataclass(frozen=True)
class FetchSongsStart(Action):
    action_type: str = field(default="songs/fetchSongsStart", init=False)
    category: str = field(default="fetch", init=False)
    page: int = 1
    limit: int = 10
    filters: Mapping[str, str] = field(default_factory=dict)
    sort: str = "-createdAt"


@dataclass(frozen=True)
class FetchSongsSuccess(Action):
    action_type: str = field(default="songs/fetchSongsSuccess", init=False)
    category: str = field(default="fetch", init=False)
    data: tuple[Song, ...] = ()
    pagination: Pagination | None = None


@dataclass(frozen=True)
class FetchSongsFailure(Action):
    action_type: str = field(default="songs/fetchSongsFailure", init=False)
    category: str = field(default="fetch", init=False)
    message: str = ""


@dataclass(frozen=True)
class CreateSongStart(Action):
    action_type: str = field(default="songs/createSongStart", init=False)
    category: str = field(default="create", init=False)
    fields: Mapping[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class CreateSongSuccess(Action):
    action_type: str = field(default="songs/createSongSuccess", init=False)
    category: str = field(default="create", init=False)
    song: Song = field(default_factory=dict)


@dataclass(frozen=True)
class CreateSongFailure(Action):
    action_type: str = field(default="songs/createSongFailure", init=False)
    category: str = field(default="create", init=False)
    message: str = ""


@dataclass(frozen=True)
class UpdateSongStart(Action):
    action_type: str = field(default="songs/updateSongStart", init=False)
    category: str = field(default="update", init=False)
    song_id: str = ""
    fields: Mapping[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class UpdateSongSuccess(Action):
    action_type: str = field(default="songs/updateSongSuccess", init=False)
    category: str = field(default="update", init=False)
    song: Song = field(default_factory=dict)


@dataclass(frozen=True)
class UpdateSongFailure(Action):
    action_type: str = field(default="songs/updateSongFailure", init=False)
    category: str = field(default="update", init=False)
    message: str = ""


@dataclass(frozen=True)
class DeleteSongStart(Action):
    action_type: str = field(default="songs/deleteSongStart", init=False)
    category: str = field(default="delete", init=False)
    song_id: str = ""


@dataclass(frozen=True)
class DeleteSongSuccess(Action):
    action_type: str = field(default="songs/deleteSongSuccess", init=False)
    category: str = field(default="delete", init=False)
    song_id: str = ""


@dataclass(frozen=True)
class DeleteSongFailure(Action):
    action_type: str = field(default="songs/deleteSongFailure", init=False)
    category: str = field(default="delete", init=False)
    message: str = ""


START_ACTIONS = (FetchSongsStart, CreateSongStart, UpdateSongStart, DeleteSongStart)
FAILURE_ACTIONS = (FetchSongsFailure, CreateSongFailure, UpdateSongFailure, DeleteSongFailure)


# =============================================================================
# Reducer
# =============================================================================


def songs_reducer(state: SongsState, action: Action) -> SongsState:
    """Return the state after `action`. Never mutates `state`."""
    if isinstance(action, START_ACTIONS):
        return replace(state, loading=True, error=None)

    if isinstance(action, FAILURE_ACTIONS):
        return replace(state, loading=False, error=action.message)

    if isinstance(action, FetchSongsSuccess):
        return replace(
            state, songs=tuple(action.data), pagination=action.pagination, loading=False
        )

    if isinstance(action, CreateSongSuccess):
        return replace(state, songs=(action.song, *state.songs), loading=False)

    if isinstance(action, UpdateSongSuccess):
        target = song_id(action.song)
        songs = tuple(action.song if song_id(s) == target else s for s in state.songs)
        return replace(state, songs=songs, loading=False)

    if isinstance(action, DeleteSongSuccess):
        songs = tuple(s for s in state.songs if song_id(s) != action.song_id)
        return replace(state, songs=songs, loading=False)

    return state
