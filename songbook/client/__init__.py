"""
Songbook client-side state layer.

Flow: the view dispatches a `*Start` action -> `SongsStore` reduces it and
runs the effect -> the effect calls the API through `SongsApi` -> the
resulting `*Success` / `*Failure` action is reduced -> listeners re-render.
"""

from songbook.client.api import ApiError, SongsApi
from songbook.client.state import (
    CreateSongStart,
    DeleteSongStart,
    FetchSongsStart,
    Pagination,
    SongsState,
    UpdateSongStart,
    songs_reducer,
)
from songbook.client.store import SongsStore

__all__ = [
    "ApiError",
    "SongsApi",
    "SongsStore",
    "SongsState",
    "Pagination",
    "FetchSongsStart",
    "CreateSongStart",
    "UpdateSongStart",
    "DeleteSongStart",
    "songs_reducer",
]
