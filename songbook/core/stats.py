"""
Catalog statistics: global snapshot and paginated group views.

The pipelines work on an in-memory song sequence:

    songs -> group (by genre / artist / album) -> per-group fields -> sort -> slice

Grouping keys use exact, case-sensitive string equality. "Bowie" and "bowie"
are two artists.

`StatsService` binds the pure functions to a `CatalogDb`. Every call reads
the full song set with a single query, so each response is computed from one
consistent snapshot and nothing is cached between requests.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Final, Iterable, Sequence

from songbook.core.db.models import SongRow
from songbook.core.paging import PageResult, page_request, paginate

if TYPE_CHECKING:
    from songbook.core.catalog_db import CatalogDb

logger = logging.getLogger(__name__)

DEFAULT_STATS_SORT_FIELD: Final[str] = "totalSongs"

# Public (camelCase) sort field -> dataclass attribute
ARTIST_SORT_FIELDS: Final[dict[str, str]] = {
    "totalSongs": "total_songs",
    "albumCount": "album_count",
    "artist": "artist",
}
ALBUM_SORT_FIELDS: Final[dict[str, str]] = {
    "totalSongs": "total_songs",
    "album": "album",
    "artist": "artist",
}
GENRE_SORT_FIELDS: Final[dict[str, str]] = {
    "totalSongs": "total_songs",
    "genre": "genre",
}


@dataclass(frozen=True, slots=True)
class GenreStats:
    genre: str
    total_songs: int
    songs: tuple[str, ...]

    def to_dict(self) -> dict[str, Any]:
        return {"genre": self.genre, "totalSongs": self.total_songs, "songs": list(self.songs)}


@dataclass(frozen=True, slots=True)
class ArtistStats:
    artist: str
    total_songs: int
    album_count: int
    albums: tuple[str, ...]
    songs: tuple[str, ...]

    def to_dict(self) -> dict[str, Any]:
        return {
            "artist": self.artist,
            "totalSongs": self.total_songs,
            "albumCount": self.album_count,
            "albums": list(self.albums),
            "songs": list(self.songs),
        }


@dataclass(frozen=True, slots=True)
class AlbumStats:
    album: str
    artist: str  # artist of the album's first song
    total_songs: int
    songs: tuple[str, ...]

    def to_dict(self) -> dict[str, Any]:
        return {
            "album": self.album,
            "artist": self.artist,
            "totalSongs": self.total_songs,
            "songs": list(self.songs),
        }


@dataclass(frozen=True, slots=True)
class StatisticsSnapshot:
    total_songs: int
    total_artists: int
    total_albums: int
    total_genres: int
    songs_per_genre: tuple[GenreStats, ...]
    songs_per_artist: tuple[ArtistStats, ...]
    songs_per_album: tuple[AlbumStats, ...]

    def to_dict(self) -> dict[str, Any]:
        return {
            "totalSongs": self.total_songs,
            "totalArtists": self.total_artists,
            "totalAlbums": self.total_albums,
            "totalGenres": self.total_genres,
            "songsPerGenre": [g.to_dict() for g in self.songs_per_genre],
            "songsPerArtist": [a.to_dict() for a in self.songs_per_artist],
            "songsPerAlbum": [a.to_dict() for a in self.songs_per_album],
        }


# ---------------------------------------------------------------------------
# Grouping
# ---------------------------------------------------------------------------


@dataclass
class _ArtistGroup:
    songs: list[str] = field(default_factory=list)
    # dict as an insertion-ordered set of album names
    albums: dict[str, None] = field(default_factory=dict)


@dataclass
class _AlbumGroup:
    artist: str
    songs: list[str] = field(default_factory=list)


@dataclass
class _Groups:
    genres: dict[str, list[str]] = field(default_factory=dict)
    artists: dict[str, _ArtistGroup] = field(default_factory=dict)
    albums: dict[str, _AlbumGroup] = field(default_factory=dict)
    song_count: int = 0


def _group_songs(songs: Iterable[SongRow]) -> _Groups:
    """Group by genre, artist and album in one pass over `songs`."""
    groups = _Groups()
    for song in songs:
        groups.song_count += 1
        groups.genres.setdefault(song.genre, []).append(song.title)

        artist = groups.artists.setdefault(song.artist, _ArtistGroup())
        artist.songs.append(song.title)
        artist.albums.setdefault(song.album, None)

        album = groups.albums.get(song.album)
        if album is None:
            album = groups.albums[song.album] = _AlbumGroup(artist=song.artist)
        album.songs.append(song.title)
    return groups


def _genre_stats(groups: _Groups) -> list[GenreStats]:
    return [
        GenreStats(genre=name, total_songs=len(titles), songs=tuple(titles))
        for name, titles in groups.genres.items()
    ]


def _artist_stats(groups: _Groups) -> list[ArtistStats]:
    return [
        ArtistStats(
            artist=name,
            total_songs=len(g.songs),
            album_count=len(g.albums),
            albums=tuple(g.albums),
            songs=tuple(g.songs),
        )
        for name, g in groups.artists.items()
    ]


def _album_stats(groups: _Groups) -> list[AlbumStats]:
    return [
        AlbumStats(album=name, artist=g.artist, total_songs=len(g.songs), songs=tuple(g.songs))
        for name, g in groups.albums.items()
    ]


def _by_default_order(items: list[Any], key_attr: str) -> tuple[Any, ...]:
    # Most songs first, then by name, same as an unparameterized group view.
    ordered = sorted(items, key=lambda item: getattr(item, key_attr))
    ordered.sort(key=lambda item: item.total_songs, reverse=True)
    return tuple(ordered)


# ---------------------------------------------------------------------------
# Public pipelines
# ---------------------------------------------------------------------------


def compute_global_stats(songs: Iterable[SongRow]) -> StatisticsSnapshot:
    """Build the global statistics snapshot from one pass over `songs`."""
    groups = _group_songs(songs)
    return StatisticsSnapshot(
        total_songs=groups.song_count,
        total_artists=len(groups.artists),
        total_albums=len(groups.albums),
        total_genres=len(groups.genres),
        songs_per_genre=_by_default_order(_genre_stats(groups), "genre"),
        songs_per_artist=_by_default_order(_artist_stats(groups), "artist"),
        songs_per_album=_by_default_order(_album_stats(groups), "album"),
    )


def _group_page(
    items: list[Any],
    *,
    fields: dict[str, str],
    key_attr: str,
    page: Any,
    limit: Any,
    sort_field: str | None,
    sort_order: str | None,
) -> PageResult[Any]:
    request = page_request(
        page,
        limit,
        sort_field,
        sort_order,
        default_field=DEFAULT_STATS_SORT_FIELD,
        allowed_fields=fields,
    )
    return paginate(
        items,
        request,
        value=lambda item, name: getattr(item, fields[name]),
        tie_key=lambda item: getattr(item, key_attr),
    )


def list_by_artist(
    songs: Iterable[SongRow],
    page: Any = None,
    limit: Any = None,
    sort_field: str | None = None,
    sort_order: str | None = None,
) -> PageResult[ArtistStats]:
    """Songs grouped by artist, with album count and album list."""
    return _group_page(
        _artist_stats(_group_songs(songs)),
        fields=ARTIST_SORT_FIELDS,
        key_attr="artist",
        page=page,
        limit=limit,
        sort_field=sort_field,
        sort_order=sort_order,
    )


def list_by_album(
    songs: Iterable[SongRow],
    page: Any = None,
    limit: Any = None,
    sort_field: str | None = None,
    sort_order: str | None = None,
) -> PageResult[AlbumStats]:
    """Songs grouped by album name, with the artist of first occurrence."""
    return _group_page(
        _album_stats(_group_songs(songs)),
        fields=ALBUM_SORT_FIELDS,
        key_attr="album",
        page=page,
        limit=limit,
        sort_field=sort_field,
        sort_order=sort_order,
    )


def list_by_genre(
    songs: Iterable[SongRow],
    page: Any = None,
    limit: Any = None,
    sort_field: str | None = None,
    sort_order: str | None = None,
) -> PageResult[GenreStats]:
    """Songs grouped by genre."""
    return _group_page(
        _genre_stats(_group_songs(songs)),
        fields=GENRE_SORT_FIELDS,
        key_attr="genre",
        page=page,
        limit=limit,
        sort_field=sort_field,
        sort_order=sort_order,
    )


class StatsService:
    """Aggregation service over the record store. Stateless; safe to share."""

    def __init__(self, db: CatalogDb) -> None:
        self._db = db

    async def _snapshot(self) -> Sequence[SongRow]:
        songs = await self._db.list_all_songs()
        logger.debug("Aggregating statistics over %d songs", len(songs))
        return songs

    async def compute_global_stats(self) -> StatisticsSnapshot:
        return compute_global_stats(await self._snapshot())

    async def list_by_artist(
        self,
        page: Any = None,
        limit: Any = None,
        sort_field: str | None = None,
        sort_order: str | None = None,
    ) -> PageResult[ArtistStats]:
        return list_by_artist(await self._snapshot(), page, limit, sort_field, sort_order)

    async def list_by_album(
        self,
        page: Any = None,
        limit: Any = None,
        sort_field: str | None = None,
        sort_order: str | None = None,
    ) -> PageResult[AlbumStats]:
        return list_by_album(await self._snapshot(), page, limit, sort_field, sort_order)

    async def list_by_genre(
        self,
        page: Any = None,
        limit: Any = None,
        sort_field: str | None = None,
        sort_order: str | None = None,
    ) -> PageResult[GenreStats]:
        return list_by_genre(await self._snapshot(), page, limit, sort_field, sort_order)
