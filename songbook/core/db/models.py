"""
DB models (DTOs) and input normalization helpers for the song catalog.

This module is intentionally lightweight:
- No DB connection knowledge
- No SQL
- Pure dataclasses + helper functions

Validation lives here too so every write path (web, scripts, tests) applies
the same rules before anything reaches the store.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime, timezone
from typing import Any, Final, Mapping

from songbook.core import ValidationError

REQUIRED_FIELDS: Final[tuple[str, ...]] = ("title", "artist", "album", "genre")

# SQLite INTEGER is a signed 64-bit value.
SQLITE_MAX_INTEGER: Final[int] = 2**63 - 1


@dataclass(frozen=True, slots=True)
class SongRow:
    """Song record as stored in SQLite."""

    id: str
    title: str
    artist: str
    album: str
    genre: str
    release_date: str | None
    play_count: int | None
    created_at: str
    updated_at: str

    def to_dict(self) -> dict[str, Any]:
        """JSON shape. `_id` mirrors `id` for clients of the document-store API."""
        return {
            "_id": self.id,
            "id": self.id,
            "title": self.title,
            "artist": self.artist,
            "album": self.album,
            "genre": self.genre,
            "releaseDate": self.release_date,
            "playCount": self.play_count,
            "createdAt": self.created_at,
            "updatedAt": self.updated_at,
        }


@dataclass(frozen=True, slots=True)
class NewSong:
    """Validated input for creating a song. Identifier and timestamps are assigned on insert."""

    title: str
    artist: str
    album: str
    genre: str
    release_date: str | None = None
    play_count: int | None = None


@dataclass(frozen=True, slots=True)
class SongPatch:
    """
    Validated partial update.

    `changes` maps column names to their new values. Only columns present in
    the request body appear here; an explicit null clears an optional column.
    """

    changes: dict[str, Any] = field(default_factory=dict)

    def __bool__(self) -> bool:
        return bool(self.changes)


@dataclass(frozen=True, slots=True)
class SongFilters:
    """Exact-match list filters. `None` means no constraint on that column."""

    genre: str | None = None
    artist: str | None = None
    album: str | None = None

    def as_columns(self) -> dict[str, str]:
        return {
            name: value
            for name, value in (("genre", self.genre), ("artist", self.artist), ("album", self.album))
            if value is not None
        }


def utc_now_iso() -> str:
    """Current UTC time as an ISO-8601 string with millisecond precision and a `Z` suffix."""
    now = datetime.now(timezone.utc)
    return now.isoformat(timespec="milliseconds").replace("+00:00", "Z")


def normalize_text(value: str | None) -> str | None:
    """
    Normalize optional text fields:
    - strip whitespace
    - coerce empty strings to None
    """
    if value is None:
        return None
    v = value.strip()
    return v if v else None


def normalize_release_date(value: Any) -> str | None:
    """
    Parse an ISO-8601 date or datetime and return its canonical string form.

    Raises ValueError for anything that is not an ISO string.
    """
    if value is None:
        return None
    if not isinstance(value, str):
        raise ValueError("must be an ISO-8601 date string")
    text = value.strip()
    if not text:
        return None
    if len(text) == 10:
        return date.fromisoformat(text).isoformat()
    return datetime.fromisoformat(text.replace("Z", "+00:00")).isoformat()


def normalize_play_count(value: Any) -> int | None:
    """
    Coerce a play count to a non-negative int (numeric strings accepted).

    Raises ValueError for negative, fractional or non-numeric values and for
    counts too large to store.
    """
    if value is None:
        return None
    if isinstance(value, bool):
        raise ValueError("must be a number")
    if isinstance(value, float):
        if not value.is_integer():
            raise ValueError("must be a whole number")
        value = int(value)
    if isinstance(value, str):
        text = value.strip()
        if not text.lstrip("-").isdigit():
            raise ValueError("must be a number")
        value = int(text)
    if not isinstance(value, int):
        raise ValueError("must be a number")
    if value < 0:
        raise ValueError("must not be negative")
    if value > SQLITE_MAX_INTEGER:
        raise ValueError("out of range")
    return value


def _required_text(payload: Mapping[str, Any], name: str, errors: dict[str, str]) -> str | None:
    raw = payload.get(name)
    if raw is not None and not isinstance(raw, str):
        errors[name] = f"{name.capitalize()} must be a string"
        return None
    value = normalize_text(raw)
    if value is None:
        errors[name] = f"{name.capitalize()} is required"
    return value


def _optional_values(payload: Mapping[str, Any], errors: dict[str, str]) -> dict[str, Any]:
    values: dict[str, Any] = {}
    if "releaseDate" in payload:
        try:
            values["release_date"] = normalize_release_date(payload["releaseDate"])
        except ValueError:
            errors["releaseDate"] = "Release date must be an ISO-8601 date"
    if "playCount" in payload:
        try:
            values["play_count"] = normalize_play_count(payload["playCount"])
        except ValueError:
            errors["playCount"] = "Play count must be a non-negative number"
    return values


def validate_new_song(payload: Mapping[str, Any]) -> NewSong:
    """
    Validate a create payload (camelCase JSON keys).

    All four core fields must be non-empty strings. Every failing field is
    reported at once.
    """
    if not isinstance(payload, Mapping):
        raise ValidationError({"body": "Request body must be a JSON object"})

    errors: dict[str, str] = {}
    core = {name: _required_text(payload, name, errors) for name in REQUIRED_FIELDS}
    optional = _optional_values(payload, errors)

    if errors:
        raise ValidationError(errors)

    return NewSong(
        title=core["title"],  # type: ignore[arg-type]
        artist=core["artist"],  # type: ignore[arg-type]
        album=core["album"],  # type: ignore[arg-type]
        genre=core["genre"],  # type: ignore[arg-type]
        release_date=optional.get("release_date"),
        play_count=optional.get("play_count"),
    )


def validate_song_patch(payload: Mapping[str, Any], song_id: str) -> SongPatch:
    """
    Validate a partial update payload.

    Provided core fields must stay non-empty. An identifier in the body is
    accepted only if it matches `song_id`. Unknown keys are ignored.
    """
    if not isinstance(payload, Mapping):
        raise ValidationError({"body": "Request body must be a JSON object"})

    errors: dict[str, str] = {}
    for id_key in ("id", "_id"):
        if id_key in payload and payload[id_key] != song_id:
            errors[id_key] = "Identifier cannot be changed"

    changes: dict[str, Any] = {}
    for name in REQUIRED_FIELDS:
        if name in payload:
            value = _required_text(payload, name, errors)
            if value is not None:
                changes[name] = value
    changes.update(_optional_values(payload, errors))

    if errors:
        raise ValidationError(errors)
    return SongPatch(changes=changes)
