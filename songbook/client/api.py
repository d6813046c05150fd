"""
HTTP client for the Songbook REST API.

`SongsApi` wraps an `httpx.AsyncClient` and returns decoded JSON. Non-2xx
responses raise `ApiError` carrying the status code and the server's error
message; transport failures surface as `httpx.HTTPError`.

Usage:
    async with SongsApi("http://localhost:5050") as api:
        page = await api.fetch_songs(page=1, limit=10, filters={"genre": "Rock"})
"""

from __future__ import annotations

import logging
from typing import Any, Mapping

import httpx

logger = logging.getLogger(__name__)

DEFAULT_BASE_URL = "http://localhost:5050"


class ApiError(Exception):
    """Raised for non-2xx responses and unreadable bodies from the Songbook API."""

    def __init__(self, status_code: int, message: str) -> None:
        self.status_code = status_code
        self.message = message
        super().__init__(message)


def _error_message(response: httpx.Response) -> str:
    try:
        body = response.json()
    except ValueError:
        body = None
    if isinstance(body, dict):
        for key in ("error", "message"):
            if isinstance(body.get(key), str) and body[key]:
                return body[key]
    return f"Request failed with status code {response.status_code}"


class SongsApi:
    """Async client for every Songbook endpoint."""

    def __init__(
        self,
        base_url: str = DEFAULT_BASE_URL,
        *,
        prefix: str = "/song",
        transport: httpx.AsyncBaseTransport | None = None,
        timeout: float = 10.0,
    ) -> None:
        self._prefix = prefix.rstrip("/")
        self._client = httpx.AsyncClient(base_url=base_url, transport=transport, timeout=timeout)

    async def __aenter__(self) -> SongsApi:
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._client.aclose()

    async def _request(
        self,
        method: str,
        path: str,
        *,
        params: Mapping[str, Any] | None = None,
        json: Any = None,
    ) -> Any:
        url = f"{self._prefix}{path}"
        response = await self._client.request(method, url, params=params, json=json)
        if response.is_error:
            message = _error_message(response)
            logger.debug("%s %s failed (%d): %s", method, url, response.status_code, message)
            raise ApiError(response.status_code, message)
        try:
            return response.json()
        except ValueError as e:
            logger.debug("%s %s returned a non-JSON body", method, url)
            raise ApiError(response.status_code, "Invalid JSON response") from e

    # ---- Songs ----

    async def fetch_songs(
        self,
        page: int = 1,
        limit: int = 10,
        filters: Mapping[str, str] | None = None,
        sort: str = "-createdAt",
    ) -> dict[str, Any]:
        """One page of songs: `{"data": [...], "pagination": {...}}`."""
        params: dict[str, Any] = {"page": page, "limit": limit, "sort": sort}
        params.update({k: v for k, v in (filters or {}).items() if v})
        return await self._request("GET", "/", params=params)

    async def get_song(self, song_id: str) -> dict[str, Any]:
        return await self._request("GET", f"/{song_id}")

    async def create_song(self, fields: Mapping[str, Any]) -> dict[str, Any]:
        return await self._request("POST", "/", json=dict(fields))

    async def update_song(self, song_id: str, fields: Mapping[str, Any]) -> dict[str, Any]:
        return await self._request("PATCH", f"/{song_id}", json=dict(fields))

    async def delete_song(self, song_id: str) -> None:
        await self._request("DELETE", f"/{song_id}")

    # ---- Statistics ----

    async def fetch_stats(self) -> dict[str, Any]:
        return await self._request("GET", "/stats")

    async def _fetch_group(
        self, path: str, page: int, limit: int, sort_field: str, sort_order: str
    ) -> dict[str, Any]:
        params = {"page": page, "limit": limit, "sortField": sort_field, "sortOrder": sort_order}
        return await self._request("GET", path, params=params)

    async def fetch_artists(
        self, page: int = 1, limit: int = 10, sort_field: str = "totalSongs", sort_order: str = "desc"
    ) -> dict[str, Any]:
        return await self._fetch_group("/artists", page, limit, sort_field, sort_order)

    async def fetch_albums(
        self, page: int = 1, limit: int = 10, sort_field: str = "totalSongs", sort_order: str = "desc"
    ) -> dict[str, Any]:
        return await self._fetch_group("/albums", page, limit, sort_field, sort_order)

    async def fetch_genres(
        self, page: int = 1, limit: int = 10, sort_field: str = "totalSongs", sort_order: str = "desc"
    ) -> dict[str, Any]:
        return await self._fetch_group("/genres", page, limit, sort_field, sort_order)

    async def fetch_songs_per_artist(
        self, page: int = 1, limit: int = 10, sort_field: str = "totalSongs", sort_order: str = "desc"
    ) -> dict[str, Any]:
        return await self._fetch_group("/songs-per-artist", page, limit, sort_field, sort_order)

    async def fetch_songs_per_album(
        self, page: int = 1, limit: int = 10, sort_field: str = "totalSongs", sort_order: str = "desc"
    ) -> dict[str, Any]:
        return await self._fetch_group("/songs-per-album", page, limit, sort_field, sort_order)
