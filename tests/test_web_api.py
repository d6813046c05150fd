"""
Tests for songbook.web (FastAPI app, routes, origin guard).

These tests verify:
- Song CRUD endpoints and their status codes (200/201/400/404)
- Filtered, paginated song listing
- Statistics and group endpoints, including the alias paths
- Write-origin allow-list (403 before any handler runs)
- Store failures surface as 500
"""

from __future__ import annotations

import pytest
from httpx import ASGITransport, AsyncClient

from songbook.core.catalog import SongCatalog
from songbook.core.catalog_db import CatalogDb
from songbook.web.origin_guard import FORBIDDEN_MESSAGE, is_write_allowed
from songbook.web.server import WebServer

SONGS = [
    {"title": "Heroes", "artist": "Bowie", "album": "Heroes", "genre": "Pop"},
    {"title": "Warszawa", "artist": "Bowie", "album": "Low", "genre": "Rock"},
    {"title": "Sound and Vision", "artist": "Eno", "album": "Low", "genre": "Rock"},
]

# =============================================================================
# Fixtures
# =============================================================================


@pytest.fixture
async def db() -> CatalogDb:
    """Create an in-memory database for testing."""
    db = CatalogDb(":memory:")
    await db.open()
    await db.ensure_schema()
    yield db
    await db.close()


@pytest.fixture
async def catalog(db: CatalogDb) -> SongCatalog:
    catalog = SongCatalog(db=db)
    await catalog.initialize()
    return catalog


@pytest.fixture
def web_server(catalog: SongCatalog) -> WebServer:
    """WebServer with an open (empty) origin allow-list."""
    return WebServer(catalog)


@pytest.fixture
async def client(web_server: WebServer) -> AsyncClient:
    """Create an async HTTP client for testing."""
    transport = ASGITransport(app=web_server.app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client


@pytest.fixture
async def seeded(client: AsyncClient) -> list[dict]:
    created = []
    for song in SONGS:
        response = await client.post("/song/", json=song)
        assert response.status_code == 201
        created.append(response.json())
    return created


# =============================================================================
# Basic endpoints
# =============================================================================


class TestBasicEndpoints:
    """Tests for the banner and health routes."""

    async def test_banner(self, client: AsyncClient) -> None:
        response = await client.get("/")
        assert response.status_code == 200
        assert response.json() == {"status": "ok", "message": "Song-Manager API is running..."}

    async def test_health(self, client: AsyncClient) -> None:
        response = await client.get("/health")
        assert response.status_code == 200
        assert response.json() == {"status": "ok", "server": "songbook"}


# =============================================================================
# CRUD
# =============================================================================


class TestSongCrud:
    """Tests for /song CRUD routes."""

    async def test_create_and_get(self, client: AsyncClient) -> None:
        response = await client.post(
            "/song/", json={**SONGS[0], "releaseDate": "1977-09-23", "playCount": 4}
        )
        assert response.status_code == 201
        created = response.json()
        assert created["_id"] == created["id"]
        assert created["releaseDate"] == "1977-09-23"
        assert created["playCount"] == 4
        assert created["createdAt"] == created["updatedAt"]

        response = await client.get(f"/song/{created['id']}")
        assert response.status_code == 200
        assert response.json() == created

    async def test_create_invalid_lists_fields(self, client: AsyncClient) -> None:
        response = await client.post("/song/", json={"title": "Heroes", "playCount": -1})

        assert response.status_code == 400
        body = response.json()
        assert set(body["fields"]) == {"artist", "album", "genre", "playCount"}
        assert "error" in body

    async def test_create_oversized_play_count(self, client: AsyncClient) -> None:
        response = await client.post(
            "/song/",
            json={"title": "Heroes", "artist": "Bowie", "album": "Heroes", "genre": "Pop", "playCount": 10**20},
        )

        assert response.status_code == 400
        assert response.json()["fields"] == {"playCount": "Play count must be a non-negative number"}

    async def test_create_malformed_json(self, client: AsyncClient) -> None:
        response = await client.post(
            "/song/", content=b"{not json", headers={"content-type": "application/json"}
        )
        assert response.status_code == 400
        assert "body" in response.json()["fields"]

    async def test_get_missing(self, client: AsyncClient) -> None:
        response = await client.get("/song/does-not-exist")
        assert response.status_code == 404
        assert response.json() == {"error": "Song not found"}

    async def test_patch_merges(self, client: AsyncClient, seeded: list[dict]) -> None:
        song = seeded[0]
        response = await client.patch(f"/song/{song['id']}", json={"genre": "X"})

        assert response.status_code == 200
        updated = response.json()
        assert updated["genre"] == "X"
        for key in ("title", "artist", "album", "createdAt", "id"):
            assert updated[key] == song[key]
        assert updated["updatedAt"] >= song["updatedAt"]

    async def test_put_is_an_update(self, client: AsyncClient, seeded: list[dict]) -> None:
        song = seeded[1]
        response = await client.put(f"/song/{song['id']}", json={"title": "Subterraneans"})
        assert response.status_code == 200
        assert response.json()["title"] == "Subterraneans"

    async def test_patch_missing(self, client: AsyncClient) -> None:
        response = await client.patch("/song/nope", json={"genre": "X"})
        assert response.status_code == 404

    async def test_patch_invalid(self, client: AsyncClient, seeded: list[dict]) -> None:
        song = seeded[0]
        response = await client.patch(f"/song/{song['id']}", json={"artist": "", "id": "other"})

        assert response.status_code == 400
        assert set(response.json()["fields"]) == {"artist", "id"}

    async def test_delete_twice(self, client: AsyncClient, seeded: list[dict]) -> None:
        song_id = seeded[0]["id"]

        response = await client.delete(f"/song/{song_id}")
        assert response.status_code == 200
        assert response.json() == {"message": "Song deleted successfully"}

        response = await client.delete(f"/song/{song_id}")
        assert response.status_code == 404

        response = await client.get(f"/song/{song_id}")
        assert response.status_code == 404


# =============================================================================
# Listing
# =============================================================================


class TestSongList:
    """Tests for GET /song/."""

    async def test_filter_and_page(self, client: AsyncClient, seeded: list[dict]) -> None:
        response = await client.get("/song/", params={"genre": "Rock", "page": 1, "limit": 1})

        assert response.status_code == 200
        body = response.json()
        assert len(body["data"]) == 1
        assert body["data"][0]["genre"] == "Rock"
        assert body["pagination"] == {"total": 2, "page": 1, "limit": 1, "totalPages": 2}

    async def test_combined_filters(self, client: AsyncClient, seeded: list[dict]) -> None:
        response = await client.get("/song/", params={"album": "Low", "artist": "Eno"})
        body = response.json()
        assert [s["title"] for s in body["data"]] == ["Sound and Vision"]
        assert body["pagination"]["total"] == 1

    async def test_sort_token(self, client: AsyncClient, seeded: list[dict]) -> None:
        response = await client.get("/song/", params={"sort": "title"})
        assert [s["title"] for s in response.json()["data"]] == [
            "Heroes",
            "Sound and Vision",
            "Warszawa",
        ]

        response = await client.get("/song/", params={"sort": "-title"})
        assert [s["title"] for s in response.json()["data"]] == [
            "Warszawa",
            "Sound and Vision",
            "Heroes",
        ]

    async def test_invalid_params_fall_back(self, client: AsyncClient, seeded: list[dict]) -> None:
        response = await client.get("/song/", params={"page": "abc", "limit": "-1", "sort": "bogus"})

        assert response.status_code == 200
        body = response.json()
        assert body["pagination"] == {"total": 3, "page": 1, "limit": 10, "totalPages": 1}
        assert len(body["data"]) == 3

    async def test_page_beyond_end(self, client: AsyncClient, seeded: list[dict]) -> None:
        response = await client.get("/song/", params={"page": 9, "limit": 2})
        body = response.json()
        assert body["data"] == []
        assert body["pagination"]["totalPages"] == 2

    async def test_huge_page_and_limit(self, client: AsyncClient, seeded: list[dict]) -> None:
        response = await client.get("/song/", params={"page": 10**19, "limit": 10})

        assert response.status_code == 200
        body = response.json()
        assert body["data"] == []
        assert body["pagination"]["total"] == 3

        response = await client.get("/song/", params={"limit": 10**19})

        assert response.status_code == 200
        body = response.json()
        assert len(body["data"]) == 3
        assert body["pagination"]["totalPages"] == 1


# =============================================================================
# Statistics
# =============================================================================


class TestStatsEndpoints:
    """Tests for /song/stats and the group views."""

    async def test_stats(self, client: AsyncClient, seeded: list[dict]) -> None:
        response = await client.get("/song/stats")

        assert response.status_code == 200
        body = response.json()
        assert body["totalSongs"] == 3
        assert body["totalArtists"] == 2
        assert body["totalAlbums"] == 2
        assert body["totalGenres"] == 2
        assert body["songsPerAlbum"][0] == {
            "album": "Low",
            "artist": "Bowie",
            "totalSongs": 2,
            "songs": ["Warszawa", "Sound and Vision"],
        }

    async def test_stats_empty(self, client: AsyncClient) -> None:
        body = (await client.get("/song/stats")).json()
        assert body["totalSongs"] == 0
        assert body["songsPerGenre"] == []

    @pytest.mark.parametrize("path", ["/song/artists", "/song/songs-per-artist"])
    async def test_artists(self, client: AsyncClient, seeded: list[dict], path: str) -> None:
        response = await client.get(path)

        assert response.status_code == 200
        body = response.json()
        assert [(a["artist"], a["totalSongs"], a["albumCount"]) for a in body["data"]] == [
            ("Bowie", 2, 2),
            ("Eno", 1, 1),
        ]
        assert body["totalArtists"] == 2
        assert body["totalPages"] == 1

    @pytest.mark.parametrize("path", ["/song/albums", "/song/album", "/song/songs-per-album"])
    async def test_albums(self, client: AsyncClient, seeded: list[dict], path: str) -> None:
        response = await client.get(path, params={"sortField": "album", "sortOrder": "asc"})

        body = response.json()
        assert [a["album"] for a in body["data"]] == ["Heroes", "Low"]
        assert body["totalAlbums"] == 2

    @pytest.mark.parametrize("path", ["/song/genres", "/song/genre"])
    async def test_genres_paging(self, client: AsyncClient, seeded: list[dict], path: str) -> None:
        response = await client.get(path, params={"page": 2, "limit": 1})

        body = response.json()
        assert [g["genre"] for g in body["data"]] == ["Pop"]
        assert (body["page"], body["limit"], body["totalGenres"], body["totalPages"]) == (2, 1, 2, 2)

    async def test_unknown_sort_field(self, client: AsyncClient, seeded: list[dict]) -> None:
        response = await client.get("/song/genres", params={"sortField": "bogus", "sortOrder": "ASC"})
        assert [g["genre"] for g in response.json()["data"]] == ["Pop", "Rock"]


# =============================================================================
# Origin guard
# =============================================================================


class TestOriginGuard:
    """Tests for the write-origin allow-list."""

    @pytest.mark.parametrize(
        ("method", "origin", "allowed", "expected"),
        [
            ("POST", None, (), True),
            ("DELETE", "http://evil.example", (), True),
            ("GET", None, ("http://app.example",), True),
            ("GET", "http://evil.example", ("http://app.example",), True),
            ("POST", "http://app.example", ("http://app.example",), True),
            ("post", "http://app.example", ("http://app.example",), True),
            ("POST", None, ("http://app.example",), False),
            ("PATCH", "http://evil.example", ("http://app.example",), False),
            ("PUT", "http://evil.example", ("http://app.example",), False),
            ("DELETE", "http://app.example/", ("http://app.example",), False),
        ],
    )
    def test_is_write_allowed(self, method, origin, allowed, expected) -> None:
        assert is_write_allowed(method, origin, allowed) is expected

    @pytest.fixture
    async def guarded(self, catalog: SongCatalog) -> AsyncClient:
        server = WebServer(catalog, allowed_origins=["http://app.example"])
        transport = ASGITransport(app=server.app)
        async with AsyncClient(transport=transport, base_url="http://test") as client:
            yield client

    async def test_open_policy_permits_writes_without_origin(self, client: AsyncClient) -> None:
        response = await client.post("/song/", json=SONGS[0])
        assert response.status_code == 201

    async def test_mismatched_origin_is_forbidden(
        self, guarded: AsyncClient, catalog: SongCatalog
    ) -> None:
        response = await guarded.post(
            "/song/", json=SONGS[0], headers={"Origin": "http://evil.example"}
        )

        assert response.status_code == 403
        assert response.json() == {"message": FORBIDDEN_MESSAGE}
        assert await catalog.db.count_songs() == 0

    async def test_missing_origin_is_forbidden(self, guarded: AsyncClient) -> None:
        response = await guarded.delete("/song/anything")
        assert response.status_code == 403

    async def test_listed_origin_may_write(self, guarded: AsyncClient) -> None:
        response = await guarded.post(
            "/song/", json=SONGS[0], headers={"Origin": "http://app.example"}
        )
        assert response.status_code == 201

    async def test_reads_are_never_guarded(self, guarded: AsyncClient) -> None:
        response = await guarded.get("/song/", headers={"Origin": "http://evil.example"})
        assert response.status_code == 200


# =============================================================================
# Failures
# =============================================================================


class TestStoreFailures:
    """Store failures surface as 500 responses."""

    async def test_closed_store(self, client: AsyncClient, db: CatalogDb) -> None:
        await db.close()

        response = await client.get("/song/")
        assert response.status_code == 500
        assert "error" in response.json()

        response = await client.get("/song/stats")
        assert response.status_code == 500
