"""
Web Server Module for Songbook.

This module provides the WebServer class that creates and manages the
FastAPI application, registers all routes, and maps core errors onto HTTP
responses.

The WebServer integrates:
- REST API for songs (CRUD) under the configured prefix
- Statistics and group views
- Write-origin guard and CORS
"""

from __future__ import annotations

import asyncio
import logging
from typing import TYPE_CHECKING, Awaitable, Callable, Collection

import aiosqlite
import uvicorn
from fastapi import FastAPI, Request, Response
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from songbook import __version__
from songbook.core import CoreError, NotFoundError, StoreUnavailableError, ValidationError
from songbook.web.origin_guard import install_origin_guard
from songbook.web.routes.songs import register_song_routes
from songbook.web.routes.stats import register_stats_routes

if TYPE_CHECKING:
    from songbook.core.catalog import SongCatalog

logger = logging.getLogger(__name__)


class WebServer:
    """
    FastAPI-based web server for Songbook.

    Provides the song CRUD endpoints, the statistics endpoints, a banner at
    `/` and a health check at `/health`.
    """

    def __init__(
        self,
        catalog: SongCatalog,
        *,
        allowed_origins: Collection[str] = (),
        api_prefix: str = "/song",
    ) -> None:
        """
        Initialize the WebServer.

        Args:
            catalog: Initialized song catalog
            allowed_origins: Origins allowed to send write requests. Empty allows all.
            api_prefix: Mount point of the song routes
        """
        self.catalog = catalog
        self.allowed_origins = tuple(allowed_origins)
        self.api_prefix = api_prefix.rstrip("/")

        # Create FastAPI app
        self.app = FastAPI(
            title="Songbook",
            description="Song catalog manager",
            version=__version__,
        )

        # Origin guard first so CORS wraps it and 403 replies still carry CORS headers
        install_origin_guard(self.app, self.allowed_origins)
        self._install_request_logging()

        self.app.add_middleware(
            CORSMiddleware,
            allow_origins=list(self.allowed_origins) or ["*"],
            allow_methods=["*"],
            allow_headers=["*"],
        )

        self._install_exception_handlers()

        # Server state
        self._server: uvicorn.Server | None = None
        self._serve_task: asyncio.Task[None] | None = None
        self._host = "0.0.0.0"
        self._port = 5050

        # Register routes
        self._register_routes()

    def _install_request_logging(self) -> None:
        @self.app.middleware("http")
        async def log_request(
            request: Request, call_next: Callable[[Request], Awaitable[Response]]
        ) -> Response:
            response = await call_next(request)
            logger.debug("%s %s -> %d", request.method, request.url.path, response.status_code)
            return response

    def _install_exception_handlers(self) -> None:
        """Map the core error taxonomy onto JSON error responses."""

        @self.app.exception_handler(NotFoundError)
        async def not_found(request: Request, exc: NotFoundError) -> JSONResponse:
            return JSONResponse(status_code=404, content={"error": "Song not found"})

        @self.app.exception_handler(ValidationError)
        async def invalid(request: Request, exc: ValidationError) -> JSONResponse:
            return JSONResponse(status_code=400, content={"error": str(exc), "fields": exc.fields})

        @self.app.exception_handler(StoreUnavailableError)
        async def store_unavailable(request: Request, exc: StoreUnavailableError) -> JSONResponse:
            logger.error("Store unavailable for %s %s: %s", request.method, request.url.path, exc)
            return JSONResponse(status_code=500, content={"error": "Record store unavailable"})

        @self.app.exception_handler(aiosqlite.Error)
        async def store_failure(request: Request, exc: aiosqlite.Error) -> JSONResponse:
            logger.error("Store failure for %s %s: %s", request.method, request.url.path, exc)
            return JSONResponse(status_code=500, content={"error": "Record store failure"})

        @self.app.exception_handler(CoreError)
        async def core_failure(request: Request, exc: CoreError) -> JSONResponse:
            logger.error("Request %s %s failed: %s", request.method, request.url.path, exc)
            return JSONResponse(status_code=500, content={"error": str(exc)})

    def _register_routes(self) -> None:
        """Register all routes with the FastAPI app."""

        @self.app.get("/")
        async def banner() -> dict[str, str]:
            return {"status": "ok", "message": "Song-Manager API is running..."}

        # Health check
        @self.app.get("/health")
        async def health_check() -> dict[str, str]:
            """Health check endpoint."""
            return {"status": "ok", "server": "songbook"}

        # Statistics before CRUD: /{song_id} would otherwise capture /stats etc.
        register_stats_routes(self.app, self.catalog, prefix=self.api_prefix)
        register_song_routes(self.app, self.catalog, prefix=self.api_prefix)

    async def start(self, host: str = "0.0.0.0", port: int = 5050) -> None:
        """
        Start the web server.

        Args:
            host: Host address to bind to
            port: Port to listen on
        """
        self._host = host
        self._port = port

        # Configure uvicorn
        config = uvicorn.Config(
            self.app,
            host=host,
            port=port,
            log_level="warning",
            access_log=False,
        )
        self._server = uvicorn.Server(config)

        # Start server in background
        self._serve_task = asyncio.create_task(self._server.serve())

        logger.info("Web server started on http://%s:%d%s/", host, port, self.api_prefix)

    async def stop(self) -> None:
        """Stop the web server."""
        if self._server is not None:
            self._server.should_exit = True
            self._server = None

        if self._serve_task is not None:
            await self._serve_task
            self._serve_task = None

        logger.info("Web server stopped")

    @property
    def port(self) -> int:
        """Get the server port."""
        return self._port

    @property
    def host(self) -> str:
        """Get the server host."""
        return self._host
