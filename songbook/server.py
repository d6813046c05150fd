"""
Songbook - Main Server Module

This module contains the main SongbookServer class that wires the record
store, the catalog and the web server together and manages the application
lifecycle.
"""

import asyncio
import logging
import signal

from songbook.config import Settings, get_settings
from songbook.core.catalog import SongCatalog
from songbook.core.catalog_db import CatalogDb
from songbook.web.server import WebServer

logger = logging.getLogger(__name__)


class SongbookServer:
    """
    Main Songbook server that coordinates all components.

    The server manages:
    - Record store (SQLite via aiosqlite)
    - Song catalog facade (CRUD + statistics)
    - Web server for the REST API
    """

    def __init__(self, settings: Settings | None = None) -> None:
        """
        Initialize the Songbook server.

        Args:
            settings: Resolved settings. Defaults to the global settings.
        """
        self.settings = settings if settings is not None else get_settings()

        self.catalog_db = CatalogDb(self.settings.db_path)
        self.catalog = SongCatalog(db=self.catalog_db)
        self.web_server: WebServer | None = None

        self._running = False
        self._shutdown_event: asyncio.Event | None = None

    async def start(self) -> None:
        """Start all server components."""
        logger.info("Starting Songbook server on %s:%d", self.settings.host, self.settings.port)

        self._running = True
        self._shutdown_event = asyncio.Event()

        # Open the record store and bring the schema up to date
        await self.catalog_db.open()
        await self.catalog.initialize()

        self.web_server = WebServer(
            self.catalog,
            allowed_origins=self.settings.allowed_origins,
            api_prefix=self.settings.api_prefix,
        )
        await self.web_server.start(host=self.settings.host, port=self.settings.port)

        logger.info("Songbook server started successfully")

    async def stop(self) -> None:
        """Stop all server components gracefully."""
        if not self._running:
            return

        logger.info("Stopping Songbook server...")
        self._running = False

        # Stop accepting requests before closing the store
        if self.web_server:
            await self.web_server.stop()

        await self.catalog_db.close()

        if self._shutdown_event:
            self._shutdown_event.set()

        logger.info("Songbook server stopped")

    async def run(self) -> None:
        """
        Run the server until shutdown is requested.

        This method starts all components and waits for a shutdown signal
        (SIGINT or SIGTERM).
        """
        await self.start()

        # Set up signal handlers for graceful shutdown
        loop = asyncio.get_running_loop()

        def handle_signal() -> None:
            logger.info("Received shutdown signal")
            if self._shutdown_event:
                self._shutdown_event.set()

        for sig in (signal.SIGINT, signal.SIGTERM):
            try:
                loop.add_signal_handler(sig, handle_signal)
            except NotImplementedError:
                # Signal handlers not supported on Windows
                pass

        # Wait for shutdown
        if self._shutdown_event:
            await self._shutdown_event.wait()

        await self.stop()

    @property
    def is_running(self) -> bool:
        """Check if the server is currently running."""
        return self._running
