"""
Songbook Web Layer.

This package provides the HTTP/REST API layer for Songbook.

Components:
- WebServer: FastAPI application with all routes
- origin_guard: write-verb origin allow-list
"""

from songbook.web.server import WebServer

__all__ = [
    "WebServer",
]
