"""
Web Routes Package.

This package contains FastAPI route modules:
- stats: catalog statistics and group views (/song/stats, /song/artists, ...)
- songs: song CRUD (/song/, /song/{song_id})
"""

from songbook.web.routes.songs import register_song_routes
from songbook.web.routes.stats import register_stats_routes

__all__ = [
    "register_song_routes",
    "register_stats_routes",
]
