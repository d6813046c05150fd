"""
Songbook - a song catalog manager.

Songbook provides a REST API for listing, creating, editing and deleting song
records, aggregate statistics over the catalog (songs per artist, album and
genre), and a client-side state layer that a UI can render from.
"""

__version__ = "0.1.0"
__author__ = "Songbook Contributors"
__license__ = "GPL-2.0"

from songbook.server import SongbookServer

__all__ = ["SongbookServer", "__version__"]
