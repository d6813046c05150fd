"""
Internal DB subpackage for Songbook.

This package splits the record store into focused units (models, schema /
migrations, ordering and queries) while keeping `CatalogDb` as the single
public interface that the rest of the codebase imports.

External code should import `CatalogDb` from `songbook.core.catalog_db`.
"""

from __future__ import annotations

# Models / DTOs
from .models import NewSong, SongFilters, SongPatch, SongRow

# Schema / migrations
from .schema import ensure_schema, migrate

__all__ = [
    # models
    "NewSong",
    "SongFilters",
    "SongPatch",
    "SongRow",
    # schema
    "ensure_schema",
    "migrate",
]
