"""
Core domain package.

This package contains the catalog logic which should be independent of any UI
layer (web, client, CLI). It holds the record store access layer, the paging
helpers and the statistics pipelines.

We intentionally keep exports minimal; consumers should usually import from the
specific module they need (e.g. `songbook.core.catalog`).
"""

from __future__ import annotations

__all__: list[str] = [
    "CoreError",
    "NotFoundError",
    "ValidationError",
    "OriginForbiddenError",
    "StoreUnavailableError",
]


class CoreError(Exception):
    """Base class for core-layer exceptions."""


class NotFoundError(CoreError):
    """Raised when no song matches the requested identifier."""


class ValidationError(CoreError):
    """
    Raised when a song payload is missing or has malformed fields.

    `fields` maps each failing field name to a human readable message.
    """

    def __init__(self, fields: dict[str, str]) -> None:
        self.fields = dict(fields)
        names = ", ".join(sorted(self.fields))
        super().__init__(f"Invalid song fields: {names}")


class OriginForbiddenError(CoreError):
    """Raised when a write request comes from an origin outside the allow-list."""


class StoreUnavailableError(CoreError):
    """Raised when the record store cannot serve a request."""
