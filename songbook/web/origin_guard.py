"""
Write-origin guard.

Requests with a write verb (POST, PATCH, PUT, DELETE) are only accepted from
origins on the configured allow-list. An empty allow-list accepts every
origin, including requests that send no `Origin` header at all.

Reads are never restricted here; browser-level CORS is handled separately by
`CORSMiddleware`.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Awaitable, Callable, Collection, Final

from fastapi import Request, Response
from fastapi.responses import JSONResponse

from songbook.core import OriginForbiddenError

if TYPE_CHECKING:
    from fastapi import FastAPI

logger = logging.getLogger(__name__)

WRITE_METHODS: Final[frozenset[str]] = frozenset({"POST", "PATCH", "PUT", "DELETE"})
FORBIDDEN_MESSAGE: Final[str] = "Forbidden: Origin not allowed for write operations."


def is_write_allowed(method: str, origin: str | None, allowed_origins: Collection[str]) -> bool:
    """
    Decide whether a request may proceed.

    Args:
        method: HTTP method of the request.
        origin: Value of the `Origin` header, or None if absent.
        allowed_origins: Configured allow-list. Empty means no restriction.

    Returns:
        False only for a write verb from a missing or unlisted origin while
        the allow-list is non-empty.
    """
    if method.upper() not in WRITE_METHODS:
        return True
    if not allowed_origins:
        return True
    return origin is not None and origin in allowed_origins


def require_write_origin(method: str, origin: str | None, allowed_origins: Collection[str]) -> None:
    """Raise OriginForbiddenError unless `is_write_allowed` accepts the request."""
    if not is_write_allowed(method, origin, allowed_origins):
        raise OriginForbiddenError(FORBIDDEN_MESSAGE)


def install_origin_guard(app: FastAPI, allowed_origins: Collection[str]) -> None:
    """Register the guard as HTTP middleware on `app`."""
    allowed = frozenset(allowed_origins)

    if not allowed:
        logger.warning("No write origins configured: accepting writes from any origin")

    @app.middleware("http")
    async def origin_guard(
        request: Request, call_next: Callable[[Request], Awaitable[Response]]
    ) -> Response:
        origin = request.headers.get("origin")
        try:
            require_write_origin(request.method, origin, allowed)
        except OriginForbiddenError as e:
            logger.warning(
                "Rejected %s %s from origin %r", request.method, request.url.path, origin
            )
            return JSONResponse(status_code=403, content={"message": str(e)})
        return await call_next(request)
