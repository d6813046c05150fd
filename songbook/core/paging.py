"""
Pagination and sort helpers shared by every list endpoint.

Everything here is pure: invalid inputs are normalized, never rejected.

Two sort syntaxes exist on the wire:
- Group views (`/artists`, `/albums`, `/genres`) take `sortField` plus a
  separate `sortOrder`; only `asc` means ascending.
- The raw song list takes a single `sort` token where a leading `-` means
  descending and a bare field (or leading `+`) means ascending.

Both are parsed into the same `SortSpec`.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, Collection, Final, Generic, Iterable, TypeVar

T = TypeVar("T")

DEFAULT_PAGE: Final[int] = 1
DEFAULT_LIMIT: Final[int] = 10
ASCENDING_TOKEN: Final[str] = "asc"
DEFAULT_SONG_SORT: Final[str] = "-createdAt"


@dataclass(frozen=True, slots=True)
class SortSpec:
    """Sort field plus direction."""

    field: str
    descending: bool = True

    @property
    def token(self) -> str:
        """The list-endpoint sort token (`-field` or `field`)."""
        return f"-{self.field}" if self.descending else self.field


@dataclass(frozen=True, slots=True)
class PageRequest:
    """Normalized paging parameters."""

    page: int
    limit: int
    sort: SortSpec

    @property
    def skip(self) -> int:
        return (self.page - 1) * self.limit

    @property
    def take(self) -> int:
        return self.limit


@dataclass(frozen=True, slots=True)
class PageResult(Generic[T]):
    """
    A window over a sorted sequence plus paging metadata.

    `total_pages == ceil(total / limit)`; `data` holds at most `limit` items
    and is empty iff `page > total_pages` or `total == 0`.
    """

    page: int
    limit: int
    total: int
    data: tuple[T, ...]

    @property
    def total_pages(self) -> int:
        return -(-self.total // self.limit) if self.limit > 0 else 0

    def pagination(self) -> dict[str, int]:
        return {
            "total": self.total,
            "page": self.page,
            "limit": self.limit,
            "totalPages": self.total_pages,
        }


def _to_int(value: Any) -> int | None:
    if value is None or isinstance(value, bool):
        return None
    try:
        return int(value)
    except (TypeError, ValueError):
        return None


def normalize_page(value: Any) -> int:
    """Page numbers are 1-based; anything missing, unparsable or < 1 becomes 1."""
    page = _to_int(value)
    if page is None or page < 1:
        return DEFAULT_PAGE
    return page


def normalize_limit(value: Any) -> int:
    """Anything missing, unparsable or <= 0 becomes the default page size."""
    limit = _to_int(value)
    if limit is None or limit <= 0:
        return DEFAULT_LIMIT
    return limit


def parse_sort_order(token: str | None) -> bool:
    """Return True for descending. Only the ascending token (any case) means ascending."""
    if token is None:
        return True
    return token.strip().lower() != ASCENDING_TOKEN


def parse_sort_token(token: str | None, *, default: str = DEFAULT_SONG_SORT) -> SortSpec:
    """Parse a `-field` / `+field` / `field` sort token."""
    text = (token or "").strip()
    if not text.lstrip("+-"):
        text = default
    if text.startswith("-"):
        return SortSpec(field=text[1:], descending=True)
    return SortSpec(field=text.lstrip("+"), descending=False)


def _coerce_field(spec: SortSpec, allowed: Collection[str] | None, default_field: str) -> SortSpec:
    if allowed is not None and spec.field not in allowed:
        return SortSpec(field=default_field, descending=spec.descending)
    return spec


def page_request(
    page: Any = None,
    limit: Any = None,
    sort_field: str | None = None,
    sort_order: str | None = None,
    *,
    default_field: str,
    allowed_fields: Collection[str] | None = None,
) -> PageRequest:
    """Normalize group-view parameters (`page, limit, sortField, sortOrder`)."""
    spec = SortSpec(field=sort_field or default_field, descending=parse_sort_order(sort_order))
    return PageRequest(
        page=normalize_page(page),
        limit=normalize_limit(limit),
        sort=_coerce_field(spec, allowed_fields, default_field),
    )


def list_page_request(
    page: Any = None,
    limit: Any = None,
    sort: str | None = None,
    *,
    default_sort: str = DEFAULT_SONG_SORT,
    allowed_fields: Collection[str] | None = None,
) -> PageRequest:
    """Normalize song-list parameters (`page, limit, sort`)."""
    default_spec = parse_sort_token(default_sort)
    spec = parse_sort_token(sort, default=default_sort)
    return PageRequest(
        page=normalize_page(page),
        limit=normalize_limit(limit),
        sort=_coerce_field(spec, allowed_fields, default_spec.field),
    )


def sort_items(
    items: Iterable[T],
    sort: SortSpec,
    *,
    value: Callable[[T, str], Any],
    tie_key: Callable[[T], Any],
) -> list[T]:
    """
    Sort by `sort.field` in the requested direction, ties broken by `tie_key` ascending.

    Python's sort is stable (also with reverse=True), so sorting by the
    tie key first and the field second yields a deterministic order.
    """
    ordered = sorted(items, key=tie_key)
    ordered.sort(key=lambda item: value(item, sort.field), reverse=sort.descending)
    return ordered


def paginate(
    items: Iterable[T],
    request: PageRequest,
    *,
    value: Callable[[T, str], Any],
    tie_key: Callable[[T], Any],
) -> PageResult[T]:
    """Sort `items` per `request.sort` and cut out the requested page."""
    ordered = sort_items(items, request.sort, value=value, tie_key=tie_key)
    window = ordered[request.skip : request.skip + request.take]
    return PageResult(
        page=request.page,
        limit=request.limit,
        total=len(ordered),
        data=tuple(window),
    )
