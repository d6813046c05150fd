"""
Tests for songbook.core.paging.

These tests verify:
- page/limit normalization (invalid values fall back, never fail)
- both sort syntaxes (`sortField` + `sortOrder`, and `-field` tokens)
- the stable sort + slice pipeline and its paging metadata
"""

from __future__ import annotations

import math

import pytest

from songbook.core.paging import (
    DEFAULT_LIMIT,
    PageRequest,
    PageResult,
    SortSpec,
    list_page_request,
    normalize_limit,
    normalize_page,
    page_request,
    paginate,
    parse_sort_order,
    parse_sort_token,
    sort_items,
)


def _value(item: dict, name: str):
    return item[name]


def _tie(item: dict):
    return item["name"]


class TestNormalization:
    """Tests for page and limit normalization."""

    @pytest.mark.parametrize("raw", [None, "", "abc", 0, -3, "0", True])
    def test_invalid_page_becomes_one(self, raw) -> None:
        assert normalize_page(raw) == 1

    @pytest.mark.parametrize("raw", [None, "", "xyz", 0, -1, "-5"])
    def test_invalid_limit_becomes_default(self, raw) -> None:
        assert normalize_limit(raw) == DEFAULT_LIMIT == 10

    def test_numeric_strings_are_parsed(self) -> None:
        assert normalize_page("3") == 3
        assert normalize_limit("25") == 25

    def test_skip_and_take(self) -> None:
        request = PageRequest(page=3, limit=7, sort=SortSpec("totalSongs"))
        assert request.skip == 14
        assert request.take == 7


class TestSortParsing:
    """Tests for sort order and sort token parsing."""

    @pytest.mark.parametrize("token", ["asc", "ASC", " Asc "])
    def test_asc_means_ascending(self, token: str) -> None:
        assert parse_sort_order(token) is False

    @pytest.mark.parametrize("token", [None, "desc", "", "ascending", "1"])
    def test_everything_else_means_descending(self, token) -> None:
        assert parse_sort_order(token) is True

    def test_minus_prefix_is_descending(self) -> None:
        assert parse_sort_token("-title") == SortSpec("title", descending=True)

    def test_bare_and_plus_are_ascending(self) -> None:
        assert parse_sort_token("title") == SortSpec("title", descending=False)
        assert parse_sort_token("+title") == SortSpec("title", descending=False)

    def test_empty_token_uses_default(self) -> None:
        assert parse_sort_token(None) == SortSpec("createdAt", descending=True)
        assert parse_sort_token("  ") == SortSpec("createdAt", descending=True)
        assert parse_sort_token("-") == SortSpec("createdAt", descending=True)

    def test_token_round_trip(self) -> None:
        assert SortSpec("artist", descending=True).token == "-artist"
        assert SortSpec("artist", descending=False).token == "artist"

    def test_unknown_group_field_falls_back(self) -> None:
        request = page_request(
            None, None, "nonsense", "asc", default_field="totalSongs", allowed_fields={"totalSongs", "genre"}
        )
        assert request.sort == SortSpec("totalSongs", descending=False)

    def test_unknown_list_field_falls_back_keeping_direction(self) -> None:
        request = list_page_request(1, 5, "bogus", allowed_fields={"createdAt", "title"})
        assert request.sort == SortSpec("createdAt", descending=False)
        request = list_page_request(1, 5, "-bogus", allowed_fields={"createdAt", "title"})
        assert request.sort == SortSpec("createdAt", descending=True)


class TestPaginate:
    """Tests for the sort + slice pipeline."""

    ITEMS = [
        {"name": "delta", "count": 2},
        {"name": "alpha", "count": 2},
        {"name": "charlie", "count": 5},
        {"name": "bravo", "count": 1},
        {"name": "echo", "count": 2},
    ]

    def test_descending_with_tie_break_ascending(self) -> None:
        ordered = sort_items(self.ITEMS, SortSpec("count", True), value=_value, tie_key=_tie)
        assert [i["name"] for i in ordered] == ["charlie", "alpha", "delta", "echo", "bravo"]

    def test_ascending_with_tie_break_ascending(self) -> None:
        ordered = sort_items(self.ITEMS, SortSpec("count", False), value=_value, tie_key=_tie)
        assert [i["name"] for i in ordered] == ["bravo", "alpha", "delta", "echo", "charlie"]

    def test_slices_and_metadata(self) -> None:
        request = page_request(2, 2, "count", "desc", default_field="count")
        result = paginate(self.ITEMS, request, value=_value, tie_key=_tie)

        assert [i["name"] for i in result.data] == ["delta", "echo"]
        assert result.total == 5
        assert result.total_pages == 3
        assert result.pagination() == {"total": 5, "page": 2, "limit": 2, "totalPages": 3}

    def test_page_beyond_end_is_empty(self) -> None:
        request = page_request(9, 2, None, None, default_field="count")
        result = paginate(self.ITEMS, request, value=_value, tie_key=_tie)
        assert result.data == ()
        assert result.total == 5

    def test_empty_input(self) -> None:
        request = page_request(1, 10, None, None, default_field="count")
        result = paginate([], request, value=_value, tie_key=_tie)
        assert result.data == ()
        assert result.total == 0
        assert result.total_pages == 0

    @pytest.mark.parametrize("limit", [1, 2, 3, 4, 5, 7])
    @pytest.mark.parametrize("page", [1, 2, 3, 6])
    def test_page_invariants(self, page: int, limit: int) -> None:
        request = page_request(page, limit, "count", None, default_field="count")
        result = paginate(self.ITEMS, request, value=_value, tie_key=_tie)

        assert result.total_pages == math.ceil(result.total / limit)
        assert len(result.data) <= limit
        assert (len(result.data) == 0) == (page > result.total_pages)


class TestPageResult:
    """Tests for PageResult metadata."""

    def test_total_pages_rounds_up(self) -> None:
        assert PageResult(page=1, limit=10, total=21, data=()).total_pages == 3
        assert PageResult(page=1, limit=10, total=20, data=()).total_pages == 2
