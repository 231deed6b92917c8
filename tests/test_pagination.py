"""Tests for paginators and the default pagination strategy."""

from __future__ import annotations

from collections.abc import Sequence
from typing import Any

import pytest
from werkzeug.datastructures import MultiDict

from contracts.errors import ConfigurationError
from services.pagination import (
    EXCLUDE_FROM_REQUEST,
    CursorPaginator,
    DefaultPaginationStrategy,
    LengthAwarePaginator,
    decode_cursor,
    encode_cursor,
    page_summary,
)
from tests.factories import FakeUrlProvider


class ListQuery:
    """Pageable and keyset-ordered source over a list of dicts sorted by ``id``."""

    def __init__(self, rows: Sequence[dict[str, Any]]) -> None:
        self.rows = list(rows)
        self.fetch_calls: list[tuple[int, int]] = []

    def count(self) -> int:
        return len(self.rows)

    def fetch(self, offset: int, limit: int) -> list[dict[str, Any]]:
        self.fetch_calls.append((offset, limit))
        return self.rows[offset:offset + limit]

    def fetch_after(self, after: Any | None, limit: int) -> list[dict[str, Any]]:
        rows = [row for row in self.rows if after is None or row["id"] > after]
        return rows[:limit]

    def key_for(self, item: dict[str, Any]) -> Any:
        return item["id"]


class FakeFormRequest:
    def __init__(self, args: dict[str, Any], form: dict[str, Any] | None = None) -> None:
        self.args = MultiDict(args)
        self.form = MultiDict(form or {})


ROWS = [{"id": n} for n in range(1, 8)]


def test_length_aware_paginator_navigation() -> None:
    paginator = LengthAwarePaginator(["c", "d"], total=7, per_page=2, current_page=2, path="/items")

    assert paginator.last_page == 4
    assert paginator.has_more_pages is True
    assert paginator.on_first_page is False
    assert paginator.first_item == 3
    assert paginator.last_item == 4
    assert paginator.next_page_url == "/items?page=3"
    assert paginator.previous_page_url == "/items?page=1"


def test_length_aware_paginator_last_and_empty_pages() -> None:
    last = LengthAwarePaginator(["g"], total=7, per_page=2, current_page=4)
    empty = LengthAwarePaginator([], total=0, per_page=15)

    assert last.next_page_url is None
    assert empty.last_page == 1
    assert empty.first_item is None
    assert empty.previous_page_url is None


def test_appends_and_set_path_chain() -> None:
    paginator = LengthAwarePaginator([1], total=30, per_page=10).set_path("https://app.test/users?sort=name")
    paginator.appends({"q": "ann"})

    assert paginator.url(2) == "https://app.test/users?sort=name&q=ann&page=2"


def test_through_maps_items_in_place() -> None:
    paginator = LengthAwarePaginator([1, 2], total=2, per_page=2)
    assert paginator.through(lambda n: n * 10) is paginator
    assert list(paginator) == [10, 20]


def test_to_dict_shape() -> None:
    payload = LengthAwarePaginator(["a"], total=3, per_page=1, current_page=1, path="/p").to_dict()

    assert payload["data"] == ["a"]
    assert payload["from"] == 1
    assert payload["to"] == 1
    assert payload["last_page"] == 3
    assert payload["first_page_url"] == "/p?page=1"
    assert payload["last_page_url"] == "/p?page=3"
    assert payload["prev_page_url"] is None


def test_build_paginator_slices_sequences() -> None:
    strategy = DefaultPaginationStrategy(default_per_page=3)
    paginator = strategy.build_paginator(list(range(10)), page=2)

    assert paginator.items == [3, 4, 5]
    assert paginator.total == 10
    assert paginator.last_page == 4


@pytest.mark.parametrize("page", [0, -1, -5])
def test_non_positive_pages_fall_back_to_the_first_page(page: int) -> None:
    strategy = DefaultPaginationStrategy(default_per_page=15)
    query = ListQuery(ROWS)

    paginator = strategy.build_paginator(list(range(100)), page=page)
    from_query = strategy.paginate_length_aware(query, page=page)

    assert paginator.current_page == 1
    assert paginator.items == list(range(15))
    assert from_query.items == ROWS
    assert query.fetch_calls == [(0, 15)]


def test_build_paginator_returns_existing_paginator() -> None:
    strategy = DefaultPaginationStrategy()
    existing = LengthAwarePaginator([1], total=1, per_page=5)

    result = strategy.build_paginator(existing, set_full_url=True, url_provider=FakeUrlProvider(current="/now"))

    assert result is existing
    assert result.path == "/now"


def test_build_paginator_delegates_to_queries() -> None:
    query = ListQuery(ROWS)
    paginator = DefaultPaginationStrategy(default_per_page=3).build_paginator(query, page=3)

    assert paginator.items == [{"id": 7}]
    assert query.fetch_calls == [(6, 3)]


def test_paginate_length_aware_with_transformation_and_full_url() -> None:
    strategy = DefaultPaginationStrategy(default_per_page=2)
    paginator = strategy.paginate_length_aware(
        ListQuery(ROWS),
        page=1,
        page_name="p",
        set_full_url=True,
        transformation=lambda row: row["id"],
        url_provider=FakeUrlProvider(current="https://app.test/rows"),
    )

    assert paginator.items == [1, 2]
    assert paginator.next_page_url == "https://app.test/rows?p=2"


def test_paginate_length_aware_skips_fetch_when_empty() -> None:
    query = ListQuery([])
    paginator = DefaultPaginationStrategy().paginate_length_aware(query)

    assert paginator.items == []
    assert query.fetch_calls == []


def test_cursor_pagination_walks_forward() -> None:
    strategy = DefaultPaginationStrategy(default_per_page=3)
    query = ListQuery(ROWS)

    first = strategy.paginate_cursor(query)
    second = strategy.paginate_cursor(query, cursor=first.next_cursor)
    third = strategy.paginate_cursor(query, cursor=second.next_cursor)

    assert [row["id"] for row in first] == [1, 2, 3]
    assert [row["id"] for row in second] == [4, 5, 6]
    assert [row["id"] for row in third] == [7]
    assert third.next_cursor is None
    assert third.has_more_pages is False


def test_cursor_paginator_urls() -> None:
    paginator = CursorPaginator([1], per_page=1, next_cursor="abc", path="/feed", cursor_name="after")

    assert paginator.next_page_url == "/feed?after=abc"
    assert paginator.previous_page_url is None
    assert paginator.to_dict()["next_cursor"] == "abc"


def test_cursor_round_trip_and_garbage() -> None:
    token = encode_cursor({"id": 5})
    decoded = decode_cursor(token)

    assert decoded is not None
    assert decoded.key == {"id": 5}
    assert decoded.points_to_next is True
    assert decode_cursor("not a cursor!") is None
    assert decode_cursor(None) is None


@pytest.mark.parametrize("value", [0, -5, "abc"])
def test_resolve_items_per_page_rejects_invalid(value: Any) -> None:
    with pytest.raises(ConfigurationError, match="Pagination per-page value must be a positive integer."):
        DefaultPaginationStrategy().resolve_items_per_page(value)


def test_resolve_items_per_page_uses_default() -> None:
    assert DefaultPaginationStrategy(default_per_page=20).resolve_items_per_page() == 20
    assert DefaultPaginationStrategy(default_per_page=20).resolve_items_per_page(5) == 5


def test_append_cleaned_request_drops_excluded_params() -> None:
    strategy = DefaultPaginationStrategy()
    request = FakeFormRequest(
        {"page": "2", "q": "ann", "tags": "a", "client_token": "secret"},
        {"_token": "csrf", "sort": "name"},
    )
    paginator = LengthAwarePaginator([], total=0, per_page=5, path="/users")

    strategy.append_cleaned_request(paginator, request)

    assert paginator.query == {"q": "ann", "tags": "a", "sort": "name"}
    assert "page" in EXCLUDE_FROM_REQUEST


def test_set_full_url_requires_url_provider() -> None:
    with pytest.raises(ConfigurationError):
        DefaultPaginationStrategy().set_full_url(LengthAwarePaginator([], total=0, per_page=1), None)


def test_page_summary() -> None:
    paginator = LengthAwarePaginator(["x"], total=4, per_page=2, current_page=1)
    assert page_summary(paginator) == {"data": ["x"], "current_page": 1, "last_page": 2}
