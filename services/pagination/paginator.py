"""Paginator value objects.

``LengthAwarePaginator`` knows the total item count and therefore the last
page. ``CursorPaginator`` walks a keyset-ordered source with opaque cursors
and never counts.

Both keep a base ``path`` and extra ``query`` parameters used to build page
URLs; ``appends`` and ``set_path`` return the paginator for chaining.
"""

from __future__ import annotations

import base64
import binascii
import json
import math
from collections.abc import Callable, Iterable, Mapping
from dataclasses import dataclass
from typing import Any
from urllib.parse import urlencode

from contracts.typed_dicts import CursorPageDict, LengthAwarePageDict

_POINTS_TO_NEXT = "_pointsToNextItems"


def _build_url(path: str, query: Mapping[str, Any], extra: Mapping[str, Any]) -> str:
    params = {**query, **extra}
    params = {key: value for key, value in params.items() if value is not None}
    if not params:
        return path
    separator = "&" if "?" in path else "?"
    return f"{path}{separator}{urlencode(params, doseq=True)}"


class LengthAwarePaginator:
    """One page of items out of a known total."""

    def __init__(
        self,
        items: Iterable[Any],
        total: int,
        per_page: int,
        current_page: int = 1,
        *,
        path: str = "/",
        query: Mapping[str, Any] | None = None,
        page_name: str = "page",
    ) -> None:
        if per_page <= 0:
            raise ValueError("per_page must be > 0")
        self.items: list[Any] = list(items)
        self.total = max(int(total), 0)
        self.per_page = int(per_page)
        self.current_page = max(int(current_page), 1)
        self.path = path
        self.query: dict[str, Any] = dict(query or {})
        self.page_name = page_name

    @property
    def last_page(self) -> int:
        return max(math.ceil(self.total / self.per_page), 1)

    @property
    def has_more_pages(self) -> bool:
        return self.current_page < self.last_page

    @property
    def on_first_page(self) -> bool:
        return self.current_page <= 1

    @property
    def first_item(self) -> int | None:
        if not self.items:
            return None
        return (self.current_page - 1) * self.per_page + 1

    @property
    def last_item(self) -> int | None:
        first = self.first_item
        if first is None:
            return None
        return first + len(self.items) - 1

    def url(self, page: int) -> str:
        return _build_url(self.path, self.query, {self.page_name: max(int(page), 1)})

    @property
    def next_page_url(self) -> str | None:
        if not self.has_more_pages:
            return None
        return self.url(self.current_page + 1)

    @property
    def previous_page_url(self) -> str | None:
        if self.on_first_page:
            return None
        return self.url(self.current_page - 1)

    def appends(self, params: Mapping[str, Any]) -> LengthAwarePaginator:
        self.query.update(params)
        return self

    def set_path(self, path: str) -> LengthAwarePaginator:
        self.path = path
        return self

    def through(self, transformation: Callable[[Any], Any]) -> LengthAwarePaginator:
        """Map every item of the current page in place."""
        self.items = [transformation(item) for item in self.items]
        return self

    def to_dict(self) -> LengthAwarePageDict:
        return {
            "data": list(self.items),
            "current_page": self.current_page,
            "per_page": self.per_page,
            "total": self.total,
            "last_page": self.last_page,
            "from": self.first_item,
            "to": self.last_item,
            "path": self.path,
            "first_page_url": self.url(1),
            "last_page_url": self.url(self.last_page),
            "next_page_url": self.next_page_url,
            "prev_page_url": self.previous_page_url,
        }

    def __iter__(self):
        return iter(self.items)

    def __len__(self) -> int:
        return len(self.items)

    def __repr__(self) -> str:
        return (
            f"LengthAwarePaginator(page={self.current_page}/{self.last_page}, "
            f"per_page={self.per_page}, total={self.total})"
        )


@dataclass(frozen=True)
class Cursor:
    """Position in a keyset-ordered source."""

    key: Any
    points_to_next: bool = True

    def encode(self) -> str:
        payload = json.dumps(
            {"key": self.key, _POINTS_TO_NEXT: self.points_to_next},
            separators=(",", ":"),
            sort_keys=True,
        )
        return base64.urlsafe_b64encode(payload.encode("utf-8")).decode("ascii").rstrip("=")


def encode_cursor(key: Any, *, points_to_next: bool = True) -> str:
    return Cursor(key=key, points_to_next=points_to_next).encode()


def decode_cursor(value: str | None) -> Cursor | None:
    """Decode a cursor string; None for missing or malformed input."""
    if not value:
        return None
    padded = value + "=" * (-len(value) % 4)
    try:
        raw = base64.urlsafe_b64decode(padded.encode("ascii"))
        payload = json.loads(raw.decode("utf-8"))
    except (binascii.Error, UnicodeError, ValueError):
        return None
    if not isinstance(payload, dict) or "key" not in payload:
        return None
    return Cursor(key=payload["key"], points_to_next=bool(payload.get(_POINTS_TO_NEXT, True)))


class CursorPaginator:
    """One page of a keyset-paginated source."""

    def __init__(
        self,
        items: Iterable[Any],
        per_page: int,
        *,
        next_cursor: str | None = None,
        previous_cursor: str | None = None,
        path: str = "/",
        query: Mapping[str, Any] | None = None,
        cursor_name: str = "cursor",
    ) -> None:
        if per_page <= 0:
            raise ValueError("per_page must be > 0")
        self.items: list[Any] = list(items)
        self.per_page = int(per_page)
        self.next_cursor = next_cursor
        self.previous_cursor = previous_cursor
        self.path = path
        self.query: dict[str, Any] = dict(query or {})
        self.cursor_name = cursor_name

    @property
    def has_more_pages(self) -> bool:
        return self.next_cursor is not None

    def url(self, cursor: str | None) -> str:
        return _build_url(self.path, self.query, {self.cursor_name: cursor})

    @property
    def next_page_url(self) -> str | None:
        if self.next_cursor is None:
            return None
        return self.url(self.next_cursor)

    @property
    def previous_page_url(self) -> str | None:
        if self.previous_cursor is None:
            return None
        return self.url(self.previous_cursor)

    def appends(self, params: Mapping[str, Any]) -> CursorPaginator:
        self.query.update(params)
        return self

    def set_path(self, path: str) -> CursorPaginator:
        self.path = path
        return self

    def through(self, transformation: Callable[[Any], Any]) -> CursorPaginator:
        self.items = [transformation(item) for item in self.items]
        return self

    def to_dict(self) -> CursorPageDict:
        return {
            "data": list(self.items),
            "per_page": self.per_page,
            "path": self.path,
            "next_cursor": self.next_cursor,
            "prev_cursor": self.previous_cursor,
            "next_page_url": self.next_page_url,
            "prev_page_url": self.previous_page_url,
        }

    def __iter__(self):
        return iter(self.items)

    def __len__(self) -> int:
        return len(self.items)
