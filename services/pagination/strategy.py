"""Pagination strategies.

A strategy turns raw data (a sequence, an existing paginator or a pageable
query) into a paginator sized from configuration, optionally pointing its
URLs at the current request and carrying the request's filter parameters.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Callable, Sequence
from typing import Any

from contracts.errors import ConfigurationError
from contracts.interfaces import CursorQueryProtocol, PageableQueryProtocol, UrlProviderProtocol
from contracts.typed_dicts import JsonPage
from services.pagination.paginator import (
    CursorPaginator,
    LengthAwarePaginator,
    decode_cursor,
    encode_cursor,
)

Paginator = LengthAwarePaginator | CursorPaginator

# Request parameters never carried into page links.
EXCLUDE_FROM_REQUEST: tuple[str, ...] = (
    "_token",
    "page",
    "client_user",
    "client_token",
    "client_token_type",
)

PER_PAGE_ERROR = "Pagination per-page value must be a positive integer."


def _flatten(source: Any) -> dict[str, Any]:
    """Mapping or Werkzeug MultiDict -> plain dict (single values unwrapped)."""
    if source is None:
        return {}
    if hasattr(source, "to_dict"):
        multi = source.to_dict(flat=False)
        return {key: values[0] if len(values) == 1 else list(values) for key, values in multi.items()}
    return dict(source)


class PaginationStrategy(ABC):
    """Abstract pagination contract plus the request/URL helpers every strategy shares."""

    def __init__(self, default_per_page: int = 15) -> None:
        self.default_per_page = default_per_page

    @abstractmethod
    def build_paginator(
        self,
        data: Any,
        page: int | None = None,
        items_per_page: int | None = None,
        set_full_url: bool = False,
        url_provider: UrlProviderProtocol | None = None,
    ) -> LengthAwarePaginator:
        raise NotImplementedError

    @abstractmethod
    def paginate_length_aware(
        self,
        query: PageableQueryProtocol,
        page: int | None = None,
        page_name: str = "page",
        items_per_page: int | None = None,
        set_full_url: bool = False,
        transformation: Callable[[Any], Any] | None = None,
        url_provider: UrlProviderProtocol | None = None,
    ) -> LengthAwarePaginator:
        raise NotImplementedError

    @abstractmethod
    def paginate_cursor(
        self,
        query: CursorQueryProtocol,
        items_per_page: int | None = None,
        cursor_name: str = "cursor",
        cursor: str | None = None,
        set_full_url: bool = False,
        transformation: Callable[[Any], Any] | None = None,
        url_provider: UrlProviderProtocol | None = None,
    ) -> CursorPaginator:
        raise NotImplementedError

    def excluded_request_parameters(self) -> tuple[str, ...]:
        return EXCLUDE_FROM_REQUEST

    def cleaned_request_parameters(self, request: Any) -> dict[str, Any]:
        """Query string and form parameters minus the excluded names."""
        excluded = set(self.excluded_request_parameters())
        params = _flatten(getattr(request, "args", None))
        params.update(_flatten(getattr(request, "form", None)))
        return {key: value for key, value in params.items() if key not in excluded}

    def append_cleaned_request(self, paginator: Paginator, request: Any) -> Paginator:
        return paginator.appends(self.cleaned_request_parameters(request))

    def set_full_url(self, paginator: Paginator, url_provider: UrlProviderProtocol | None) -> Paginator:
        if url_provider is None:
            raise ConfigurationError("set_full_url requires a url_provider")
        return paginator.set_path(url_provider.current())

    def resolve_items_per_page(self, items_per_page: int | None = None) -> int:
        value = self.default_per_page if items_per_page is None else items_per_page
        try:
            resolved = int(value)
        except (TypeError, ValueError) as exc:
            raise ConfigurationError(PER_PAGE_ERROR) from exc
        if resolved <= 0:
            raise ConfigurationError(PER_PAGE_ERROR)
        return resolved


class DefaultPaginationStrategy(PaginationStrategy):
    """Sequences are sliced in memory; queries are asked for one page only."""

    def build_paginator(
        self,
        data: Any,
        page: int | None = None,
        items_per_page: int | None = None,
        set_full_url: bool = False,
        url_provider: UrlProviderProtocol | None = None,
    ) -> LengthAwarePaginator:
        if isinstance(data, LengthAwarePaginator):
            if set_full_url:
                self.set_full_url(data, url_provider)
            return data

        if isinstance(data, PageableQueryProtocol):
            return self.paginate_length_aware(
                data,
                page=page,
                items_per_page=items_per_page,
                set_full_url=set_full_url,
                url_provider=url_provider,
            )

        items: Sequence[Any] = data if isinstance(data, Sequence) else list(data)
        per_page = self.resolve_items_per_page(items_per_page)
        current_page = max(page or 1, 1)
        offset = (current_page - 1) * per_page
        paginator = LengthAwarePaginator(
            items[offset:offset + per_page],
            len(items),
            per_page,
            current_page,
        )
        if set_full_url:
            self.set_full_url(paginator, url_provider)
        return paginator

    def paginate_length_aware(
        self,
        query: PageableQueryProtocol,
        page: int | None = None,
        page_name: str = "page",
        items_per_page: int | None = None,
        set_full_url: bool = False,
        transformation: Callable[[Any], Any] | None = None,
        url_provider: UrlProviderProtocol | None = None,
    ) -> LengthAwarePaginator:
        per_page = self.resolve_items_per_page(items_per_page)
        current_page = max(page or 1, 1)
        total = int(query.count())
        items = query.fetch((current_page - 1) * per_page, per_page) if total else []
        paginator = LengthAwarePaginator(items, total, per_page, current_page, page_name=page_name)

        if transformation is not None:
            paginator.through(transformation)
        if set_full_url:
            self.set_full_url(paginator, url_provider)
        return paginator

    def paginate_cursor(
        self,
        query: CursorQueryProtocol,
        items_per_page: int | None = None,
        cursor_name: str = "cursor",
        cursor: str | None = None,
        set_full_url: bool = False,
        transformation: Callable[[Any], Any] | None = None,
        url_provider: UrlProviderProtocol | None = None,
    ) -> CursorPaginator:
        """Forward keyset pagination: fetch one extra row to detect a next page."""
        per_page = self.resolve_items_per_page(items_per_page)
        position = decode_cursor(cursor)
        after = position.key if position is not None else None

        rows = list(query.fetch_after(after, per_page + 1))
        items = rows[:per_page]
        next_cursor = None
        if len(rows) > per_page and items:
            next_cursor = encode_cursor(query.key_for(items[-1]))

        paginator = CursorPaginator(items, per_page, next_cursor=next_cursor, cursor_name=cursor_name)
        if transformation is not None:
            paginator.through(transformation)
        if set_full_url:
            self.set_full_url(paginator, url_provider)
        return paginator


def page_summary(paginator: LengthAwarePaginator) -> JsonPage:
    """Compact page shape returned to JSON callers."""
    return {
        "data": list(paginator.items),
        "current_page": paginator.current_page,
        "last_page": paginator.last_page,
    }
