"""Context-aware pagination for Flask views.

JSON callers get the compact ``{"data", "current_page", "last_page"}`` page;
everyone else gets the paginator object (for templates).
"""

from __future__ import annotations

from collections.abc import Callable
from typing import Any

from flask import has_request_context, request

from apps.flask_toolkit.extension import get_toolkit
from contracts.interfaces import PageableQueryProtocol
from services.pagination.paginator import CursorPaginator, LengthAwarePaginator
from services.pagination.strategy import page_summary


def _requested_page(page_name: str) -> int | None:
    if not has_request_context():
        return None
    value = request.args.get(page_name, type=int)
    if value is None or value < 1:
        return None
    return value


def _wants_json() -> bool:
    state = get_toolkit()
    return state.classifier.wants_json(state.current_request(), console=state.running_in_console())


def paginate(
    data: Any,
    page: int | None = None,
    page_name: str = "page",
    items_per_page: int | None = None,
    set_full_url: bool = False,
    transformation: Callable[[Any], Any] | None = None,
    append_request: bool = False,
) -> LengthAwarePaginator | dict[str, Any]:
    """Paginate a sequence, pageable query or paginator.

    Args:
        data: Sequence, ``PageableQueryProtocol`` or ``LengthAwarePaginator``
        page: Page number (default: the ``page_name`` query parameter, else 1)
        page_name: Query parameter carrying the page number
        items_per_page: Page size (default: ``paginator.page_items``)
        set_full_url: Point page links at the current URL
        transformation: Callable applied to every item of the page
        append_request: Carry the request's query/form parameters into page links

    Returns:
        Compact page dict for JSON callers, the paginator otherwise

    Raises:
        ConfigurationError: If the page size is not a positive integer
    """
    state = get_toolkit()
    strategy = state.pagination
    current_page = page if page is not None else _requested_page(page_name)

    if isinstance(data, LengthAwarePaginator):
        paginator = strategy.build_paginator(data, set_full_url=set_full_url, url_provider=state.url_provider)
        if transformation is not None:
            paginator.through(transformation)
    elif isinstance(data, PageableQueryProtocol):
        paginator = strategy.paginate_length_aware(
            data,
            page=current_page,
            page_name=page_name,
            items_per_page=items_per_page,
            set_full_url=set_full_url,
            transformation=transformation,
            url_provider=state.url_provider,
        )
    else:
        paginator = strategy.build_paginator(
            data,
            page=current_page,
            items_per_page=items_per_page,
            set_full_url=set_full_url,
            url_provider=state.url_provider,
        )
        paginator.page_name = page_name
        if transformation is not None:
            paginator.through(transformation)

    if append_request and has_request_context():
        strategy.append_cleaned_request(paginator, request)

    if _wants_json():
        return dict(page_summary(paginator))
    return paginator


def cursor_paginate(
    query: Any,
    items_per_page: int | None = None,
    cursor_name: str = "cursor",
    set_full_url: bool = False,
    transformation: Callable[[Any], Any] | None = None,
) -> CursorPaginator | dict[str, Any]:
    """Keyset-paginate ``query`` from the cursor in the request's query string."""
    state = get_toolkit()
    cursor = request.args.get(cursor_name) if has_request_context() else None
    paginator = state.pagination.paginate_cursor(
        query,
        items_per_page=items_per_page,
        cursor_name=cursor_name,
        cursor=cursor,
        set_full_url=set_full_url,
        transformation=transformation,
        url_provider=state.url_provider,
    )
    if _wants_json():
        return dict(paginator.to_dict())
    return paginator
