"""
TypedDict definitions for wire formats produced by the toolkit.

Usage:
    from contracts.typed_dicts import JsonEnvelopeBody, FlashPayload
"""

from __future__ import annotations

from typing import Any, NotRequired, TypedDict


class JsonEnvelopeBody(TypedDict):
    """
    Body of a JSON response (every status except 204).

    ``data`` is present only when a payload was supplied; ``errors`` only
    for status >= 400.
    """
    status: int
    message: str
    data: NotRequired[Any]
    errors: NotRequired[dict[str, Any]]


class FlashPayload(TypedDict):
    """
    Session flash payload attached to redirect responses.
    """
    status: int
    message: str
    errors: dict[str, Any]
    data: Any


class JsonPage(TypedDict):
    """
    Compact page shape returned to JSON consumers by the pagination facade.
    """
    data: list[Any]
    current_page: int
    last_page: int


# Functional form: "from" is a keyword.
LengthAwarePageDict = TypedDict(
    "LengthAwarePageDict",
    {
        "data": list[Any],
        "current_page": int,
        "per_page": int,
        "total": int,
        "last_page": int,
        "from": int | None,
        "to": int | None,
        "path": str,
        "first_page_url": str,
        "last_page_url": str,
        "next_page_url": str | None,
        "prev_page_url": str | None,
    },
)


class CursorPageDict(TypedDict):
    """
    Full serialization of a cursor paginator.
    """
    data: list[Any]
    per_page: int
    path: str
    next_cursor: str | None
    prev_cursor: str | None
    next_page_url: str | None
    prev_page_url: str | None
