"""Length-aware and cursor pagination."""

from services.pagination.paginator import (
    Cursor,
    CursorPaginator,
    LengthAwarePaginator,
    decode_cursor,
    encode_cursor,
)
from services.pagination.strategy import (
    EXCLUDE_FROM_REQUEST,
    DefaultPaginationStrategy,
    PaginationStrategy,
    page_summary,
)

__all__ = [
    "EXCLUDE_FROM_REQUEST",
    "Cursor",
    "CursorPaginator",
    "DefaultPaginationStrategy",
    "LengthAwarePaginator",
    "PaginationStrategy",
    "decode_cursor",
    "encode_cursor",
    "page_summary",
]
