"""Response strategy selection."""

from __future__ import annotations

from enum import Enum

from services.responses.context import RouteContext


class StrategyKind(str, Enum):
    """The three terminal rendering behaviours."""

    CONSOLE = "console"
    JSON = "json"
    REDIRECT = "redirect"

    @property
    def requires_header_allow_list(self) -> bool:
        """Only redirects forward caller-supplied headers through the allow-list."""
        return self is StrategyKind.REDIRECT


def select_strategy(context: RouteContext, wants_json: bool) -> StrategyKind:
    """Pick the renderer for a classified request.

    Console wins over everything; otherwise JSON when the request wants it,
    else a redirect back to the web page.
    """
    if context is RouteContext.CONSOLE:
        return StrategyKind.CONSOLE
    if wants_json:
        return StrategyKind.JSON
    return StrategyKind.REDIRECT
