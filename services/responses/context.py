"""Route-context classification.

Decides which channel a request arrived on (console, API, hook, IoT or web)
and whether the caller expects JSON. Every method takes the request, or None
when no request is active, as an explicit argument; console execution mode
is passed in by the caller because it is a property of the process, not of
the request.
"""

from __future__ import annotations

import re
from collections.abc import Mapping, Sequence
from enum import Enum
from functools import lru_cache
from types import MappingProxyType

from werkzeug.http import parse_accept_header

from contracts.interfaces import RequestProtocol

API_MATCHERS = "api_matchers"
HOOK_MATCHERS = "hook_matchers"
IOT_MATCHERS = "iot_matchers"
JSON_MATCHERS = "json_matchers"

MATCHER_KEYS = (API_MATCHERS, HOOK_MATCHERS, IOT_MATCHERS, JSON_MATCHERS)


class RouteContext(str, Enum):
    """Execution/request channel driving the response shape."""

    CONSOLE = "console"
    API = "api"
    HOOK = "hook"
    IOT = "iot"
    WEB = "web"

    @property
    def implies_json(self) -> bool:
        return self in (RouteContext.API, RouteContext.HOOK, RouteContext.IOT)


@lru_cache(maxsize=512)
def _compile_pattern(pattern: str) -> re.Pattern[str]:
    # Only "*" is special; everything else is literal.
    parts = (re.escape(chunk) for chunk in pattern.split("*"))
    return re.compile(".*".join(parts), re.DOTALL)


def glob_match(pattern: str, path: str) -> bool:
    """Return True when ``path`` matches the ``*``-wildcard ``pattern`` exactly."""
    return _compile_pattern(pattern).fullmatch(path) is not None


def request_path(request: RequestProtocol) -> str:
    """Request path without the leading slash; the root path is ``/``."""
    path = (request.path or "").lstrip("/")
    return path or "/"


def path_matches(request: RequestProtocol, patterns: Sequence[str]) -> bool:
    """True when the request path matches any of ``patterns``."""
    if not patterns:
        return False
    path = request_path(request)
    return any(glob_match(pattern.lstrip("/") or "/", path) for pattern in patterns)


def _best_accept_type(accept: str) -> str:
    # Accept keeps quality order; equal qualities stay in header order.
    for media, _quality in parse_accept_header(accept):
        return media.lower()
    return ""


def accepts_json(request: RequestProtocol) -> bool:
    """Content negotiation: does the request declare it expects JSON?

    True when the highest-quality ``Accept`` media type is JSON (``*/json``
    or ``*+json``), or for an XHR that is not PJAX and accepts any content
    type.
    """
    headers = request.headers
    best = _best_accept_type(headers.get("Accept", "") or "")
    if "/json" in best or "+json" in best:
        return True

    is_xhr = (headers.get("X-Requested-With", "") or "").lower() == "xmlhttprequest"
    is_pjax = bool(headers.get("X-PJAX"))
    accepts_any = best in {"", "*/*", "*"}
    return is_xhr and not is_pjax and accepts_any


class RouteContextClassifier:
    """Classify requests using configured glob matchers.

    ``matchers`` maps ``api_matchers``/``hook_matchers``/``iot_matchers``/
    ``json_matchers`` to ordered pattern lists. The mapping is copied and
    frozen at construction; concurrent requests only read it.
    """

    def __init__(self, matchers: Mapping[str, Sequence[str]] | None = None) -> None:
        source = matchers or {}
        self._matchers: Mapping[str, tuple[str, ...]] = MappingProxyType(
            {key: tuple(source.get(key, ()) or ()) for key in MATCHER_KEYS}
        )

    @property
    def matchers(self) -> Mapping[str, tuple[str, ...]]:
        return self._matchers

    def patterns(self, key: str) -> tuple[str, ...]:
        return self._matchers.get(key, ())

    def matches(self, request: RequestProtocol | None, key: str) -> bool:
        if request is None:
            return False
        return path_matches(request, self.patterns(key))

    def is_api(self, request: RequestProtocol | None, *, console: bool = False) -> bool:
        return not console and self.matches(request, API_MATCHERS)

    def is_hook(self, request: RequestProtocol | None, *, console: bool = False) -> bool:
        return not console and self.matches(request, HOOK_MATCHERS)

    def is_iot(self, request: RequestProtocol | None, *, console: bool = False) -> bool:
        return not console and self.matches(request, IOT_MATCHERS)

    def is_web(self, request: RequestProtocol | None, *, console: bool = False) -> bool:
        return self.classify(request, console=console) is RouteContext.WEB

    def wants_json(self, request: RequestProtocol | None, *, console: bool = False) -> bool:
        # API/hook/IoT first: those clients may omit "Accept: application/json".
        if console or request is None:
            return False
        return (
            self.is_api(request)
            or self.is_hook(request)
            or self.is_iot(request)
            or self.matches(request, JSON_MATCHERS)
            or accepts_json(request)
        )

    def classify(self, request: RequestProtocol | None, *, console: bool = False) -> RouteContext:
        if console:
            return RouteContext.CONSOLE
        if request is None:
            return RouteContext.WEB
        if self.is_api(request):
            return RouteContext.API
        if self.is_hook(request):
            return RouteContext.HOOK
        if self.is_iot(request):
            return RouteContext.IOT
        return RouteContext.WEB

    # ------------------------------------------------------------------
    # Request introspection helpers
    # ------------------------------------------------------------------

    def is_expression(self, request: RequestProtocol | None, pattern: str, *, console: bool = False) -> bool:
        if console or request is None:
            return False
        return path_matches(request, [pattern])

    def get_method(self, request: RequestProtocol | None, *, console: bool = False) -> str | None:
        if console or request is None:
            return None
        return (request.method or "").upper() or None

    def is_method(self, request: RequestProtocol | None, method: str, *, console: bool = False) -> bool:
        current = self.get_method(request, console=console)
        return current is not None and current == method.strip().upper()

    def get_route_name(self, request: RequestProtocol | None, *, console: bool = False) -> str | None:
        if console or request is None:
            return None
        return getattr(request, "endpoint", None) or None

    def is_route_name(self, request: RequestProtocol | None, name: str, *, console: bool = False) -> bool:
        return self.get_route_name(request, console=console) == name

    def route_contains(self, request: RequestProtocol | None, fragment: str, *, console: bool = False) -> bool:
        if console or not fragment:
            return False
        return fragment in (self.get_route_name(request) or "")
