"""
Protocol definitions for the collaborators the response core depends on.

The core (classifier, sanitization, renderers, dispatcher) never imports Flask.
It only talks to objects satisfying these Protocols, which enables:
- explicit context passing (the request is a parameter, never a global)
- fakes in tests without a running application
- alternative hosts (any WSGI framework exposing the same attributes)

Usage:
    from contracts.interfaces import RedirectorProtocol, UrlProviderProtocol

    # In production, use apps.flask_toolkit.adapters
    # In tests, use the fakes in tests/factories.py
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from typing import Any, Protocol, runtime_checkable

# -----------------------------------------------------------------------------
# Inbound request
# -----------------------------------------------------------------------------

@runtime_checkable
class RequestProtocol(Protocol):
    """Subset of a Werkzeug request the classifier reads."""

    path: str
    method: str
    headers: Mapping[str, str]
    endpoint: str | None


@runtime_checkable
class RequestResolverProtocol(Protocol):
    """Resolve the active request, or None outside a request scope."""

    def resolve(self) -> RequestProtocol | None:
        ...


@runtime_checkable
class ConsoleProbeProtocol(Protocol):
    """Report whether the process runs in console (CLI) execution mode."""

    def running_in_console(self) -> bool:
        ...


# -----------------------------------------------------------------------------
# Outbound collaborators
# -----------------------------------------------------------------------------

@runtime_checkable
class UrlProviderProtocol(Protocol):
    """URL lookups used by the redirect renderer and paginators."""

    def current(self) -> str:
        """URL of the current request without query string."""
        ...

    def previous(self) -> str:
        """URL the user came from (fallback target for redirects)."""
        ...


@runtime_checkable
class RedirectResultProtocol(Protocol):
    """Chainable redirect response that can flash session data."""

    def flash(self, data: Mapping[str, Any]) -> RedirectResultProtocol:
        ...

    def flash_errors(self, errors: Mapping[str, Any]) -> RedirectResultProtocol:
        ...

    def flash_input(self) -> RedirectResultProtocol:
        ...


@runtime_checkable
class RedirectorProtocol(Protocol):
    """Build redirect responses."""

    def redirect_to(self, url: str, headers: Mapping[str, str]) -> RedirectResultProtocol:
        ...


@runtime_checkable
class JsonResponderProtocol(Protocol):
    """Build JSON responses."""

    def json(self, body: Any, status: int, headers: Mapping[str, str]) -> Any:
        ...


# -----------------------------------------------------------------------------
# Pagination sources
# -----------------------------------------------------------------------------

@runtime_checkable
class PageableQueryProtocol(Protocol):
    """Offset-paginated data source (SQL query wrapper, repository, ...)."""

    def count(self) -> int:
        ...

    def fetch(self, offset: int, limit: int) -> Sequence[Any]:
        ...


@runtime_checkable
class CursorQueryProtocol(Protocol):
    """Keyset-paginated data source ordered by a stable key."""

    def fetch_after(self, after: Any | None, limit: int) -> Sequence[Any]:
        """Return up to ``limit`` items whose key sorts after ``after``."""
        ...

    def key_for(self, item: Any) -> Any:
        """Return the JSON-serializable ordering key of ``item``."""
        ...
