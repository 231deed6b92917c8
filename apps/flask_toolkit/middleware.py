"""Request/response hooks and view decorators.

- ``force_json_response``: ``before_request`` hook rewriting ``Accept`` to JSON
- ``json_response``: the same rewrite for a single view
- ``force_api_response``: deprecated alias of ``force_json_response``
- ``exclude_from_history``: keep a view out of the "previous URL" history
- ``remember_previous_url``: ``after_request`` hook recording that history
"""

from __future__ import annotations

import warnings
from collections.abc import Callable
from functools import wraps
from typing import Any

from flask import Response, g, has_request_context, request, session

from apps.flask_toolkit.adapters import PREVIOUS_URL_KEY

JSON_MIMETYPE = "application/json"
_EXCLUDED_FLAG = "_toolkit_exclude_from_history"


def force_json_response() -> None:
    """Make the current request negotiate JSON, whatever the client sent."""
    current = request._get_current_object()
    current.environ["HTTP_ACCEPT"] = JSON_MIMETYPE
    # Werkzeug caches the parsed Accept header on first access.
    current.__dict__.pop("accept_mimetypes", None)


def force_api_response() -> None:
    """Deprecated: use ``force_json_response``."""
    warnings.warn(
        "force_api_response is deprecated; use force_json_response instead",
        DeprecationWarning,
        stacklevel=2,
    )
    force_json_response()


def json_response(view: Callable[..., Any]) -> Callable[..., Any]:
    """View decorator: always answer this view in JSON."""

    @wraps(view)
    def _wrapped(*args: Any, **kwargs: Any) -> Any:
        force_json_response()
        return view(*args, **kwargs)

    return _wrapped


def exclude_from_history(view: Callable[..., Any]) -> Callable[..., Any]:
    """View decorator: do not record this request as the previous URL."""

    @wraps(view)
    def _wrapped(*args: Any, **kwargs: Any) -> Any:
        setattr(g, _EXCLUDED_FLAG, True)
        return view(*args, **kwargs)

    return _wrapped


def is_excluded_from_history() -> bool:
    return has_request_context() and bool(g.get(_EXCLUDED_FLAG, False))


def remember_previous_url(response: Response) -> Response:
    """Record successful HTML GET pages so redirects can go back to them."""
    if request.method != "GET" or is_excluded_from_history():
        return response
    if response.status_code != 200 or response.is_json:
        return response
    if request.headers.get("X-Requested-With", "").lower() == "xmlhttprequest":
        return response

    session[PREVIOUS_URL_KEY] = request.url
    return response
