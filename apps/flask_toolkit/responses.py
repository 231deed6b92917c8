"""Context-aware response helpers for Flask views.

    from apps.flask_toolkit import responses

    @bp.post("/users")
    def create_user():
        user = ...
        return responses.created("User created", data=user)

The same call answers JSON for API/hook/IoT routes and JSON-negotiating
clients, redirects back with flashed data for browser routes, and returns a
text block in console mode.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from apps.flask_toolkit.extension import as_response, get_toolkit
from services.responses.dispatcher import NO_CONTENT_MESSAGE, STATUS_DISPATCH, effective_status

ENTRY_POINT_STATUS: dict[str, int] = {name: status for status, name in STATUS_DISPATCH.items()}


def _dispatch(entry_point: str, message: str, data: Any = None, **options: Any) -> Any:
    state = get_toolkit()
    options.setdefault("request", state.current_request())
    options.setdefault("console", state.running_in_console())
    result = getattr(state.dispatcher, entry_point)(message, data, **options)
    return as_response(result, ENTRY_POINT_STATUS[entry_point])


def success(message: str, data: Any = None, **options: Any) -> Any:
    return _dispatch("success", message, data, **options)


def created(message: str, data: Any = None, **options: Any) -> Any:
    return _dispatch("created", message, data, **options)


def accepted(message: str, data: Any = None, **options: Any) -> Any:
    return _dispatch("accepted", message, data, **options)


def no_content(message: str = NO_CONTENT_MESSAGE, data: Any = None, **options: Any) -> Any:
    return _dispatch("no_content", message, data, **options)


def bad_request(message: str, data: Any = None, **options: Any) -> Any:
    return _dispatch("bad_request", message, data, **options)


def unauthorized(message: str, data: Any = None, **options: Any) -> Any:
    return _dispatch("unauthorized", message, data, **options)


def forbidden(message: str, data: Any = None, **options: Any) -> Any:
    return _dispatch("forbidden", message, data, **options)


def not_found(message: str, data: Any = None, **options: Any) -> Any:
    return _dispatch("not_found", message, data, **options)


def not_acceptable(message: str, data: Any = None, **options: Any) -> Any:
    return _dispatch("not_acceptable", message, data, **options)


def conflict(message: str, data: Any = None, **options: Any) -> Any:
    return _dispatch("conflict", message, data, **options)


def unprocessable_entity(message: str, data: Any = None, **options: Any) -> Any:
    return _dispatch("unprocessable_entity", message, data, **options)


def too_many_requests(message: str, data: Any = None, **options: Any) -> Any:
    return _dispatch("too_many_requests", message, data, **options)


def error(message: str, data: Any = None, **options: Any) -> Any:
    return _dispatch("error", message, data, **options)


def handle_exception(
    exc: BaseException,
    errors: Mapping[str, Any] | None = None,
    headers: Mapping[str, Any] | None = None,
    forward_url: str | None = None,
) -> Any:
    """Render ``exc`` through the entry point matching its status code."""
    state = get_toolkit()
    result = state.dispatcher.handle_exception(
        exc,
        errors,
        headers,
        forward_url,
        request=state.current_request(),
        console=state.running_in_console(),
    )
    return as_response(result, effective_status(exc))
