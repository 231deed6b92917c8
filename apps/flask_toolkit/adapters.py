"""Flask implementations of the response-core collaborators.

Each adapter satisfies one Protocol from ``contracts.interfaces`` and is the
only place that touches Flask globals (``request``, ``session``,
``current_app``). The response core receives them through ``RenderPorts``.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

import click
from flask import Response, current_app, has_request_context, jsonify, request, session
from werkzeug.utils import redirect

from contracts.interfaces import RequestProtocol

# Session keys
PREVIOUS_URL_KEY = "_previous_url"
FLASH_KEY = "_flash"
ERRORS_KEY = "errors"
OLD_INPUT_KEY = "_old_input"

# Input fields never written back to the session.
DONT_FLASH: tuple[str, ...] = ("current_password", "password", "password_confirmation")

CONSOLE_MODES = ("auto", "always", "never")


class FlaskRequestResolver:
    """Return the active Flask request, or None outside a request context."""

    def resolve(self) -> RequestProtocol | None:
        if not has_request_context():
            return None
        return request._get_current_object()


class ClickConsoleProbe:
    """Console mode detection.

    ``auto``: console when a click command is running and no request is being
    served (``flask <command>`` or a click entry point). ``always``/``never``
    force the answer.
    """

    def __init__(self, console_mode: str = "auto") -> None:
        if console_mode not in CONSOLE_MODES:
            raise ValueError(f"console_mode must be one of {CONSOLE_MODES}, got {console_mode!r}")
        self.console_mode = console_mode

    def running_in_console(self) -> bool:
        if self.console_mode == "always":
            return True
        if self.console_mode == "never":
            return False
        return click.get_current_context(silent=True) is not None and not has_request_context()


class FlaskUrlProvider:
    """URL lookups backed by the current request and session."""

    def __init__(self, fallback_url: str = "/") -> None:
        self.fallback_url = fallback_url

    def current(self) -> str:
        if not has_request_context():
            return self.fallback_url
        return request.base_url

    def previous(self) -> str:
        """Last recorded page, then the Referer header, then the fallback URL."""
        if not has_request_context():
            return self.fallback_url
        stored = session.get(PREVIOUS_URL_KEY)
        if isinstance(stored, str) and stored:
            return stored
        return request.referrer or self.fallback_url


def _session_safe(value: Any) -> Any:
    # Read-only mappings are not JSON-serializable; the session needs plain dicts.
    if isinstance(value, Mapping):
        return {str(key): _session_safe(item) for key, item in value.items()}
    if isinstance(value, (list, tuple)):
        return [_session_safe(item) for item in value]
    return value


def request_input(exclude: tuple[str, ...] = DONT_FLASH) -> dict[str, Any]:
    """Query string and form fields of the current request, minus ``exclude``."""
    if not has_request_context():
        return {}
    data: dict[str, Any] = request.args.to_dict()
    data.update(request.form.to_dict())
    return {key: value for key, value in data.items() if key not in exclude}


class FlaskRedirectResult(Response):
    """Redirect response that can flash data into the session.

    A view may return it directly; the flash methods return ``self``.
    """

    def flash(self, data: Mapping[str, Any]) -> FlaskRedirectResult:
        session[FLASH_KEY] = _session_safe(data)
        return self

    def flash_errors(self, errors: Mapping[str, Any]) -> FlaskRedirectResult:
        session[ERRORS_KEY] = _session_safe(errors)
        return self

    def flash_input(self) -> FlaskRedirectResult:
        session[OLD_INPUT_KEY] = request_input()
        return self


class FlaskRedirector:
    """Build ``FlaskRedirectResult`` responses."""

    def __init__(self, status_code: int = 302) -> None:
        self.status_code = status_code

    def redirect_to(self, url: str, headers: Mapping[str, str]) -> FlaskRedirectResult:
        response = redirect(url, code=self.status_code, Response=FlaskRedirectResult)
        for name, value in headers.items():
            response.headers[name] = value
        return response


class FlaskJsonResponder:
    """Build JSON responses with an explicit status; ``None`` gives an empty body."""

    def json(self, body: Any, status: int, headers: Mapping[str, str]) -> Response:
        if body is None:
            response = current_app.response_class(status=status, mimetype="application/json")
        else:
            response = jsonify(body)
            response.status_code = status
        for name, value in headers.items():
            response.headers[name] = value
        return response


def pop_flashed() -> dict[str, Any]:
    """Read and remove the data flashed by the previous redirect.

    Returns:
        Mapping with ``flash``, ``errors`` and ``old_input`` keys (None when absent)
    """
    return {
        "flash": session.pop(FLASH_KEY, None),
        "errors": session.pop(ERRORS_KEY, None),
        "old_input": session.pop(OLD_INPUT_KEY, None),
    }
