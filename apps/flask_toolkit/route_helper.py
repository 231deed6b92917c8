"""Route-context helpers bound to the current Flask request.

Every function reads the active request (None outside a request) and the
console state from the toolkit bound to the current application.
"""

from __future__ import annotations

from apps.flask_toolkit.extension import get_toolkit
from services.responses.context import RouteContext


def _call(name: str, *args: object) -> object:
    state = get_toolkit()
    method = getattr(state.classifier, name)
    return method(state.current_request(), *args, console=state.running_in_console())


def route_context() -> RouteContext:
    return _call("classify")  # type: ignore[return-value]


def is_console() -> bool:
    return get_toolkit().running_in_console()


def is_api() -> bool:
    return bool(_call("is_api"))


def is_hook() -> bool:
    return bool(_call("is_hook"))


def is_iot() -> bool:
    return bool(_call("is_iot"))


def is_web() -> bool:
    return bool(_call("is_web"))


def wants_json() -> bool:
    """True when the current request should be answered in JSON."""
    return bool(_call("wants_json"))


def is_expression(pattern: str) -> bool:
    return bool(_call("is_expression", pattern))


def get_method() -> str | None:
    return _call("get_method")  # type: ignore[return-value]


def is_method(method: str) -> bool:
    return bool(_call("is_method", method))


def get_route_name() -> str | None:
    """Endpoint name of the matched route (``blueprint.view``)."""
    return _call("get_route_name")  # type: ignore[return-value]


def is_route_name(name: str) -> bool:
    return bool(_call("is_route_name", name))


def route_contains(fragment: str) -> bool:
    return bool(_call("route_contains", fragment))
