"""Renderers for the three response strategies.

Each ``StrategyKind`` maps to exactly one render function through a registry
populated at import time. ``render`` is the single dispatch entry point; the
Flask extension checks at startup that every kind has a renderer.
"""

from __future__ import annotations

import json
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

from contracts.errors import ConfigurationError
from contracts.interfaces import JsonResponderProtocol, RedirectorProtocol, UrlProviderProtocol
from contracts.typed_dicts import FlashPayload, JsonEnvelopeBody
from services.responses.envelope import HTTP_BAD_REQUEST, HTTP_NO_CONTENT, ResponseEnvelope
from services.responses.sanitization import SanitizationConfig, filter_error_fields
from services.responses.strategies import StrategyKind

UNSERIALIZABLE_PLACEHOLDER = "[unserializable payload]"


@dataclass(frozen=True)
class RenderPorts:
    """Outbound collaborators a renderer may need.

    Console rendering needs none; JSON needs ``json_responder``; redirects need
    ``redirector`` and ``url_provider``.
    """

    url_provider: UrlProviderProtocol | None = None
    redirector: RedirectorProtocol | None = None
    json_responder: JsonResponderProtocol | None = None


Renderer = Callable[[ResponseEnvelope, RenderPorts, SanitizationConfig], Any]

_RENDERERS: dict[StrategyKind, Renderer] = {}


def register_renderer(kind: StrategyKind, *, replace: bool = False) -> Callable[[Renderer], Renderer]:
    """Register the render function for a strategy kind."""

    def _decorator(func: Renderer) -> Renderer:
        if kind in _RENDERERS and not replace:
            raise KeyError(f"Renderer already registered for '{kind.value}'")
        _RENDERERS[kind] = func
        return func

    return _decorator


def get_renderer(kind: StrategyKind) -> Renderer | None:
    return _RENDERERS.get(kind)


def missing_renderers() -> list[StrategyKind]:
    """Strategy kinds without a registered renderer, in declaration order."""
    return [kind for kind in StrategyKind if kind not in _RENDERERS]


def render(
    kind: StrategyKind,
    envelope: ResponseEnvelope,
    ports: RenderPorts,
    config: SanitizationConfig,
) -> Any:
    renderer = _RENDERERS.get(kind)
    if renderer is None:
        raise ConfigurationError(f"No renderer registered for strategy '{kind.value}'")
    return renderer(envelope, ports, config)


def stringify_payload(payload: Any) -> str:
    """Scalars as-is, everything else compact JSON; never raises."""
    if isinstance(payload, (str, int, float, bool)):
        return str(payload)
    try:
        return json.dumps(payload, ensure_ascii=False, separators=(",", ":"))
    except (TypeError, ValueError):
        return UNSERIALIZABLE_PLACEHOLDER


@register_renderer(StrategyKind.CONSOLE)
def render_console(envelope: ResponseEnvelope, ports: RenderPorts, config: SanitizationConfig) -> str:
    """Multi-line text block for CLI output."""
    lines = [f"[{envelope.status}] {envelope.message}"]

    if envelope.errors:
        lines.append("Errors:")
        lines.append(stringify_payload(dict(envelope.errors)))

    if envelope.data is not None:
        lines.append("Data:")
        lines.append(stringify_payload(envelope.data))

    if envelope.headers:
        lines.append("Headers:")
        lines.append(stringify_payload(dict(envelope.headers)))

    if envelope.forward_url is not None:
        lines.append(f"Forward: {envelope.forward_url}")

    return "\n".join(lines)


def json_body(envelope: ResponseEnvelope) -> JsonEnvelopeBody | None:
    """Body of a JSON response; None for 204 No Content."""
    if envelope.status == HTTP_NO_CONTENT:
        return None

    body: JsonEnvelopeBody = {"status": envelope.status, "message": envelope.message}
    if envelope.data is not None:
        body["data"] = envelope.data
    if envelope.status >= HTTP_BAD_REQUEST:
        body["errors"] = dict(envelope.errors)
    return body


@register_renderer(StrategyKind.JSON)
def render_json(envelope: ResponseEnvelope, ports: RenderPorts, config: SanitizationConfig) -> Any:
    if ports.json_responder is None:
        raise ConfigurationError("JSON rendering requires a json_responder")
    return ports.json_responder.json(json_body(envelope), envelope.status, dict(envelope.headers))


@register_renderer(StrategyKind.REDIRECT)
def render_redirect(envelope: ResponseEnvelope, ports: RenderPorts, config: SanitizationConfig) -> Any:
    """Redirect back (or to ``forward_url``) flashing the envelope into the session."""
    if ports.redirector is None:
        raise ConfigurationError("Redirect rendering requires a redirector")

    target = envelope.forward_url
    if not target:
        if ports.url_provider is None:
            raise ConfigurationError("Redirect rendering without forward_url requires a url_provider")
        target = ports.url_provider.previous()

    errors = filter_error_fields(envelope.errors, config.redirect_allowed_error_fields)
    payload: FlashPayload = {
        "status": envelope.status,
        "message": envelope.message,
        "errors": errors,
        "data": envelope.data,
    }
    return (
        ports.redirector.redirect_to(target, dict(envelope.headers))
        .flash(payload)
        .flash_errors(errors)
        .flash_input()
    )
