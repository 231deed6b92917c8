"""Tests for the console, JSON and redirect renderers."""

from __future__ import annotations

import pytest

from contracts.errors import ConfigurationError
from services.responses.envelope import ResponseEnvelope
from services.responses.renderers import (
    UNSERIALIZABLE_PLACEHOLDER,
    RenderPorts,
    json_body,
    missing_renderers,
    register_renderer,
    render,
    render_console,
    render_json,
    render_redirect,
    stringify_payload,
)
from services.responses.sanitization import SanitizationConfig
from services.responses.strategies import StrategyKind
from tests.factories import FakeRedirector, FakeUrlProvider, make_ports


def test_every_strategy_has_a_renderer() -> None:
    assert missing_renderers() == []


def test_registering_twice_raises() -> None:
    with pytest.raises(KeyError):
        register_renderer(StrategyKind.JSON)(render_json)


def test_render_requires_ports_for_json() -> None:
    envelope = ResponseEnvelope(status=200, message="OK")
    with pytest.raises(ConfigurationError):
        render(StrategyKind.JSON, envelope, RenderPorts(), SanitizationConfig())


def test_console_minimal() -> None:
    text = render_console(ResponseEnvelope(status=200, message="Done"), RenderPorts(), SanitizationConfig())
    assert text == "[200] Done"


def test_console_sections_in_order() -> None:
    envelope = ResponseEnvelope(
        status=422,
        message="Invalid",
        errors={"email": ["required"]},
        data={"url": "https://example.test/a/b", "name": "Zoë"},
        headers={"X-Trace": "abc"},
        forward_url="/users",
    )

    text = render_console(envelope, RenderPorts(), SanitizationConfig())

    assert text.split("\n") == [
        "[422] Invalid",
        "Errors:",
        '{"email":["required"]}',
        "Data:",
        '{"url":"https://example.test/a/b","name":"Zoë"}',
        "Headers:",
        '{"X-Trace":"abc"}',
        "Forward: /users",
    ]


def test_stringify_payload() -> None:
    assert stringify_payload("plain") == "plain"
    assert stringify_payload(3) == "3"
    assert stringify_payload([1, 2]) == "[1,2]"
    assert stringify_payload({"obj": object()}) == UNSERIALIZABLE_PLACEHOLDER


def test_json_body_shapes() -> None:
    assert json_body(ResponseEnvelope(status=200, message="OK")) == {"status": 200, "message": "OK"}
    assert json_body(ResponseEnvelope(status=201, message="Created", data={"id": 1})) == {
        "status": 201,
        "message": "Created",
        "data": {"id": 1},
    }
    assert json_body(ResponseEnvelope(status=404, message="Missing")) == {
        "status": 404,
        "message": "Missing",
        "errors": {},
    }
    assert json_body(ResponseEnvelope(status=204, message="Gone", data={"x": 1})) is None


def test_json_renderer_passes_status_and_headers() -> None:
    envelope = ResponseEnvelope(status=429, message="Slow down", headers={"Retry-After": "10"})
    response = render_json(envelope, make_ports(), SanitizationConfig())

    assert response.status == 429
    assert response.headers == {"Retry-After": "10"}
    assert response.body == {"status": 429, "message": "Slow down", "errors": {}}


def test_redirect_goes_back_and_flashes() -> None:
    ports = make_ports()
    envelope = ResponseEnvelope(
        status=422,
        message="Invalid",
        errors={"email": ["required"], "meta": {"nested": True}},
        data={"id": 3},
    )

    result = render_redirect(envelope, ports, SanitizationConfig())

    assert result.url == "https://app.test/previous"
    assert result.flashed == {
        "status": 422,
        "message": "Invalid",
        "errors": {"email": ["required"]},
        "data": {"id": 3},
    }
    assert result.flashed_errors == {"email": ["required"]}
    assert result.input_flashed is True


def test_redirect_prefers_forward_url_and_applies_error_allow_list() -> None:
    ports = make_ports()
    envelope = ResponseEnvelope(
        status=400,
        message="Bad",
        errors={"email": "bad", "token": "leak"},
        forward_url="/signup",
        headers={"Retry-After": "5"},
    )
    config = SanitizationConfig.build(redirect_allowed_error_fields=["email"])

    result = render_redirect(envelope, ports, config)

    assert result.url == "/signup"
    assert result.headers == {"Retry-After": "5"}
    assert result.flashed_errors == {"email": "bad"}


def test_redirect_requires_ports() -> None:
    envelope = ResponseEnvelope(status=200, message="OK")

    with pytest.raises(ConfigurationError):
        render_redirect(envelope, RenderPorts(url_provider=FakeUrlProvider()), SanitizationConfig())
    with pytest.raises(ConfigurationError):
        render_redirect(envelope, RenderPorts(redirector=FakeRedirector()), SanitizationConfig())
