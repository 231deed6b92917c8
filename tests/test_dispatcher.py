"""End-to-end tests for the response dispatcher with fake collaborators."""

from __future__ import annotations

from typing import Any

import pytest

from contracts.errors import ConflictError, NotFoundError, TooManyRequestsError
from services.responses.dispatcher import (
    NO_CONTENT_MESSAGE,
    STATUS_DISPATCH,
    effective_status,
    exception_message,
    exception_status,
)
from services.responses.sanitization import GENERIC_ERROR_MESSAGE
from services.responses.strategies import StrategyKind
from tests.factories import make_dispatcher, make_request

API = make_request("/api/users")
WEB = make_request("/dashboard")


class CodedError(Exception):
    """Exception carrying an integer ``code`` like most framework errors."""

    def __init__(self, message: str, code: int) -> None:
        super().__init__(message)
        self.code = code


def test_select_strategy_per_context() -> None:
    dispatcher = make_dispatcher()

    assert dispatcher.select(API) is StrategyKind.JSON
    assert dispatcher.select(WEB) is StrategyKind.REDIRECT
    assert dispatcher.select(WEB, console=True) is StrategyKind.CONSOLE
    assert dispatcher.select(None) is StrategyKind.REDIRECT


def test_success_json_round_trip() -> None:
    response = make_dispatcher().success("OK", {"id": 1}, request=API)

    assert response.status == 200
    assert response.body == {"status": 200, "message": "OK", "data": {"id": 1}}
    assert "errors" not in response.body


def test_no_content_json_has_no_body_even_with_data() -> None:
    response = make_dispatcher().no_content(data={"ignored": True}, request=API)

    assert response.status == 204
    assert response.body is None


def test_no_content_default_message_in_console() -> None:
    text = make_dispatcher().no_content(console=True)
    assert text == f"[204] {NO_CONTENT_MESSAGE}"


@pytest.mark.parametrize(
    ("entry_point", "status"),
    [
        ("success", 200),
        ("created", 201),
        ("accepted", 202),
        ("bad_request", 400),
        ("unauthorized", 401),
        ("forbidden", 403),
        ("not_found", 404),
        ("not_acceptable", 406),
        ("conflict", 409),
        ("unprocessable_entity", 422),
        ("too_many_requests", 429),
        ("error", 500),
    ],
)
def test_entry_points_use_their_status(entry_point: str, status: int) -> None:
    response = getattr(make_dispatcher(debug=True), entry_point)("msg", request=API)

    assert response.status == status
    assert response.body["status"] == status
    assert ("errors" in response.body) is (status >= 400)


def test_status_dispatch_table_is_complete() -> None:
    assert sorted(STATUS_DISPATCH) == [200, 201, 202, 204, 400, 401, 403, 404, 406, 409, 422, 429, 500]


def test_console_bad_request_lists_errors() -> None:
    text = make_dispatcher().bad_request("Bad", errors={"field": "required"}, console=True)

    lines = text.split("\n")
    assert "[400] Bad" in text
    assert lines[lines.index("Errors:") + 1] == '{"field":"required"}'


def test_server_error_is_generic_without_debug() -> None:
    response = make_dispatcher().error("db password is hunter2", errors={"dsn": "postgres://..."}, request=API)

    assert response.body == {"status": 500, "message": GENERIC_ERROR_MESSAGE, "errors": {}}


def test_server_error_keeps_details_with_debug() -> None:
    response = make_dispatcher(debug=True).error("boom", errors={"trace": "x"}, request=API)
    assert response.body == {"status": 500, "message": "boom", "errors": {"trace": "x"}}


def test_web_error_redirects_back_with_flash() -> None:
    dispatcher = make_dispatcher()
    result = dispatcher.unprocessable_entity(
        "Invalid",
        errors={"email": ["required"]},
        headers={"Retry-After": "3", "Set-Cookie": "x=1"},
        request=WEB,
    )

    assert result.url == "https://app.test/previous"
    assert result.headers == {"Retry-After": "3"}
    assert result.flashed["status"] == 422
    assert result.flashed_errors == {"email": ["required"]}


def test_redirect_to_forward_url() -> None:
    result = make_dispatcher().created("Saved", {"id": 9}, forward_url="/users/9", request=WEB)

    assert result.url == "/users/9"
    assert result.flashed == {"status": 201, "message": "Saved", "errors": {}, "data": {"id": 9}}


def test_redirect_with_empty_allow_list_drops_all_headers() -> None:
    result = make_dispatcher(allowed_headers=()).success("OK", headers={"Retry-After": "1"}, request=WEB)
    assert result.headers == {}


def test_json_keeps_string_headers() -> None:
    response = make_dispatcher().success("OK", headers={"X-Trace": "abc", "X-Bad": 1}, request=API)
    assert response.headers == {"X-Trace": "abc"}


def _as_comparable(result: Any) -> Any:
    return (result.body, result.status, result.headers)


def test_handle_exception_matches_direct_call() -> None:
    dispatcher = make_dispatcher()

    via_exception = dispatcher.handle_exception(CodedError("x", 404), request=API)
    direct = dispatcher.not_found("x", request=API)

    assert _as_comparable(via_exception) == _as_comparable(direct)


def test_handle_exception_uses_http_error_bag() -> None:
    dispatcher = make_dispatcher()

    response = dispatcher.handle_exception(ConflictError("Duplicate", errors={"email": ["taken"]}), request=API)
    fallback = dispatcher.handle_exception(NotFoundError(), request=API)

    assert response.body == {"status": 409, "message": "Duplicate", "errors": {"email": ["taken"]}}
    assert fallback.body == {"status": 404, "message": "Not Found", "errors": {"message": "Not Found"}}


def test_handle_exception_explicit_errors_win() -> None:
    exc = ConflictError("Duplicate", errors={"email": ["taken"]})
    response = make_dispatcher().handle_exception(exc, {"name": "taken"}, request=API)

    assert response.body["errors"] == {"name": "taken"}


def test_unknown_code_collapses_to_500() -> None:
    exc = CodedError("I'm a teapot", 418)

    debug = make_dispatcher(debug=True).handle_exception(exc, request=API)
    production = make_dispatcher().handle_exception(exc, request=API)

    assert debug.status == 500
    assert debug.body["message"] == f"{GENERIC_ERROR_MESSAGE} (418: I'm a teapot)"
    assert production.body == {"status": 500, "message": GENERIC_ERROR_MESSAGE, "errors": {}}


def test_plain_exception_is_a_server_error() -> None:
    response = make_dispatcher(debug=True).handle_exception(RuntimeError("kaput"), request=API)
    assert response.body == {"status": 500, "message": "kaput", "errors": {}}


def test_handle_exception_forwards_headers_and_url() -> None:
    exc = TooManyRequestsError("Slow down")
    result = make_dispatcher().handle_exception(exc, None, {"Retry-After": "60"}, "/login", request=WEB)

    assert result.url == "/login"
    assert result.headers == {"Retry-After": "60"}
    assert result.flashed["message"] == "Slow down"


def test_exception_introspection() -> None:
    assert exception_status(NotFoundError()) == 404
    assert exception_status(CodedError("x", 409)) == 409
    assert exception_status(ValueError("x")) == 500
    assert effective_status(CodedError("x", 418)) == 500
    assert exception_message(NotFoundError("gone")) == "gone"
    assert exception_message(ValueError("bad value")) == "bad value"
