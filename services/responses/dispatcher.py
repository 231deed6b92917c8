"""Context-aware response dispatch.

``ResponseDispatcher`` runs the whole pipeline for one call:

    classify -> select strategy -> sanitize -> build envelope -> render

It holds only read-only collaborators (classifier, sanitization config,
render ports), so a single instance serves concurrent requests. The request
and the console flag are explicit arguments of every entry point.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from contracts.errors import HttpError
from contracts.interfaces import RequestProtocol
from services.responses.context import RouteContextClassifier
from services.responses.envelope import (
    HTTP_ACCEPTED,
    HTTP_BAD_REQUEST,
    HTTP_CONFLICT,
    HTTP_CREATED,
    HTTP_FORBIDDEN,
    HTTP_INTERNAL_SERVER_ERROR,
    HTTP_NO_CONTENT,
    HTTP_NOT_ACCEPTABLE,
    HTTP_NOT_FOUND,
    HTTP_OK,
    HTTP_TOO_MANY_REQUESTS,
    HTTP_UNAUTHORIZED,
    HTTP_UNPROCESSABLE_ENTITY,
    ResponseEnvelope,
)
from services.responses.renderers import RenderPorts, render
from services.responses.sanitization import GENERIC_ERROR_MESSAGE, SanitizationConfig, sanitize
from services.responses.strategies import StrategyKind, select_strategy

NO_CONTENT_MESSAGE = "Operation completed successfully"

# Status code -> dispatcher entry point.
STATUS_DISPATCH: dict[int, str] = {
    HTTP_OK: "success",
    HTTP_CREATED: "created",
    HTTP_ACCEPTED: "accepted",
    HTTP_NO_CONTENT: "no_content",
    HTTP_BAD_REQUEST: "bad_request",
    HTTP_UNAUTHORIZED: "unauthorized",
    HTTP_FORBIDDEN: "forbidden",
    HTTP_NOT_FOUND: "not_found",
    HTTP_NOT_ACCEPTABLE: "not_acceptable",
    HTTP_CONFLICT: "conflict",
    HTTP_UNPROCESSABLE_ENTITY: "unprocessable_entity",
    HTTP_TOO_MANY_REQUESTS: "too_many_requests",
    HTTP_INTERNAL_SERVER_ERROR: "error",
}


def exception_status(exc: BaseException) -> int:
    """Status code carried by an exception; 500 when it carries none."""
    for attr in ("status_code", "code"):
        value = getattr(exc, attr, None)
        if isinstance(value, int) and not isinstance(value, bool):
            return value
    return HTTP_INTERNAL_SERVER_ERROR


def effective_status(exc: BaseException) -> int:
    """Status the exception is rendered with: unknown codes collapse to 500."""
    code = exception_status(exc)
    return code if code in STATUS_DISPATCH else HTTP_INTERNAL_SERVER_ERROR


def exception_message(exc: BaseException) -> str:
    message = getattr(exc, "message", None)
    if isinstance(message, str):
        return message
    description = getattr(exc, "description", None)
    if isinstance(description, str) and description:
        return description
    return str(exc)


class ResponseDispatcher:
    """Render status/message/errors/data in the shape the request calls for."""

    def __init__(
        self,
        classifier: RouteContextClassifier,
        sanitization: SanitizationConfig,
        ports: RenderPorts,
    ) -> None:
        self.classifier = classifier
        self.sanitization = sanitization
        self.ports = ports

    def select(self, request: RequestProtocol | None, *, console: bool = False) -> StrategyKind:
        context = self.classifier.classify(request, console=console)
        return select_strategy(context, self.classifier.wants_json(request, console=console))

    def respond(
        self,
        status: int,
        message: str,
        *,
        errors: Mapping[str, Any] | None = None,
        data: Any = None,
        headers: Mapping[str, Any] | None = None,
        forward_url: str | None = None,
        request: RequestProtocol | None = None,
        console: bool = False,
    ) -> Any:
        kind = self.select(request, console=console)
        clean = sanitize(status, message, errors, headers, kind, self.sanitization)
        envelope = ResponseEnvelope(
            status=status,
            message=clean.message,
            errors=clean.errors,
            data=data,
            headers=clean.headers,
            forward_url=forward_url,
        )
        return render(kind, envelope, self.ports, self.sanitization)

    # ------------------------------------------------------------------
    # Success responses
    # ------------------------------------------------------------------

    def success(self, message: str, data: Any = None, **options: Any) -> Any:
        return self.respond(HTTP_OK, message, data=data, **options)

    def created(self, message: str, data: Any = None, **options: Any) -> Any:
        return self.respond(HTTP_CREATED, message, data=data, **options)

    def accepted(self, message: str, data: Any = None, **options: Any) -> Any:
        return self.respond(HTTP_ACCEPTED, message, data=data, **options)

    def no_content(self, message: str = NO_CONTENT_MESSAGE, data: Any = None, **options: Any) -> Any:
        # 204 never carries a payload.
        return self.respond(HTTP_NO_CONTENT, message, data=None, **options)

    # ------------------------------------------------------------------
    # Error responses
    # ------------------------------------------------------------------

    def bad_request(self, message: str, data: Any = None, **options: Any) -> Any:
        return self.respond(HTTP_BAD_REQUEST, message, data=data, **options)

    def unauthorized(self, message: str, data: Any = None, **options: Any) -> Any:
        return self.respond(HTTP_UNAUTHORIZED, message, data=data, **options)

    def forbidden(self, message: str, data: Any = None, **options: Any) -> Any:
        return self.respond(HTTP_FORBIDDEN, message, data=data, **options)

    def not_found(self, message: str, data: Any = None, **options: Any) -> Any:
        return self.respond(HTTP_NOT_FOUND, message, data=data, **options)

    def not_acceptable(self, message: str, data: Any = None, **options: Any) -> Any:
        return self.respond(HTTP_NOT_ACCEPTABLE, message, data=data, **options)

    def conflict(self, message: str, data: Any = None, **options: Any) -> Any:
        return self.respond(HTTP_CONFLICT, message, data=data, **options)

    def unprocessable_entity(self, message: str, data: Any = None, **options: Any) -> Any:
        return self.respond(HTTP_UNPROCESSABLE_ENTITY, message, data=data, **options)

    def too_many_requests(self, message: str, data: Any = None, **options: Any) -> Any:
        return self.respond(HTTP_TOO_MANY_REQUESTS, message, data=data, **options)

    def error(self, message: str, data: Any = None, **options: Any) -> Any:
        return self.respond(HTTP_INTERNAL_SERVER_ERROR, message, data=data, **options)

    # ------------------------------------------------------------------
    # Exceptions
    # ------------------------------------------------------------------

    def handle_exception(
        self,
        exc: BaseException,
        errors: Mapping[str, Any] | None = None,
        headers: Mapping[str, Any] | None = None,
        forward_url: str | None = None,
        *,
        request: RequestProtocol | None = None,
        console: bool = False,
    ) -> Any:
        """Render an exception through the entry point matching its status code.

        Unknown codes collapse to 500 with a message naming the original code;
        that message is still subject to debug-gating.
        """
        code = exception_status(exc)
        message = exception_message(exc)
        if errors is None and isinstance(exc, HttpError):
            errors = exc.error_bag()

        options: dict[str, Any] = {
            "errors": errors,
            "headers": headers,
            "forward_url": forward_url,
            "request": request,
            "console": console,
        }
        entry_point = STATUS_DISPATCH.get(code)
        if entry_point is None:
            return self.error(f"{GENERIC_ERROR_MESSAGE} ({code}: {message})", **options)
        return getattr(self, entry_point)(message, **options)
