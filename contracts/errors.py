"""Error taxonomy shared by the response core and the Flask integration.

``HttpError`` subclasses are raised by application code and rendered
terminally by ``services.responses.dispatcher.ResponseDispatcher``; they are
never retried or recovered inside the toolkit.
"""

from __future__ import annotations

import traceback
from collections.abc import Mapping
from typing import Any, Protocol


class ConfigurationError(ValueError):
    """Raised when toolkit configuration is missing or invalid."""


class _EventLogger(Protocol):
    def error(self, event: str, **fields: Any) -> None:
        ...


class HttpError(Exception):
    """Base class for HTTP semantic errors carrying an optional error bag."""

    status_code: int = 500
    default_message: str = "Internal Server Error"

    def __init__(
        self,
        message: str | None = None,
        previous: BaseException | None = None,
        errors: Mapping[str, Any] | None = None,
    ) -> None:
        self.message = message if message is not None else self.default_message
        super().__init__(self.message)
        self.errors: dict[str, Any] | None = dict(errors) if errors is not None else None
        if previous is not None:
            self.__cause__ = previous

    @property
    def code(self) -> int:
        return self.status_code

    def error_bag(self) -> dict[str, Any]:
        """Errors to render: the explicit bag, else the message under ``message``."""
        if self.errors is not None:
            return dict(self.errors)
        return {"message": self.message}

    def origin(self) -> tuple[str | None, int | None]:
        """File and line where the exception was raised, when a traceback exists."""
        if self.__traceback__ is None:
            return None, None
        frames = traceback.extract_tb(self.__traceback__)
        if not frames:
            return None, None
        last = frames[-1]
        return last.filename, last.lineno

    def report(self, logger: _EventLogger) -> None:
        """Emit a structured log entry describing this error."""
        origin_file, origin_line = self.origin()
        logger.error(
            "http_exception",
            exception=type(self).__name__,
            status=self.status_code,
            error_message=self.message,
            errors=self.errors,
            origin_file=origin_file,
            origin_line=origin_line,
        )

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.message!r}, status_code={self.status_code})"


class BadRequestError(HttpError):
    status_code = 400
    default_message = "Bad Request"


class UnauthorizedError(HttpError):
    status_code = 401
    default_message = "Unauthorized"


class ForbiddenError(HttpError):
    status_code = 403
    default_message = "Forbidden"


class NotFoundError(HttpError):
    status_code = 404
    default_message = "Not Found"


class NotAcceptableError(HttpError):
    status_code = 406
    default_message = "Not Acceptable"


class ConflictError(HttpError):
    status_code = 409
    default_message = "Conflict"


class UnprocessableEntityError(HttpError):
    status_code = 422
    default_message = "Unprocessable Entity"


class TooManyRequestsError(HttpError):
    status_code = 429
    default_message = "Too Many Requests"


HTTP_ERRORS: tuple[type[HttpError], ...] = (
    BadRequestError,
    UnauthorizedError,
    ForbiddenError,
    NotFoundError,
    NotAcceptableError,
    ConflictError,
    UnprocessableEntityError,
    TooManyRequestsError,
)
