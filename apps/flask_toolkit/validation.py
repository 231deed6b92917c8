"""Request payload validation with pydantic models.

Validation failures become ``BadRequestError`` so they render through the
same context-aware path as every other HTTP error.
"""

from __future__ import annotations

from collections.abc import Callable, Mapping
from functools import wraps
from typing import Any, TypeVar

from flask import request
from pydantic import BaseModel, ValidationError

from contracts.errors import BadRequestError

ModelT = TypeVar("ModelT", bound=BaseModel)

VALIDATION_MESSAGE = "Validation error"


def error_bag_from(exc: ValidationError) -> dict[str, list[str]]:
    """Group pydantic error messages by dotted field path."""
    bag: dict[str, list[str]] = {}
    for item in exc.errors():
        field = ".".join(str(part) for part in item.get("loc", ())) or "payload"
        bag.setdefault(field, []).append(str(item.get("msg", "Invalid value")))
    return bag


def validate_payload(model: type[ModelT], payload: Mapping[str, Any] | None) -> ModelT:
    """Validate ``payload`` against ``model``.

    Raises:
        BadRequestError: With one error list per invalid field
    """
    try:
        return model.model_validate(dict(payload or {}))
    except ValidationError as exc:
        raise BadRequestError(VALIDATION_MESSAGE, previous=exc, errors=error_bag_from(exc)) from exc


def request_payload() -> dict[str, Any]:
    """JSON body when present, else form fields."""
    body = request.get_json(silent=True)
    if isinstance(body, dict):
        return body
    return request.form.to_dict()


def validated_body(model: type[BaseModel]) -> Callable[[Callable[..., Any]], Callable[..., Any]]:
    """View decorator injecting the validated request payload as ``body``."""

    def _decorator(view: Callable[..., Any]) -> Callable[..., Any]:
        @wraps(view)
        def _wrapped(*args: Any, **kwargs: Any) -> Any:
            kwargs["body"] = validate_payload(model, request_payload())
            return view(*args, **kwargs)

        return _wrapped

    return _decorator
