"""Response envelope and HTTP status constants."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any

HTTP_OK = 200
HTTP_CREATED = 201
HTTP_ACCEPTED = 202
HTTP_NO_CONTENT = 204
HTTP_BAD_REQUEST = 400
HTTP_UNAUTHORIZED = 401
HTTP_FORBIDDEN = 403
HTTP_NOT_FOUND = 404
HTTP_NOT_ACCEPTABLE = 406
HTTP_CONFLICT = 409
HTTP_UNPROCESSABLE_ENTITY = 422
HTTP_TOO_MANY_REQUESTS = 429
HTTP_INTERNAL_SERVER_ERROR = 500


def _freeze(mapping: Mapping[str, Any] | None) -> Mapping[str, Any]:
    return MappingProxyType(dict(mapping or {}))


@dataclass(frozen=True)
class ResponseEnvelope:
    """Sanitized inputs handed to exactly one renderer.

    Built fresh per dispatch call; ``errors`` and ``headers`` are read-only
    views so a renderer cannot mutate what another component sees.
    """

    status: int
    message: str
    errors: Mapping[str, Any] = field(default_factory=dict)
    data: Any = None
    headers: Mapping[str, str] = field(default_factory=dict)
    forward_url: str | None = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "errors", _freeze(self.errors))
        object.__setattr__(self, "headers", _freeze(self.headers))

    @property
    def is_error(self) -> bool:
        return self.status >= HTTP_BAD_REQUEST
