"""Contracts shared across the toolkit.

The contracts package defines:
- Protocol definitions for the host-framework collaborators (``interfaces``)
- TypedDict definitions for the wire formats (``typed_dicts``)
- the error taxonomy (``errors``)

Main exports:
- ConfigurationError, HttpError and its eight HTTP subclasses
- RequestProtocol, UrlProviderProtocol, RedirectorProtocol, JsonResponderProtocol
"""

from contracts import errors as errors_module
from contracts import interfaces as interfaces_module

# Explicit re-exports to satisfy ruff F401
__all__ = [
    "BadRequestError",
    "ConfigurationError",
    "ConflictError",
    "ForbiddenError",
    "HttpError",
    "NotAcceptableError",
    "NotFoundError",
    "TooManyRequestsError",
    "UnauthorizedError",
    "UnprocessableEntityError",
    "JsonResponderProtocol",
    "RedirectorProtocol",
    "RequestProtocol",
    "UrlProviderProtocol",
]

ConfigurationError = errors_module.ConfigurationError
HttpError = errors_module.HttpError
BadRequestError = errors_module.BadRequestError
UnauthorizedError = errors_module.UnauthorizedError
ForbiddenError = errors_module.ForbiddenError
NotFoundError = errors_module.NotFoundError
NotAcceptableError = errors_module.NotAcceptableError
ConflictError = errors_module.ConflictError
UnprocessableEntityError = errors_module.UnprocessableEntityError
TooManyRequestsError = errors_module.TooManyRequestsError

JsonResponderProtocol = interfaces_module.JsonResponderProtocol
RedirectorProtocol = interfaces_module.RedirectorProtocol
RequestProtocol = interfaces_module.RequestProtocol
UrlProviderProtocol = interfaces_module.UrlProviderProtocol
