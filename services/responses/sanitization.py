"""Sanitization policy applied before any renderer sees its inputs.

Two controls live here:

* debug-gating: for status >= 500 with debug details disabled, the message is
  replaced by ``GENERIC_ERROR_MESSAGE`` and the error bag is emptied, whatever
  the caller passed in;
* header filtering: non-string keys/values are always dropped, and strategies
  whose ``requires_header_allow_list`` is set only keep allow-listed headers.
  An empty allow-list keeps nothing.

``filter_error_fields`` is the redirect-specific error bag filter; the redirect
renderer applies it, not ``sanitize``.

All functions are pure: same inputs, same outputs.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from typing import Any

from services.responses.strategies import StrategyKind

GENERIC_ERROR_MESSAGE = "An unexpected error occurred."


@dataclass(frozen=True)
class SanitizationConfig:
    """Read-only sanitization settings.

    ``redirect_allowed_headers`` holds lower-cased header names;
    use ``SanitizationConfig.build`` to normalize raw configuration.
    """

    include_debug_details: bool = False
    redirect_allowed_headers: frozenset[str] = field(default_factory=frozenset)
    redirect_allowed_error_fields: frozenset[str] = field(default_factory=frozenset)

    @classmethod
    def build(
        cls,
        *,
        include_debug_details: bool = False,
        redirect_allowed_headers: Iterable[str] = (),
        redirect_allowed_error_fields: Iterable[str] = (),
    ) -> SanitizationConfig:
        return cls(
            include_debug_details=bool(include_debug_details),
            redirect_allowed_headers=frozenset(
                str(name).strip().lower() for name in redirect_allowed_headers if str(name).strip()
            ),
            redirect_allowed_error_fields=frozenset(
                str(name).strip() for name in redirect_allowed_error_fields if str(name).strip()
            ),
        )


@dataclass(frozen=True)
class SanitizedPayload:
    message: str
    errors: dict[str, Any]
    headers: dict[str, str]


def redact(
    status: int,
    message: str,
    errors: Mapping[str, Any] | None,
    config: SanitizationConfig,
) -> tuple[str, dict[str, Any]]:
    """Apply debug-gating to the message and error bag."""
    if status >= 500 and not config.include_debug_details:
        return GENERIC_ERROR_MESSAGE, {}
    return message, dict(errors or {})


def filter_headers(
    headers: Mapping[Any, Any] | None,
    kind: StrategyKind,
    config: SanitizationConfig,
) -> dict[str, str]:
    """Drop non-string headers, then apply the allow-list when the strategy needs it."""
    clean = {
        key: value
        for key, value in (headers or {}).items()
        if isinstance(key, str) and isinstance(value, str)
    }
    if not kind.requires_header_allow_list:
        return clean

    allowed = config.redirect_allowed_headers
    if not allowed:
        return {}
    return {key: value for key, value in clean.items() if key.lower() in allowed}


def sanitize(
    status: int,
    message: str,
    errors: Mapping[str, Any] | None,
    headers: Mapping[Any, Any] | None,
    kind: StrategyKind,
    config: SanitizationConfig,
) -> SanitizedPayload:
    """Return the cleaned message, errors and headers for one dispatch."""
    clean_message, clean_errors = redact(status, message, errors, config)
    return SanitizedPayload(
        message=clean_message,
        errors=clean_errors,
        headers=filter_headers(headers, kind, config),
    )


_SCALARS = (str, int, float, bool)


def _to_text(value: Any) -> str | None:
    """Coerce a scalar or string-convertible value; None when not convertible.

    Booleans use the form-field convention: True is ``"1"``, False is ``""``.
    """
    if value is None:
        return None
    if isinstance(value, bool):
        return "1" if value else ""
    if isinstance(value, _SCALARS):
        return str(value)
    if isinstance(value, (Mapping, list, tuple, set, frozenset, bytes, bytearray)):
        return None
    if type(value).__str__ is not object.__str__:
        return str(value)
    return None


def filter_error_fields(
    errors: Mapping[Any, Any] | None,
    allowed_fields: Iterable[str] = (),
) -> dict[str, str | list[str]]:
    """Reduce an error bag to string values, optionally restricted to allowed keys.

    Scalars and objects defining ``__str__`` become strings; lists/tuples become
    lists of strings with non-convertible elements dropped. Anything else
    (None, nested mappings, plain objects) is removed. A non-empty
    ``allowed_fields`` drops every key not listed.
    """
    allowed = frozenset(allowed_fields)
    clean: dict[str, str | list[str]] = {}
    for raw_key, value in (errors or {}).items():
        key = str(raw_key)
        if allowed and key not in allowed:
            continue
        if isinstance(value, (list, tuple)):
            texts = [text for text in (_to_text(item) for item in value) if text is not None]
            clean[key] = texts
            continue
        text = _to_text(value)
        if text is not None:
            clean[key] = text
    return clean
