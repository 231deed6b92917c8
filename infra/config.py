"""Centralized toolkit configuration with schema validation.

Settings are read once at process start and are read-only afterwards:
- Supports flat environment names (for example ``TOOLKIT_API_MATCHERS``).
- Supports nested names (for example ``ROUTE__API_MATCHERS``).
- Optionally reads a local ``.env`` file before process env values.
- List-valued keys accept comma-separated strings.
"""

from __future__ import annotations

import os
from collections.abc import Mapping
from pathlib import Path
from threading import Lock
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

_DEFAULT_API_MATCHERS = ["api*", "*-api*"]
_DEFAULT_HOOK_MATCHERS = ["hooks/*"]
_DEFAULT_IOT_MATCHERS = ["iot/*"]
_DEFAULT_REDIRECT_HEADERS = ["Cache-Control", "Retry-After"]

_CONSOLE_MODES = {"auto", "always", "never"}


def _normalize_text_list(value: object) -> list[str]:
    """Accept list or comma-separated string and normalize to unique ordered list."""
    if value is None:
        return []

    items: list[str]
    if isinstance(value, str):
        items = [part.strip() for part in value.split(",") if part.strip()]
    elif isinstance(value, (list, tuple, set, frozenset)):
        items = [str(part).strip() for part in value if str(part).strip()]
    else:
        raise TypeError("expected a list[str] or comma-separated string")

    seen: set[str] = set()
    ordered: list[str] = []
    for item in items:
        if item not in seen:
            seen.add(item)
            ordered.append(item)
    return ordered


def _parse_flag(value: object, default: bool) -> bool:
    if value is None:
        return default
    if isinstance(value, bool):
        return value
    text = str(value).strip().lower()
    if text in {"1", "true", "yes", "on"}:
        return True
    if text in {"0", "false", "no", "off"}:
        return False
    return default


class RouteConfig(BaseModel):
    """Route-context matchers (glob patterns against the request path)."""

    model_config = ConfigDict(frozen=True)

    api_matchers: list[str] = Field(default_factory=lambda: list(_DEFAULT_API_MATCHERS))
    hook_matchers: list[str] = Field(default_factory=lambda: list(_DEFAULT_HOOK_MATCHERS))
    iot_matchers: list[str] = Field(default_factory=lambda: list(_DEFAULT_IOT_MATCHERS))
    json_matchers: list[str] = Field(default_factory=list)
    console_mode: str = Field(default="auto")

    @field_validator("api_matchers", "hook_matchers", "iot_matchers", "json_matchers", mode="before")
    @classmethod
    def _normalize_matchers(cls, value: object) -> list[str]:
        return _normalize_text_list(value)

    @field_validator("console_mode", mode="before")
    @classmethod
    def _normalize_console_mode(cls, value: object) -> str:
        text = str(value or "").strip().lower()
        if text in _CONSOLE_MODES:
            return text
        return "auto"

    def matchers(self) -> dict[str, list[str]]:
        """Return the matcher lists keyed the way the classifier expects."""
        return {
            "api_matchers": list(self.api_matchers),
            "hook_matchers": list(self.hook_matchers),
            "iot_matchers": list(self.iot_matchers),
            "json_matchers": list(self.json_matchers),
        }


class ResponsesConfig(BaseModel):
    """Response sanitization policy."""

    model_config = ConfigDict(frozen=True)

    # None means "follow the host application's debug flag".
    include_debug_details: bool | None = Field(default=None)
    redirect_allowed_headers: list[str] = Field(default_factory=lambda: list(_DEFAULT_REDIRECT_HEADERS))
    redirect_allowed_error_fields: list[str] = Field(default_factory=list)

    @field_validator("include_debug_details", mode="before")
    @classmethod
    def _normalize_debug(cls, value: object) -> bool | None:
        if value is None or (isinstance(value, str) and not value.strip()):
            return None
        return _parse_flag(value, False)

    @field_validator("redirect_allowed_headers", "redirect_allowed_error_fields", mode="before")
    @classmethod
    def _normalize_allow_lists(cls, value: object) -> list[str]:
        return _normalize_text_list(value)


class PaginatorConfig(BaseModel):
    """Pagination defaults."""

    model_config = ConfigDict(frozen=True)

    page_items: int = Field(default=15, ge=1, le=10_000)


class LoggingSettings(BaseModel):
    """Toolkit logging settings."""

    model_config = ConfigDict(frozen=True)

    level: str = Field(default="INFO")
    json_logs: bool = Field(default=False)
    override_root_handlers: bool = Field(default=False)

    @field_validator("level")
    @classmethod
    def _normalize_level(cls, value: str) -> str:
        text = str(value or "").strip().upper()
        if text in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
            return text
        return "INFO"

    @field_validator("json_logs", "override_root_handlers", mode="before")
    @classmethod
    def _normalize_flags(cls, value: object) -> bool:
        return _parse_flag(value, False)


class Settings(BaseModel):
    """Top-level settings model."""

    model_config = ConfigDict(frozen=True)

    route: RouteConfig = Field(default_factory=RouteConfig)
    responses: ResponsesConfig = Field(default_factory=ResponsesConfig)
    paginator: PaginatorConfig = Field(default_factory=PaginatorConfig)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)

    @classmethod
    def from_env(
        cls,
        *,
        env: Mapping[str, str] | None = None,
        env_file: str = ".env",
    ) -> Settings:
        """Build settings from `.env` then environment variables."""
        runtime_env = os.environ if env is None else env
        merged_env = _merge_env(_load_dotenv(Path(env_file)), runtime_env)
        payload = _build_payload(merged_env)
        return cls.model_validate(payload)

    def with_overrides(self, overrides: Mapping[str, Any] | None) -> Settings:
        """Return a new validated Settings with section-level overrides applied.

        ``overrides`` is a nested mapping such as
        ``{"responses": {"redirect_allowed_headers": ["Retry-After"]}}``.
        Unknown sections are rejected by validation.
        """
        if not overrides:
            return self
        payload = self.model_dump()
        for section, values in overrides.items():
            if isinstance(values, Mapping) and isinstance(payload.get(section), dict):
                payload[section] = {**payload[section], **dict(values)}
            else:
                payload[section] = values
        return type(self).model_validate(payload)


def _load_dotenv(path: Path) -> dict[str, str]:
    """Parse a minimal `.env` file format."""
    if not path.exists() or not path.is_file():
        return {}

    values: dict[str, str] = {}
    for raw_line in path.read_text(encoding="utf-8").splitlines():
        line = raw_line.strip()
        if not line or line.startswith("#"):
            continue
        if "=" not in line:
            continue
        key, raw_value = line.split("=", 1)
        key_clean = key.strip()
        value = raw_value.strip()
        if len(value) >= 2 and value[0] == value[-1] and value[0] in {"'", '"'}:
            value = value[1:-1]
        if key_clean:
            values[key_clean] = value
    return values


def _merge_env(dotenv_values: Mapping[str, str], runtime_env: Mapping[str, str]) -> dict[str, str]:
    """Return env map where process env overrides `.env` values."""
    merged = {str(k): str(v) for k, v in dotenv_values.items()}
    for key, value in runtime_env.items():
        merged[str(key)] = str(value)
    return merged


def _first_present(env: Mapping[str, str], *keys: str) -> str | None:
    """Return the first value set for the provided keys.

    An explicitly empty value is kept: ``TOOLKIT_JSON_MATCHERS=`` means "no
    patterns", which differs from "use the default list".
    """
    for key in keys:
        if key in env:
            return str(env[key]).strip()
    return None


def _first_non_empty(env: Mapping[str, str], *keys: str) -> str | None:
    """Return the first non-empty value for the provided keys."""
    for key in keys:
        value = str(env.get(key, "")).strip()
        if value:
            return value
    return None


# Every env key the toolkit reads, grouped by settings section.
# Order inside each tuple is lookup precedence (nested name first).
ENV_KEYS: dict[str, dict[str, tuple[str, ...]]] = {
    "route": {
        "api_matchers": ("ROUTE__API_MATCHERS", "TOOLKIT_API_MATCHERS"),
        "hook_matchers": ("ROUTE__HOOK_MATCHERS", "TOOLKIT_HOOK_MATCHERS"),
        "iot_matchers": ("ROUTE__IOT_MATCHERS", "TOOLKIT_IOT_MATCHERS"),
        "json_matchers": ("ROUTE__JSON_MATCHERS", "TOOLKIT_JSON_MATCHERS"),
        "console_mode": ("ROUTE__CONSOLE_MODE", "TOOLKIT_CONSOLE_MODE"),
    },
    "responses": {
        "include_debug_details": ("RESPONSES__INCLUDE_DEBUG_DETAILS", "TOOLKIT_DEBUG", "APP_DEBUG"),
        "redirect_allowed_headers": ("RESPONSES__REDIRECT_ALLOWED_HEADERS", "TOOLKIT_REDIRECT_ALLOWED_HEADERS"),
        "redirect_allowed_error_fields": (
            "RESPONSES__REDIRECT_ALLOWED_ERROR_FIELDS",
            "TOOLKIT_REDIRECT_ALLOWED_ERROR_FIELDS",
        ),
    },
    "paginator": {
        "page_items": ("PAGINATOR__PAGE_ITEMS", "TOOLKIT_PAGE_ITEMS"),
    },
    "logging": {
        "level": ("LOGGING__LEVEL", "TOOLKIT_LOG_LEVEL"),
        "json_logs": ("LOGGING__JSON_LOGS", "TOOLKIT_LOG_JSON"),
        "override_root_handlers": ("LOGGING__OVERRIDE_ROOT_HANDLERS", "TOOLKIT_LOG_OVERRIDE"),
    },
}

# Keys where an explicitly empty value is meaningful (empty list).
_LIST_KEYS = {
    "api_matchers",
    "hook_matchers",
    "iot_matchers",
    "json_matchers",
    "redirect_allowed_headers",
    "redirect_allowed_error_fields",
}


def _build_payload(env: Mapping[str, str]) -> dict[str, object]:
    """Build nested settings payload from env values."""
    payload: dict[str, object] = {}
    for section, fields in ENV_KEYS.items():
        values: dict[str, object] = {}
        for field_name, keys in fields.items():
            if field_name in _LIST_KEYS:
                value = _first_present(env, *keys)
            else:
                value = _first_non_empty(env, *keys)
            if value is not None:
                values[field_name] = value
        payload[section] = values
    return payload


_SETTINGS_LOCK = Lock()
_SETTINGS_CACHE: Settings | None = None


def get_settings(*, reload: bool = False) -> Settings:
    """Return cached settings, optionally forcing reload from env."""
    global _SETTINGS_CACHE
    with _SETTINGS_LOCK:
        if reload or _SETTINGS_CACHE is None:
            _SETTINGS_CACHE = Settings.from_env()
        return _SETTINGS_CACHE


def clear_settings_cache() -> None:
    """Clear in-process settings cache."""
    global _SETTINGS_CACHE
    with _SETTINGS_LOCK:
        _SETTINGS_CACHE = None


__all__ = [
    "ENV_KEYS",
    "LoggingSettings",
    "PaginatorConfig",
    "ResponsesConfig",
    "RouteConfig",
    "Settings",
    "get_settings",
    "clear_settings_cache",
    "ValidationError",
]
