"""Unit tests for centralized configuration parsing and validation."""

from __future__ import annotations

from pathlib import Path
from typing import Any

import pytest

from infra.config import Settings, ValidationError, clear_settings_cache, get_settings


def test_settings_defaults() -> None:
    """Without env values the documented defaults apply."""
    settings = Settings.from_env(env={}, env_file=".missing.env")

    assert settings.route.api_matchers == ["api*", "*-api*"]
    assert settings.route.hook_matchers == ["hooks/*"]
    assert settings.route.iot_matchers == ["iot/*"]
    assert settings.route.json_matchers == []
    assert settings.route.console_mode == "auto"
    assert settings.responses.include_debug_details is None
    assert settings.responses.redirect_allowed_headers == ["Cache-Control", "Retry-After"]
    assert settings.responses.redirect_allowed_error_fields == []
    assert settings.paginator.page_items == 15
    assert settings.logging.level == "INFO"


def test_settings_reads_flat_env_keys() -> None:
    """Flat TOOLKIT_* env keys should map to nested settings models."""
    env = {
        "TOOLKIT_API_MATCHERS": "v1/*, v2/*",
        "TOOLKIT_JSON_MATCHERS": "reports/*",
        "TOOLKIT_CONSOLE_MODE": "never",
        "TOOLKIT_DEBUG": "1",
        "TOOLKIT_REDIRECT_ALLOWED_HEADERS": "Retry-After",
        "TOOLKIT_PAGE_ITEMS": "25",
        "TOOLKIT_LOG_LEVEL": "debug",
        "TOOLKIT_LOG_JSON": "true",
    }
    settings = Settings.from_env(env=env, env_file=".missing.env")

    assert settings.route.api_matchers == ["v1/*", "v2/*"]
    assert settings.route.json_matchers == ["reports/*"]
    assert settings.route.console_mode == "never"
    assert settings.responses.include_debug_details is True
    assert settings.responses.redirect_allowed_headers == ["Retry-After"]
    assert settings.paginator.page_items == 25
    assert settings.logging.level == "DEBUG"
    assert settings.logging.json_logs is True


def test_settings_reads_nested_env_keys_first() -> None:
    """Nested env keys (`__` delimiter) take precedence over flat aliases."""
    env = {
        "ROUTE__API_MATCHERS": "api/*,api/*,internal/*",
        "TOOLKIT_API_MATCHERS": "ignored/*",
        "PAGINATOR__PAGE_ITEMS": "40",
        "TOOLKIT_PAGE_ITEMS": "10",
    }
    settings = Settings.from_env(env=env, env_file=".missing.env")

    assert settings.route.api_matchers == ["api/*", "internal/*"]
    assert settings.paginator.page_items == 40


def test_explicit_empty_list_disables_matchers() -> None:
    settings = Settings.from_env(
        env={"TOOLKIT_REDIRECT_ALLOWED_HEADERS": "", "TOOLKIT_HOOK_MATCHERS": ""},
        env_file=".missing.env",
    )

    assert settings.responses.redirect_allowed_headers == []
    assert settings.route.hook_matchers == []


def test_app_debug_is_a_fallback_for_debug_details() -> None:
    settings = Settings.from_env(env={"APP_DEBUG": "false"}, env_file=".missing.env")
    assert settings.responses.include_debug_details is False


def test_settings_invalid_page_items_raises_validation_error() -> None:
    """Constrained values should fail schema validation."""
    with pytest.raises(ValidationError):
        Settings.from_env(env={"TOOLKIT_PAGE_ITEMS": "0"}, env_file=".missing.env")


def test_invalid_console_mode_falls_back_to_auto() -> None:
    settings = Settings.from_env(env={"TOOLKIT_CONSOLE_MODE": "sometimes"}, env_file=".missing.env")
    assert settings.route.console_mode == "auto"


def test_dotenv_values_are_overridden_by_process_env(tmp_path: Path) -> None:
    env_file = tmp_path / ".env"
    env_file.write_text(
        "# toolkit\nTOOLKIT_PAGE_ITEMS=30\nTOOLKIT_IOT_MATCHERS='devices/*'\n",
        encoding="utf-8",
    )

    settings = Settings.from_env(env={"TOOLKIT_PAGE_ITEMS": "50"}, env_file=str(env_file))

    assert settings.paginator.page_items == 50
    assert settings.route.iot_matchers == ["devices/*"]


def test_with_overrides_returns_new_validated_settings() -> None:
    base = Settings()
    updated = base.with_overrides({"responses": {"redirect_allowed_headers": "X-Trace"}})

    assert updated.responses.redirect_allowed_headers == ["X-Trace"]
    assert base.responses.redirect_allowed_headers == ["Cache-Control", "Retry-After"]
    assert updated.route == base.route

    with pytest.raises(ValidationError):
        base.with_overrides({"paginator": {"page_items": -3}})


def test_settings_are_frozen() -> None:
    settings = Settings()
    with pytest.raises(ValidationError):
        settings.paginator.page_items = 99  # type: ignore[misc]


def test_get_settings_reload_rebuilds_cache(monkeypatch: Any) -> None:
    """Reload should rebuild cached settings from current process env."""
    clear_settings_cache()
    monkeypatch.setenv("TOOLKIT_PAGE_ITEMS", "11")
    first = get_settings(reload=True)

    monkeypatch.setenv("TOOLKIT_PAGE_ITEMS", "12")
    cached = get_settings()
    second = get_settings(reload=True)

    assert first.paginator.page_items == 11
    assert cached is first
    assert second.paginator.page_items == 12
    clear_settings_cache()
