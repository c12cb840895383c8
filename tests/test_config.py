"""Tests for centralized Settings, credential validation, and get_settings cache.

Covers: defaults, env-override, production hardening gate, dev-mode warnings,
and lru_cache behavior.
"""

from __future__ import annotations

from pathlib import Path

import pytest

from enquiry.config import Settings, get_settings, validate_credentials

# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------

@pytest.fixture(autouse=True)
def _clear_settings_cache() -> None:
    """Clear get_settings lru_cache before each test."""
    get_settings.cache_clear()


def _production_settings(**overrides) -> Settings:
    values = {
        "production": True,
        "smtp_host": "smtp.example.com",
        "smtp_username": "mailer@tdetrading.com.au",
        "smtp_password": "secret",
        "session_secret": "session-secret",
        "recaptcha_secret": "recaptcha-secret",
    }
    values.update(overrides)
    return Settings(_env_file=None, **values)  # type: ignore[call-arg, arg-type]


# ---------------------------------------------------------------------------
# Settings defaults
# ---------------------------------------------------------------------------

class TestSettingsDefaults:
    """Verify that Settings fields have the expected default values."""

    def test_settings_defaults(self) -> None:
        s = Settings(_env_file=None)  # type: ignore[call-arg]

        assert s.production is False
        assert s.http_port == 8000
        assert s.audit_db_path == Path("data/audit.db")
        assert s.captcha_enabled is True
        assert s.csrf_enabled is True
        assert s.rate_min_interval_seconds == 60
        assert s.rate_max_per_window == 5
        assert s.rate_window_seconds == 3600
        assert s.min_fill_seconds == 20
        assert s.max_form_age_seconds == 1800
        assert s.smtp_encryption == "tls"

    def test_settings_from_env(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("PRODUCTION", "true")
        monkeypatch.setenv("HTTP_PORT", "9090")
        monkeypatch.setenv("SMTP_PASSWORD", "pw")
        monkeypatch.setenv("ALLOWED_ORIGINS", '["https://example.com"]')

        s = Settings(_env_file=None)  # type: ignore[call-arg]

        assert s.production is True
        assert s.http_port == 9090
        assert s.smtp_password.get_secret_value() == "pw"
        assert s.allowed_origins == ["https://example.com"]

    def test_secrets_hidden_from_repr(self) -> None:
        s = _production_settings()
        assert "recaptcha-secret" not in repr(s)
        assert "session-secret" not in repr(s)

    def test_sender_address_falls_back_to_login(self) -> None:
        assert _production_settings().sender_address == "mailer@tdetrading.com.au"
        explicit = _production_settings(mail_from_address="noreply@tdetrading.com.au")
        assert explicit.sender_address == "noreply@tdetrading.com.au"


# ---------------------------------------------------------------------------
# Credential validation
# ---------------------------------------------------------------------------

class TestValidateCredentials:
    """Verify validate_credentials behaviour in production and dev modes."""

    def test_production_valid(self) -> None:
        """Production mode passes when every secret is present."""
        validate_credentials(_production_settings())

    @pytest.mark.parametrize(
        "overrides",
        [
            {"smtp_host": ""},
            {"smtp_password": ""},
            {"session_secret": ""},
            {"recaptcha_secret": ""},
            {"captcha_enabled": False},
            {"allowed_origins": ["*"]},
        ],
    )
    def test_production_unsafe_config_exits(self, overrides: dict) -> None:
        with pytest.raises(SystemExit) as exc_info:
            validate_credentials(_production_settings(**overrides))
        assert exc_info.value.code == 1

    def test_dev_mode_warns_without_exiting(self) -> None:
        """Dev mode logs warnings but does NOT exit."""
        validate_credentials(Settings(_env_file=None, captcha_enabled=False))  # type: ignore[call-arg]


# ---------------------------------------------------------------------------
# get_settings cache
# ---------------------------------------------------------------------------

class TestGetSettingsCached:
    """Verify lru_cache on get_settings."""

    def test_get_settings_cached(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """Calling get_settings() twice returns the exact same object."""
        monkeypatch.delenv("PRODUCTION", raising=False)

        first = get_settings()
        second = get_settings()

        assert first is second
