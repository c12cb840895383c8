"""Centralized, typed configuration using pydantic-settings.

Provides a single ``Settings`` class backed by ``.env`` file and environment
variables, a cached ``get_settings()`` accessor, and a ``validate_credentials()``
startup gate that refuses to start a production process with missing SMTP
credentials or a disabled CAPTCHA.

IMPORTANT: This module has ZERO imports from the ``enquiry`` package to
prevent circular imports.  Only stdlib, pydantic, pydantic_settings, and
structlog are used.
"""

from __future__ import annotations

import sys
from functools import lru_cache
from pathlib import Path
from typing import Literal

import structlog
from pydantic import SecretStr, ValidationError
from pydantic_settings import BaseSettings, SettingsConfigDict

logger = structlog.get_logger()


class Settings(BaseSettings):
    """Application settings loaded from environment variables and ``.env`` file.

    SMTP credentials and the reCAPTCHA secret live here and nowhere else;
    ``SecretStr`` fields keep them out of logs and ``repr`` output.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
    )

    # -- General ---------------------------------------------------------------
    production: bool = False
    http_host: str = "0.0.0.0"
    http_port: int = 8000
    allowed_origins: list[str] = [
        "https://tdetrading.com.au",
        "https://www.tdetrading.com.au",
    ]
    session_secret: SecretStr = SecretStr("")
    sentry_dsn: str = ""

    # -- Audit -----------------------------------------------------------------
    audit_db_path: Path = Path("data/audit.db")

    # -- SMTP (secrets) --------------------------------------------------------
    smtp_host: str = ""
    smtp_port: int = 587
    smtp_username: str = ""
    smtp_password: SecretStr = SecretStr("")
    smtp_encryption: Literal["tls", "ssl", "none"] = "tls"
    smtp_timeout: float = 30.0

    # -- Outbound message ------------------------------------------------------
    mail_from_address: str = ""
    mail_from_name: str = "TDE Trading Website"
    contact_recipient: str = "info@tdetrading.com.au"
    contact_subject: str = "TDE Trading - Website Contact Form Submission"

    # -- Branding --------------------------------------------------------------
    business_name: str = "TDE Trading"
    business_tagline: str = "Professional Trading Education"
    support_phone: str = "(+61) 430 333 813"
    support_phone_uri: str = "+61430333813"
    support_email: str = "info@tdetrading.com.au"

    # -- CAPTCHA ---------------------------------------------------------------
    captcha_enabled: bool = True
    recaptcha_secret: SecretStr = SecretStr("")
    recaptcha_verify_url: str = "https://www.google.com/recaptcha/api/siteverify"
    captcha_timeout: float = 10.0

    # -- Rate limiting ---------------------------------------------------------
    rate_min_interval_seconds: int = 60
    rate_max_per_window: int = 5
    rate_window_seconds: int = 3600

    # -- Anti-bot timing -------------------------------------------------------
    min_fill_seconds: int = 20
    max_form_age_seconds: int = 1800

    # -- Validation flags ------------------------------------------------------
    dns_check_enabled: bool = True
    dns_timeout: float = 5.0
    spam_detection_enabled: bool = True
    spam_rules_path: Path = Path("config/spam_rules.yaml")
    csrf_enabled: bool = True

    @property
    def sender_address(self) -> str:
        """Return the envelope ``From`` address (defaults to the SMTP login)."""
        return self.mail_from_address or self.smtp_username


@lru_cache
def get_settings() -> Settings:
    """Return a cached ``Settings`` instance.

    The ``@lru_cache`` decorator ensures environment variables are parsed
    exactly once.  Call ``get_settings.cache_clear()`` in tests to reset.

    Returns:
        The application ``Settings``.
    """
    try:
        return Settings()
    except ValidationError as exc:
        # Log only the structured errors list -- never the full exception
        # which may contain raw SecretStr values.
        logger.error("settings_validation_failed", errors=exc.errors())
        sys.exit(1)


def validate_credentials(settings: Settings) -> None:
    """Enforce credential presence and hardening rules at startup.

    In **production** mode (``settings.production is True``), the application
    exits with a clear error block if SMTP credentials, the session secret or
    the reCAPTCHA secret are missing, or if CAPTCHA verification is disabled.

    In **development** mode, each problem is logged as a warning but the
    application continues to start.

    Args:
        settings: The loaded application settings.
    """
    errors: list[str] = []

    if not settings.smtp_host:
        errors.append("SMTP_HOST is empty or not set")

    if not settings.smtp_password.get_secret_value():
        errors.append("SMTP_PASSWORD is empty or not set")

    if not settings.session_secret.get_secret_value():
        errors.append("SESSION_SECRET is empty or not set")

    if settings.captcha_enabled:
        if not settings.recaptcha_secret.get_secret_value():
            errors.append("RECAPTCHA_SECRET is empty or not set")
    else:
        errors.append("CAPTCHA_ENABLED is false; CAPTCHA verification is bypassed")

    if "*" in settings.allowed_origins:
        errors.append("ALLOWED_ORIGINS contains a wildcard origin")

    if not errors:
        logger.info("credential_validation_passed")
        return

    if settings.production:
        for err in errors:
            logger.error("credential_missing", detail=err)
        print("\n=== STARTUP FAILED ===", file=sys.stderr)
        print("Configuration is not safe for production mode:", file=sys.stderr)
        for err in errors:
            print(f"  - {err}", file=sys.stderr)
        print("======================\n", file=sys.stderr)
        sys.exit(1)
    else:
        for err in errors:
            logger.warning("credential_missing_dev", detail=err)
