"""Application entry point for the contact-form service.

Configures:
- **structlog** with JSON rendering (production) or colored console (development)
- **Sentry** error forwarding when a DSN is configured
- **Services**: audit DB, Abuse Gate, validator, renderer, SMTP transport and
  the orchestrator that ties them together
- **FastAPI** with CORS (site origins only), signed session cookies,
  request IDs, Prometheus metrics, health probes and the ``/contact`` router
"""

from __future__ import annotations

import asyncio
import logging
import secrets
import time
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from typing import Any

import structlog
import uvicorn
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from starlette.middleware.sessions import SessionMiddleware

from enquiry.api.contact import router as contact_router
from enquiry.audit.logger import AuditLogger
from enquiry.audit.store import close_audit_db, init_audit_db
from enquiry.config import Settings, get_settings, validate_credentials
from enquiry.email.models import Branding, SmtpConfig
from enquiry.email.renderer import EmailRenderer
from enquiry.email.transport import SmtpTransport
from enquiry.gate.abuse import AbuseGate
from enquiry.gate.captcha import CaptchaVerifier
from enquiry.gate.rate_limit import InMemoryRateStore, RateLimiter
from enquiry.health import register_health_routes
from enquiry.observability.metrics import setup_metrics
from enquiry.observability.middleware import RequestIdMiddleware
from enquiry.observability.sentry import get_sentry_processor, init_sentry
from enquiry.submission.orchestrator import SubmissionOrchestrator
from enquiry.validation.domains import DnsDomainChecker
from enquiry.validation.form import FormValidator
from enquiry.validation.spam import SpamScanner, load_spam_rules

logger = structlog.get_logger()

RATE_PRUNE_INTERVAL_SECONDS = 300


def configure_logging(production: bool = False, sentry_enabled: bool = False) -> None:
    """Configure structlog for production (JSON) or development (console).

    Production mode (*production=True*): JSON rendering at INFO level.
    Development mode: colored console rendering at DEBUG level.

    Args:
        production: Enable production mode if ``True``.
        sentry_enabled: Insert the Sentry processor so ERROR events are
            forwarded.
    """
    shared_processors: list[structlog.types.Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
    ]
    if sentry_enabled:
        shared_processors.append(get_sentry_processor())
    shared_processors += [
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.UnicodeDecoder(),
    ]

    if production:
        shared_processors.append(structlog.processors.format_exc_info)
        renderer: structlog.types.Processor = structlog.processors.JSONRenderer()
        log_level = logging.INFO
    else:
        renderer = structlog.dev.ConsoleRenderer()
        log_level = logging.DEBUG

    structlog.configure(
        processors=[*shared_processors, renderer],
        wrapper_class=structlog.make_filtering_bound_logger(log_level),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(),
        cache_logger_on_first_use=True,
    )

    structlog.contextvars.bind_contextvars(service="enquiry")


def initialize_services(settings: Settings | None = None) -> dict[str, Any]:
    """Set up all shared services for the application.

    Args:
        settings: Application settings.  If ``None``, ``get_settings()`` is used.

    Returns:
        A dict of initialized service instances keyed by name.
    """
    if settings is None:
        settings = get_settings()

    services: dict[str, Any] = {"_settings": settings}

    # a. SQLite audit database
    audit_db_path = settings.audit_db_path
    audit_db_path.parent.mkdir(parents=True, exist_ok=True)
    audit_conn = init_audit_db(audit_db_path)
    services["audit_conn"] = audit_conn
    audit_logger = AuditLogger(audit_conn)
    services["audit_logger"] = audit_logger

    # b. Abuse Gate
    rate_store = InMemoryRateStore()
    services["rate_store"] = rate_store
    captcha = CaptchaVerifier(
        secret=settings.recaptcha_secret.get_secret_value(),
        enabled=settings.captcha_enabled,
        verify_url=settings.recaptcha_verify_url,
        timeout=settings.captcha_timeout,
    )
    services["captcha"] = captcha
    if not settings.captcha_enabled:
        logger.warning("captcha_disabled_by_configuration")
    gate = AbuseGate(
        rate_limiter=RateLimiter(
            rate_store,
            min_interval_seconds=settings.rate_min_interval_seconds,
            max_per_window=settings.rate_max_per_window,
            window_seconds=settings.rate_window_seconds,
        ),
        captcha=captcha,
        min_fill_seconds=settings.min_fill_seconds,
        max_form_age_seconds=settings.max_form_age_seconds,
    )
    services["gate"] = gate

    # c. Composite validator
    domain_checker = None
    if settings.dns_check_enabled:
        domain_checker = DnsDomainChecker(timeout=settings.dns_timeout)
    validator = FormValidator(
        spam_scanner=SpamScanner(load_spam_rules(settings.spam_rules_path)),
        domain_checker=domain_checker,
        spam_detection_enabled=settings.spam_detection_enabled,
    )
    services["validator"] = validator

    # d. Renderer and transport
    branding = Branding(
        business_name=settings.business_name,
        tagline=settings.business_tagline,
        subject=settings.contact_subject,
        support_phone=settings.support_phone,
        support_phone_uri=settings.support_phone_uri,
        support_email=settings.support_email,
    )
    services["branding"] = branding
    transport = SmtpTransport(build_smtp_config(settings))
    services["transport"] = transport

    # e. Orchestrator
    services["orchestrator"] = SubmissionOrchestrator(
        gate=gate,
        validator=validator,
        renderer=EmailRenderer(branding),
        transport=transport,
        recipient=settings.contact_recipient,
        from_name=settings.mail_from_name,
        branding=branding,
        audit_logger=audit_logger,
    )

    logger.info(
        "services_initialized",
        captcha_enabled=settings.captcha_enabled,
        dns_check_enabled=settings.dns_check_enabled,
        spam_detection_enabled=settings.spam_detection_enabled,
        smtp_configured=transport.configured,
    )
    return services


def build_smtp_config(settings: Settings) -> SmtpConfig:
    """Translate settings into the transport's connection config."""
    return SmtpConfig(
        host=settings.smtp_host,
        port=settings.smtp_port,
        username=settings.smtp_username,
        password=settings.smtp_password,
        encryption=settings.smtp_encryption,
        timeout=settings.smtp_timeout,
        from_address=settings.sender_address,
    )


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None]:
    """Lifespan context manager for FastAPI startup and shutdown.

    On shutdown: closes the audit database connection.

    Args:
        app: The FastAPI application instance.

    Yields:
        Control to the application.
    """
    logger.info("fastapi_application_starting")
    yield
    audit_conn = app.state.services.get("audit_conn")
    if audit_conn is not None:
        close_audit_db(audit_conn)
        logger.info("audit_db_closed")


def create_app(services: dict[str, Any]) -> FastAPI:
    """Create the FastAPI app with middleware, health probes and the contact route.

    Args:
        services: The initialized services dict from ``initialize_services``.

    Returns:
        The configured FastAPI application.
    """
    settings: Settings = services.get("_settings") or get_settings()

    fastapi_app = FastAPI(title="TDE Trading Enquiries", lifespan=lifespan)
    fastapi_app.state.services = services
    fastapi_app.state.settings = settings

    session_secret = settings.session_secret.get_secret_value()
    if not session_secret:
        # Sessions (and CSRF tokens) will not survive a restart.
        session_secret = secrets.token_hex(32)
        logger.warning("session_secret_generated")

    # Middleware added last runs first: request id -> CORS -> session.
    fastapi_app.add_middleware(
        SessionMiddleware,
        secret_key=session_secret,
        session_cookie="enquiry_session",
        same_site="lax",
        https_only=settings.production,
    )
    fastapi_app.add_middleware(
        CORSMiddleware,
        allow_origins=[origin for origin in settings.allowed_origins if origin != "*"],
        allow_credentials=True,
        allow_methods=["GET", "POST", "OPTIONS"],
        allow_headers=["Content-Type", "X-Requested-With", "X-Request-ID"],
        expose_headers=["Retry-After", "X-Request-ID"],
        max_age=3600,
    )
    fastapi_app.add_middleware(RequestIdMiddleware)

    setup_metrics(fastapi_app)
    register_health_routes(fastapi_app)
    fastapi_app.include_router(contact_router)

    return fastapi_app


async def prune_rate_state_periodically(
    store: InMemoryRateStore,
    window_seconds: int,
    interval_seconds: float = RATE_PRUNE_INTERVAL_SECONDS,
) -> None:
    """Drop rate state whose window has lapsed so idle keys do not accumulate.

    Args:
        store: The in-process rate store.
        window_seconds: Rate window size; states older than this are idle.
        interval_seconds: Pause between sweeps.
    """
    while True:
        await asyncio.sleep(interval_seconds)
        removed = store.discard_idle(older_than=time.time() - window_seconds)
        if removed:
            logger.debug("rate_state_pruned", removed=removed, remaining=len(store))


async def main() -> None:
    """Main entry point: configure, validate, wire services and serve HTTP.

    1. Configure logging and Sentry
    2. Validate credentials (fatal in production)
    3. Initialize services and create the FastAPI app
    4. Run uvicorn alongside the rate-state sweeper
    5. Close audit DB on exit
    """
    settings = get_settings()
    sentry_enabled = init_sentry(
        settings.sentry_dsn,
        environment="production" if settings.production else "development",
    )
    configure_logging(production=settings.production, sentry_enabled=sentry_enabled)
    logger.info("application_starting")

    validate_credentials(settings)

    services = initialize_services(settings)
    fastapi_app = create_app(services)

    config = uvicorn.Config(
        fastapi_app,
        host=settings.http_host,
        port=settings.http_port,
        log_level="info",
        proxy_headers=True,
    )
    server = uvicorn.Server(config)

    sweeper = asyncio.ensure_future(
        prune_rate_state_periodically(services["rate_store"], settings.rate_window_seconds)
    )
    try:
        await server.serve()
    finally:
        sweeper.cancel()
        audit_conn = services.get("audit_conn")
        if audit_conn is not None:
            close_audit_db(audit_conn)
            logger.info("audit_db_closed_on_shutdown")


def run() -> None:
    """Console-script entry point."""
    asyncio.run(main())


if __name__ == "__main__":
    run()
