"""Prometheus metrics instrumentation for the contact-form service.

Provides:
- ``setup_metrics(app)``: Attach prometheus-fastapi-instrumentator to a FastAPI
  app, exposing ``/metrics`` with HTTP request duration/count.
- ``SUBMISSIONS``: Counter of terminal outcomes, labelled by ``outcome``.
- ``GATE_REJECTIONS``: Counter of Abuse Gate vetoes, labelled by ``kind``.

Business counters are incremented by the orchestrator at terminal states.
"""

from __future__ import annotations

from fastapi import FastAPI
from prometheus_client import Counter
from prometheus_fastapi_instrumentator import Instrumentator

SUBMISSIONS: Counter = Counter(
    "enquiry_submissions_total",
    "Contact-form requests by terminal outcome",
    ["outcome"],
)

GATE_REJECTIONS: Counter = Counter(
    "enquiry_gate_rejections_total",
    "Submissions vetoed before validation, by rejection kind",
    ["kind"],
)


def setup_metrics(app: FastAPI) -> None:
    """Instrument *app* with Prometheus HTTP metrics and expose ``/metrics``.

    Excludes health/ready/metrics endpoints from instrumentation.

    Args:
        app: The FastAPI application to instrument.
    """
    Instrumentator(
        should_group_status_codes=True,
        should_ignore_untemplated=True,
        excluded_handlers=["/health", "/ready", "/metrics"],
    ).instrument(app).expose(app, include_in_schema=False, should_gzip=True)
