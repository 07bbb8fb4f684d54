import logging
import os
from typing import Any, Optional

import sentry_sdk
from sentry_sdk.integrations.fastapi import FastApiIntegration

from ..exceptions import DomainException

logger = logging.getLogger(__name__)


def sample_rate_from_env(name: str, default: float = 0.0) -> float:
    """Read a Sentry sample rate, falling back to ``default`` outside [0, 1]."""

    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        rate = float(raw)
    except ValueError:
        logger.warning("%s=%r is not a number; using %.2f", name, raw, default)
        return default
    if not 0.0 <= rate <= 1.0:
        logger.warning("%s=%r is outside [0, 1]; using %.2f", name, raw, default)
        return default
    return rate


def drop_domain_errors(event: dict, hint: dict) -> Optional[dict]:
    """Keep 4xx domain errors (bad scores, conflicts, 404s) out of Sentry.

    Commit failures (503) are still reported.
    """

    exc_info: Any = hint.get("exc_info")
    if exc_info:
        exc = exc_info[1]
        if isinstance(exc, DomainException) and exc.status_code < 500:
            return None
    return event


def init_sentry() -> bool:
    """Initialise Sentry from ``SENTRY_*`` variables; return whether it is on."""

    dsn = os.getenv("SENTRY_DSN")
    if not dsn:
        logger.info("SENTRY_DSN not set; error reporting disabled")
        return False

    environment = (os.getenv("SENTRY_ENVIRONMENT") or "").strip() or None
    sentry_sdk.init(
        dsn=dsn,
        integrations=[FastApiIntegration()],
        environment=environment,
        release=(os.getenv("SENTRY_RELEASE") or "").strip() or None,
        traces_sample_rate=sample_rate_from_env("SENTRY_TRACES_SAMPLE_RATE"),
        profiles_sample_rate=sample_rate_from_env("SENTRY_PROFILES_SAMPLE_RATE"),
        before_send=drop_domain_errors,
    )
    sentry_sdk.set_tag("service", "pifa-league-stats")
    logger.info("Sentry enabled (environment=%s)", environment or "default")
    return True
