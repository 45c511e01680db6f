"""Centralised Sentry initialisation for the investor analytics API."""

import re

import structlog
import sentry_sdk
from sentry_sdk.integrations.fastapi import FastApiIntegration
from sentry_sdk.integrations.httpx import HttpxIntegration
from sentry_sdk.integrations.redis import RedisIntegration

logger = structlog.get_logger()

_SENSITIVE_HEADERS = {"authorization", "cookie", "x-api-key", "x-com-vantageir-subscriptions-clientid"}
# Investor lookups take the reporting e-mail (debug routes) or a search term
_PII_QUERY_PARAM = re.compile(r"(?i)\b(email|q)=[^&]*")
_EMAIL = re.compile(r"[^\s@/?&=]+@[^\s@/?&=]+")

REDACTED = "[REDACTED]"


def _redact_query(query: str) -> str:
    return _PII_QUERY_PARAM.sub(lambda m: f"{m.group(1)}={REDACTED}", query)


def _scrub_sensitive_data(event: dict, hint: dict) -> dict:
    """Remove auth headers and investor e-mails before sending to Sentry."""
    request = event.get("request", {})
    headers = request.get("headers", {})
    for header in list(headers):
        if header.lower() in _SENSITIVE_HEADERS:
            headers[header] = REDACTED

    query = request.get("query_string")
    if isinstance(query, str) and query:
        request["query_string"] = _redact_query(query)
    url = request.get("url")
    if isinstance(url, str) and url:
        request["url"] = _EMAIL.sub(REDACTED, url)
    return event


def init_sentry(
    dsn: str | None,
    environment: str = "development",
    release: str | None = None,
) -> None:
    """Initialise Sentry with the FastAPI, Redis and httpx integrations.

    Call this BEFORE creating the FastAPI app. No-op when dsn is None or empty.
    """
    if not dsn:
        logger.info("sentry_disabled", reason="SENTRY_DSN not set")
        return

    traces_sample_rate = 0.1 if environment == "production" else 1.0
    sentry_sdk.init(
        dsn=dsn,
        environment=environment,
        release=release,
        traces_sample_rate=traces_sample_rate,
        integrations=[
            FastApiIntegration(transaction_style="endpoint"),
            RedisIntegration(),
            HttpxIntegration(),
        ],
        send_default_pii=False,      # investor names and e-mails stay out of Sentry
        before_send=_scrub_sensitive_data,
    )
    logger.info("sentry_initialized", environment=environment, traces_sample_rate=traces_sample_rate)
