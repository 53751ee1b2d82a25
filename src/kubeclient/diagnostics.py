"""Logging setup and HTTP request/response diagnostics."""

from __future__ import annotations

import sys
from collections.abc import Awaitable, Callable
from enum import Flag, auto
from typing import Any

import httpx
import structlog

log = structlog.get_logger()

REDACTED = "[REDACTED]"

_SENSITIVE_HEADERS = {"authorization", "proxy-authorization", "cookie", "set-cookie"}

# Largest body, in characters, written to a single log record.
MAX_LOGGED_BODY = 4096


class LogMessageComponents(Flag):
    """Which parts of an HTTP message the diagnostic hooks capture."""

    BASIC = auto()
    HEADERS = auto()
    BODY = auto()


def configure_logging(*, json_output: bool | None = None) -> None:
    """Configure structlog for output to stderr.

    Args:
        json_output: Force JSON (True) or console (False) rendering. Defaults to
            console rendering when stderr is a terminal.
    """
    if json_output is None:
        json_output = not sys.stderr.isatty()
    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.JSONRenderer() if json_output else structlog.dev.ConsoleRenderer(),
        ],
        logger_factory=structlog.PrintLoggerFactory(file=sys.stderr),
    )


def log_components(log_headers: bool, log_payloads: bool) -> LogMessageComponents:
    components = LogMessageComponents.BASIC
    if log_headers:
        components |= LogMessageComponents.HEADERS
    if log_payloads:
        components |= LogMessageComponents.BODY
    return components


def redact_headers(headers: httpx.Headers) -> dict[str, str]:
    """Return headers as a plain dict with credential-bearing values masked."""
    return {name: (REDACTED if name.lower() in _SENSITIVE_HEADERS else value) for name, value in headers.items()}


def _truncate(text: str) -> str:
    if len(text) <= MAX_LOGGED_BODY:
        return text
    return f"{text[:MAX_LOGGED_BODY]}... ({len(text) - MAX_LOGGED_BODY} more characters)"


def is_watch_request(request: httpx.Request) -> bool:
    return request.url.params.get("watch") == "true"


def build_event_hooks(
    components: LogMessageComponents,
) -> dict[str, list[Callable[[Any], Awaitable[None]]]]:
    """Build httpx event hooks that log requests and responses.

    Bodies are only captured when ``components`` includes BODY. Watch responses
    are streamed indefinitely, so their bodies are never read here.
    """

    async def log_request(request: httpx.Request) -> None:
        fields: dict[str, Any] = {"method": request.method, "url": str(request.url)}
        if LogMessageComponents.HEADERS in components:
            fields["headers"] = redact_headers(request.headers)
        if LogMessageComponents.BODY in components and request.content:
            fields["body"] = _truncate(request.content.decode("utf-8", errors="replace"))
        log.debug("http_request", **fields)

    async def log_response(response: httpx.Response) -> None:
        request = response.request
        fields: dict[str, Any] = {
            "method": request.method,
            "url": str(request.url),
            "status_code": response.status_code,
        }
        if LogMessageComponents.HEADERS in components:
            fields["headers"] = redact_headers(response.headers)
        if LogMessageComponents.BODY in components and not is_watch_request(request):
            await response.aread()
            fields["body"] = _truncate(response.text)
        log.debug("http_response", **fields)

    return {"request": [log_request], "response": [log_response]}
