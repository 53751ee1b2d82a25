"""Build a configured httpx transport from ConnectionOptions."""

from __future__ import annotations

import ssl
from collections.abc import Generator

import httpx
import structlog

from kubeclient.config import ConnectionOptions
from kubeclient.diagnostics import build_event_hooks, log_components

log = structlog.get_logger()

_PEM_MARKER = "-----BEGIN"

DEFAULT_TIMEOUT = httpx.Timeout(30.0)


class BearerTokenAuth(httpx.Auth):
    """Attach ``Authorization: Bearer <token>`` to every outgoing request."""

    def __init__(self, token: str) -> None:
        self._header = f"Bearer {token}"

    def auth_flow(self, request: httpx.Request) -> Generator[httpx.Request, httpx.Response, None]:
        request.headers["Authorization"] = self._header
        yield request


def build_ssl_context(options: ConnectionOptions) -> ssl.SSLContext:
    """Create the TLS context for the given options.

    Server trust is one of three mutually exclusive modes: verification disabled
    (``allow_insecure``, which wins over everything else), a pinned CA, or the
    system trust store. A client certificate is loaded on top for mutual TLS.
    """
    if options.allow_insecure:
        context = ssl.create_default_context()
        context.check_hostname = False
        context.verify_mode = ssl.CERT_NONE
    elif options.trusted_ca_certificate:
        ca = options.trusted_ca_certificate
        if ca.lstrip().startswith(_PEM_MARKER):
            context = ssl.create_default_context(cadata=ca)
        else:
            context = ssl.create_default_context(cafile=ca)
    else:
        context = ssl.create_default_context()

    if options.client_certificate is not None:
        context.load_cert_chain(
            certfile=options.client_certificate.cert_file,
            keyfile=options.client_certificate.key_file,
        )
    return context


def build_transport(
    options: ConnectionOptions,
    *,
    transport: httpx.AsyncBaseTransport | None = None,
) -> httpx.AsyncClient:
    """Compose authentication, trust, and diagnostics into an ``httpx.AsyncClient``.

    No network I/O happens here.

    Args:
        options: Connection options; validated before anything is built.
        transport: Optional low-level transport (e.g. ``httpx.MockTransport``).
            When given, TLS settings are not applied since the transport owns
            the connection.

    Raises:
        ConfigurationError: If the options are invalid.
    """
    options.validate()

    auth = BearerTokenAuth(options.access_token) if options.access_token and options.access_token.strip() else None
    verify = build_ssl_context(options) if transport is None else True

    event_hooks = None
    if options.log_headers or options.log_payloads:
        event_hooks = build_event_hooks(log_components(options.log_headers, options.log_payloads))

    log.debug(
        "building_transport",
        endpoint=options.endpoint,
        bearer_token=auth is not None,
        allow_insecure=options.allow_insecure,
        pinned_ca=bool(options.trusted_ca_certificate) and not options.allow_insecure,
        client_certificate=options.client_certificate is not None,
        log_headers=options.log_headers,
        log_payloads=options.log_payloads,
    )
    return httpx.AsyncClient(
        base_url=options.endpoint or "",
        auth=auth,
        verify=verify,
        transport=transport,
        event_hooks=event_hooks,
        timeout=DEFAULT_TIMEOUT,
        headers={"Accept": "application/json"},
    )
