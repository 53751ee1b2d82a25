"""Exception taxonomy for the Kubernetes API client."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from kubeclient.models.base import StatusV1


class KubeClientError(Exception):
    """Base class for all errors raised by kubeclient."""


class ConfigurationError(KubeClientError):
    """Connection options are invalid; raised before any I/O takes place."""


class TemplateError(KubeClientError):
    """A mandatory request-template placeholder was not supplied."""


class DisposedError(KubeClientError):
    """An operation was attempted after the owning KubeApiClient was closed."""


class KubeConnectionError(KubeClientError):
    """A network-level failure (connect, read, reset, timeout)."""


class ProtocolError(KubeClientError):
    """A response body did not have the expected shape."""


class WatchProtocolError(ProtocolError):
    """A watch stream produced a line that is not a valid event envelope."""


class RequestFailedError(KubeClientError):
    """The API server answered with a non-success status code.

    Attributes:
        status_code: The HTTP status code.
        status: The decoded Kubernetes ``Status`` body, when the server sent one.
        body: The raw response body text.
    """

    def __init__(self, status_code: int, status: StatusV1 | None = None, body: str = "") -> None:
        self.status_code = status_code
        self.status = status
        self.body = body
        reason = status.message if status is not None and status.message else body[:200]
        super().__init__(f"Kubernetes API request failed with HTTP {status_code}: {reason}")
