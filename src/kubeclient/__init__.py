"""Typed async client for the Kubernetes API."""

from kubeclient.api_client import KubeApiClient
from kubeclient.config import ClientCertificate, ConnectionOptions
from kubeclient.errors import (
    ConfigurationError,
    DisposedError,
    KubeClientError,
    KubeConnectionError,
    ProtocolError,
    RequestFailedError,
    TemplateError,
    WatchProtocolError,
)
from kubeclient.models.base import DeletePropagationPolicy, StatusV1
from kubeclient.templates import RequestTemplate
from kubeclient.transport import build_transport
from kubeclient.watch import ChangeEvent, ResourceEventType, WatchState, WatchStream

__all__ = [
    "ChangeEvent",
    "ClientCertificate",
    "ConfigurationError",
    "ConnectionOptions",
    "DeletePropagationPolicy",
    "DisposedError",
    "KubeApiClient",
    "KubeClientError",
    "KubeConnectionError",
    "ProtocolError",
    "RequestFailedError",
    "RequestTemplate",
    "ResourceEventType",
    "StatusV1",
    "TemplateError",
    "WatchProtocolError",
    "WatchState",
    "WatchStream",
    "build_transport",
]
