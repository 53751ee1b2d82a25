"""KubeApiClient: owns the HTTP transport and the per-type resource client cache."""

from __future__ import annotations

import threading
from collections.abc import Callable
from typing import TYPE_CHECKING, TypeVar

import httpx
import structlog

from kubeclient.config import ClientCertificate, ConnectionOptions
from kubeclient.errors import DisposedError
from kubeclient.transport import build_transport

if TYPE_CHECKING:
    from kubeclient.resource_clients.base import KubeResourceClient
    from kubeclient.resource_clients.pods import PodClientV1
    from kubeclient.resource_clients.replica_sets import ReplicaSetClientV1Beta1

log = structlog.get_logger()

ClientT = TypeVar("ClientT", bound="KubeResourceClient")


class KubeApiClient:
    """Client for the Kubernetes API.

    One instance owns exactly one ``httpx.AsyncClient``; every resource client
    obtained from it shares that transport. Resource clients are created lazily
    and at most once per client type.
    """

    def __init__(self, http_client: httpx.AsyncClient, options: ConnectionOptions) -> None:
        self._http = http_client
        self._options = options.clone().validate()
        self._clients: dict[type[KubeResourceClient], KubeResourceClient] = {}
        self._client_locks: dict[type[KubeResourceClient], threading.Lock] = {}
        self._default_namespace = self._options.default_namespace
        self._disposed = False

    @classmethod
    def create(
        cls,
        options: ConnectionOptions | str,
        *,
        access_token: str | None = None,
        client_certificate: ClientCertificate | None = None,
        trusted_ca_certificate: str | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> KubeApiClient:
        """Create a client from options, or from an endpoint plus credentials.

        Args:
            options: Full connection options, or just the API endpoint.
            access_token: Bearer token (only used when ``options`` is an endpoint).
            client_certificate: Client certificate (only used when ``options`` is an endpoint).
            trusted_ca_certificate: Expected CA (only used when ``options`` is an endpoint).
            transport: Optional low-level httpx transport, mainly for tests.

        Raises:
            ConfigurationError: If the resulting options are invalid.
        """
        if isinstance(options, str):
            options = ConnectionOptions(
                endpoint=options,
                access_token=access_token,
                client_certificate=client_certificate,
                trusted_ca_certificate=trusted_ca_certificate,
            )
        snapshot = options.clone()
        http_client = build_transport(snapshot, transport=transport)
        log.debug("kube_api_client_created", endpoint=snapshot.endpoint, namespace=snapshot.default_namespace)
        return cls(http_client, snapshot)

    @classmethod
    def from_pod_service_account(cls, *, transport: httpx.AsyncBaseTransport | None = None) -> KubeApiClient:
        """Create a client using the service account of the pod this process runs in."""
        return cls.create(ConnectionOptions.from_pod_service_account(), transport=transport)

    @classmethod
    def from_http_client(cls, http_client: httpx.AsyncClient, options: ConnectionOptions) -> KubeApiClient:
        """Wrap an existing ``httpx.AsyncClient``; the new KubeApiClient takes ownership of it."""
        if not str(http_client.base_url):
            msg = "The underlying httpx.AsyncClient must specify a base_url."
            raise ValueError(msg)
        return cls(http_client, options)

    async def __aenter__(self) -> KubeApiClient:
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        """Close the underlying transport. Later operations raise DisposedError."""
        if self._disposed:
            return
        self._disposed = True
        await self._http.aclose()
        log.debug("kube_api_client_closed", endpoint=self._options.endpoint)

    @property
    def is_disposed(self) -> bool:
        return self._disposed

    @property
    def default_namespace(self) -> str:
        """Namespace used by resource clients when a call does not name one."""
        return self._default_namespace

    @default_namespace.setter
    def default_namespace(self, namespace: str) -> None:
        if not namespace or not namespace.strip():
            msg = f"Invalid default namespace: {namespace!r}. Must not be empty or whitespace."
            raise ValueError(msg)
        self._default_namespace = namespace

    @property
    def api_endpoint(self) -> str:
        return self._options.endpoint or ""

    @property
    def http(self) -> httpx.AsyncClient:
        """The shared transport.

        Raises:
            DisposedError: If the client has been closed.
        """
        self.ensure_open()
        return self._http

    def ensure_open(self) -> None:
        if self._disposed:
            msg = f"KubeApiClient for {self._options.endpoint} has been closed."
            raise DisposedError(msg)

    def get_options(self) -> ConnectionOptions:
        """Return a copy of the options this client was built from."""
        return self._options.clone()

    def resource_client(self, client_type: type[ClientT], factory: Callable[[KubeApiClient], ClientT]) -> ClientT:
        """Get or create the resource client of the given type.

        The factory runs at most once per client type for the lifetime of this
        KubeApiClient, even when several threads ask for the same type at the
        same time. Different client types never wait on each other.

        Raises:
            DisposedError: If the client has been closed.
            TypeError: If the factory returns None or an object of the wrong type.
        """
        self.ensure_open()

        existing = self._clients.get(client_type)
        if existing is not None:
            return existing  # type: ignore[return-value]

        # setdefault is atomic, so every racing caller ends up with the same lock.
        lock = self._client_locks.setdefault(client_type, threading.Lock())
        with lock:
            existing = self._clients.get(client_type)
            if existing is not None:
                return existing  # type: ignore[return-value]

            created = factory(self)
            if created is None:
                msg = f"Factory for Kubernetes resource client of type '{client_type.__qualname__}' returned None."
                raise TypeError(msg)
            if not isinstance(created, client_type):
                msg = (
                    f"Factory for Kubernetes resource client of type '{client_type.__qualname__}' "
                    f"returned {type(created).__qualname__}."
                )
                raise TypeError(msg)
            self._clients[client_type] = created
            log.debug("resource_client_created", client_type=client_type.__qualname__)
            return created

    def replica_sets_v1beta1(self) -> ReplicaSetClientV1Beta1:
        from kubeclient.resource_clients.replica_sets import ReplicaSetClientV1Beta1

        return self.resource_client(ReplicaSetClientV1Beta1, ReplicaSetClientV1Beta1)

    def pods_v1(self) -> PodClientV1:
        from kubeclient.resource_clients.pods import PodClientV1

        return self.resource_client(PodClientV1, PodClientV1)
