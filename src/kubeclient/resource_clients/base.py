"""Behaviour shared by every typed Kubernetes resource client."""

from __future__ import annotations

import weakref
from collections.abc import Callable
from typing import TYPE_CHECKING, Any, TypeVar

import httpx
import structlog
from pydantic import BaseModel, ValidationError

from kubeclient.errors import DisposedError, KubeConnectionError, ProtocolError, RequestFailedError
from kubeclient.models.base import DeleteOptionsV1, DeletePropagationPolicy, KubeResourceV1, StatusV1
from kubeclient.models.patch import JSON_PATCH_CONTENT_TYPE, JsonPatchDocument
from kubeclient.templates import RequestTemplate
from kubeclient.watch import WatchStream

if TYPE_CHECKING:
    from kubeclient.api_client import KubeApiClient

log = structlog.get_logger()

ModelT = TypeVar("ModelT", bound=BaseModel)
ResourceT = TypeVar("ResourceT", bound=KubeResourceV1)

PatchAction = JsonPatchDocument | Callable[[JsonPatchDocument], Any]

# Watches stay open indefinitely, so only connecting is bounded.
WATCH_TIMEOUT = httpx.Timeout(30.0, read=None)


def validate_name(name: str) -> None:
    """Reject blank resource names before any request is built."""
    if not name or not name.strip():
        msg = f"Invalid resource name: {name!r}. Must not be empty or whitespace."
        raise ValueError(msg)


def build_patch(patch: PatchAction) -> JsonPatchDocument:
    if isinstance(patch, JsonPatchDocument):
        document = patch
    else:
        document = JsonPatchDocument()
        patch(document)
    if len(document) == 0:
        msg = "Patch document contains no operations."
        raise ValueError(msg)
    return document


class KubeResourceClient:
    """Base class for Kubernetes resource clients.

    Holds only a weak reference to its KubeApiClient: a resource client never
    keeps the transport alive, and it fails with DisposedError once the owning
    client is closed or gone.
    """

    def __init__(self, client: KubeApiClient) -> None:
        self._client_ref = weakref.ref(client)

    @property
    def kube_client(self) -> KubeApiClient:
        client = self._client_ref()
        if client is None:
            msg = f"The KubeApiClient that owned this {type(self).__name__} no longer exists."
            raise DisposedError(msg)
        client.ensure_open()
        return client

    @property
    def default_namespace(self) -> str:
        return self.kube_client.default_namespace

    def _namespace(self, namespace: str | None) -> str:
        return namespace or self.default_namespace

    async def _send(
        self,
        method: str,
        request: RequestTemplate,
        *,
        json: Any = None,
        headers: dict[str, str] | None = None,
        stream: bool = False,
    ) -> httpx.Response:
        url = request.render()
        http = self.kube_client.http
        timeout = WATCH_TIMEOUT if stream else httpx.USE_CLIENT_DEFAULT
        http_request = http.build_request(method, url, json=json, headers=headers, timeout=timeout)
        try:
            return await http.send(http_request, stream=stream)
        except httpx.TransportError as exc:
            log.error("kube_request_failed", method=method, url=url, error=str(exc))
            msg = f"{method} {url} failed: {exc}"
            raise KubeConnectionError(msg) from exc

    async def _get_single_resource(self, resource_type: type[ModelT], request: RequestTemplate) -> ModelT | None:
        """GET a single resource; a 404 yields None rather than an error."""
        response = await self._send("GET", request)
        if response.status_code == httpx.codes.NOT_FOUND:
            return None
        return self._read_content(response, resource_type)

    async def _get_resource_list(self, list_type: type[ModelT], request: RequestTemplate) -> ModelT:
        response = await self._send("GET", request)
        return self._read_content(response, list_type)

    async def _create_resource(
        self, resource_type: type[ResourceT], request: RequestTemplate, resource: ResourceT
    ) -> ResourceT:
        response = await self._send("POST", request, json=resource.to_wire())
        return self._read_content(response, resource_type)

    async def _patch_resource(
        self, resource_type: type[ResourceT], request: RequestTemplate, patch: PatchAction
    ) -> ResourceT:
        document = build_patch(patch)
        response = await self._send(
            "PATCH",
            request,
            json=document.to_wire(),
            headers={"Content-Type": JSON_PATCH_CONTENT_TYPE},
        )
        return self._read_content(response, resource_type)

    async def _delete_resource(
        self,
        resource_type: type[ResourceT],
        request: RequestTemplate,
        propagation_policy: DeletePropagationPolicy,
    ) -> StatusV1 | ResourceT:
        """DELETE a resource.

        With Foreground propagation the server answers with the resource in its
        terminating state, so the body is decoded as ``resource_type``. Otherwise
        a Status body is returned as StatusV1 and anything else as the resource.
        A 404 means the resource is already gone and is reported as success.
        """
        body = DeleteOptionsV1(propagation_policy=propagation_policy).to_wire()
        response = await self._send("DELETE", request, json=body)

        if response.status_code == httpx.codes.NOT_FOUND:
            name = request.parameters.get("Name", "")
            log.debug("delete_target_already_gone", kind=resource_type.kube_kind, name=name)
            return StatusV1.already_gone(resource_type.kube_kind, str(name))

        if propagation_policy is DeletePropagationPolicy.FOREGROUND:
            return self._read_content(response, resource_type)

        payload = self._read_content(response, _KindProbe)
        if payload.kind == StatusV1.kube_kind:
            return self._read_content(response, StatusV1)
        return self._read_content(response, resource_type)

    def _observe_events(self, resource_type: type[ResourceT], request: RequestTemplate) -> WatchStream[ResourceT]:
        """Create a watch stream; nothing is sent until the stream is iterated."""
        watch_request = request.with_parameters(Watch=True)
        url = watch_request.render()

        async def connect() -> httpx.Response:
            return await self._send("GET", watch_request, stream=True)

        return WatchStream(connect, resource_type, url=url)

    def _read_content(self, response: httpx.Response, model_type: type[ModelT]) -> ModelT:
        if not response.is_success:
            raise self._request_failed(response)
        try:
            return model_type.model_validate_json(response.content)
        except ValidationError as exc:
            log.error(
                "kube_response_decode_failed",
                url=str(response.request.url),
                model=model_type.__name__,
                errors=exc.error_count(),
            )
            msg = f"Response from {response.request.url} could not be decoded as {model_type.__name__}."
            raise ProtocolError(msg) from exc

    def _request_failed(self, response: httpx.Response) -> RequestFailedError:
        try:
            status: StatusV1 | None = StatusV1.model_validate_json(response.content)
        except ValidationError:
            status = None
        log.warning(
            "kube_request_rejected",
            method=response.request.method,
            url=str(response.request.url),
            status_code=response.status_code,
            reason=status.reason if status else None,
        )
        return RequestFailedError(response.status_code, status, response.text)


class _KindProbe(BaseModel):
    kind: str | None = None
