"""Shared test fixtures: connection options, fake API server, and stream helpers."""

from __future__ import annotations

import asyncio
import json
from collections.abc import AsyncIterator, Callable
from typing import Any

import httpx
import pytest

from kubeclient.api_client import KubeApiClient
from kubeclient.config import ConnectionOptions

TEST_ENDPOINT = "https://kube.test"


@pytest.fixture
def options() -> ConnectionOptions:
    return ConnectionOptions(endpoint=TEST_ENDPOINT, access_token="test-token")


class FakeApiServer:
    """Routes requests to handlers and records every request it sees."""

    def __init__(self) -> None:
        self.requests: list[httpx.Request] = []
        self._routes: dict[tuple[str, str], Callable[[httpx.Request], httpx.Response]] = {}

    def add(self, method: str, path: str, handler: Callable[[httpx.Request], httpx.Response]) -> None:
        self._routes[(method, path)] = handler

    def respond(self, method: str, path: str, status_code: int, body: Any = None) -> None:
        self.add(method, path, lambda request: httpx.Response(status_code, json=body))

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        handler = self._routes.get((request.method, request.url.path))
        if handler is None:
            return httpx.Response(404, json=make_status(404, "NotFound", f"no route for {request.url.path}"))
        return handler(request)

    @property
    def last_request(self) -> httpx.Request:
        return self.requests[-1]


@pytest.fixture
def api_server() -> FakeApiServer:
    return FakeApiServer()


@pytest.fixture
async def kube_client(options: ConnectionOptions, api_server: FakeApiServer) -> AsyncIterator[KubeApiClient]:
    client = KubeApiClient.create(options, transport=httpx.MockTransport(api_server))
    yield client
    await client.aclose()


class LineStream(httpx.AsyncByteStream):
    """A response body that hands out pre-baked chunks, then idles, fails, or ends.

    ``reads`` counts how many chunks the consumer has pulled from the network.
    """

    def __init__(self, chunks: list[bytes], *, then: str = "hang", error: Exception | None = None) -> None:
        self._chunks = list(chunks)
        self._then = then
        self._error = error
        self.reads = 0
        self.closed = False

    async def __aiter__(self) -> AsyncIterator[bytes]:
        for chunk in self._chunks:
            if self.closed:
                return
            self.reads += 1
            yield chunk
        if self._then == "fail":
            raise self._error or httpx.ReadError("connection reset by peer")
        if self._then == "hang":
            await asyncio.Event().wait()

    async def aclose(self) -> None:
        self.closed = True


def watch_line(event_type: str, obj: dict[str, Any]) -> bytes:
    return (json.dumps({"type": event_type, "object": obj}) + "\n").encode()


def make_status(code: int, reason: str, message: str = "", status: str = "Failure") -> dict[str, Any]:
    return {
        "kind": "Status",
        "apiVersion": "v1",
        "status": status,
        "reason": reason,
        "message": message,
        "code": code,
    }


def make_replica_set(name: str = "web", namespace: str = "default", replicas: int = 3) -> dict[str, Any]:
    return {
        "kind": "ReplicaSet",
        "apiVersion": "extensions/v1beta1",
        "metadata": {"name": name, "namespace": namespace, "resourceVersion": "100", "labels": {"app": name}},
        "spec": {"replicas": replicas, "selector": {"matchLabels": {"app": name}}},
        "status": {"replicas": replicas, "readyReplicas": replicas},
    }


def make_pod(name: str = "web-abc12", namespace: str = "default", phase: str = "Running") -> dict[str, Any]:
    return {
        "kind": "Pod",
        "apiVersion": "v1",
        "metadata": {"name": name, "namespace": namespace},
        "spec": {"containers": [{"name": "app", "image": "nginx:1.25"}], "nodeName": "node-1"},
        "status": {"phase": phase, "podIP": "10.0.0.12"},
    }
