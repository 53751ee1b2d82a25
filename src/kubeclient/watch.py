"""Watch streams: typed change events read from a long-lived HTTP response.

The API server keeps a watch response open and writes one JSON envelope per
line, ``{"type": "ADDED", "object": {...}}``. ``WatchStream`` reads that body
incrementally and hands out one ``ChangeEvent`` at a time; the next line is not
read from the network until the consumer asks for the next event.

A stream moves through ``IDLE -> CONNECTING -> STREAMING`` and ends in exactly
one of ``COMPLETED``, ``FAILED`` or ``CANCELLED``. It never reconnects; resuming
from a resource version is left to the caller.
"""

from __future__ import annotations

import asyncio
import json
from collections.abc import AsyncIterator, Awaitable, Callable
from dataclasses import dataclass
from enum import StrEnum
from typing import Any, Generic, TypeVar

import httpx
import structlog
from pydantic import BaseModel, ValidationError

from kubeclient.errors import KubeClientError, KubeConnectionError, RequestFailedError, WatchProtocolError
from kubeclient.models.base import KubeResourceV1, StatusV1

log = structlog.get_logger()

ResourceT = TypeVar("ResourceT", bound=KubeResourceV1)


class ResourceEventType(StrEnum):
    ADDED = "ADDED"
    MODIFIED = "MODIFIED"
    DELETED = "DELETED"
    ERROR = "ERROR"


class WatchState(StrEnum):
    IDLE = "idle"
    CONNECTING = "connecting"
    STREAMING = "streaming"
    COMPLETED = "completed"
    FAILED = "failed"
    CANCELLED = "cancelled"


TERMINAL_STATES = frozenset({WatchState.COMPLETED, WatchState.FAILED, WatchState.CANCELLED})


@dataclass(frozen=True)
class ChangeEvent(Generic[ResourceT]):
    """A single change reported by a watch.

    ``resource`` is set for ADDED / MODIFIED / DELETED events; ``error_status``
    is set for ERROR events.
    """

    event_type: ResourceEventType
    resource: ResourceT | None = None
    error_status: StatusV1 | None = None


class WatchEnvelope(BaseModel):
    type: str
    object: dict[str, Any]


def decode_event(line: str, resource_type: type[ResourceT]) -> ChangeEvent[ResourceT]:
    """Decode one line of a watch response.

    Raises:
        WatchProtocolError: If the line is not a well-formed event envelope.
    """
    try:
        envelope = WatchEnvelope.model_validate(json.loads(line))
    except (json.JSONDecodeError, ValidationError) as exc:
        msg = f"Malformed watch event: {line[:200]!r}"
        raise WatchProtocolError(msg) from exc

    try:
        event_type = ResourceEventType(envelope.type)
    except ValueError:
        msg = f"Unknown watch event type {envelope.type!r}."
        raise WatchProtocolError(msg) from None

    try:
        if event_type is ResourceEventType.ERROR:
            return ChangeEvent(event_type=event_type, error_status=StatusV1.model_validate(envelope.object))
        return ChangeEvent(event_type=event_type, resource=resource_type.model_validate(envelope.object))
    except ValidationError as exc:
        msg = f"Watch event payload does not match {resource_type.__name__}: {exc.error_count()} validation error(s)."
        raise WatchProtocolError(msg) from exc


class WatchStream(Generic[ResourceT]):
    """A lazily-started, cancellable, single-use stream of change events.

    Iterate with ``async for``; the HTTP request is only sent on the first
    iteration. ``aclose()`` cancels the stream, closing the connection without
    raising. Connection and protocol failures are raised from the iterator.
    """

    def __init__(
        self,
        connect: Callable[[], Awaitable[httpx.Response]],
        resource_type: type[ResourceT],
        *,
        url: str = "",
    ) -> None:
        self._connect_fn = connect
        self._resource_type = resource_type
        self._url = url
        self._state = WatchState.IDLE
        self._response: httpx.Response | None = None
        self._lines: AsyncIterator[str] | None = None
        self.error_status: StatusV1 | None = None

    @property
    def state(self) -> WatchState:
        return self._state

    @property
    def closed(self) -> bool:
        return self._state in TERMINAL_STATES

    def __aiter__(self) -> WatchStream[ResourceT]:
        return self

    async def __aenter__(self) -> WatchStream[ResourceT]:
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()

    async def __anext__(self) -> ChangeEvent[ResourceT]:
        if self._state in TERMINAL_STATES:
            raise StopAsyncIteration
        try:
            return await self._next_event()
        except StopAsyncIteration:
            raise
        except asyncio.CancelledError:
            await self._finish(WatchState.CANCELLED)
            raise
        except Exception as exc:
            if self._state is WatchState.CANCELLED:
                # Closed from another task while a read was pending.
                raise StopAsyncIteration from None
            await self._finish(WatchState.FAILED)
            if isinstance(exc, httpx.TransportError):
                log.warning("watch_stream_disconnected", url=self._url, error=str(exc))
                msg = f"Watch connection to {self._url} failed: {exc}"
                raise KubeConnectionError(msg) from exc
            if isinstance(exc, KubeClientError):
                log.warning("watch_stream_failed", url=self._url, error=str(exc))
            raise

    async def aclose(self) -> None:
        """Cancel the stream. Safe to call more than once, and from any state."""
        if self._state not in TERMINAL_STATES:
            await self._finish(WatchState.CANCELLED)

    async def _next_event(self) -> ChangeEvent[ResourceT]:
        if self._state is WatchState.IDLE:
            await self._connect()

        while True:
            if self._state is not WatchState.STREAMING:
                raise StopAsyncIteration
            line = await self._read_line()
            if self._state is not WatchState.STREAMING:
                # Cancelled while the read was pending; drop whatever arrived.
                raise StopAsyncIteration
            if line is None:
                await self._finish(WatchState.COMPLETED)
                raise StopAsyncIteration
            if not line.strip():
                # Keep-alive.
                continue
            event = decode_event(line, self._resource_type)
            if event.event_type is ResourceEventType.ERROR:
                self.error_status = event.error_status
                log.warning(
                    "watch_stream_error_event",
                    url=self._url,
                    reason=event.error_status.reason if event.error_status else None,
                    code=event.error_status.code if event.error_status else None,
                )
                await self._finish(WatchState.FAILED)
            return event

    async def _connect(self) -> None:
        self._state = WatchState.CONNECTING
        response = await self._connect_fn()
        await self._abandon_if_cancelled(response)
        if not response.is_success:
            await response.aread()
            await self._abandon_if_cancelled(response)
            self._response = response
            status = _try_decode_status(response)
            raise RequestFailedError(response.status_code, status, response.text)
        self._response = response
        self._lines = response.aiter_lines()
        self._state = WatchState.STREAMING
        log.debug("watch_stream_connected", url=self._url)

    async def _abandon_if_cancelled(self, response: httpx.Response) -> None:
        """Close ``response`` and stop if aclose() ran while the stream was connecting."""
        if self._state is not WatchState.CONNECTING:
            await response.aclose()
            raise StopAsyncIteration

    async def _read_line(self) -> str | None:
        assert self._lines is not None
        try:
            return await anext(self._lines)
        except StopAsyncIteration:
            return None

    async def _finish(self, state: WatchState) -> None:
        self._state = state
        response, self._response = self._response, None
        self._lines = None
        if response is not None:
            await response.aclose()
        log.debug("watch_stream_closed", url=self._url, state=state.value)


def _try_decode_status(response: httpx.Response) -> StatusV1 | None:
    try:
        return StatusV1.model_validate_json(response.content)
    except ValidationError:
        return None
