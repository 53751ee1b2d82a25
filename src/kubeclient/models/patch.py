"""JSON Patch (RFC 6902) documents used by resource-client updates."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field

JSON_PATCH_CONTENT_TYPE = "application/json-patch+json"


class JsonPatchOperation(BaseModel):
    op: str
    path: str
    value: Any = None
    from_: str | None = Field(default=None, alias="from")

    def to_wire(self) -> dict[str, Any]:
        wire: dict[str, Any] = {"op": self.op, "path": self.path}
        if self.op in ("add", "replace", "test"):
            wire["value"] = self.value
        if self.from_ is not None:
            wire["from"] = self.from_
        return wire


def _escape(segment: str) -> str:
    return segment.replace("~", "~0").replace("/", "~1")


def pointer(*segments: str | int) -> str:
    """Build a JSON Pointer from path segments, e.g. ``pointer("metadata", "labels", "app")``."""
    return "".join(f"/{_escape(str(segment))}" for segment in segments)


class JsonPatchDocument:
    """An ordered list of JSON Patch operations built up by the caller."""

    def __init__(self) -> None:
        self._operations: list[JsonPatchOperation] = []

    def __len__(self) -> int:
        return len(self._operations)

    @property
    def operations(self) -> tuple[JsonPatchOperation, ...]:
        return tuple(self._operations)

    def add(self, path: str, value: Any) -> JsonPatchDocument:
        self._operations.append(JsonPatchOperation(op="add", path=path, value=value))
        return self

    def replace(self, path: str, value: Any) -> JsonPatchDocument:
        self._operations.append(JsonPatchOperation(op="replace", path=path, value=value))
        return self

    def remove(self, path: str) -> JsonPatchDocument:
        self._operations.append(JsonPatchOperation(op="remove", path=path))
        return self

    def test(self, path: str, value: Any) -> JsonPatchDocument:
        self._operations.append(JsonPatchOperation(op="test", path=path, value=value))
        return self

    def move(self, from_path: str, path: str) -> JsonPatchDocument:
        self._operations.append(JsonPatchOperation(op="move", path=path, **{"from": from_path}))
        return self

    def copy(self, from_path: str, path: str) -> JsonPatchDocument:
        self._operations.append(JsonPatchOperation(op="copy", path=path, **{"from": from_path}))
        return self

    def to_wire(self) -> list[dict[str, Any]]:
        return [operation.to_wire() for operation in self._operations]
