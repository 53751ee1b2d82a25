"""Base models shared by all Kubernetes resource types."""

from __future__ import annotations

from enum import StrEnum
from typing import Any, ClassVar, Generic, TypeVar

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class KubeModel(BaseModel):
    """Base for every wire model: camelCase aliases, unknown fields kept."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="allow")

    def to_wire(self) -> dict[str, Any]:
        """Serialise to the JSON-compatible dict sent to the API server."""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


class KubeObjectV1(KubeModel):
    """An object carrying the ``kind`` / ``apiVersion`` type tag.

    Subclasses declare their tag with ``kube_kind`` and ``kube_api_version``;
    those become the field defaults so new instances serialise correctly.
    """

    kube_kind: ClassVar[str | None] = None
    kube_api_version: ClassVar[str | None] = None

    kind: str | None = None
    api_version: str | None = None

    def model_post_init(self, __context: Any) -> None:
        if self.kind is None and self.kube_kind is not None:
            self.kind = self.kube_kind
        if self.api_version is None and self.kube_api_version is not None:
            self.api_version = self.kube_api_version


class ObjectMetaV1(KubeModel):
    name: str | None = None
    namespace: str | None = None
    uid: str | None = None
    resource_version: str | None = None
    generation: int | None = None
    creation_timestamp: str | None = None
    deletion_timestamp: str | None = None
    labels: dict[str, str] | None = None
    annotations: dict[str, str] | None = None
    finalizers: list[str] | None = None


class ListMetaV1(KubeModel):
    resource_version: str | None = None
    continue_: str | None = Field(default=None, alias="continue")
    self_link: str | None = None


class KubeResourceV1(KubeObjectV1):
    """A named (and usually namespaced) API resource."""

    metadata: ObjectMetaV1 | None = None


ResourceT = TypeVar("ResourceT", bound=KubeResourceV1)


class KubeResourceListV1(KubeObjectV1, Generic[ResourceT]):
    """A list of resources as returned by collection endpoints."""

    item_kind: ClassVar[str | None] = None
    item_api_version: ClassVar[str | None] = None

    metadata: ListMetaV1 | None = None
    items: list[ResourceT] = Field(default_factory=list)

    def __iter__(self):  # type: ignore[override]
        return iter(self.items)

    def __len__(self) -> int:
        return len(self.items)

    @classmethod
    def get_list_item_kind(cls) -> tuple[str | None, str | None]:
        """Return the ``(kind, apiVersion)`` of the items this list type holds."""
        return cls.item_kind, cls.item_api_version


class StatusCauseV1(KubeModel):
    reason: str | None = None
    message: str | None = None
    field: str | None = None


class StatusDetailsV1(KubeModel):
    name: str | None = None
    group: str | None = None
    kind: str | None = None
    uid: str | None = None
    causes: list[StatusCauseV1] | None = None
    retry_after_seconds: int | None = None


class StatusV1(KubeObjectV1):
    """The ``Status`` object returned for errors and non-resource results."""

    kube_kind = "Status"
    kube_api_version = "v1"

    metadata: ListMetaV1 | None = None
    status: str | None = None
    message: str | None = None
    reason: str | None = None
    details: StatusDetailsV1 | None = None
    code: int | None = None

    @property
    def is_success(self) -> bool:
        return self.status == "Success"

    @classmethod
    def already_gone(cls, kind: str | None, name: str) -> StatusV1:
        """Synthesise the result reported when a deleted resource no longer exists."""
        return cls(
            status="Success",
            reason="NotFound",
            message=f"{kind or 'resource'} '{name}' was not found (already deleted).",
            details=StatusDetailsV1(name=name, kind=kind),
            code=404,
        )


class DeletePropagationPolicy(StrEnum):
    """Whether and how dependent objects are deleted along with their owner."""

    ORPHAN = "Orphan"
    BACKGROUND = "Background"
    FOREGROUND = "Foreground"


class DeleteOptionsV1(KubeObjectV1):
    kube_kind = "DeleteOptions"
    kube_api_version = "v1"

    propagation_policy: DeletePropagationPolicy | None = None
    grace_period_seconds: int | None = None
