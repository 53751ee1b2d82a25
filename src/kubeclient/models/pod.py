"""Pod (v1) models."""

from __future__ import annotations

from typing import Any

from pydantic import Field

from kubeclient.models.base import KubeModel, KubeResourceListV1, KubeResourceV1


class ContainerV1(KubeModel):
    name: str
    image: str | None = None
    command: list[str] | None = None
    args: list[str] | None = None
    env: list[dict[str, Any]] | None = None


class PodSpecV1(KubeModel):
    containers: list[ContainerV1] = Field(default_factory=list)
    node_name: str | None = None
    restart_policy: str | None = None
    service_account_name: str | None = None


class ContainerStatusV1(KubeModel):
    name: str
    ready: bool = False
    restart_count: int = 0
    state: dict[str, Any] | None = None
    last_state: dict[str, Any] | None = None


class PodStatusV1(KubeModel):
    phase: str | None = None
    reason: str | None = None
    message: str | None = None
    pod_ip: str | None = Field(default=None, alias="podIP")
    container_statuses: list[ContainerStatusV1] | None = None


class PodV1(KubeResourceV1):
    """Pod is a collection of containers that can run on a host."""

    kube_kind = "Pod"
    kube_api_version = "v1"

    spec: PodSpecV1 | None = None
    status: PodStatusV1 | None = None


class PodListV1(KubeResourceListV1[PodV1]):
    kube_kind = "PodList"
    kube_api_version = "v1"
    item_kind = "Pod"
    item_api_version = "v1"
