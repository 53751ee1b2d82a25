"""ReplicaSet (extensions/v1beta1) models."""

from __future__ import annotations

from typing import Any

from kubeclient.models.base import KubeModel, KubeResourceListV1, KubeResourceV1


class LabelSelectorV1(KubeModel):
    match_labels: dict[str, str] | None = None
    match_expressions: list[dict[str, Any]] | None = None


class ReplicaSetSpecV1Beta1(KubeModel):
    replicas: int | None = None
    min_ready_seconds: int | None = None
    selector: LabelSelectorV1 | None = None
    # Pod template; kept as raw JSON since its schema is the full PodSpec.
    template: dict[str, Any] | None = None


class ReplicaSetStatusV1Beta1(KubeModel):
    replicas: int | None = None
    ready_replicas: int | None = None
    available_replicas: int | None = None
    fully_labeled_replicas: int | None = None
    observed_generation: int | None = None


class ReplicaSetV1Beta1(KubeResourceV1):
    """ReplicaSet ensures that a specified number of pod replicas are running at any given time."""

    kube_kind = "ReplicaSet"
    kube_api_version = "extensions/v1beta1"

    spec: ReplicaSetSpecV1Beta1 | None = None
    status: ReplicaSetStatusV1Beta1 | None = None


class ReplicaSetListV1Beta1(KubeResourceListV1[ReplicaSetV1Beta1]):
    kube_kind = "ReplicaSetList"
    kube_api_version = "extensions/v1beta1"
    item_kind = "ReplicaSet"
    item_api_version = "extensions/v1beta1"
