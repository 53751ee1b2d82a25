"""Kubernetes wire models used by the resource clients."""

from kubeclient.models.base import (
    DeleteOptionsV1,
    DeletePropagationPolicy,
    KubeModel,
    KubeObjectV1,
    KubeResourceListV1,
    KubeResourceV1,
    ListMetaV1,
    ObjectMetaV1,
    StatusV1,
)
from kubeclient.models.patch import JsonPatchDocument, pointer
from kubeclient.models.pod import ContainerV1, PodListV1, PodSpecV1, PodStatusV1, PodV1
from kubeclient.models.replica_set import (
    LabelSelectorV1,
    ReplicaSetListV1Beta1,
    ReplicaSetSpecV1Beta1,
    ReplicaSetStatusV1Beta1,
    ReplicaSetV1Beta1,
)

__all__ = [
    "ContainerV1",
    "DeleteOptionsV1",
    "DeletePropagationPolicy",
    "JsonPatchDocument",
    "KubeModel",
    "KubeObjectV1",
    "KubeResourceListV1",
    "KubeResourceV1",
    "LabelSelectorV1",
    "ListMetaV1",
    "ObjectMetaV1",
    "PodListV1",
    "PodSpecV1",
    "PodStatusV1",
    "PodV1",
    "ReplicaSetListV1Beta1",
    "ReplicaSetSpecV1Beta1",
    "ReplicaSetStatusV1Beta1",
    "ReplicaSetV1Beta1",
    "StatusV1",
    "pointer",
]
