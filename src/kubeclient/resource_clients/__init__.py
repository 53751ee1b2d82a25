"""Typed clients for individual Kubernetes resource types."""

from kubeclient.resource_clients.base import KubeResourceClient
from kubeclient.resource_clients.pods import PodClientV1
from kubeclient.resource_clients.replica_sets import ReplicaSetClientV1Beta1

__all__ = ["KubeResourceClient", "PodClientV1", "ReplicaSetClientV1Beta1"]
