"""Client for the Kubernetes ReplicaSets (extensions/v1beta1) API."""

from __future__ import annotations

from kubeclient.models.base import DeletePropagationPolicy, StatusV1
from kubeclient.models.replica_set import ReplicaSetListV1Beta1, ReplicaSetV1Beta1
from kubeclient.resource_clients.base import KubeResourceClient, PatchAction, validate_name
from kubeclient.templates import RequestTemplate
from kubeclient.watch import WatchStream


class ReplicaSetRequests:
    """Request templates for the ReplicaSet (v1beta1) API."""

    COLLECTION = RequestTemplate(
        "/apis/extensions/v1beta1/namespaces/{Namespace}/replicasets?labelSelector={LabelSelector?}&watch={Watch?}"
    )
    BY_NAME = RequestTemplate("/apis/extensions/v1beta1/namespaces/{Namespace}/replicasets/{Name}")


class ReplicaSetClientV1Beta1(KubeResourceClient):
    """A client for the Kubernetes ReplicaSets (v1beta1) API."""

    async def get(self, name: str, namespace: str | None = None) -> ReplicaSetV1Beta1 | None:
        """Get the ReplicaSet with the specified name.

        Args:
            name: The name of the ReplicaSet to retrieve.
            namespace: The target namespace (defaults to the client's default namespace).

        Returns:
            The current state of the ReplicaSet, or None if it does not exist.
        """
        validate_name(name)
        return await self._get_single_resource(
            ReplicaSetV1Beta1,
            ReplicaSetRequests.BY_NAME.with_parameters(Name=name, Namespace=self._namespace(namespace)),
        )

    async def list(self, label_selector: str | None = None, namespace: str | None = None) -> ReplicaSetListV1Beta1:
        """Get all ReplicaSets in a namespace, optionally matching a label selector."""
        return await self._get_resource_list(
            ReplicaSetListV1Beta1,
            ReplicaSetRequests.COLLECTION.with_parameters(
                Namespace=self._namespace(namespace),
                LabelSelector=label_selector,
            ),
        )

    def watch_all(
        self, label_selector: str | None = None, namespace: str | None = None
    ) -> WatchStream[ReplicaSetV1Beta1]:
        """Watch for events relating to ReplicaSets.

        Each call returns a new stream with its own connection, opened on first iteration.
        """
        return self._observe_events(
            ReplicaSetV1Beta1,
            ReplicaSetRequests.COLLECTION.with_parameters(
                Namespace=self._namespace(namespace),
                LabelSelector=label_selector,
            ),
        )

    async def create(self, new_replica_set: ReplicaSetV1Beta1) -> ReplicaSetV1Beta1:
        """Request creation of a ReplicaSet in its own namespace (or the default one)."""
        namespace = new_replica_set.metadata.namespace if new_replica_set.metadata else None
        return await self._create_resource(
            ReplicaSetV1Beta1,
            ReplicaSetRequests.COLLECTION.with_parameters(Namespace=self._namespace(namespace)),
            new_replica_set,
        )

    async def update(self, name: str, patch: PatchAction, namespace: str | None = None) -> ReplicaSetV1Beta1:
        """Request update (JSON PATCH) of a ReplicaSet.

        Args:
            name: The name of the target ReplicaSet.
            patch: A JsonPatchDocument, or a callable that populates an empty one.
            namespace: The target namespace (defaults to the client's default namespace).
        """
        validate_name(name)
        return await self._patch_resource(
            ReplicaSetV1Beta1,
            ReplicaSetRequests.BY_NAME.with_parameters(Name=name, Namespace=self._namespace(namespace)),
            patch,
        )

    async def delete(
        self,
        name: str,
        namespace: str | None = None,
        propagation_policy: DeletePropagationPolicy = DeletePropagationPolicy.BACKGROUND,
    ) -> StatusV1 | ReplicaSetV1Beta1:
        """Request deletion of the specified ReplicaSet.

        Returns:
            The ReplicaSet in its terminating state for Foreground deletion,
            otherwise a StatusV1 describing the result.
        """
        validate_name(name)
        return await self._delete_resource(
            ReplicaSetV1Beta1,
            ReplicaSetRequests.BY_NAME.with_parameters(Name=name, Namespace=self._namespace(namespace)),
            propagation_policy,
        )
