"""Client for the Kubernetes Pods (v1) API."""

from __future__ import annotations

from kubeclient.models.base import DeletePropagationPolicy, StatusV1
from kubeclient.models.pod import PodListV1, PodV1
from kubeclient.resource_clients.base import KubeResourceClient, PatchAction, validate_name
from kubeclient.templates import RequestTemplate
from kubeclient.watch import WatchStream


class PodRequests:
    """Request templates for the Pod (v1) API."""

    COLLECTION = RequestTemplate("/api/v1/namespaces/{Namespace}/pods?labelSelector={LabelSelector?}&watch={Watch?}")
    BY_NAME = RequestTemplate("/api/v1/namespaces/{Namespace}/pods/{Name}")


class PodClientV1(KubeResourceClient):
    """A client for the Kubernetes Pods (v1) API."""

    async def get(self, name: str, namespace: str | None = None) -> PodV1 | None:
        """Get the Pod with the specified name, or None if it does not exist."""
        validate_name(name)
        return await self._get_single_resource(
            PodV1,
            PodRequests.BY_NAME.with_parameters(Name=name, Namespace=self._namespace(namespace)),
        )

    async def list(self, label_selector: str | None = None, namespace: str | None = None) -> PodListV1:
        """Get all Pods in a namespace, optionally matching a label selector."""
        return await self._get_resource_list(
            PodListV1,
            PodRequests.COLLECTION.with_parameters(
                Namespace=self._namespace(namespace),
                LabelSelector=label_selector,
            ),
        )

    def watch_all(self, label_selector: str | None = None, namespace: str | None = None) -> WatchStream[PodV1]:
        """Watch for events relating to Pods.

        Each call returns a new stream with its own connection, opened on first iteration.
        """
        return self._observe_events(
            PodV1,
            PodRequests.COLLECTION.with_parameters(
                Namespace=self._namespace(namespace),
                LabelSelector=label_selector,
            ),
        )

    async def create(self, new_pod: PodV1) -> PodV1:
        """Request creation of a Pod in its own namespace (or the default one)."""
        namespace = new_pod.metadata.namespace if new_pod.metadata else None
        return await self._create_resource(
            PodV1,
            PodRequests.COLLECTION.with_parameters(Namespace=self._namespace(namespace)),
            new_pod,
        )

    async def update(self, name: str, patch: PatchAction, namespace: str | None = None) -> PodV1:
        """Request update (JSON PATCH) of a Pod."""
        validate_name(name)
        return await self._patch_resource(
            PodV1,
            PodRequests.BY_NAME.with_parameters(Name=name, Namespace=self._namespace(namespace)),
            patch,
        )

    async def delete(
        self,
        name: str,
        namespace: str | None = None,
        propagation_policy: DeletePropagationPolicy = DeletePropagationPolicy.BACKGROUND,
    ) -> StatusV1 | PodV1:
        """Request deletion of the specified Pod.

        Returns:
            The Pod in its terminating state for Foreground deletion,
            otherwise a StatusV1 describing the result.
        """
        validate_name(name)
        return await self._delete_resource(
            PodV1,
            PodRequests.BY_NAME.with_parameters(Name=name, Namespace=self._namespace(namespace)),
            propagation_policy,
        )
