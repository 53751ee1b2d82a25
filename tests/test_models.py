"""Tests for the wire models: aliases, type tags, Status helpers, JSON Patch."""

from __future__ import annotations

from kubeclient.models import (
    DeleteOptionsV1,
    DeletePropagationPolicy,
    JsonPatchDocument,
    ObjectMetaV1,
    PodListV1,
    PodV1,
    ReplicaSetListV1Beta1,
    ReplicaSetV1Beta1,
    StatusV1,
    pointer,
)

from tests.conftest import make_pod, make_replica_set, make_status


class TestTypeTags:
    def test_new_resource_carries_kind_and_api_version(self) -> None:
        replica_set = ReplicaSetV1Beta1(metadata=ObjectMetaV1(name="web"))
        wire = replica_set.to_wire()
        assert wire["kind"] == "ReplicaSet"
        assert wire["apiVersion"] == "extensions/v1beta1"
        assert wire["metadata"] == {"name": "web"}

    def test_decoded_kind_preserved(self) -> None:
        pod = PodV1.model_validate(make_pod())
        assert pod.kind == "Pod"
        assert pod.api_version == "v1"

    def test_list_item_kind(self) -> None:
        assert ReplicaSetListV1Beta1.get_list_item_kind() == ("ReplicaSet", "extensions/v1beta1")
        assert PodListV1.get_list_item_kind() == ("Pod", "v1")


class TestAliases:
    def test_camel_case_fields(self) -> None:
        replica_set = ReplicaSetV1Beta1.model_validate(make_replica_set(replicas=2))
        assert replica_set.metadata.resource_version == "100"
        assert replica_set.status.ready_replicas == 2
        assert replica_set.spec.selector.match_labels == {"app": "web"}

    def test_pod_ip_alias(self) -> None:
        pod = PodV1.model_validate(make_pod())
        assert pod.status.pod_ip == "10.0.0.12"
        assert pod.to_wire()["status"]["podIP"] == "10.0.0.12"

    def test_unknown_fields_round_trip(self) -> None:
        data = make_pod()
        data["spec"]["hostNetwork"] = True
        pod = PodV1.model_validate(data)
        assert pod.to_wire()["spec"]["hostNetwork"] is True

    def test_list_items_typed(self) -> None:
        listing = ReplicaSetListV1Beta1.model_validate(
            {"kind": "ReplicaSetList", "items": [make_replica_set("a"), make_replica_set("b")]}
        )
        assert len(listing) == 2
        assert [item.metadata.name for item in listing] == ["a", "b"]
        assert all(isinstance(item, ReplicaSetV1Beta1) for item in listing)


class TestStatus:
    def test_failure_status(self) -> None:
        status = StatusV1.model_validate(make_status(409, "AlreadyExists", "exists"))
        assert not status.is_success
        assert status.code == 409

    def test_already_gone(self) -> None:
        status = StatusV1.already_gone("ReplicaSet", "web")
        assert status.is_success
        assert status.reason == "NotFound"
        assert status.code == 404
        assert status.details.name == "web"
        assert status.kind == "Status"


class TestDeleteOptions:
    def test_wire_format(self) -> None:
        wire = DeleteOptionsV1(propagation_policy=DeletePropagationPolicy.FOREGROUND).to_wire()
        assert wire == {"kind": "DeleteOptions", "apiVersion": "v1", "propagationPolicy": "Foreground"}


class TestJsonPatch:
    def test_pointer_escapes_segments(self) -> None:
        assert pointer("metadata", "labels", "app.kubernetes.io/name") == "/metadata/labels/app.kubernetes.io~1name"
        assert pointer("spec", "containers", 0, "image") == "/spec/containers/0/image"
        assert pointer("a~b") == "/a~0b"

    def test_operations_in_order(self) -> None:
        document = (
            JsonPatchDocument()
            .test("/spec/replicas", 3)
            .replace("/spec/replicas", 5)
            .add("/metadata/labels/tier", "web")
            .remove("/metadata/annotations")
            .move("/a", "/b")
            .copy("/c", "/d")
        )
        assert len(document) == 6
        assert document.to_wire() == [
            {"op": "test", "path": "/spec/replicas", "value": 3},
            {"op": "replace", "path": "/spec/replicas", "value": 5},
            {"op": "add", "path": "/metadata/labels/tier", "value": "web"},
            {"op": "remove", "path": "/metadata/annotations"},
            {"op": "move", "path": "/b", "from": "/a"},
            {"op": "copy", "path": "/d", "from": "/c"},
        ]

    def test_replace_with_null_value_kept(self) -> None:
        assert JsonPatchDocument().replace("/spec/nodeName", None).to_wire() == [
            {"op": "replace", "path": "/spec/nodeName", "value": None}
        ]
