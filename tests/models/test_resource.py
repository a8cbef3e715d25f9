"""Tests for unstructured resource wrappers."""

import pytest

from xrcompose.models.common import ObjectReference, OwnerReference
from xrcompose.models.resource import ComposedObject, CompositeResource, Unstructured
from xrcompose.utils.errors import OwnershipConflictError


def _owner(uid: str, name: str = "ola", controller: bool = True) -> OwnerReference:
    return OwnerReference(
        api_version="example.org/v1alpha1",
        kind="XDatabase",
        name=name,
        uid=uid,
        controller=controller,
        block_owner_deletion=True,
    )


class TestUnstructured:
    """Test Unstructured accessors."""

    def test_metadata_accessors(self) -> None:
        """Test reading identity fields."""
        obj = Unstructured(
            {
                "apiVersion": "v1",
                "kind": "ConfigMap",
                "metadata": {"name": "cm", "namespace": "ns", "uid": "u1"},
            }
        )

        assert obj.api_version == "v1"
        assert obj.kind == "ConfigMap"
        assert obj.name == "cm"
        assert obj.namespace == "ns"
        assert obj.uid == "u1"

    def test_empty_object(self) -> None:
        """Test accessors on an empty object return empty values."""
        obj = Unstructured()

        assert obj.name == ""
        assert obj.labels == {}
        assert obj.owner_references == []
        assert obj.get_controller() is None

    def test_clearing_name_removes_key(self) -> None:
        """Test setting an empty name removes it from metadata."""
        obj = Unstructured({"metadata": {"name": "cm"}})

        obj.name = ""

        assert "name" not in obj.object["metadata"]

    def test_labels_are_copies(self) -> None:
        """Test mutating returned labels does not change the object."""
        obj = Unstructured({"metadata": {"labels": {"a": "b"}}})

        labels = obj.labels
        labels["c"] = "d"

        assert obj.labels == {"a": "b"}

    def test_get_condition_missing(self) -> None:
        """Test a missing condition is reported as Unknown."""
        obj = Unstructured({"status": {"conditions": [{"type": "Synced", "status": "True"}]}})

        assert obj.get_condition("Synced").is_true
        ready = obj.get_condition("Ready")
        assert ready.status == "Unknown"
        assert not ready.is_true

    def test_to_dict_is_deep_copy(self) -> None:
        """Test to_dict does not alias the underlying object."""
        obj = Unstructured({"spec": {"a": {"b": 1}}})

        d = obj.to_dict()
        d["spec"]["a"]["b"] = 2

        assert obj.get_value("spec.a.b") == 1

    def test_to_reference(self) -> None:
        """Test building a reference omits empty namespace and uid."""
        obj = Unstructured({"apiVersion": "v1", "kind": "ConfigMap", "metadata": {"name": "cm"}})

        ref = obj.to_reference()

        assert ref == ObjectReference(api_version="v1", kind="ConfigMap", name="cm")
        assert ref.to_dict() == {"apiVersion": "v1", "kind": "ConfigMap", "name": "cm"}


class TestControllerReference:
    """Test controller reference handling."""

    def test_set_on_unowned(self) -> None:
        """Test setting a controller on an object without owners."""
        obj = Unstructured({"metadata": {"name": "cd"}})

        obj.set_controller_reference(_owner("uid-1"))

        controller = obj.get_controller()
        assert controller is not None
        assert controller.uid == "uid-1"
        assert obj.metadata["ownerReferences"][0]["blockOwnerDeletion"] is True

    def test_set_same_owner_is_idempotent(self) -> None:
        """Test setting the same controller twice keeps one reference."""
        obj = Unstructured({"metadata": {"name": "cd"}})

        obj.set_controller_reference(_owner("uid-1"))
        obj.set_controller_reference(_owner("uid-1"))

        assert len(obj.owner_references) == 1

    def test_keeps_non_controller_owners(self) -> None:
        """Test other non-controller owners are preserved."""
        obj = Unstructured({"metadata": {"name": "cd"}})
        obj.owner_references = [_owner("uid-other", name="other", controller=False)]

        obj.set_controller_reference(_owner("uid-1"))

        assert [r.uid for r in obj.owner_references] == ["uid-other", "uid-1"]

    def test_conflicting_controller(self) -> None:
        """Test a different controller is rejected."""
        obj = Unstructured({"metadata": {"name": "cd"}})
        obj.set_controller_reference(_owner("uid-other", name="other"))

        with pytest.raises(OwnershipConflictError) as exc_info:
            obj.set_controller_reference(_owner("uid-1"))

        assert "cd is already controlled by XDatabase other (UID uid-other)" in str(exc_info.value)


class TestCompositeResource:
    """Test CompositeResource resource references."""

    def test_resource_refs_round_trip(self) -> None:
        """Test reading back written resource references."""
        xr = CompositeResource({"spec": {}})
        refs = [
            ObjectReference(api_version="v1", kind="ConfigMap", name="a", namespace="ns"),
            ObjectReference(api_version="v1", kind="ConfigMap", name="b"),
        ]

        xr.resource_refs = refs

        assert xr.resource_refs == refs
        assert xr.object["spec"]["resourceRefs"][1] == {
            "apiVersion": "v1",
            "kind": "ConfigMap",
            "name": "b",
        }

    def test_no_resource_refs(self) -> None:
        """Test a composite without spec has no references."""
        assert CompositeResource({}).resource_refs == []


class TestComposedObject:
    """Test ComposedObject helpers."""

    def test_from_reference(self) -> None:
        """Test a placeholder copies the reference identity."""
        ref = ObjectReference(api_version="v1", kind="ConfigMap", name="cm", namespace="ns")

        cd = ComposedObject.from_reference(ref)

        assert cd.api_version == "v1"
        assert cd.kind == "ConfigMap"
        assert cd.name == "cm"
        assert cd.namespace == "ns"

    @pytest.mark.parametrize("ref", [None, ObjectReference()])
    def test_from_empty_reference(self, ref: ObjectReference | None) -> None:
        """Test a missing or empty reference yields a blank object."""
        assert ComposedObject.from_reference(ref).object == {}

    def test_connection_secret_ref(self) -> None:
        """Test the secret namespace defaults to the object's namespace."""
        cd = ComposedObject(
            {
                "metadata": {"name": "cd", "namespace": "ns"},
                "spec": {"writeConnectionSecretToRef": {"name": "conn"}},
            }
        )

        ref = cd.write_connection_secret_to_ref

        assert ref is not None
        assert ref.name == "conn"
        assert ref.namespace == "ns"

    def test_no_connection_secret_ref(self) -> None:
        """Test objects without a secret reference return None."""
        assert ComposedObject({"spec": {}}).write_connection_secret_to_ref is None
