"""Unstructured representations of composite and composed resources.

The composer works with arbitrary kinds, so objects are kept as plain
Kubernetes dicts and wrapped with typed accessors for the handful of fields
it reads and writes.
"""

from __future__ import annotations

import copy
from typing import Any

from xrcompose.models.common import Condition, ObjectReference, OwnerReference, SecretReference
from xrcompose.utils import fieldpath
from xrcompose.utils.errors import OwnershipConflictError


class Unstructured:
    """A Kubernetes object of any kind, backed by its dict representation."""

    def __init__(self, obj: dict[str, Any] | None = None) -> None:
        self.object: dict[str, Any] = obj if obj is not None else {}

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.object!r})"

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Unstructured):
            return NotImplemented
        return self.object == other.object

    @property
    def api_version(self) -> str:
        return self.object.get("apiVersion", "")

    @api_version.setter
    def api_version(self, value: str) -> None:
        self.object["apiVersion"] = value

    @property
    def kind(self) -> str:
        return self.object.get("kind", "")

    @kind.setter
    def kind(self, value: str) -> None:
        self.object["kind"] = value

    @property
    def metadata(self) -> dict[str, Any]:
        return self.object.setdefault("metadata", {})

    def _meta_str(self, key: str) -> str:
        return self.object.get("metadata", {}).get(key) or ""

    def _set_meta(self, key: str, value: Any) -> None:
        if value:
            self.metadata[key] = value
        else:
            self.object.get("metadata", {}).pop(key, None)

    @property
    def name(self) -> str:
        return self._meta_str("name")

    @name.setter
    def name(self, value: str) -> None:
        self._set_meta("name", value)

    @property
    def namespace(self) -> str:
        return self._meta_str("namespace")

    @namespace.setter
    def namespace(self, value: str) -> None:
        self._set_meta("namespace", value)

    @property
    def generate_name(self) -> str:
        return self._meta_str("generateName")

    @generate_name.setter
    def generate_name(self, value: str) -> None:
        self._set_meta("generateName", value)

    @property
    def uid(self) -> str:
        return self._meta_str("uid")

    @property
    def labels(self) -> dict[str, str]:
        return dict(self.object.get("metadata", {}).get("labels") or {})

    @labels.setter
    def labels(self, value: dict[str, str]) -> None:
        self._set_meta("labels", dict(value))

    @property
    def annotations(self) -> dict[str, str]:
        return dict(self.object.get("metadata", {}).get("annotations") or {})

    @annotations.setter
    def annotations(self, value: dict[str, str]) -> None:
        self._set_meta("annotations", dict(value))

    @property
    def owner_references(self) -> list[OwnerReference]:
        refs = self.object.get("metadata", {}).get("ownerReferences") or []
        return [OwnerReference.from_dict(r) for r in refs]

    @owner_references.setter
    def owner_references(self, value: list[OwnerReference]) -> None:
        self._set_meta("ownerReferences", [r.to_dict() for r in value])

    @property
    def conditions(self) -> list[Condition]:
        status = self.object.get("status") or {}
        return [Condition.from_dict(c) for c in status.get("conditions") or []]

    def get_condition(self, condition_type: str) -> Condition:
        """Get a status condition, or an Unknown condition if it is not set."""
        for condition in self.conditions:
            if condition.type == condition_type:
                return condition
        return Condition(type=condition_type, status="Unknown")

    def get_controller(self) -> OwnerReference | None:
        """Get the owner reference that controls this object, if any."""
        for ref in self.owner_references:
            if ref.controller:
                return ref
        return None

    def set_controller_reference(self, owner: OwnerReference) -> None:
        """Make owner the controller of this object.

        An existing reference to the same owner is replaced. Any other owner
        references are kept.

        Raises:
            OwnershipConflictError: If a different owner already controls
                this object.
        """
        current = self.get_controller()
        if current is not None and current.uid != owner.uid:
            raise OwnershipConflictError(
                f"{self.name} is already controlled by {current.kind} {current.name} "
                f"(UID {current.uid})"
            )
        refs = [r for r in self.owner_references if r.uid != owner.uid]
        refs.append(owner)
        self.owner_references = refs

    def get_value(self, path: str) -> Any:
        """Get the value at a field path."""
        return fieldpath.get_value(self.object, path)

    def set_value(self, path: str, value: Any) -> None:
        """Set the value at a field path."""
        fieldpath.set_value(self.object, path, value)

    def to_dict(self) -> dict[str, Any]:
        """Return a deep copy of the underlying object."""
        return copy.deepcopy(self.object)

    def to_reference(self) -> ObjectReference:
        """Build a reference to this object."""
        return ObjectReference(
            api_version=self.api_version,
            kind=self.kind,
            name=self.name,
            namespace=self.namespace or None,
            uid=self.uid or None,
        )

    def to_owner_reference(self, controller: bool = True) -> OwnerReference:
        """Build an owner reference pointing at this object."""
        return OwnerReference(
            api_version=self.api_version,
            kind=self.kind,
            name=self.name,
            uid=self.uid,
            controller=controller,
            block_owner_deletion=True,
        )


class CompositeResource(Unstructured):
    """A composite resource (XR)."""

    @property
    def resource_refs(self) -> list[ObjectReference]:
        """References to the composed resources this composite owns."""
        spec = self.object.get("spec") or {}
        return [ObjectReference.from_dict(r) for r in spec.get("resourceRefs") or []]

    @resource_refs.setter
    def resource_refs(self, refs: list[ObjectReference]) -> None:
        spec = self.object.setdefault("spec", {})
        spec["resourceRefs"] = [r.to_dict() for r in refs]


class ComposedObject(Unstructured):
    """A resource composed from a template."""

    @classmethod
    def from_reference(cls, ref: ObjectReference | None) -> ComposedObject:
        """Create a placeholder that points at an existing resource.

        An empty or missing reference yields a blank object that will be
        named when it is first rendered.
        """
        obj = cls()
        if ref is None or ref.is_empty:
            return obj
        obj.api_version = ref.api_version
        obj.kind = ref.kind
        obj.name = ref.name
        if ref.namespace:
            obj.namespace = ref.namespace
        return obj

    @property
    def write_connection_secret_to_ref(self) -> SecretReference | None:
        """The secret this resource writes its connection details to, if any."""
        spec = self.object.get("spec") or {}
        ref = spec.get("writeConnectionSecretToRef")
        if not ref or not ref.get("name"):
            return None
        return SecretReference(name=ref["name"], namespace=ref.get("namespace") or self.namespace)
