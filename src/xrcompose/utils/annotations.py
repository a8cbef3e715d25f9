"""Annotation keys written on composed resources."""

from typing import Any


class XRAnnotations:
    """Well-known annotations used by the composer."""

    # Name of the template a composed resource was rendered from. This is a
    # lookup key only; ownership is tracked by the controller reference.
    COMPOSITION_RESOURCE_NAME = "crossplane.io/composition-resource-name"

    @classmethod
    def composition_resource_name(cls, obj: Any) -> str:
        """Get the template name recorded on an object, or an empty string."""
        annotations = obj.annotations or {}
        return annotations.get(cls.COMPOSITION_RESOURCE_NAME, "")

    @classmethod
    def set_composition_resource_name(cls, obj: Any, name: str) -> None:
        """Record the template name an object was rendered from."""
        annotations = dict(obj.annotations or {})
        annotations[cls.COMPOSITION_RESOURCE_NAME] = name
        obj.annotations = annotations
