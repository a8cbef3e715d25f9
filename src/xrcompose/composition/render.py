"""Renderers that compute the desired state of composite and composed resources."""

from __future__ import annotations

import copy
import json
import logging
from collections.abc import Callable
from typing import TYPE_CHECKING, Any, Protocol

from xrcompose.composition.patches import COMPOSED_PATCH_TYPES, COMPOSITE_PATCH_TYPES, apply_patch
from xrcompose.models.composition import ComposedTemplate, Environment
from xrcompose.models.resource import CompositeResource, Unstructured
from xrcompose.utils.annotations import XRAnnotations
from xrcompose.utils.errors import ComposeStage, ComposeStageError, OwnershipConflictError
from xrcompose.utils.labels import XRLabels

if TYPE_CHECKING:
    from xrcompose.clients.base import K8sClient

logger = logging.getLogger(__name__)

# Metadata that survives re-rendering a composed resource from its base
IDENTITY_METADATA = (
    "name",
    "namespace",
    "generateName",
    "ownerReferences",
    "uid",
    "resourceVersion",
)


class Renderer(Protocol):
    """Renders a composite or composed resource from a template."""

    def render(
        self,
        composite: CompositeResource,
        composed: Unstructured,
        template: ComposedTemplate,
        environment: Environment | None,
    ) -> None: ...


class RendererFn:
    """Adapts a plain function to the Renderer protocol."""

    def __init__(
        self,
        fn: Callable[[CompositeResource, Unstructured, ComposedTemplate, Environment | None], None],
    ) -> None:
        self._fn = fn

    def render(
        self,
        composite: CompositeResource,
        composed: Unstructured,
        template: ComposedTemplate,
        environment: Environment | None,
    ) -> None:
        self._fn(composite, composed, template, environment)


class RendererChain:
    """Runs several renderers in order, stopping at the first error."""

    def __init__(self, *renderers: Renderer) -> None:
        self._renderers = renderers

    def render(
        self,
        composite: CompositeResource,
        composed: Unstructured,
        template: ComposedTemplate,
        environment: Environment | None,
    ) -> None:
        for renderer in self._renderers:
            renderer.render(composite, composed, template, environment)


def render_from_json(obj: Unstructured, base: Any) -> None:
    """Lay a template base over an object.

    Top-level fields of the base replace the object's, while fields the base
    does not mention, such as status, are kept. Metadata is replaced by the
    base's except for the object's identity (name, namespace, generate-name,
    owner references, uid and resource version), so a composed resource
    keeps its identity and observed state when re-rendered.

    Raises:
        ComposeStageError: If the base is not a JSON object.
    """
    if isinstance(base, (str, bytes)):
        try:
            data = json.loads(base)
        except json.JSONDecodeError as e:
            raise ComposeStageError(ComposeStage.UNMARSHAL, e) from e
    else:
        data = copy.deepcopy(base)
    if not isinstance(data, dict):
        raise ComposeStageError(
            ComposeStage.UNMARSHAL, TypeError(f"base must be an object, got {type(data).__name__}")
        )

    existing = obj.object.get("metadata") or {}
    metadata = data.pop("metadata", None) or {}
    if not isinstance(metadata, dict):
        raise ComposeStageError(ComposeStage.UNMARSHAL, TypeError("base metadata must be an object"))
    metadata.update({k: v for k, v in existing.items() if k in IDENTITY_METADATA and v})

    rendered = {k: v for k, v in obj.object.items() if k != "metadata"}
    rendered.update(data)
    if metadata:
        rendered["metadata"] = metadata
    obj.object = rendered


class APIDryRunRenderer:
    """Establishes the identity of a composed resource.

    Names the resource after its composite, labels it, records the template
    it came from and makes the composite its controller. Resources without a
    name are dry-run created so the API server allocates one without
    persisting anything.
    """

    def __init__(self, client: K8sClient) -> None:
        self._client = client

    def render(
        self,
        composite: CompositeResource,
        composed: Unstructured,
        template: ComposedTemplate,
        environment: Environment | None,
    ) -> None:
        render_from_json(composed, template.base)
        self.establish_identity(composite, composed, template)

    def establish_identity(
        self,
        composite: CompositeResource,
        composed: Unstructured,
        template: ComposedTemplate,
    ) -> None:
        """Name, label and take ownership of a rendered composed resource.

        Raises:
            ComposeStageError: If the composite has no name prefix label,
                another owner controls the resource, or naming fails.
        """
        prefix = XRLabels.name_prefix(composite.labels)
        if not prefix:
            raise ComposeStageError(ComposeStage.NAME_PREFIX)

        composed.generate_name = f"{prefix}-"
        labels = composed.labels
        labels.update(XRLabels.composed_labels(composite.labels))
        composed.labels = labels
        if template.name:
            XRAnnotations.set_composition_resource_name(composed, template.name)

        try:
            composed.set_controller_reference(composite.to_owner_reference())
        except OwnershipConflictError as e:
            raise ComposeStageError(ComposeStage.SET_CONTROLLER_REF, e) from e

        if composed.name:
            return

        try:
            created = self._client.create(composed, dry_run=True)
        except Exception as e:
            raise ComposeStageError(ComposeStage.NAME, e) from e
        composed.name = Unstructured(created).name
        logger.debug(f"Dry-run create named {composed.kind} {composed.name}")


class ComposedPatchRenderer:
    """Renders a composed resource from its template base and patches.

    Patches flowing from the composite or environment are applied before the
    resource's identity is established, so the dry-run naming request sees
    the fully rendered object.
    """

    def __init__(self, identity: APIDryRunRenderer) -> None:
        self._identity = identity

    def render(
        self,
        composite: CompositeResource,
        composed: Unstructured,
        template: ComposedTemplate,
        environment: Environment | None,
    ) -> None:
        render_from_json(composed, template.base)
        for patch in template.patches:
            if patch.type in COMPOSED_PATCH_TYPES:
                apply_patch(patch, composite, composed, environment)
        self._identity.establish_identity(composite, composed, template)


class CompositePatchRenderer:
    """Writes values from a composed resource back onto its composite."""

    def render(
        self,
        composite: CompositeResource,
        composed: Unstructured,
        template: ComposedTemplate,
        environment: Environment | None,
    ) -> None:
        for patch in template.patches:
            if patch.type in COMPOSITE_PATCH_TYPES:
                apply_patch(patch, composite, composed, environment)
