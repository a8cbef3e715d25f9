"""Association of composition templates with existing composed resources.

Associations keep the identity of composed resources stable across
reconciliations: a template keeps producing the same resource even when
templates are added, removed or reordered.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import TYPE_CHECKING, Protocol

from xrcompose.models.common import ObjectReference
from xrcompose.models.composition import ComposedTemplate, TemplateAssociation
from xrcompose.models.resource import CompositeResource, Unstructured
from xrcompose.utils.annotations import XRAnnotations
from xrcompose.utils.errors import ComposeStage, ComposeStageError, NotFoundError

if TYPE_CHECKING:
    from xrcompose.clients.base import K8sClient

logger = logging.getLogger(__name__)


class TemplateAssociator(Protocol):
    """Associates templates with the composed resources they produced."""

    def associate_templates(
        self, composite: CompositeResource, templates: list[ComposedTemplate]
    ) -> list[TemplateAssociation]: ...


class TemplateAssociatorFn:
    """Adapts a plain function to the TemplateAssociator protocol."""

    def __init__(
        self, fn: Callable[[CompositeResource, list[ComposedTemplate]], list[TemplateAssociation]]
    ) -> None:
        self._fn = fn

    def associate_templates(
        self, composite: CompositeResource, templates: list[ComposedTemplate]
    ) -> list[TemplateAssociation]:
        return self._fn(composite, templates)


def associate_by_order(
    templates: list[ComposedTemplate], references: list[ObjectReference]
) -> list[TemplateAssociation]:
    """Associate templates with references by position.

    References beyond the number of templates are dropped; templates beyond
    the number of references get no reference.
    """
    return [
        TemplateAssociation(template=t, reference=references[i] if i < len(references) else None)
        for i, t in enumerate(templates)
    ]


class OrderedAssociator:
    """Associates templates with the composite's resource references by position."""

    def associate_templates(
        self, composite: CompositeResource, templates: list[ComposedTemplate]
    ) -> list[TemplateAssociation]:
        return associate_by_order(templates, composite.resource_refs)


class GarbageCollectingAssociator:
    """Associates templates with resources by their template name annotation.

    Resources whose template no longer exists are deleted, unless some other
    owner controls them. Falls back to positional association when any
    template is anonymous or any referenced resource predates the template
    name annotation.
    """

    def __init__(self, client: K8sClient) -> None:
        self._client = client

    def associate_templates(
        self, composite: CompositeResource, templates: list[ComposedTemplate]
    ) -> list[TemplateAssociation]:
        """Associate templates with the composite's composed resources.

        Returns:
            One association per template, in template order.

        Raises:
            ComposeStageError: If a referenced resource cannot be read or an
                orphaned resource cannot be deleted.
        """
        refs = composite.resource_refs
        if any(not t.name for t in templates):
            logger.debug("Associating templates by order, not all templates are named")
            return associate_by_order(templates, refs)

        template_names = {t.name for t in templates}
        matched: dict[str, ObjectReference] = {}

        for ref in refs:
            try:
                obj = Unstructured(self._client.get(ref))
            except NotFoundError:
                logger.debug(f"Composed resource {ref.kind} {ref.name} no longer exists")
                continue
            except Exception as e:
                raise ComposeStageError(ComposeStage.GET_COMPOSED, e) from e

            name = XRAnnotations.composition_resource_name(obj)
            if not name:
                logger.debug(
                    f"Associating templates by order, {ref.kind} {ref.name} has no template name"
                )
                return associate_by_order(templates, refs)

            if name in template_names:
                # A later resource claiming the same template replaces an earlier one
                matched[name] = ref
                continue

            # The template that produced this resource is gone
            controller = obj.get_controller()
            if controller is not None and controller.uid != composite.uid:
                logger.debug(f"Not garbage collecting {ref.kind} {ref.name}, it is not ours")
                continue

            try:
                self._client.delete(obj)
            except NotFoundError:
                pass
            except Exception as e:
                raise ComposeStageError(ComposeStage.GC_COMPOSED, e) from e
            logger.info(f"Garbage collected {ref.kind} {ref.name} from removed template {name}")

        return [TemplateAssociation(template=t, reference=matched.get(t.name or "")) for t in templates]
