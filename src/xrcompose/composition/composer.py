"""Composition of a composite resource from a composition revision."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING

from xrcompose.composition.apply import APIPatchingApplicator, Applicator
from xrcompose.composition.associator import GarbageCollectingAssociator, TemplateAssociator
from xrcompose.composition.connection import (
    ConnectionDetails,
    ConnectionDetailsExtractor,
    ConnectionDetailsExtractorFn,
    ConnectionDetailsFetcher,
    SecretConnectionDetailsFetcher,
    extract_connection_details,
)
from xrcompose.composition.patches import inline_patch_sets
from xrcompose.composition.ready import ReadinessChecker, ReadinessCheckerFn, check_readiness
from xrcompose.composition.render import (
    APIDryRunRenderer,
    ComposedPatchRenderer,
    CompositePatchRenderer,
    Renderer,
)
from xrcompose.models.common import Event, ObjectReference
from xrcompose.models.composition import ComposedResource, CompositionRequest, CompositionResult
from xrcompose.models.resource import ComposedObject, CompositeResource
from xrcompose.utils.errors import ComposeStage, ComposeStageError, NotFoundError

if TYPE_CHECKING:
    from xrcompose.clients.base import K8sClient

logger = logging.getLogger(__name__)

REASON_COMPOSE = "ComposeResources"


@dataclass
class ComposerOptions:
    """Collaborators a composer uses. Unset fields get production defaults."""

    associator: TemplateAssociator | None = None
    composed_renderer: Renderer | None = None
    composite_renderer: Renderer | None = None
    details_fetcher: ConnectionDetailsFetcher | None = None
    details_extractor: ConnectionDetailsExtractor | None = None
    readiness_checker: ReadinessChecker | None = None
    applicator: Applicator | None = None


class PTComposer:
    """Composes resources using patch-and-transform composition.

    Holds no state between calls; every compose re-reads what it needs from
    the store, so it is safe to call repeatedly for the same composite.
    Calls for one composite must not run concurrently.
    """

    def __init__(self, client: K8sClient, options: ComposerOptions | None = None) -> None:
        options = options or ComposerOptions()
        self._client = client
        self._associator = options.associator or GarbageCollectingAssociator(client)
        self._composed = options.composed_renderer or ComposedPatchRenderer(
            APIDryRunRenderer(client)
        )
        self._composite = options.composite_renderer or CompositePatchRenderer()
        self._fetcher = options.details_fetcher or SecretConnectionDetailsFetcher(client)
        self._extractor = options.details_extractor or ConnectionDetailsExtractorFn(
            extract_connection_details
        )
        self._readiness = options.readiness_checker or ReadinessCheckerFn(check_readiness)
        self._applicator = options.applicator or APIPatchingApplicator(client)

    def compose(self, composite: CompositeResource, request: CompositionRequest) -> CompositionResult:
        """Compose the resources of a composite.

        Templates are processed in order. A template that fails to render is
        skipped and reported as a warning event; any other failure aborts the
        composition.

        Args:
            composite: The composite to compose. Its resource references and
                any fields patched from composed resources are updated in
                place and persisted.
            request: The revision to compose from and an optional environment.

        Returns:
            The composed resources, their merged connection details and any
            warning events.

        Raises:
            ComposeStageError: On any fatal failure, tagged with its stage.
        """
        try:
            templates = inline_patch_sets(request.revision)
        except Exception as e:
            raise ComposeStageError(ComposeStage.INLINE, e) from e

        try:
            associations = self._associator.associate_templates(composite, templates)
        except Exception as e:
            raise ComposeStageError(ComposeStage.ASSOCIATE, e) from e

        composed: list[ComposedResource] = []
        refs: list[ObjectReference] = []
        contributions: list[ConnectionDetails] = []
        events: list[Event] = []

        for i, ta in enumerate(associations):
            # Anonymous templates are named by their position
            name = ta.template.name or str(i + 1)
            cd = self._existing(ta.reference)

            try:
                self._composed.render(composite, cd, ta.template, request.environment)
            except Exception as e:
                logger.warning(f"Skipping composed resource {name}: {e}")
                events.append(Event.warning(REASON_COMPOSE, f'cannot compose resource "{name}": {e}'))
                # Keep tracking a resource we already created so it isn't orphaned
                if ta.reference is not None and not ta.reference.is_empty:
                    refs.append(ta.reference)
                continue

            try:
                self._composite.render(composite, cd, ta.template, request.environment)
            except Exception as e:
                raise ComposeStageError(ComposeStage.RENDER_CR, e) from e

            try:
                self._applicator.apply(cd, controller_uid=composite.uid or None)
            except Exception as e:
                raise ComposeStageError(ComposeStage.APPLY, e) from e

            try:
                fetched = self._fetcher.fetch(cd)
            except Exception as e:
                raise ComposeStageError(ComposeStage.FETCH_DETAILS, e) from e

            try:
                extracted = self._extractor.extract(cd, fetched or {}, *ta.template.connection_details)
            except Exception as e:
                raise ComposeStageError(ComposeStage.EXTRACT_DETAILS, e) from e

            try:
                ready = self._readiness.check_readiness(cd, *ta.template.readiness_checks)
            except Exception as e:
                raise ComposeStageError(ComposeStage.READINESS, e) from e

            logger.debug(f"Composed resource {name} as {cd.kind} {cd.name} (ready={ready})")
            refs.append(cd.to_reference())
            contributions.append(extracted or {})
            composed.append(ComposedResource(resource_name=name, resource=cd, ready=ready))

        composite.resource_refs = refs
        try:
            composite.object = self._client.update(composite)
        except Exception as e:
            raise ComposeStageError(ComposeStage.UPDATE, e) from e

        details: ConnectionDetails = {}
        for contribution in contributions:
            details.update(contribution)

        return CompositionResult(composed=composed, connection_details=details, events=events)

    def _existing(self, ref: ObjectReference | None) -> ComposedObject:
        """Read the current state of a previously composed resource.

        Returns a placeholder carrying only the reference's identity when
        there is no reference or the resource no longer exists.

        Raises:
            ComposeStageError: If the resource cannot be read.
        """
        if ref is None or ref.is_empty:
            return ComposedObject.from_reference(ref)
        try:
            return ComposedObject(self._client.get(ref))
        except NotFoundError:
            logger.debug(f"Composed resource {ref.kind} {ref.name} no longer exists")
            return ComposedObject.from_reference(ref)
        except Exception as e:
            raise ComposeStageError(ComposeStage.GET_COMPOSED, e) from e
