"""Composition of composite resources from composition revisions.

A composer associates each template of a revision with the resource it
produced last time, renders and applies the desired state of every
resource, and reports their connection details and readiness back.

The dependency flow is one-way: composition imports from models, utils and
clients, never the reverse.
"""

from xrcompose.composition.associator import (
    GarbageCollectingAssociator,
    OrderedAssociator,
    TemplateAssociator,
    TemplateAssociatorFn,
    associate_by_order,
)
from xrcompose.composition.composer import REASON_COMPOSE, ComposerOptions, PTComposer
from xrcompose.composition.render import (
    APIDryRunRenderer,
    ComposedPatchRenderer,
    CompositePatchRenderer,
    Renderer,
    RendererChain,
    RendererFn,
)

__all__ = [
    "APIDryRunRenderer",
    "ComposedPatchRenderer",
    "CompositePatchRenderer",
    "ComposerOptions",
    "GarbageCollectingAssociator",
    "OrderedAssociator",
    "PTComposer",
    "REASON_COMPOSE",
    "Renderer",
    "RendererChain",
    "RendererFn",
    "TemplateAssociator",
    "TemplateAssociatorFn",
    "associate_by_order",
]
