"""Models for composition revisions, their templates and composition results."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any

import yaml
from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from xrcompose.models.common import Event, ObjectReference
from xrcompose.models.resource import ComposedObject, Unstructured


class CompositionModel(BaseModel):
    """Base for models parsed from camelCase Composition manifests."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# -----------------------------------------------------------------------------
# Patches
# -----------------------------------------------------------------------------


class PatchType(str, Enum):
    """How a patch moves a value between objects."""

    FROM_COMPOSITE_FIELD_PATH = "FromCompositeFieldPath"
    TO_COMPOSITE_FIELD_PATH = "ToCompositeFieldPath"
    FROM_ENVIRONMENT_FIELD_PATH = "FromEnvironmentFieldPath"
    TO_ENVIRONMENT_FIELD_PATH = "ToEnvironmentFieldPath"
    COMBINE_FROM_COMPOSITE = "CombineFromComposite"
    COMBINE_TO_COMPOSITE = "CombineToComposite"
    PATCH_SET = "PatchSet"


class FromFieldPathPolicy(str, Enum):
    """What to do when a patch's source field is not set."""

    OPTIONAL = "Optional"
    REQUIRED = "Required"


class PatchPolicy(CompositionModel):
    """Patch behaviour policies."""

    from_field_path: FromFieldPathPolicy = FromFieldPathPolicy.OPTIONAL


class CombineVariable(CompositionModel):
    """A source field for a combine patch."""

    from_field_path: str


class StringCombine(CompositionModel):
    """Combine variables with a format string."""

    fmt: str


class Combine(CompositionModel):
    """Combine several source fields into one value."""

    variables: list[CombineVariable] = Field(default_factory=list)
    strategy: str = "string"
    string: StringCombine | None = None


class Patch(CompositionModel):
    """A value copied from one object to another during rendering."""

    type: PatchType = PatchType.FROM_COMPOSITE_FIELD_PATH
    from_field_path: str | None = None
    to_field_path: str | None = None
    combine: Combine | None = None
    patch_set_name: str | None = None
    policy: PatchPolicy | None = None
    transforms: list[dict[str, Any]] = Field(default_factory=list)

    @property
    def required(self) -> bool:
        """Whether a missing source field is an error."""
        return self.policy is not None and self.policy.from_field_path == FromFieldPathPolicy.REQUIRED


class PatchSet(CompositionModel):
    """A named, reusable list of patches."""

    name: str
    patches: list[Patch] = Field(default_factory=list)


# -----------------------------------------------------------------------------
# Readiness checks and connection details
# -----------------------------------------------------------------------------


class ReadinessCheckType(str, Enum):
    """Ways of deciding whether a composed resource is ready."""

    NONE = "None"
    NON_EMPTY = "NonEmpty"
    MATCH_STRING = "MatchString"
    MATCH_INTEGER = "MatchInteger"
    MATCH_TRUE = "MatchTrue"
    MATCH_FALSE = "MatchFalse"
    MATCH_CONDITION = "MatchCondition"


class MatchConditionReadinessCheck(CompositionModel):
    """The condition a MatchCondition check looks for."""

    type: str = "Ready"
    status: str = "True"


class ReadinessCheck(CompositionModel):
    """A check that must pass for a composed resource to be considered ready."""

    type: ReadinessCheckType
    field_path: str | None = None
    match_string: str | None = None
    match_integer: int | None = None
    match_condition: MatchConditionReadinessCheck | None = None


class ConnectionDetailType(str, Enum):
    """Where a connection detail's value comes from."""

    FROM_CONNECTION_SECRET_KEY = "FromConnectionSecretKey"
    FROM_FIELD_PATH = "FromFieldPath"
    FROM_VALUE = "FromValue"


class ConnectionDetail(CompositionModel):
    """A connection detail to propagate from a composed resource to its composite."""

    name: str | None = None
    type: ConnectionDetailType | None = None
    from_connection_secret_key: str | None = None
    from_field_path: str | None = None
    value: str | None = None

    def resolved_type(self) -> ConnectionDetailType | None:
        """Return the explicit type, or infer it from the field that is set."""
        if self.type is not None:
            return self.type
        if self.value is not None:
            return ConnectionDetailType.FROM_VALUE
        if self.from_field_path is not None:
            return ConnectionDetailType.FROM_FIELD_PATH
        if self.from_connection_secret_key is not None:
            return ConnectionDetailType.FROM_CONNECTION_SECRET_KEY
        return None


# -----------------------------------------------------------------------------
# Templates and revisions
# -----------------------------------------------------------------------------


class ComposedTemplate(CompositionModel):
    """Template for one composed resource of a composition."""

    name: str | None = Field(None, description="Stable name used to identify the resource")
    base: Any = Field(default_factory=dict, description="Base object, as a dict or JSON")
    patches: list[Patch] = Field(default_factory=list)
    readiness_checks: list[ReadinessCheck] = Field(default_factory=list)
    connection_details: list[ConnectionDetail] = Field(default_factory=list)


class CompositionRevision(CompositionModel):
    """An immutable snapshot of a composition's templates."""

    name: str = ""
    revision: int = 0
    resources: list[ComposedTemplate] = Field(default_factory=list)
    patch_sets: list[PatchSet] = Field(default_factory=list)

    @classmethod
    def from_manifest(cls, manifest: dict[str, Any]) -> CompositionRevision:
        """Create from a CompositionRevision manifest.

        Args:
            manifest: The revision as a Kubernetes object dict.
        """
        metadata = manifest.get("metadata") or {}
        spec = manifest.get("spec") or {}
        return cls(
            name=metadata.get("name", ""),
            revision=spec.get("revision", 0),
            resources=spec.get("resources") or [],
            patch_sets=spec.get("patchSets") or [],
        )

    @classmethod
    def from_yaml(cls, document: str) -> CompositionRevision:
        """Create from a YAML CompositionRevision manifest."""
        return cls.from_manifest(yaml.safe_load(document) or {})


class Environment(Unstructured):
    """Shared values made available to patches, opaque to the composer."""


# -----------------------------------------------------------------------------
# Requests and results
# -----------------------------------------------------------------------------


@dataclass
class CompositionRequest:
    """Inputs to a single composition."""

    revision: CompositionRevision
    environment: Environment | None = None


@dataclass
class TemplateAssociation:
    """A template paired with the existing resource it last produced, if any."""

    template: ComposedTemplate
    reference: ObjectReference | None = None


@dataclass
class ComposedResource:
    """A composed resource produced by a composition."""

    resource_name: str
    resource: ComposedObject | None = None
    ready: bool = False


@dataclass
class CompositionResult:
    """The outcome of a composition."""

    composed: list[ComposedResource] = field(default_factory=list)
    connection_details: dict[str, bytes] = field(default_factory=dict)
    events: list[Event] = field(default_factory=list)
