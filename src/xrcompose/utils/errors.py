"""Exception hierarchy for xrcompose."""

from __future__ import annotations

from enum import Enum


class XRComposeError(Exception):
    """Base error for all xrcompose failures."""

    pass


class NotFoundError(XRComposeError):
    """Resource was not found in the object store."""

    def __init__(self, kind: str, name: str, namespace: str | None = None) -> None:
        self.kind = kind
        self.name = name
        self.namespace = namespace
        if namespace:
            message = f"{kind} '{name}' not found in namespace '{namespace}'"
        else:
            message = f"{kind} '{name}' not found"
        super().__init__(message)


class ConflictError(XRComposeError):
    """The store rejected a write because the object changed underneath us."""

    pass


class StoreError(XRComposeError):
    """Any other failure talking to the object store."""

    pass


class ConfigurationError(XRComposeError):
    """Invalid or missing client configuration."""

    pass


class FieldPathError(XRComposeError):
    """A field path could not be parsed or traversed."""

    pass


class FieldNotFoundError(FieldPathError):
    """A well-formed field path points at a field that is not set."""

    def __init__(self, path: str) -> None:
        self.path = path
        super().__init__(f"{path}: no such field")


class PatchError(XRComposeError):
    """A patch could not be applied."""

    pass


class ConnectionDetailError(XRComposeError):
    """A connection detail could not be extracted."""

    pass


class ReadinessCheckError(XRComposeError):
    """A readiness check could not be evaluated."""

    pass


class OwnershipConflictError(XRComposeError):
    """An object is already controlled by a different owner."""

    pass


class ComposeStage(str, Enum):
    """Stage of a composition at which a fatal error occurred.

    The value is the human-readable prefix of the error message.
    """

    INLINE = "cannot inline Composition patch sets"
    ASSOCIATE = "cannot associate composed resource templates with composition revision"
    GET_COMPOSED = "cannot get composed resource"
    GC_COMPOSED = "cannot garbage collect composed resource"
    UNMARSHAL = "cannot unmarshal base template"
    NAME_PREFIX = "name prefix is not found in labels"
    NAME = "cannot use dry-run create to name composed resource"
    SET_CONTROLLER_REF = "cannot set controller reference"
    RENDER_CR = "cannot render composite resource"
    APPLY = "cannot apply composed resource"
    FETCH_DETAILS = "cannot fetch connection details"
    EXTRACT_DETAILS = "cannot extract composite resource connection details from composed resource"
    READINESS = "cannot check whether composed resource is ready"
    UPDATE = "cannot update composite resource"


class ComposeStageError(XRComposeError):
    """Fatal composition error tagged with the stage it occurred in.

    Callers can branch on ``stage`` instead of parsing messages. The
    underlying error, if any, is available as ``cause`` and ``__cause__``.
    """

    def __init__(self, stage: ComposeStage, cause: BaseException | None = None) -> None:
        self.stage = stage
        self.cause = cause
        if cause is None:
            super().__init__(stage.value)
        else:
            super().__init__(f"{stage.value}: {cause}")
