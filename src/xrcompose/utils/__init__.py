"""Utility functions and helpers for xrcompose."""

from xrcompose.utils.annotations import XRAnnotations
from xrcompose.utils.errors import (
    ComposeStage,
    ComposeStageError,
    ConfigurationError,
    ConflictError,
    ConnectionDetailError,
    FieldNotFoundError,
    FieldPathError,
    NotFoundError,
    OwnershipConflictError,
    PatchError,
    ReadinessCheckError,
    StoreError,
    XRComposeError,
)
from xrcompose.utils.labels import XRLabels

__all__ = [
    # Errors
    "XRComposeError",
    "NotFoundError",
    "ConflictError",
    "StoreError",
    "ConfigurationError",
    "FieldPathError",
    "FieldNotFoundError",
    "PatchError",
    "ConnectionDetailError",
    "ReadinessCheckError",
    "OwnershipConflictError",
    "ComposeStage",
    "ComposeStageError",
    # Labels and annotations
    "XRAnnotations",
    "XRLabels",
]
