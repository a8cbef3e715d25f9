"""Readiness checks for composed resources."""

from __future__ import annotations

from collections.abc import Callable
from typing import Protocol

from xrcompose.models.composition import ReadinessCheck, ReadinessCheckType
from xrcompose.models.resource import Unstructured
from xrcompose.utils import fieldpath
from xrcompose.utils.errors import FieldNotFoundError, FieldPathError, ReadinessCheckError


class ReadinessChecker(Protocol):
    """Decides whether a composed resource is ready."""

    def check_readiness(self, obj: Unstructured, *checks: ReadinessCheck) -> bool: ...


class ReadinessCheckerFn:
    """Adapts a plain function to the ReadinessChecker protocol."""

    def __init__(self, fn: Callable[..., bool]) -> None:
        self._fn = fn

    def check_readiness(self, obj: Unstructured, *checks: ReadinessCheck) -> bool:
        return self._fn(obj, *checks)


def check_readiness(obj: Unstructured, *checks: ReadinessCheck) -> bool:
    """Check whether an object is ready.

    With no checks the object must have a Ready=True status condition.
    Otherwise every check must pass. Fields that are not set yet mean the
    object is not ready; they are not errors.

    Raises:
        ReadinessCheckError: If a check is misconfigured or its field path
            is malformed.
    """
    if not checks:
        return obj.get_condition("Ready").is_true

    for index, check in enumerate(checks):
        try:
            ready = _is_ready(obj, check)
        except (FieldPathError, ReadinessCheckError) as e:
            raise ReadinessCheckError(f"cannot run readiness check at index {index}: {e}") from e
        if not ready:
            return False
    return True


def _is_ready(obj: Unstructured, check: ReadinessCheck) -> bool:
    if check.type == ReadinessCheckType.NONE:
        return True

    if check.type == ReadinessCheckType.MATCH_CONDITION:
        if check.match_condition is None:
            raise ReadinessCheckError("matchCondition is required")
        condition = obj.get_condition(check.match_condition.type)
        return condition.status == check.match_condition.status

    if not check.field_path:
        raise ReadinessCheckError(f"{check.type.value} check requires a fieldPath")

    try:
        if check.type == ReadinessCheckType.NON_EMPTY:
            fieldpath.get_value(obj.object, check.field_path)
            return True
        if check.type == ReadinessCheckType.MATCH_STRING:
            if check.match_string is None:
                raise ReadinessCheckError("matchString is required")
            return fieldpath.get_string(obj.object, check.field_path) == check.match_string
        if check.type == ReadinessCheckType.MATCH_INTEGER:
            if check.match_integer is None:
                raise ReadinessCheckError("matchInteger is required")
            return fieldpath.get_integer(obj.object, check.field_path) == check.match_integer
        if check.type == ReadinessCheckType.MATCH_TRUE:
            return fieldpath.get_bool(obj.object, check.field_path) is True
        if check.type == ReadinessCheckType.MATCH_FALSE:
            return fieldpath.get_bool(obj.object, check.field_path) is False
    except FieldNotFoundError:
        return False

    raise ReadinessCheckError(f"unknown readiness check type {check.type.value}")
