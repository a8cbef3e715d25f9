"""Patch application between composite, composed and environment objects.

Only plain field-path copies and string combines are evaluated here. Value
transforms are not supported and fail the patch rather than being skipped.
"""

from __future__ import annotations

import logging
import re
from typing import Any

from xrcompose.models.composition import (
    ComposedTemplate,
    CompositionRevision,
    Patch,
    PatchType,
)
from xrcompose.models.resource import Unstructured
from xrcompose.utils.errors import FieldNotFoundError, FieldPathError, PatchError

logger = logging.getLogger(__name__)

# Patches whose value flows onto the composed resource
COMPOSED_PATCH_TYPES = frozenset(
    {
        PatchType.FROM_COMPOSITE_FIELD_PATH,
        PatchType.FROM_ENVIRONMENT_FIELD_PATH,
        PatchType.COMBINE_FROM_COMPOSITE,
    }
)

# Patches whose value flows from the composed resource back out
COMPOSITE_PATCH_TYPES = frozenset(
    {
        PatchType.TO_COMPOSITE_FIELD_PATH,
        PatchType.TO_ENVIRONMENT_FIELD_PATH,
        PatchType.COMBINE_TO_COMPOSITE,
    }
)

_FMT_VERB = re.compile(r"%[vsd]")


def inline_patch_sets(revision: CompositionRevision) -> list[ComposedTemplate]:
    """Replace PatchSet references in each template with the named patches.

    Args:
        revision: The revision whose templates should be inlined.

    Returns:
        Copies of the revision's templates with no PatchSet patches left.

    Raises:
        PatchError: If a template references an undefined patch set.
    """
    patch_sets = {ps.name: ps for ps in revision.patch_sets}
    for ps in patch_sets.values():
        for p in ps.patches:
            if p.type == PatchType.PATCH_SET:
                raise PatchError(f"cannot use patch set {p.patch_set_name} inside patch set {ps.name}")

    templates: list[ComposedTemplate] = []
    for template in revision.resources:
        patches: list[Patch] = []
        for p in template.patches:
            if p.type != PatchType.PATCH_SET:
                patches.append(p)
                continue
            if p.patch_set_name not in patch_sets:
                raise PatchError(f"cannot find PatchSet by name {p.patch_set_name}")
            patches.extend(patch_sets[p.patch_set_name].patches)
        templates.append(template.model_copy(update={"patches": patches}))
    return templates


def apply_patch(
    patch: Patch,
    composite: Unstructured,
    composed: Unstructured,
    environment: Unstructured | None = None,
) -> None:
    """Apply a single patch, writing to whichever object it targets.

    A missing source field skips the patch unless its policy requires it.

    Raises:
        PatchError: If the patch is invalid or a required source is missing.
    """
    if patch.transforms:
        raise PatchError(f"{patch.type.value} patch: transforms are not supported")

    if patch.type == PatchType.FROM_COMPOSITE_FIELD_PATH:
        _copy(patch, composite, composed)
    elif patch.type == PatchType.FROM_ENVIRONMENT_FIELD_PATH:
        _copy(patch, environment, composed)
    elif patch.type == PatchType.TO_COMPOSITE_FIELD_PATH:
        _copy(patch, composed, composite)
    elif patch.type == PatchType.TO_ENVIRONMENT_FIELD_PATH:
        _copy(patch, composed, environment)
    elif patch.type == PatchType.COMBINE_FROM_COMPOSITE:
        _combine(patch, composite, composed)
    elif patch.type == PatchType.COMBINE_TO_COMPOSITE:
        _combine(patch, composed, composite)
    else:
        raise PatchError(f"patch type {patch.type.value} must be inlined before it is applied")


def _copy(patch: Patch, src: Unstructured | None, dst: Unstructured | None) -> None:
    if not patch.from_field_path:
        raise PatchError(f"{patch.type.value} patch: fromFieldPath is required")
    if src is None or dst is None:
        # No environment was supplied for an environment patch
        if patch.required:
            raise PatchError(f"{patch.type.value} patch: no environment to patch")
        return
    try:
        value = src.get_value(patch.from_field_path)
    except FieldNotFoundError as e:
        if patch.required:
            raise PatchError(f"required field {patch.from_field_path} is not set") from e
        logger.debug(f"Skipping patch from unset field {patch.from_field_path}")
        return
    except FieldPathError as e:
        raise PatchError(str(e)) from e
    _set(dst, patch.to_field_path or patch.from_field_path, value)


def _combine(patch: Patch, src: Unstructured, dst: Unstructured) -> None:
    combine = patch.combine
    if combine is None or not combine.variables:
        raise PatchError(f"{patch.type.value} patch: combine requires at least one variable")
    if not patch.to_field_path:
        raise PatchError(f"{patch.type.value} patch: toFieldPath is required")
    if combine.strategy != "string" or combine.string is None:
        raise PatchError(f"combine strategy {combine.strategy} is not supported")

    values: list[Any] = []
    for variable in combine.variables:
        try:
            values.append(src.get_value(variable.from_field_path))
        except FieldNotFoundError as e:
            if patch.required:
                raise PatchError(f"required field {variable.from_field_path} is not set") from e
            logger.debug(f"Skipping combine patch, {variable.from_field_path} is not set")
            return
        except FieldPathError as e:
            raise PatchError(str(e)) from e

    fmt = _FMT_VERB.sub("%s", combine.string.fmt)
    try:
        combined = fmt % tuple(values)
    except (TypeError, ValueError) as e:
        raise PatchError(f"cannot combine values with format {combine.string.fmt!r}: {e}") from e
    _set(dst, patch.to_field_path, combined)


def _set(dst: Unstructured, path: str, value: Any) -> None:
    try:
        dst.set_value(path, value)
    except FieldPathError as e:
        raise PatchError(str(e)) from e
