"""Read and write values in Kubernetes objects by field path.

Paths use the syntax accepted by Kubernetes tooling, for example
``spec.forProvider.tags[0].key`` or
``metadata.annotations[crossplane.io/external-name]``. Bracketed segments
holding only digits index into arrays; anything else in brackets is a field
name and may optionally be quoted.
"""

from __future__ import annotations

import copy
from typing import Any, Union

from xrcompose.utils.errors import FieldNotFoundError, FieldPathError

Segment = Union[str, int]


def parse(path: str) -> list[Segment]:
    """Split a field path into field names and array indexes.

    Args:
        path: The field path to parse.

    Returns:
        The path segments; ints are array indexes.

    Raises:
        FieldPathError: If the path is malformed.
    """
    if not path:
        raise FieldPathError("field path is empty")

    segments: list[Segment] = []
    field = ""
    i = 0
    # True right after a closing bracket, where only '.', '[' or the end may follow
    after_bracket = False
    while i < len(path):
        char = path[i]
        if char == ".":
            if not field and not after_bracket:
                raise FieldPathError(f"{path}: unexpected '.' at position {i}")
            if field:
                segments.append(field)
                field = ""
            after_bracket = False
            i += 1
            if i == len(path):
                raise FieldPathError(f"{path}: path ends with '.'")
            continue
        if char == "[":
            if field:
                segments.append(field)
                field = ""
            end = path.find("]", i)
            if end == -1:
                raise FieldPathError(f"{path}: unterminated '[' at position {i}")
            segments.append(_bracket_segment(path, path[i + 1 : end]))
            after_bracket = True
            i = end + 1
            continue
        if char == "]":
            raise FieldPathError(f"{path}: unexpected ']' at position {i}")
        if after_bracket:
            raise FieldPathError(f"{path}: expected '.' or '[' after ']' at position {i}")
        field += char
        i += 1

    if field:
        segments.append(field)
    return segments


def _bracket_segment(path: str, content: str) -> Segment:
    """Interpret the content of a bracketed path segment."""
    if not content:
        raise FieldPathError(f"{path}: empty brackets")
    if content.isdigit():
        return int(content)
    if len(content) >= 2 and content[0] == content[-1] and content[0] in "'\"":
        content = content[1:-1]
        if not content:
            raise FieldPathError(f"{path}: empty quoted field name")
    return content


def get_value(obj: dict[str, Any], path: str) -> Any:
    """Get the value at a field path.

    Raises:
        FieldNotFoundError: If any segment of the path is not set.
        FieldPathError: If the path is malformed or traverses a scalar.
    """
    current: Any = obj
    for segment in parse(path):
        if isinstance(segment, int):
            if not isinstance(current, list):
                raise FieldPathError(f"{path}: cannot index into non-array value")
            if segment >= len(current):
                raise FieldNotFoundError(path)
            current = current[segment]
            continue
        if not isinstance(current, dict):
            raise FieldPathError(f"{path}: cannot access field '{segment}' of non-object value")
        if segment not in current:
            raise FieldNotFoundError(path)
        current = current[segment]
    return current


def get_string(obj: dict[str, Any], path: str) -> str:
    """Get a string value at a field path."""
    value = get_value(obj, path)
    if not isinstance(value, str):
        raise FieldPathError(f"{path}: value is not a string")
    return value


def get_integer(obj: dict[str, Any], path: str) -> int:
    """Get an integer value at a field path."""
    value = get_value(obj, path)
    if isinstance(value, bool) or not isinstance(value, int):
        raise FieldPathError(f"{path}: value is not an integer")
    return value


def get_bool(obj: dict[str, Any], path: str) -> bool:
    """Get a boolean value at a field path."""
    value = get_value(obj, path)
    if not isinstance(value, bool):
        raise FieldPathError(f"{path}: value is not a boolean")
    return value


def set_value(obj: dict[str, Any], path: str, value: Any) -> None:
    """Set the value at a field path, creating intermediate objects and arrays.

    Raises:
        FieldPathError: If the path is malformed or an existing value along
            the path has the wrong type.
    """
    segments = parse(path)
    if not isinstance(segments[0], str):
        raise FieldPathError(f"{path}: path must start with a field name")

    current: Any = obj
    for index, segment in enumerate(segments):
        last = index == len(segments) - 1
        next_segment = None if last else segments[index + 1]
        if isinstance(segment, int):
            if not isinstance(current, list):
                raise FieldPathError(f"{path}: cannot index into non-array value")
            while len(current) <= segment:
                current.append(None)
            if last:
                current[segment] = copy.deepcopy(value)
                return
            if current[segment] is None:
                current[segment] = [] if isinstance(next_segment, int) else {}
            current = current[segment]
            continue

        if not isinstance(current, dict):
            raise FieldPathError(f"{path}: cannot set field '{segment}' of non-object value")
        if last:
            current[segment] = copy.deepcopy(value)
            return
        if current.get(segment) is None:
            current[segment] = [] if isinstance(next_segment, int) else {}
        current = current[segment]
