#!/usr/bin/env python3
"""
KUBEBIND POINTER RESOLVER
-------------------------
Walks a generic tree (dict / list / scalar values) by a "/"-separated key
sequence.

Reads treat absence as a normal result and never touch the tree. Writes
create the missing intermediate maps one level at a time and refuse to
overwrite an existing non-map node standing where a map is required.

Pointer segments are used verbatim as map keys: there is no support for
the "~0" / "~1" escapes, so keys holding "/" cannot be addressed.
"""

import copy
import logging
from typing import Any, Dict, List, Optional, Tuple

from kubebind.core.errors import ConversionError, PathConflict

logger = logging.getLogger("kubebind.pointer")

# Zero values returned when a read finds nothing
_ZERO = {str: "", list: [], dict: {}}


def parse_pointer(pointer: str) -> List[str]:
    """'/spec/template/spec' -> ['spec', 'template', 'spec']"""
    if pointer.startswith("/"):
        pointer = pointer[1:]
    return pointer.split("/")


def resolve(root: Any, pointer: str, create: bool = False) -> Optional[Tuple[Dict[str, Any], str]]:
    """
    Locates the map holding the pointer's final key.

    Returns the (parent, key) pair, or None in read mode when any
    intermediate is missing or is not a map. In write mode every missing
    (or null) intermediate is replaced by an empty map and PathConflict is
    raised on anything else that is not a map.
    """
    keys = parse_pointer(pointer)
    walked: List[str] = []
    node = root

    if not isinstance(node, dict):
        if create:
            raise PathConflict(keys[0], walked)
        return None

    for key in keys[:-1]:
        child = node.get(key)
        if child is None:
            if not create:
                return None
            child = {}
            node[key] = child
            logger.debug(f"Created intermediate map at /{'/'.join(walked + [key])}")
        elif not isinstance(child, dict):
            if not create:
                return None
            raise PathConflict(key, walked)
        walked.append(key)
        node = child

    return node, keys[-1]


def get_at(root: Any, pointer: str, shape: type) -> Any:
    """
    Reads the value at `pointer` as `shape` (str, list or dict).

    Absence and null both produce the zero value of the shape. The result
    is a deep copy, so callers may mutate it freely.
    """
    if shape not in _ZERO:
        raise ConversionError(f"Unsupported target shape: {shape!r}")

    found = resolve(root, pointer)
    if found is None:
        return copy.deepcopy(_ZERO[shape])

    parent, key = found
    value = parent.get(key)
    if value is None:
        return copy.deepcopy(_ZERO[shape])

    if not isinstance(value, shape):
        raise ConversionError(
            f"Value at '{pointer}' is {type(value).__name__}, expected {shape.__name__}"
        )
    return copy.deepcopy(value)


def set_at(root: Any, pointer: str, value: Any) -> None:
    """
    Replaces whatever lives at `pointer` with a plain copy of `value`,
    creating the intermediate maps the path needs.
    """
    node = _to_plain(value, pointer)
    parent, key = resolve(root, pointer, create=True)
    parent[key] = node


def _to_plain(value: Any, pointer: str) -> Any:
    if isinstance(value, dict):
        return {str(k): copy.deepcopy(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [copy.deepcopy(v) for v in value]
    if isinstance(value, str):
        return str(value)
    raise ConversionError(f"Unsupported value kind {type(value).__name__} for '{pointer}'")
