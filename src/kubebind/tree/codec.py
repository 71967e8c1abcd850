#!/usr/bin/env python3
"""
KUBEBIND CODEC
--------------
Converts a structured resource (a plain dict, or a ruamel.yaml
CommentedMap loaded from a manifest) to a schema-less generic tree and
writes a tree back into the resource in place.

The tree is a detached JSON-like copy: dicts keyed by str, lists, str,
int, float, bool and None only. ruamel.yaml scalar subclasses become
their plain counterparts and YAML timestamps become ISO-8601 strings.
Writing back reuses the resource's own map, sequence and scalar objects
wherever the value survives, so comments, quoting and timestamps stay
as they were.
"""

import math
import logging
from collections.abc import Mapping, MutableMapping, MutableSequence
from datetime import date
from typing import Any, Dict, List

from ruamel.yaml.scalarbool import ScalarBoolean

from kubebind.core.errors import ConversionError

logger = logging.getLogger("kubebind.codec")


def to_tree(resource: Any) -> Dict[str, Any]:
    """Serializes `resource` into a fresh generic tree rooted at a map."""
    if not isinstance(resource, MutableMapping):
        raise ConversionError(
            f"Resource must be a mapping, got {type(resource).__name__}"
        )
    try:
        return _to_node(resource, [])
    except RecursionError as e:
        raise ConversionError("Resource is too deeply nested or self-referencing") from e


def _to_node(value: Any, path: List[str]) -> Any:
    if isinstance(value, Mapping):
        node = {}
        for key, child in value.items():
            if not isinstance(key, str):
                raise ConversionError(
                    f"Non-string key {key!r} at {_where(path)}: tree maps are keyed by strings"
                )
            node[str(key)] = _to_node(child, path + [key])
        return node
    if isinstance(value, (list, tuple)):
        return [_to_node(child, path + [str(i)]) for i, child in enumerate(value)]
    return _to_scalar(value, path)


def _to_scalar(value: Any, path: List[str]) -> Any:
    if value is None:
        return None
    if isinstance(value, (bool, ScalarBoolean)):
        return bool(value)
    if isinstance(value, str):
        return str(value)
    if isinstance(value, int):
        return int(value)
    if isinstance(value, float):
        if math.isnan(value) or math.isinf(value):
            raise ConversionError(f"Non-finite number at {_where(path)}")
        return float(value)
    # datetime is a date subclass; ruamel TimeStamp is a datetime subclass
    if isinstance(value, date):
        return value.isoformat()
    raise ConversionError(
        f"Value of type {type(value).__name__} at {_where(path)} is not representable as a tree"
    )


def _where(path: List[str]) -> str:
    return "/" + "/".join(path) if path else "<root>"


def from_tree(tree: Dict[str, Any], resource: Any) -> None:
    """Replaces the content of `resource` with `tree`, in place."""
    if not isinstance(tree, dict):
        raise ConversionError(f"Tree root must be a map, got {type(tree).__name__}")
    if not isinstance(resource, MutableMapping):
        raise ConversionError(
            f"Cannot write a tree into {type(resource).__name__}"
        )
    _merge(resource, tree)
    logger.debug(f"Wrote tree back into {type(resource).__name__}")


def _merge(target: Any, source: Any) -> Any:
    """
    Returns the value that should replace `target`: `target` itself,
    updated in place, when both sides have the same container shape,
    otherwise `source`.
    """
    if isinstance(target, MutableMapping) and isinstance(source, dict):
        for key in [k for k in target if k not in source]:
            del target[key]
        for key, value in source.items():
            if key in target:
                merged = _merge(target[key], value)
                if merged is not target[key]:
                    target[key] = merged
            else:
                target[key] = value
        return target

    if isinstance(target, MutableSequence) and not isinstance(target, str) and isinstance(source, list):
        for index, value in enumerate(source[:len(target)]):
            merged = _merge(target[index], value)
            if merged is not target[index]:
                target[index] = merged
        while len(target) > len(source):
            target.pop()
        for value in source[len(target):]:
            target.append(value)
        return target

    # Scalars: keep the original object (and its quoting style) when unchanged
    if _same_scalar(target, source):
        return target
    return source


def _same_scalar(left: Any, right: Any) -> bool:
    if isinstance(left, (MutableMapping, MutableSequence)) or isinstance(right, (dict, list)):
        return False
    normalized = _to_scalar(left, [])
    return isinstance(normalized, bool) == isinstance(right, bool) and normalized == right
