#!/usr/bin/env python3
"""
KUBEBIND ERRORS
---------------
Failure taxonomy shared by the tree, mapping and binding layers.

Read-time absence is never represented here: a pointer that resolves to
nothing simply yields the zero value of the requested shape.
"""

from typing import List


class KubeBindError(Exception):
    """Base class for every failure raised by the binding engine."""


class ConversionError(KubeBindError):
    """A resource could not be converted to or from its generic tree."""


class CompileError(KubeBindError):
    """A container path query is malformed."""

    def __init__(self, expression: str, reason: str):
        self.expression = expression
        self.reason = reason
        super().__init__(f"Invalid path query {expression!r}: {reason}")


class PathConflict(KubeBindError):
    """
    Write-mode resolution hit an existing non-map node where a map
    was required. Carries the offending key and the path walked so far.
    """

    def __init__(self, key: str, path: List[str]):
        self.key = key
        self.path = list(path)
        where = "/" + "/".join(self.path) if self.path else "<root>"
        super().__init__(f"Cannot create key '{key}' under {where}: existing value is not a map")


class ContainerDriftError(KubeBindError):
    """The container queries no longer match the template being written back."""

    def __init__(self, expected: int, actual: int):
        self.expected = expected
        self.actual = actual
        super().__init__(
            f"Container drift: template holds {expected} container(s) "
            f"but the resource now matches {actual}"
        )


class MappingError(KubeBindError):
    """A mapping configuration document is malformed."""
