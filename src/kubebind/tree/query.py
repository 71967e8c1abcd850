#!/usr/bin/env python3
"""
KUBEBIND PATH QUERIES
---------------------
Compiles Kubernetes-style JSONPath expressions such as
`.spec.template.spec.containers[*]` (optionally wrapped in `{...}`) and
evaluates them against a generic tree with jsonpath-ng.

Malformed expressions fail at compile time, before any resource is read.
Evaluation never fails: a field missing on this resource and a shape the
resource kind does not have at all both come back as "no matches".
"""

import logging
from functools import lru_cache
from typing import Any, List

from jsonpath_ng import parse as jsonpath_parse

from kubebind.core.errors import CompileError

logger = logging.getLogger("kubebind.query")


class CompiledQuery:
    """A parsed path query, reusable across trees."""

    def __init__(self, expression: str, parsed: Any):
        self.expression = expression
        self._parsed = parsed

    def evaluate(self, tree: Any) -> List[Any]:
        """
        Returns the matched nodes in document order. Nodes are live
        references into `tree`, so writes through them land in the tree.
        """
        matches = [m.value for m in self._parsed.find(tree) if m.value is not None]
        logger.debug(f"Query {self.expression!r} matched {len(matches)} node(s)")
        return matches

    def __repr__(self) -> str:
        return f"CompiledQuery({self.expression!r})"


def _normalize(expression: str) -> str:
    expr = expression.strip()
    if expr.startswith("{") and expr.endswith("}"):
        expr = expr[1:-1].strip()
    if expr.startswith("."):
        expr = "$" + expr
    return expr


@lru_cache(maxsize=128)
def compile_query(expression: str) -> CompiledQuery:
    """Parses `expression` or raises CompileError."""
    expr = _normalize(expression)
    if not expr:
        raise CompileError(expression, "empty expression")
    try:
        parsed = jsonpath_parse(expr)
    except Exception as e:
        raise CompileError(expression, str(e)) from e
    return CompiledQuery(expression, parsed)
