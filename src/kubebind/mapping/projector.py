#!/usr/bin/env python3
"""
KUBEBIND POD-TEMPLATE PROJECTOR
-------------------------------
Projects an arbitrary workload resource onto a normalized PodTemplate
(`to_meta`) and writes a PodTemplate back into the resource (`from_meta`),
both driven by the same PodMapping.

`from_meta` re-runs the container queries against the current resource
and pairs the template's containers with the matches in order, so the
resource must not gain or lose containers between the two calls. A
mismatch in count is reported as ContainerDriftError before anything is
written.
"""

import logging
from typing import Any, List, Tuple

from kubebind.core.errors import ContainerDriftError
from kubebind.core.models import Container, PodTemplate
from kubebind.mapping.config import ContainerMapping, PodMapping
from kubebind.tree.codec import from_tree, to_tree
from kubebind.tree.pointer import get_at, set_at
from kubebind.tree.query import compile_query

logger = logging.getLogger("kubebind.projector")


def _discover(tree: Any, mapping: PodMapping) -> List[Tuple[ContainerMapping, Any]]:
    """
    Runs every container query in declaration order. All queries are
    compiled before the first one is evaluated.
    """
    compiled = [(cm, compile_query(cm.path)) for cm in mapping.containers]
    matches = []
    for cm, query in compiled:
        found = query.evaluate(tree)
        if not found:
            logger.debug(f"No containers at {cm.path!r}, skipping")
        matches.extend((cm, node) for node in found)
    return matches


def to_meta(resource: Any, mapping: PodMapping) -> PodTemplate:
    """Builds a PodTemplate from `resource`. The resource is never modified."""
    tree = to_tree(resource)
    template = PodTemplate()

    template.annotations = get_at(tree, mapping.annotations, dict)

    for cm, node in _discover(tree, mapping):
        container = Container(
            name=get_at(node, cm.name, str) if cm.name else "",
            env=get_at(node, cm.env, list),
            volume_mounts=get_at(node, cm.volume_mounts, list),
        )
        template.containers.append(container)

    template.volumes = get_at(tree, mapping.volumes, list)

    logger.debug(
        f"Projected {len(template.containers)} container(s), "
        f"{len(template.volumes)} volume(s)"
    )
    return template


def from_meta(resource: Any, mapping: PodMapping, template: PodTemplate) -> None:
    """
    Writes `template` back into `resource` in place.

    Every write goes to a detached tree first; the resource only changes
    once all of them succeeded.
    """
    tree = to_tree(resource)

    matches = _discover(tree, mapping)
    if len(matches) != len(template.containers):
        raise ContainerDriftError(expected=len(template.containers), actual=len(matches))

    set_at(tree, mapping.annotations, template.annotations)

    for (cm, node), container in zip(matches, template.containers):
        if cm.name:
            set_at(node, cm.name, container.name)
        set_at(node, cm.env, container.env)
        set_at(node, cm.volume_mounts, container.volume_mounts)

    set_at(tree, mapping.volumes, template.volumes)

    from_tree(tree, resource)
