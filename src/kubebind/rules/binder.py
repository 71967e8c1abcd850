#!/usr/bin/env python3
"""
KUBEBIND BINDER - Credential Injection
--------------------------------------
The BindingInjector projects a workload onto a PodTemplate, runs every
selected container through its container rules, registers the backing
volume, and writes the template back into the resource.

Every rule checks for the entry it would add (by name) before adding it,
so binding an already-bound resource again changes nothing.
"""

import logging
from typing import Any, List, Optional, Tuple

from kubebind.core.models import Binding, Container, PodTemplate
from kubebind.mapping.config import PodMapping
from kubebind.mapping.projector import from_meta, to_meta

logger = logging.getLogger("kubebind.binder")

SERVICE_BINDING_ROOT = "SERVICE_BINDING_ROOT"
DEFAULT_BINDING_ROOT = "/bindings"


class BindingInjector:
    """
    Applies one Binding to workloads described by one PodMapping.

    The mapping is defaulted on construction; a mapping that is already
    defaulted is left as it is.
    """

    def __init__(self, binding: Binding, mapping: Optional[PodMapping] = None):
        self.binding = binding
        self.mapping = (mapping or PodMapping()).default()

        # Registry of rules run against every selected container
        self.container_rules = [
            self._rule_ensure_binding_root,
            self._rule_mount_binding,
        ]

    def project(self, resource: Any) -> PodTemplate:
        """Projects `resource` onto a PodTemplate through this injector's mapping."""
        return to_meta(resource, self.mapping)

    def bind(self, resource: Any, template: Optional[PodTemplate] = None) -> List[str]:
        """
        Injects the binding into `resource` in place.
        Returns human-readable descriptions of what changed.

        `template` may be a projection of `resource` obtained from
        `project`; it is projected here otherwise.
        """
        if template is None:
            template = self.project(resource)
        changes = self.apply(template)
        from_meta(resource, self.mapping, template)

        for change in changes:
            logger.info(change)
        return changes

    def apply(self, template: PodTemplate) -> List[str]:
        """Mutates the template only; no resource is involved."""
        changes = []
        bound = 0

        for container in template.containers:
            if not self.binding.selects(container.name):
                logger.debug(f"Container '{container.name}' not selected, skipping")
                continue

            root = DEFAULT_BINDING_ROOT
            for rule in self.container_rules:
                root, msg = rule(container, root)
                if msg:
                    changes.append(msg)
            bound += 1

        if bound:
            msg = self._rule_register_volume(template)
            if msg:
                changes.append(msg)

        return changes

    def _rule_ensure_binding_root(self, container: Container, root: str) -> Tuple[str, str]:
        """
        Policy: every bound container advertises where bindings are mounted.
        An existing SERVICE_BINDING_ROOT wins over the default.
        """
        existing = container.find_env(SERVICE_BINDING_ROOT)
        if existing is not None:
            value = existing.get("value")
            return (str(value) if value not in (None, "") else root), ""

        container.env.append({"name": SERVICE_BINDING_ROOT, "value": root})
        return root, f"Action: Set {SERVICE_BINDING_ROOT}={root} on container '{container.name}'."

    def _rule_mount_binding(self, container: Container, root: str) -> Tuple[str, str]:
        """Policy: the binding's secret is mounted read-only under the binding root."""
        name = self.binding.name
        if not name or container.find_volume_mount(name) is not None:
            return root, ""

        mount_path = f"{root.rstrip('/')}/{name}"
        container.volume_mounts.append({"name": name, "mountPath": mount_path, "readOnly": True})
        return root, f"Action: Mounted binding '{name}' at {mount_path} on container '{container.name}'."

    def _rule_register_volume(self, template: PodTemplate) -> str:
        name = self.binding.name
        if not name or template.find_volume(name) is not None:
            return ""

        template.volumes.append({"name": name, "secret": {"secretName": self.binding.secret_ref}})
        return f"Action: Registered volume '{name}' from secret '{self.binding.secret_ref}'."


def bind(resource: Any, binding: Binding, mapping: Optional[PodMapping] = None) -> List[str]:
    """Convenience wrapper around BindingInjector for one-off calls."""
    return BindingInjector(binding, mapping).bind(resource)
