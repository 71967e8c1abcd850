#!/usr/bin/env python3
"""
KUBEBIND CORE MODELS
--------------------
Normalized, shape-independent view of a workload's pod template and the
descriptor of the credentials to inject into it.

A PodTemplate is transient: it is produced by the projector for a single
call and written back to the same resource, never persisted.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, FrozenSet, List, Optional


@dataclass
class Container:
    """
    One container discovered through a ContainerMapping.

    Env and volume mount entries are kept as plain mappings so that keys
    the engine does not interpret (valueFrom, subPath, ...) survive the
    round trip untouched.
    """
    name: str = ""
    env: List[Dict[str, Any]] = field(default_factory=list)
    volume_mounts: List[Dict[str, Any]] = field(default_factory=list)

    def find_env(self, name: str) -> Optional[Dict[str, Any]]:
        for entry in self.env:
            if entry.get("name") == name:
                return entry
        return None

    def find_volume_mount(self, name: str) -> Optional[Dict[str, Any]]:
        for mount in self.volume_mounts:
            if mount.get("name") == name:
                return mount
        return None


@dataclass
class PodTemplate:
    """Annotations, containers and volumes of a workload, in document order."""
    annotations: Dict[str, str] = field(default_factory=dict)
    containers: List[Container] = field(default_factory=list)
    volumes: List[Dict[str, Any]] = field(default_factory=list)

    def find_volume(self, name: str) -> Optional[Dict[str, Any]]:
        for volume in self.volumes:
            if volume.get("name") == name:
                return volume
        return None


@dataclass
class Binding:
    """
    Credential material to project into containers.

    `containers` is an allow-list of container names; when empty every
    discovered container is bound.
    """
    name: str = ""
    secret_ref: str = ""
    containers: FrozenSet[str] = field(default_factory=frozenset)

    def __post_init__(self):
        # Accept any iterable of names (list from argparse, set, tuple)
        if not isinstance(self.containers, frozenset):
            self.containers = frozenset(self.containers or ())

    def selects(self, container_name: str) -> bool:
        return not self.containers or container_name in self.containers
