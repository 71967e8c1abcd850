#!/usr/bin/env python3
"""
KUBEBIND MAPPING CONFIGURATION
------------------------------
Declares where annotations, containers and volumes live inside a
resource whose shape the engine does not otherwise know.

Pointers ("/a/b") address a single location; container paths are
JSONPath queries (".a.b[*]") executed from the root of the resource and
may match any number of containers, including none.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List

from kubebind.core.errors import MappingError

DEFAULT_ANNOTATIONS = "/spec/template/metadata/annotations"
DEFAULT_VOLUMES = "/spec/template/spec/volumes"
DEFAULT_INIT_CONTAINERS = ".spec.template.spec.initContainers[*]"
DEFAULT_CONTAINERS = ".spec.template.spec.containers[*]"
DEFAULT_NAME = "/name"
DEFAULT_ENV = "/env"
DEFAULT_VOLUME_MOUNTS = "/volumeMounts"


@dataclass
class ContainerMapping:
    """
    Locates a group of containers and the fields of each container.

    `name`, `env` and `volume_mounts` are pointers relative to each
    matched container. `name` is optional; the other two are defaulted.
    """
    path: str = ""
    name: str = ""
    env: str = ""
    volume_mounts: str = ""

    def default(self) -> "ContainerMapping":
        if not self.env:
            self.env = DEFAULT_ENV
        if not self.volume_mounts:
            self.volume_mounts = DEFAULT_VOLUME_MOUNTS
        return self

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ContainerMapping":
        if not isinstance(data, dict):
            raise MappingError(f"Container mapping must be a map, got {type(data).__name__}")
        unknown = set(data) - {"path", "name", "env", "volumeMounts"}
        if unknown:
            raise MappingError(f"Unknown container mapping keys: {', '.join(sorted(unknown))}")
        if not data.get("path"):
            raise MappingError("Container mapping requires a 'path' query")
        return cls(
            path=str(data["path"]),
            name=str(data.get("name") or ""),
            env=str(data.get("env") or ""),
            volume_mounts=str(data.get("volumeMounts") or ""),
        )

    def to_dict(self) -> Dict[str, str]:
        out = {"path": self.path}
        if self.name:
            out["name"] = self.name
        if self.env:
            out["env"] = self.env
        if self.volume_mounts:
            out["volumeMounts"] = self.volume_mounts
        return out


@dataclass
class PodMapping:
    """
    Pod template locations for one resource shape.

    An empty PodMapping describes the common `spec.template` layout shared
    by Deployments, StatefulSets, DaemonSets, ReplicaSets and Jobs once
    `default()` has been applied.
    """
    annotations: str = ""
    containers: List[ContainerMapping] = field(default_factory=list)
    volumes: str = ""

    def default(self) -> "PodMapping":
        """Fills unset fields in place. Calling it again changes nothing."""
        if not self.annotations:
            self.annotations = DEFAULT_ANNOTATIONS
        if not self.containers:
            self.containers = [
                ContainerMapping(path=DEFAULT_INIT_CONTAINERS, name=DEFAULT_NAME),
                ContainerMapping(path=DEFAULT_CONTAINERS, name=DEFAULT_NAME),
            ]
        for container in self.containers:
            container.default()
        if not self.volumes:
            self.volumes = DEFAULT_VOLUMES
        return self

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "PodMapping":
        """Builds a mapping from a camelCase configuration document."""
        if data is None:
            return cls()
        if not isinstance(data, dict):
            raise MappingError(f"Pod mapping must be a map, got {type(data).__name__}")
        unknown = set(data) - {"annotations", "containers", "volumes"}
        if unknown:
            raise MappingError(f"Unknown pod mapping keys: {', '.join(sorted(unknown))}")

        containers = data.get("containers") or []
        if not isinstance(containers, list):
            raise MappingError("'containers' must be a list of container mappings")

        return cls(
            annotations=str(data.get("annotations") or ""),
            containers=[ContainerMapping.from_dict(c) for c in containers],
            volumes=str(data.get("volumes") or ""),
        )

    def to_dict(self) -> Dict[str, Any]:
        out: Dict[str, Any] = {}
        if self.annotations:
            out["annotations"] = self.annotations
        if self.containers:
            out["containers"] = [c.to_dict() for c in self.containers]
        if self.volumes:
            out["volumes"] = self.volumes
        return out
