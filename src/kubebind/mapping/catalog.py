#!/usr/bin/env python3
"""
KUBEBIND MAPPING CATALOG
------------------------
Per-kind PodMappings loaded from a YAML file.

Two layouts are accepted. A single mapping document applies to every
kind:

    containers:
      - path: .spec.jobTemplate.spec.template.spec.containers[*]
        name: /name

Or a `kinds` table, with an optional `default` used for unlisted kinds:

    default: {}
    kinds:
      CronJob:
        annotations: /spec/jobTemplate/spec/template/metadata/annotations
        ...
"""

import logging
from pathlib import Path
from typing import Any, Dict, Optional

from ruamel.yaml import YAML, YAMLError

from kubebind.core.errors import MappingError
from kubebind.mapping.config import PodMapping

logger = logging.getLogger("kubebind.catalog")


class MappingCatalog:
    """Resolves the PodMapping to use for a resource kind."""

    def __init__(self, default: Optional[PodMapping] = None,
                 kinds: Optional[Dict[str, PodMapping]] = None):
        self.default = (default or PodMapping()).default()
        self.kinds = {kind: m.default() for kind, m in (kinds or {}).items()}

    def for_kind(self, kind: Optional[str]) -> PodMapping:
        return self.kinds.get(kind or "", self.default)

    @classmethod
    def from_dict(cls, data: Any) -> "MappingCatalog":
        if data is None:
            return cls()
        if not isinstance(data, dict):
            raise MappingError(f"Mapping configuration must be a map, got {type(data).__name__}")

        if "kinds" not in data and "default" not in data:
            return cls(default=PodMapping.from_dict(data))

        unknown = set(data) - {"default", "kinds"}
        if unknown:
            raise MappingError(f"Unknown mapping configuration keys: {', '.join(sorted(unknown))}")

        kinds = data.get("kinds") or {}
        if not isinstance(kinds, dict):
            raise MappingError("'kinds' must map resource kinds to pod mappings")

        return cls(
            default=PodMapping.from_dict(data.get("default")),
            kinds={str(kind): PodMapping.from_dict(m) for kind, m in kinds.items()},
        )

    @classmethod
    def load(cls, path: Optional[str]) -> "MappingCatalog":
        """Reads a catalog file. No path means the built-in default mapping."""
        if not path:
            return cls()

        config_path = Path(path).resolve()
        try:
            data = YAML(typ='safe').load(config_path.read_text(encoding='utf-8-sig'))
        except (OSError, YAMLError) as e:
            logger.error(f"Unable to load mapping configuration from {config_path}")
            raise MappingError(f"Failed to load mapping configuration: {e}") from e

        catalog = cls.from_dict(data)
        logger.debug(f"Loaded mapping catalog with {len(catalog.kinds)} kind override(s)")
        return catalog
