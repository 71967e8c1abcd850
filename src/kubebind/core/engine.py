#!/usr/bin/env python3
"""
KUBEBIND ENGINE - Manifest Orchestrator
---------------------------------------
BindingEngine applies one Binding to every workload document found in a
workspace of manifest files. Writes are atomic and preceded by a backup
of the original file.
"""

import os
import time
import shutil
import logging
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional

from kubebind.core.errors import KubeBindError
from kubebind.core.models import Binding
from kubebind.io.manifest import ManifestIO
from kubebind.mapping.catalog import MappingCatalog
from kubebind.rules.binder import BindingInjector

logger = logging.getLogger("kubebind.engine")


class BindingEngine:
    """
    Coordinates manifest I/O, per-kind mapping selection and injection.
    Each file is processed independently; one failing file never stops a
    directory scan.
    """

    def __init__(self, workspace_path: str, binding: Binding,
                 catalog: Optional[MappingCatalog] = None):
        self.workspace = Path(workspace_path).resolve()
        self.binding = binding
        self.catalog = catalog or MappingCatalog()
        self.manifests = ManifestIO()
        self._injectors: Dict[int, BindingInjector] = {}

    def _injector_for(self, kind: Optional[str]) -> BindingInjector:
        mapping = self.catalog.for_kind(kind)
        key = id(mapping)
        if key not in self._injectors:
            self._injectors[key] = BindingInjector(self.binding, mapping)
        return self._injectors[key]

    def bind_file(self, relative_path: str, dry_run: bool = True) -> Dict[str, Any]:
        """Binds every workload document in one manifest file."""
        full_path = (self.workspace / relative_path).resolve()

        if not full_path.is_file():
            return self._file_error(relative_path, "FILE_NOT_FOUND", f"Path missing: {full_path}")

        try:
            raw_text = full_path.read_text(encoding='utf-8-sig')
            docs = self.manifests.load_all(raw_text)

            kinds = []
            changes = []
            for doc in docs:
                if not isinstance(doc, dict) or not doc.get("kind"):
                    continue
                kind = str(doc["kind"])
                injector = self._injector_for(kind)
                # Services, ConfigMaps, ... carry no pod template
                template = injector.project(doc)
                if not template.containers:
                    continue
                kinds.append(kind)
                changes.extend(injector.bind(doc, template))

            final_yaml = self.manifests.dump_all(docs) if docs else raw_text
        except (KubeBindError, UnicodeDecodeError, OSError) as e:
            logger.error(f"Error processing {relative_path}: {str(e)}")
            return self._file_error(relative_path, "ENGINE_ERROR", str(e))

        is_modified = raw_text.strip() != final_yaml.strip()
        result = {
            "file_path": str(relative_path),
            "success": True,
            "status": self._derive_status(is_modified, dry_run),
            "kinds": kinds,
            "changes": changes,
            "written": False,
            "backup_created": None,
            "bound_content": final_yaml if is_modified else None,
            "timestamp": time.time()
        }

        if not dry_run and is_modified:
            backup_path = self._create_unique_backup(full_path)
            try:
                shutil.copy2(full_path, backup_path)
                result["backup_created"] = str(backup_path.relative_to(self.workspace))
            except OSError as e:
                result["backup_warning"] = f"Backup failed: {str(e)}"

            try:
                self._atomic_write(full_path, final_yaml)
                result["written"] = True
            except OSError as e:
                result["write_error"] = str(e)
                result["success"] = False

        return result

    def scan_directory(self, extension: str = ".yaml", dry_run: bool = True,
                       max_depth: int = 10,
                       progress_callback: Optional[Callable[[int, int], None]] = None) -> List[Dict[str, Any]]:
        """Recursively binds every manifest with the given extension."""
        patterns = {f"*{extension.lower()}", f"*{extension.upper()}"}

        # Symlinks are excluded to prevent loops
        all_files = set()
        for p in patterns:
            all_files.update(f for f in self.workspace.rglob(p) if f.is_file() and not f.is_symlink())

        targets = []
        for file_path in sorted(all_files):
            if len(file_path.relative_to(self.workspace).parts) > max_depth:
                logger.debug(f"Skipping {file_path}: deeper than {max_depth}")
                continue
            targets.append(file_path)

        reports = []
        for processed, file_path in enumerate(targets, 1):
            rel_path = str(file_path.relative_to(self.workspace))
            reports.append(self.bind_file(rel_path, dry_run=dry_run))
            if progress_callback:
                progress_callback(processed, len(targets))

        return reports

    def generate_summary(self, reports: List[Dict[str, Any]]) -> Dict[str, Any]:
        total = len(reports)
        return {
            "total_files": total,
            "successful": sum(1 for r in reports if r.get("success", False)),
            "bound": sum(1 for r in reports if r.get("status") in ("BOUND", "PREVIEW")),
            "written_to_disk": sum(1 for r in reports if r.get("written", False)),
            "backups_created": sum(1 for r in reports if r.get("backup_created") is not None),
            "system_errors": sum(1 for r in reports if r.get("status") == "ENGINE_ERROR"),
            "summary_timestamp": time.strftime("%Y-%m-%d %H:%M:%S")
        }

    def _derive_status(self, modified: bool, dry: bool) -> str:
        if not modified: return "UNCHANGED"
        return "PREVIEW" if dry else "BOUND"

    def _atomic_write(self, target_path: Path, content: str):
        if not os.access(target_path.parent, os.W_OK):
            raise PermissionError(f"No write access to {target_path.parent}")
        temp_file = target_path.with_suffix('.kubebind.tmp')
        try:
            temp_file.write_text(content, encoding='utf-8')
            os.replace(temp_file, target_path)
        except OSError:
            if temp_file.exists(): temp_file.unlink()
            raise

    def _create_unique_backup(self, target_path: Path) -> Path:
        backup_path = target_path.with_suffix('.kubebind.backup')
        counter = 1
        while backup_path.exists():
            backup_path = target_path.with_name(f"{target_path.stem}-{counter}.kubebind.backup")
            counter += 1
        return backup_path

    def _file_error(self, path: str, status: str, error: str) -> Dict[str, Any]:
        return {
            "file_path": path, "status": status, "error": error,
            "success": False, "kinds": [], "changes": []
        }
