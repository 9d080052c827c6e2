"""Workspace discovery from the root manifest."""

from __future__ import annotations

import json
import logging
from collections.abc import Sequence
from pathlib import Path
from types import MappingProxyType
from typing import Any

from workspaces_run.config import DEFAULT_MANIFEST_NAME
from workspaces_run.workspaces.models import (
    ORDERING_DEPENDENCY_FIELDS,
    Workspace,
    WorkspaceManifest,
)

logger = logging.getLogger(__name__)


class ManifestError(RuntimeError):
    """Root manifest cannot be read, so no workspace can be discovered."""


class WorkspaceRepository:
    """Resolves workspace directories and loads their manifests.

    Loading runs in two passes. The first pass reads every workspace manifest
    into a ``WorkspaceManifest`` without looking at other workspaces. The
    second pass, :func:`resolve_internal_dependencies`, sees the complete
    name set and decides which declared dependencies are internal.
    """

    def __init__(self, root: Path, manifest_name: str = DEFAULT_MANIFEST_NAME) -> None:
        self.root = root.resolve()
        self.manifest_name = manifest_name

    def load(self, dirs: Sequence[Path] | None = None) -> list[Workspace]:
        """Load all workspaces in discovery order.

        ``dirs`` defaults to :meth:`resolve_workspace_dirs`; callers that already
        resolved the directories pass them in to avoid a second glob pass.
        """

        if dirs is None:
            dirs = self.resolve_workspace_dirs()
        return resolve_internal_dependencies(self.load_manifests(dirs))

    def read_workspace_patterns(self) -> list[str]:
        """Return the workspace glob patterns declared by the root manifest."""

        manifest_path = self.root / self.manifest_name
        try:
            payload = json.loads(manifest_path.read_text("utf-8"))
        except FileNotFoundError as error:
            raise ManifestError(f"Root manifest not found: {manifest_path}") from error
        except OSError as error:
            raise ManifestError(f"Cannot read root manifest {manifest_path}: {error}") from error
        except ValueError as error:
            raise ManifestError(f"Invalid JSON in root manifest {manifest_path}: {error}") from error
        if not isinstance(payload, dict):
            raise ManifestError(f"Root manifest must be a JSON object: {manifest_path}")

        declared = payload.get("workspaces")
        if isinstance(declared, dict):
            declared = declared.get("packages")
        if declared is None:
            return []
        if not isinstance(declared, list) or not all(isinstance(item, str) for item in declared):
            raise ManifestError(
                f"Root manifest 'workspaces' must be a list of glob patterns: {manifest_path}",
            )
        return [pattern for pattern in declared if pattern.strip()]

    def resolve_workspace_dirs(self) -> list[Path]:
        """Expand workspace patterns relative to the root into existing directories."""

        dirs: list[Path] = []
        seen: set[Path] = set()
        for pattern in self.read_workspace_patterns():
            for candidate in sorted(self._expand(pattern)):
                if not candidate.is_dir():
                    continue
                resolved = candidate.resolve()
                if resolved in seen:
                    continue
                seen.add(resolved)
                dirs.append(resolved)
        return dirs

    def load_manifests(self, dirs: Sequence[Path]) -> list[WorkspaceManifest]:
        """First pass: read every workspace manifest, skipping non-packages."""

        manifests: list[WorkspaceManifest] = []
        names: set[str] = set()
        for directory in dirs:
            manifest = self._load_manifest(directory)
            if manifest is None:
                continue
            if manifest.name in names:
                logger.warning(
                    "Skipping %s: workspace name %r is already declared",
                    directory,
                    manifest.name,
                )
                continue
            names.add(manifest.name)
            manifests.append(manifest)
        return manifests

    def _expand(self, pattern: str) -> list[Path]:
        normalized = pattern.strip().rstrip("/")
        if normalized in {"", "."}:
            return [self.root]
        if Path(normalized).is_absolute():
            logger.warning("Ignoring absolute workspace pattern %r", pattern)
            return []
        return list(self.root.glob(normalized))

    def _load_manifest(self, directory: Path) -> WorkspaceManifest | None:
        manifest_path = directory / self.manifest_name
        try:
            payload = json.loads(manifest_path.read_text("utf-8"))
        except (OSError, ValueError) as error:
            logger.debug("Skipping %s: %s", directory, error)
            return None
        if not isinstance(payload, dict):
            logger.debug("Skipping %s: manifest is not a JSON object", directory)
            return None

        name = payload.get("name")
        if not isinstance(name, str) or not name.strip():
            logger.debug("Skipping %s: manifest has no name", directory)
            return None

        return WorkspaceManifest(
            name=name,
            directory=directory,
            relative_path=self._relative_path(directory),
            scripts=_string_map(payload.get("scripts")),
            dependency_names=_dependency_names(payload),
        )

    def _relative_path(self, directory: Path) -> str:
        try:
            return directory.relative_to(self.root).as_posix()
        except ValueError:
            return directory.as_posix()


def resolve_internal_dependencies(manifests: Sequence[WorkspaceManifest]) -> list[Workspace]:
    """Second pass: keep only declared dependencies naming another loaded workspace."""

    names = {manifest.name for manifest in manifests}
    return [
        Workspace(
            name=manifest.name,
            directory=manifest.directory,
            relative_path=manifest.relative_path,
            scripts=MappingProxyType(dict(manifest.scripts)),
            internal_dependencies=frozenset(
                dep for dep in manifest.dependency_names if dep in names and dep != manifest.name
            ),
        )
        for manifest in manifests
    ]


def _dependency_names(payload: dict[str, Any]) -> tuple[str, ...]:
    collected: list[str] = []
    for field_name in ORDERING_DEPENDENCY_FIELDS:
        for dep_name in _string_map(payload.get(field_name)):
            if dep_name not in collected:
                collected.append(dep_name)
    return tuple(collected)


def _string_map(value: object) -> dict[str, str]:
    if not isinstance(value, dict):
        return {}
    return {key: item for key, item in value.items() if isinstance(item, str)}
