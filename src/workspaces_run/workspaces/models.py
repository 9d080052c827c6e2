"""Workspace entities loaded from monorepo manifests."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path

# Dependency categories that constrain execution order. Peer dependencies are
# intentionally absent: they never force one workspace to run before another.
ORDERING_DEPENDENCY_FIELDS = ("dependencies", "devDependencies", "optionalDependencies")


@dataclass(frozen=True, slots=True)
class WorkspaceManifest:
    """First-pass workspace data, before internal dependencies are resolved."""

    name: str
    directory: Path
    relative_path: str
    scripts: Mapping[str, str] = field(default_factory=dict)
    dependency_names: tuple[str, ...] = ()


@dataclass(frozen=True, slots=True)
class Workspace:
    """One sub-project of the monorepo, immutable once loaded."""

    name: str
    directory: Path
    relative_path: str
    scripts: Mapping[str, str] = field(default_factory=dict)
    internal_dependencies: frozenset[str] = frozenset()

    def has_script(self, script: str) -> bool:
        return bool(self.scripts.get(script))
