"""Runner interface used by the scheduler."""

from __future__ import annotations

from typing import Protocol

from workspaces_run.workspaces.models import Workspace


class WorkspaceRunner(Protocol):
    """Protocol implemented by per-workspace script runners."""

    def execute(self, workspace: Workspace) -> int:
        """Run the configured script in ``workspace`` and return its exit status."""
