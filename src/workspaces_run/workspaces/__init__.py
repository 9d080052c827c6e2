"""Workspace discovery, selection, and ordering."""

from workspaces_run.workspaces.models import Workspace, WorkspaceManifest
from workspaces_run.workspaces.ordering import OrderResult, order_workspaces
from workspaces_run.workspaces.repository import (
    ManifestError,
    WorkspaceRepository,
    resolve_internal_dependencies,
)
from workspaces_run.workspaces.selector import select_workspaces, workspace_matches

__all__ = [
    "ManifestError",
    "OrderResult",
    "Workspace",
    "WorkspaceManifest",
    "WorkspaceRepository",
    "order_workspaces",
    "resolve_internal_dependencies",
    "select_workspaces",
    "workspace_matches",
]
