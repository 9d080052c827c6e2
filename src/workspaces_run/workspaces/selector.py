"""Include/exclude filtering of loaded workspaces."""

from __future__ import annotations

from collections.abc import Sequence

from wcmatch.glob import BRACE, CASE, GLOBSTAR, globmatch

from workspaces_run.workspaces.models import Workspace

# `*` stays inside one path segment; `**` crosses segments.
GLOB_FLAGS = GLOBSTAR | BRACE | CASE


def workspace_matches(workspace: Workspace, patterns: Sequence[str]) -> bool:
    """Return True if any pattern matches the workspace name or root-relative path."""

    return any(
        globmatch(workspace.name, pattern, flags=GLOB_FLAGS)
        or globmatch(workspace.relative_path, pattern, flags=GLOB_FLAGS)
        for pattern in patterns
    )


def select_workspaces(
    workspaces: Sequence[Workspace],
    include: Sequence[str] = (),
    exclude: Sequence[str] = (),
) -> list[Workspace]:
    """Filter workspaces by globs and sort them by name.

    An empty ``include`` keeps everything; ``exclude`` is always applied.
    """

    selected = list(workspaces)
    if include:
        selected = [workspace for workspace in selected if workspace_matches(workspace, include)]
    if exclude:
        selected = [
            workspace for workspace in selected if not workspace_matches(workspace, exclude)
        ]
    return sorted(selected, key=lambda workspace: workspace.name)
