"""Deterministic topological ordering of selected workspaces."""

from __future__ import annotations

import heapq
from collections.abc import Sequence
from dataclasses import dataclass

from workspaces_run.workspaces.models import Workspace


@dataclass(slots=True)
class OrderResult:
    """Execution order plus a flag telling whether a cycle forced a fallback."""

    workspaces: list[Workspace]
    unordered: tuple[str, ...] = ()

    @property
    def had_cycle(self) -> bool:
        return bool(self.unordered)

    @property
    def names(self) -> list[str]:
        return [workspace.name for workspace in self.workspaces]


def order_workspaces(selected: Sequence[Workspace]) -> OrderResult:
    """Order workspaces so internal dependencies run first.

    Kahn's algorithm, always emitting the smallest ready name. Dependencies
    outside ``selected`` are ignored. Workspaces left over by a cycle are
    appended in name order and reported in ``unordered``; this is a best-effort
    total order, not an error.
    """

    by_name = {workspace.name: workspace for workspace in selected}
    in_degree = dict.fromkeys(by_name, 0)
    dependents: dict[str, list[str]] = {name: [] for name in by_name}

    for workspace in selected:
        for dep in workspace.internal_dependencies:
            if dep not in by_name or dep == workspace.name:
                continue
            dependents[dep].append(workspace.name)
            in_degree[workspace.name] += 1

    ready = [name for name, degree in in_degree.items() if degree == 0]
    heapq.heapify(ready)

    ordered: list[str] = []
    while ready:
        name = heapq.heappop(ready)
        ordered.append(name)
        for dependent in dependents[name]:
            in_degree[dependent] -= 1
            if in_degree[dependent] == 0:
                heapq.heappush(ready, dependent)

    emitted = set(ordered)
    remaining = sorted(name for name in by_name if name not in emitted)
    return OrderResult(
        workspaces=[by_name[name] for name in [*ordered, *remaining]],
        unordered=tuple(remaining),
    )
