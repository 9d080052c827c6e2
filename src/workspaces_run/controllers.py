"""Controller for the workspaces-run CLI command."""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass
from pathlib import Path

from workspaces_run.config import Settings
from workspaces_run.execution import Console, ScriptRunner, WorkspaceRunner, run_with_concurrency
from workspaces_run.workspaces import (
    Workspace,
    WorkspaceRepository,
    order_workspaces,
    select_workspaces,
)

logger = logging.getLogger(__name__)

RunnerFactory = Callable[[str, Settings, Console], WorkspaceRunner]


class RunAbortedError(RuntimeError):
    """Run cannot start; raised before any workspace script is spawned."""


@dataclass(slots=True)
class RunCommand:
    """CLI input for a workspace script run."""

    script: str | None
    root: Path | None = None
    parallel: int | None = None
    include: tuple[str, ...] = ()
    exclude: tuple[str, ...] = ()
    topo: bool = True
    ignore_missing: bool = False
    dry_run: bool = False


@dataclass(slots=True)
class RunSummary:
    """Outcome of a run to report in CLI."""

    plan: tuple[str, ...]
    failures: int = 0
    dry_run: bool = False
    had_cycle: bool = False

    @property
    def success(self) -> bool:
        return self.failures == 0


class WorkspacesCliController:
    """Coordinates discovery, selection, ordering, and scheduling."""

    def __init__(
        self,
        console: Console | None = None,
        runner_factory: RunnerFactory | None = None,
    ) -> None:
        self.console = console or Console()
        self.runner_factory = runner_factory or _script_runner

    def run(self, command: RunCommand) -> RunSummary:
        if not command.script:
            raise RunAbortedError("--script <name> is required.")
        script = command.script

        try:
            settings = Settings.from_env(root=command.root)
            if command.parallel is not None:
                settings.parallel = max(1, command.parallel)
            settings.ignore_missing = settings.ignore_missing or command.ignore_missing
            settings.validate()
        except ValueError as error:
            raise RunAbortedError(str(error)) from error

        repository = WorkspaceRepository(settings.root, manifest_name=settings.manifest_name)
        all_dirs = repository.resolve_workspace_dirs()
        all_workspaces = repository.load(all_dirs)
        logger.info(
            "Run configuration: root=%s script=%s parallel=%d include=%s exclude=%s "
            "topo=%s ignore_missing=%s dry_run=%s dirs=%d workspaces=%d",
            settings.root,
            script,
            settings.parallel,
            list(command.include),
            list(command.exclude),
            command.topo,
            settings.ignore_missing,
            command.dry_run,
            len(all_dirs),
            len(all_workspaces),
        )

        selected = select_workspaces(all_workspaces, command.include, command.exclude)
        had_cycle = False
        if command.topo:
            ordering = order_workspaces(selected)
            selected = ordering.workspaces
            had_cycle = ordering.had_cycle
            if had_cycle:
                logger.warning(
                    "Dependency cycle detected; falling back to name order for: %s",
                    ", ".join(ordering.unordered),
                )

        if not selected:
            raise RunAbortedError("No workspaces matched.")

        plan = (
            [workspace for workspace in selected if workspace.has_script(script)]
            if settings.ignore_missing
            else selected
        )
        if not plan:
            raise RunAbortedError(f'No workspaces contain script "{script}".')

        names = tuple(workspace.name for workspace in plan)
        if command.dry_run:
            self._print_plan(plan, script)
            return RunSummary(plan=names, dry_run=True, had_cycle=had_cycle)

        runner = self.runner_factory(script, settings, self.console)
        failures = run_with_concurrency(plan, settings.parallel, runner.execute)
        return RunSummary(plan=names, failures=failures, had_cycle=had_cycle)

    def _print_plan(self, plan: list[Workspace], script: str) -> None:
        self.console.info("Dry run. Would execute in order:")
        for workspace in plan:
            flag = "" if workspace.has_script(script) else " (missing script)"
            self.console.info(f" - {workspace.name}{flag}")


def _script_runner(script: str, settings: Settings, console: Console) -> WorkspaceRunner:
    return ScriptRunner(
        script=script,
        console=console,
        command_template=settings.command_template,
    )

