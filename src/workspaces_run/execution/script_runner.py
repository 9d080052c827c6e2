"""Subprocess-based runner executing one workspace script."""

from __future__ import annotations

import logging
import os
import shlex
import subprocess
from collections.abc import Mapping

from workspaces_run.config import DEFAULT_COMMAND_TEMPLATE
from workspaces_run.execution.streams import Console, LinePrefixer, start_pump
from workspaces_run.workspaces.models import Workspace

logger = logging.getLogger(__name__)

EXIT_SCRIPT_MISSING = 1
EXIT_START_FAILED = 127


class ScriptRunError(RuntimeError):
    """Script process could not be started."""


class ScriptRunner:
    """Run ``script`` in a workspace directory, streaming prefixed output."""

    def __init__(
        self,
        *,
        script: str,
        console: Console,
        command_template: str = DEFAULT_COMMAND_TEMPLATE,
        env: Mapping[str, str] | None = None,
    ) -> None:
        self.script = script
        self.console = console
        self.command_template = command_template
        self.env = dict(env or {})

    def execute(self, workspace: Workspace) -> int:
        prefix = f"[{workspace.name}] "
        if not workspace.has_script(self.script):
            self.console.error(f'{prefix}Script "{self.script}" not found.')
            return EXIT_SCRIPT_MISSING

        self.console.info(f'{prefix}Running "{self.script}"…')
        try:
            code = self.run_process(workspace)
        except ScriptRunError as error:
            self.console.error(f"{prefix}{error}")
            return EXIT_START_FAILED

        if code == 0:
            self.console.info(f"{prefix}✔ Done")
        else:
            self.console.error(f"{prefix}✖ Failed with exit code {code}")
        return code

    def run_process(self, workspace: Workspace) -> int:
        """Spawn the script and block until both streams drain and the process exits."""

        run_args = build_run_args(self.command_template, self.script)
        env = os.environ.copy()
        env.update(self.env)
        if not workspace.directory.is_dir():
            raise ScriptRunError(f"Workspace directory not found: {workspace.directory}")
        logger.debug("Starting %s in %s", run_args, workspace.directory)
        try:
            process = subprocess.Popen(  # noqa: S603
                run_args,
                cwd=workspace.directory,
                env=env,
                stdout=subprocess.PIPE,
                stderr=subprocess.PIPE,
            )
        except FileNotFoundError as error:
            raise ScriptRunError(f"Command not found: {run_args[0]}") from error
        except OSError as error:
            raise ScriptRunError(f"Failed to start {run_args[0]}: {error}") from error

        return _wait_with_pumps(process, workspace=workspace, console=self.console)


def build_run_args(command_template: str, script: str) -> list[str]:
    """Render the command template for ``script`` into an argv list."""

    try:
        rendered = command_template.strip().format(script=shlex.quote(script))
    except (KeyError, IndexError, ValueError) as error:
        raise ScriptRunError(f"Unsupported command template placeholder: {error}") from error
    try:
        argv = shlex.split(rendered)
    except ValueError as error:
        raise ScriptRunError(f"Invalid command template: {error}") from error
    if not argv:
        raise ScriptRunError("Command template rendered empty command.")
    return argv


def _wait_with_pumps(
    process: subprocess.Popen[bytes],
    *,
    workspace: Workspace,
    console: Console,
) -> int:
    prefix = f"[{workspace.name}] ".encode()
    assert process.stdout is not None
    assert process.stderr is not None
    pumps = [
        start_pump(
            process.stdout,
            LinePrefixer(prefix, console.write_stdout),
            name=f"{workspace.name}-stdout",
        ),
        start_pump(
            process.stderr,
            LinePrefixer(prefix, console.write_stderr),
            name=f"{workspace.name}-stderr",
        ),
    ]
    returncode = process.wait()
    for pump in pumps:
        pump.join()
    logger.debug("%s exited with %d", workspace.name, returncode)
    return returncode

