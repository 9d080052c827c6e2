"""Scheduling and per-workspace script execution."""

from workspaces_run.execution.base import WorkspaceRunner
from workspaces_run.execution.scheduler import run_with_concurrency
from workspaces_run.execution.script_runner import ScriptRunError, ScriptRunner, build_run_args
from workspaces_run.execution.streams import Console, LinePrefixer, pump_stream

__all__ = [
    "Console",
    "LinePrefixer",
    "ScriptRunError",
    "ScriptRunner",
    "WorkspaceRunner",
    "build_run_args",
    "pump_stream",
    "run_with_concurrency",
]
