"""Runtime configuration for workspace script runs."""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

DEFAULT_MANIFEST_NAME = "package.json"
DEFAULT_COMMAND_TEMPLATE = "bun run {script}"


@dataclass(slots=True)
class Settings:
    """Settings shared by discovery, scheduling, and script execution."""

    root: Path = Path()
    manifest_name: str = DEFAULT_MANIFEST_NAME
    command_template: str = DEFAULT_COMMAND_TEMPLATE
    parallel: int = 1
    ignore_missing: bool = False

    @classmethod
    def from_env(cls, root: Path | None = None) -> Settings:
        """Load settings from environment, falling back to the current directory as root."""

        return cls(
            root=(root or Path(os.getenv("WORKSPACES_RUN_ROOT", os.getcwd()))).resolve(),
            manifest_name=os.getenv("WORKSPACES_RUN_MANIFEST_NAME", DEFAULT_MANIFEST_NAME),
            command_template=os.getenv(
                "WORKSPACES_RUN_COMMAND_TEMPLATE",
                DEFAULT_COMMAND_TEMPLATE,
            ),
            parallel=_env_int("WORKSPACES_RUN_PARALLEL", default=1),
            ignore_missing=_env_bool("WORKSPACES_RUN_IGNORE_MISSING", default=False),
        )

    def validate(self) -> None:
        """Raise configuration error if settings cannot drive a run."""

        if not self.manifest_name.strip():
            raise ValueError("WORKSPACES_RUN_MANIFEST_NAME must not be empty.")
        if "{script}" not in self.command_template:
            raise ValueError(
                "WORKSPACES_RUN_COMMAND_TEMPLATE must include {script}: "
                f"{self.command_template!r}",
            )
        if self.parallel < 1:
            raise ValueError("WORKSPACES_RUN_PARALLEL must be >= 1.")


def _env_int(name: str, default: int) -> int:
    value = os.getenv(name)
    if value is None or not value.strip():
        return default
    try:
        return int(value)
    except ValueError as error:
        raise ValueError(f"Invalid integer value for {name}: {value!r}") from error


def _env_bool(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    normalized = value.strip().lower()
    if normalized in {"1", "true", "yes", "on"}:
        return True
    if normalized in {"0", "false", "no", "off"}:
        return False
    raise ValueError(f"Invalid boolean value for {name}: {value!r}")
