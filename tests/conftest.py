"""Shared test fixtures."""

from __future__ import annotations

import json
import shlex
import sys
from collections.abc import Callable
from pathlib import Path

import pytest

from workspaces_run.execution import Console

_FAKE_SCRIPT_SOURCE = '''\
import os
import sys
from pathlib import Path

script = sys.argv[1]
name = Path.cwd().name
trace = os.environ.get("WORKSPACES_RUN_TEST_TRACE")
if trace:
    with open(trace, "a", encoding="utf-8") as handle:
        handle.write(name + "\\n")

if script == "build":
    print(f"built {name}")
    sys.stderr.write(f"warning from {name}\\n")
    sys.exit(0)
if script == "fail":
    print("boom")
    sys.exit(3)
if script == "partial":
    sys.stdout.write("first\\nno newline")
    sys.exit(0)
if script == "flood":
    sys.stderr.write("e" * 300000 + "\\n")
    sys.stderr.flush()
    print("out")
    sys.exit(0)
sys.exit(0)
'''


class RecordingConsole(Console):
    """Console capturing output instead of writing to the terminal."""

    def __init__(self) -> None:
        super().__init__()
        self.stdout: list[bytes] = []
        self.stderr: list[bytes] = []
        self.infos: list[str] = []
        self.errors: list[str] = []

    def write_stdout(self, data: bytes) -> None:
        with self._lock:
            self.stdout.append(data)

    def write_stderr(self, data: bytes) -> None:
        with self._lock:
            self.stderr.append(data)

    def info(self, message: str) -> None:
        with self._lock:
            self.infos.append(message)

    def error(self, message: str) -> None:
        with self._lock:
            self.errors.append(message)


@pytest.fixture(autouse=True)
def _isolated_env(monkeypatch) -> None:
    for name in (
        "WORKSPACES_RUN_ROOT",
        "WORKSPACES_RUN_MANIFEST_NAME",
        "WORKSPACES_RUN_COMMAND_TEMPLATE",
        "WORKSPACES_RUN_PARALLEL",
        "WORKSPACES_RUN_IGNORE_MISSING",
        "WORKSPACES_RUN_LOG_LEVEL",
        "WORKSPACES_RUN_TEST_TRACE",
    ):
        monkeypatch.delenv(name, raising=False)


@pytest.fixture()
def console() -> RecordingConsole:
    return RecordingConsole()


@pytest.fixture()
def make_monorepo(tmp_path: Path) -> Callable[..., Path]:
    """Build a monorepo under tmp_path from ``{dirname: manifest}`` mappings."""

    def _make(
        packages: dict[str, dict[str, object] | None],
        *,
        workspaces: object = ("packages/*",),
    ) -> Path:
        root = tmp_path / "repo"
        root.mkdir(exist_ok=True)
        declared = list(workspaces) if isinstance(workspaces, tuple) else workspaces
        _write_json(root / "package.json", {"name": "root", "private": True, "workspaces": declared})
        for dirname, manifest in packages.items():
            package_dir = root / "packages" / dirname
            package_dir.mkdir(parents=True, exist_ok=True)
            if manifest is not None:
                _write_json(package_dir / "package.json", manifest)
        return root

    return _make


@pytest.fixture()
def fake_script_template(tmp_path: Path) -> str:
    """Command template running a tiny Python script that reacts to the script name."""

    script_path = tmp_path / "fake_script.py"
    script_path.write_text(_FAKE_SCRIPT_SOURCE, "utf-8")
    return f"{shlex.quote(sys.executable)} {shlex.quote(str(script_path))} {{script}}"


def _write_json(path: Path, payload: object) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(payload), "utf-8")
