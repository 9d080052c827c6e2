from __future__ import annotations

from pathlib import Path

import allure
import pytest
from click.testing import CliRunner

from workspaces_run import __version__
from workspaces_run.main import workspaces_run

pytestmark = [
    allure.epic("Execution"),
    allure.feature("CLI"),
]


@pytest.fixture()
def chain_repo(make_monorepo) -> Path:
    return make_monorepo(
        {
            "a": {"name": "a", "scripts": {"build": "x"}},
            "b": {"name": "b", "scripts": {"build": "x"}, "dependencies": {"a": "*"}},
            "c": {"name": "c", "scripts": {"build": "x"}, "dependencies": {"b": "*"}},
        },
    )


def test_version():
    assert __version__


def test_version_option():
    runner = CliRunner()
    result = runner.invoke(workspaces_run, ["--version"])
    assert result.exit_code == 0
    assert __version__ in result.output


def test_build_runs_in_dependency_order(
    chain_repo: Path,
    tmp_path: Path,
    fake_script_template: str,
    monkeypatch,
) -> None:
    trace = tmp_path / "trace.txt"
    monkeypatch.setenv("WORKSPACES_RUN_COMMAND_TEMPLATE", fake_script_template)
    monkeypatch.setenv("WORKSPACES_RUN_TEST_TRACE", str(trace))

    result = CliRunner().invoke(
        workspaces_run,
        ["--script", "build", "--parallel", "1", "--root", str(chain_repo)],
    )

    assert result.exit_code == 0, result.output
    assert trace.read_text("utf-8").splitlines() == ["a", "b", "c"]
    assert "[a] built a" in result.output
    assert "[c] ✔ Done" in result.output
    assert result.output.index('[a] Running "build"') < result.output.index('[b] Running "build"')
    assert result.output.index('[b] Running "build"') < result.output.index('[c] Running "build"')


def test_parallel_run_reports_failed_workspaces(
    make_monorepo,
    fake_script_template: str,
    monkeypatch,
) -> None:
    root = make_monorepo(
        {
            "one": {"name": "one", "scripts": {"fail": "x"}},
            "two": {"name": "two", "scripts": {"fail": "x"}},
        },
    )
    monkeypatch.setenv("WORKSPACES_RUN_COMMAND_TEMPLATE", fake_script_template)

    result = CliRunner().invoke(
        workspaces_run,
        ["-s", "fail", "-p", "2", "--root", str(root)],
    )

    assert result.exit_code == 1
    assert "[one] boom" in result.output
    assert "[two] boom" in result.output
    assert "2 workspace(s) failed." in result.output


def test_missing_script_fails_each_workspace(make_monorepo) -> None:
    root = make_monorepo({"x": {"name": "x"}, "y": {"name": "y"}})

    result = CliRunner().invoke(workspaces_run, ["--script", "test", "--root", str(root)])

    assert result.exit_code == 1
    assert '[x] Script "test" not found.' in result.output
    assert '[y] Script "test" not found.' in result.output
    assert "2 workspace(s) failed." in result.output


def test_ignore_missing_fails_on_empty_plan_instead(make_monorepo) -> None:
    root = make_monorepo({"x": {"name": "x"}, "y": {"name": "y"}})

    result = CliRunner().invoke(
        workspaces_run,
        ["--script", "test", "--ignore-missing", "--root", str(root)],
    )

    assert result.exit_code == 1
    assert 'No workspaces contain script "test".' in result.output
    assert "not found" not in result.output


def test_dry_run_lists_plan_and_exits_zero(chain_repo: Path, tmp_path: Path, monkeypatch) -> None:
    trace = tmp_path / "trace.txt"
    monkeypatch.setenv("WORKSPACES_RUN_TEST_TRACE", str(trace))

    result = CliRunner().invoke(
        workspaces_run,
        ["--script", "build", "--dry-run", "--root", str(chain_repo)],
    )

    assert result.exit_code == 0
    assert "Dry run. Would execute in order:\n - a\n - b\n - c\n" in result.output
    assert not trace.exists()


def test_script_option_is_required(chain_repo: Path) -> None:
    result = CliRunner().invoke(workspaces_run, ["--root", str(chain_repo)])

    assert result.exit_code == 1
    assert "--script <name> is required." in result.output


def test_no_matching_workspace_exits_with_error(chain_repo: Path) -> None:
    result = CliRunner().invoke(
        workspaces_run,
        ["--script", "build", "--include", "nope", "--root", str(chain_repo)],
    )

    assert result.exit_code == 1
    assert "No workspaces matched." in result.output


def test_unreadable_root_manifest_exits_with_error(tmp_path: Path) -> None:
    result = CliRunner().invoke(workspaces_run, ["--script", "build", "--root", str(tmp_path)])

    assert result.exit_code == 1
    assert "Root manifest not found" in result.output
