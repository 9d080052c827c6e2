"""CLI entrypoint for workspaces-run."""

import logging
import os
from pathlib import Path

import rich_click as click

from workspaces_run import __version__
from workspaces_run.controllers import RunAbortedError, RunCommand, WorkspacesCliController
from workspaces_run.workspaces import ManifestError

click.rich_click.USE_MARKDOWN = True
WORKSPACES_CONTROLLER = WorkspacesCliController()


@click.command()
@click.version_option(version=__version__, prog_name="workspaces-run")
@click.option("--script", "-s", default=None, help="Name of the script to run in each workspace.")
@click.option(
    "--parallel",
    "-p",
    type=int,
    default=None,
    help="Maximum number of scripts running at once (values below 1 mean 1). "
    "Defaults to WORKSPACES_RUN_PARALLEL or 1.",
)
@click.option(
    "--include",
    "include",
    multiple=True,
    help="Glob matched against workspace name or relative path. Can be repeated.",
)
@click.option(
    "--exclude",
    "exclude",
    multiple=True,
    help="Glob of workspaces to skip, matched like --include. Can be repeated.",
)
@click.option(
    "--topo/--no-topo",
    default=True,
    show_default=True,
    help="Order workspaces so internal dependencies run first.",
)
@click.option(
    "--ignore-missing",
    is_flag=True,
    help="Drop workspaces that do not declare the script instead of failing them.",
)
@click.option("--dry-run", is_flag=True, help="Print the execution plan without running anything.")
@click.option(
    "--root",
    type=click.Path(path_type=Path, file_okay=False),
    default=None,
    help="Monorepo root holding the root manifest. Defaults to WORKSPACES_RUN_ROOT or cwd.",
)
@click.option("--verbose", "-v", is_flag=True, help="Enable debug logging.")
def workspaces_run(  # noqa: PLR0913
    script: str | None,
    parallel: int | None,
    include: tuple[str, ...],
    exclude: tuple[str, ...],
    topo: bool,
    ignore_missing: bool,
    dry_run: bool,
    root: Path | None,
    verbose: bool,
) -> None:
    """Run a script in every workspace declared by the root manifest.

    Example: `workspaces-run --script build --parallel 4`
    """

    _configure_logging(verbose=verbose)
    try:
        summary = WORKSPACES_CONTROLLER.run(
            RunCommand(
                script=script,
                root=root,
                parallel=parallel,
                include=include,
                exclude=exclude,
                topo=topo,
                ignore_missing=ignore_missing,
                dry_run=dry_run,
            ),
        )
    except (RunAbortedError, ManifestError) as error:
        raise click.ClickException(str(error)) from error

    if not summary.success:
        raise click.ClickException(f"{summary.failures} workspace(s) failed.")


def _configure_logging(*, verbose: bool) -> None:
    level = "DEBUG" if verbose else os.getenv("WORKSPACES_RUN_LOG_LEVEL", "WARNING").strip().upper()
    if level not in logging.getLevelNamesMapping():
        level = "WARNING"
    logging.basicConfig(level=level, format="%(asctime)s %(levelname)s %(name)s: %(message)s")


if __name__ == "__main__":  # pragma: no cover
    workspaces_run()
