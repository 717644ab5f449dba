"""Apply command: run a full sync pass for the current project."""

from pathlib import Path

import click

from kitsync.api import sync_project
from kitsync.commands.results import echo_results
from kitsync.error_boundary import cli_error_boundary
from kitsync.io.project_config import load_project_config


@click.command()
@click.option(
    "--targets",
    default=None,
    help="Profiles to target, separated by ';' or ','. Disables auto-detection.",
)
@click.option(
    "--no-auto-detect",
    is_flag=True,
    help="Do not detect profiles from marker directories",
)
@cli_error_boundary
def apply(targets: str | None, no_auto_detect: bool) -> None:
    """Copy declared content and merge config fragments into every active profile.

    Files and entries from packages that are no longer declared are removed.
    """
    project_dir = Path.cwd()
    config = load_project_config(project_dir)
    if targets is not None:
        config = config.with_targets(targets)
    if no_auto_detect:
        config = config.with_auto_detect(False)

    if not echo_results(sync_project(project_dir, config)):
        raise SystemExit(1)
