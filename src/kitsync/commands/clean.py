"""Clean command: undo everything kitsync wrote."""

from pathlib import Path

import click

from kitsync.api import clean_project
from kitsync.commands.results import echo_results
from kitsync.error_boundary import cli_error_boundary
from kitsync.io.project_config import load_project_config


@click.command()
@cli_error_boundary
def clean() -> None:
    """Remove all tracked content files and managed config entries.

    User-authored files and entries are left in place.
    """
    project_dir = Path.cwd()
    config = load_project_config(project_dir)

    if not echo_results(clean_project(project_dir, config)):
        raise SystemExit(1)
