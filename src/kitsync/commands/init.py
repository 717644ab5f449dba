"""Init command for creating kitsync.toml."""

from pathlib import Path

import click

from kitsync.error_boundary import cli_error_boundary
from kitsync.io.project_config import (
    CONFIG_FILE_NAME,
    ProjectConfig,
    config_path,
    save_project_config,
)


@click.command()
@click.option(
    "--force",
    "-f",
    is_flag=True,
    help=f"Overwrite existing {CONFIG_FILE_NAME} if present",
)
@cli_error_boundary
def init(force: bool) -> None:
    """Create a starter kitsync.toml in the current directory.

    The starter file has no packages; add [[package]] tables to declare
    content sources and configuration fragments, then run `kitsync apply`.
    """
    project_dir = Path.cwd()

    if config_path(project_dir).exists() and not force:
        click.echo(f"Error: {CONFIG_FILE_NAME} already exists", err=True)
        click.echo("Use --force to overwrite", err=True)
        raise SystemExit(1)

    path = save_project_config(project_dir, ProjectConfig())
    click.echo(f"Created {path}")
