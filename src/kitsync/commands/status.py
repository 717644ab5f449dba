"""Status command for showing what kitsync currently tracks."""

import logging
from pathlib import Path

import click
from rich.console import Console
from rich.table import Table

from kitsync.error_boundary import cli_error_boundary
from kitsync.io.manifest_store import FilesystemManifestStore
from kitsync.models.manifest import TrackedManifest
from kitsync.models.result import Report

logger = logging.getLogger(__name__)


def _relative(project_dir: Path, recorded: str) -> str:
    path = Path(recorded)
    try:
        return path.relative_to(project_dir).as_posix()
    except ValueError:
        return recorded


def build_content_table(project_dir: Path, manifest: TrackedManifest) -> Table:
    table = Table(show_header=True, header_style="bold")
    table.add_column("package", style="cyan", no_wrap=True)
    table.add_column("profile", no_wrap=True)
    table.add_column("file", no_wrap=True)

    for package_id in sorted(manifest.packages, key=str.casefold):
        record = manifest.packages[package_id]
        for profile_id in sorted(record.files):
            for path in sorted(record.files[profile_id]):
                table.add_row(package_id, profile_id, _relative(project_dir, path))
    return table


def build_config_table(manifest: TrackedManifest) -> Table:
    table = Table(show_header=True, header_style="bold")
    table.add_column("profile", style="cyan", no_wrap=True)
    table.add_column("document", no_wrap=True)
    table.add_column("managed entries")

    for profile_id in sorted(manifest.config):
        record = manifest.config[profile_id]
        table.add_row(profile_id, record.path, ", ".join(sorted(record.managed_keys)))
    return table


@click.command()
@cli_error_boundary
def status() -> None:
    """Show tracked content files and managed config entries."""
    project_dir = Path.cwd().resolve()
    report = Report(operation="status", logger=logger)
    manifest = FilesystemManifestStore(project_dir).load(report)
    for warning in report.warnings:
        click.echo(f"Warning: {warning}", err=True)

    if manifest.is_empty():
        click.echo("Nothing tracked")
        return

    console = Console(width=200)
    if manifest.packages:
        console.print(build_content_table(project_dir, manifest))
    if manifest.config:
        console.print(build_config_table(manifest))
