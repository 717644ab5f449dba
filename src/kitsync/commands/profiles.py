"""Profiles command: list known profiles and preview resolution."""

from pathlib import Path

import click
from rich.console import Console
from rich.table import Table

from kitsync.api import build_registry, resolve_project_profiles
from kitsync.error_boundary import cli_error_boundary
from kitsync.io.project_config import load_project_config


@click.command()
@cli_error_boundary
def profiles() -> None:
    """List registered profiles and which ones `kitsync apply` would target."""
    project_dir = Path.cwd()
    config = load_project_config(project_dir)
    registry = build_registry(config)

    table = Table(show_header=True, header_style="bold")
    table.add_column("id", style="cyan", no_wrap=True)
    table.add_column("detected", no_wrap=True)
    table.add_column("content root", no_wrap=True)
    table.add_column("config document", no_wrap=True)
    table.add_column("root key", no_wrap=True)

    for profile in registry.registered():
        detected = "yes" if profile.marker_path(project_dir).is_dir() else "no"
        table.add_row(
            profile.id,
            detected,
            profile.content_root,
            profile.config_document,
            profile.config_root_key,
        )

    Console(width=200).print(table)

    active = [
        profile_id if registry.is_registered(profile_id) else f"{profile_id} (synthesized)"
        for profile_id in resolve_project_profiles(project_dir, config, registry)
    ]
    click.echo(f"Active profiles: {', '.join(active) if active else '(none)'}")
