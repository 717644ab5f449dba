"""Shared rendering of OperationResults for CLI commands."""

from collections.abc import Sequence

import click

from kitsync.models.result import OperationResult


def echo_results(results: Sequence[OperationResult]) -> bool:
    """Print warnings, errors and a status line per result.

    Returns:
        True if every operation succeeded
    """
    for result in results:
        for warning in result.warnings:
            click.echo(f"Warning: {warning}", err=True)
        for error in result.errors:
            click.echo(f"Error: {error}", err=True)

        if result.success:
            click.echo(f"✓ {result.operation}")
        else:
            click.echo(f"✗ {result.operation} failed", err=True)

    return all(result.success for result in results)
