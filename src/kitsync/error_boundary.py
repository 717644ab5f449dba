"""Error boundary handling for CLI commands.

Catches well-known exceptions at CLI entry points and displays clean error
messages without stack traces.
"""

import functools
from collections.abc import Callable
from typing import Any

import click

from kitsync.errors import KitsyncError


def cli_error_boundary[T: Callable[..., Any]](func: T) -> T:
    """Decorator that catches well-known exceptions and displays clean error messages.

    Catches:
        - KitsyncError: Unreadable kitsync.toml, invalid profile tables
        - FileNotFoundError: Missing files/directories
        - ValueError: Invalid input or configuration
        - PermissionError: Permission denied errors

    All other exceptions bubble up normally with full stack traces.

    Example:
        @click.command()
        @cli_error_boundary
        def my_command():
            ...
    """

    @functools.wraps(func)
    def wrapper(*args: Any, **kwargs: Any) -> Any:
        try:
            return func(*args, **kwargs)
        except KitsyncError as e:
            click.echo(f"Error: {e}", err=True)
            raise SystemExit(1) from None
        except FileNotFoundError as e:
            click.echo(f"Error: {e}", err=True)
            raise SystemExit(1) from None
        except ValueError as e:
            click.echo(f"Error: {e}", err=True)
            raise SystemExit(1) from None
        except PermissionError as e:
            click.echo(f"Error: {e}", err=True)
            raise SystemExit(1) from None

    return wrapper  # type: ignore[return-value]
