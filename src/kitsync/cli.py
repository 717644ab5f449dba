import logging
import os

import click

from kitsync import __version__
from kitsync.commands import apply, clean, init, profiles, status

CONTEXT_SETTINGS = dict(help_option_names=["-h", "--help"])

DEBUG_ENV_VAR = "KITSYNC_DEBUG"


def configure_logging(debug: bool) -> None:
    if debug:
        logging.basicConfig(level=logging.DEBUG, format="[DEBUG %(name)s:%(lineno)d] %(message)s")


@click.group(invoke_without_command=True, context_settings=CONTEXT_SETTINGS)
@click.version_option(version=__version__)
@click.option("--debug", is_flag=True, help="Show debug logging on stderr")
@click.pass_context
def cli(ctx: click.Context, debug: bool) -> None:
    """Sync package-owned skills and config entries into agent profiles."""
    configure_logging(debug or bool(os.getenv(DEBUG_ENV_VAR)))
    if ctx.invoked_subcommand is None:
        click.echo(ctx.get_help())


cli.add_command(init.init)
cli.add_command(apply.apply)
cli.add_command(clean.clean)
cli.add_command(status.status)
cli.add_command(profiles.profiles)


if __name__ == "__main__":
    cli()
