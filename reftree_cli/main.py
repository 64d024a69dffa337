"""CLI entrypoint."""

import sys

import click
from loguru import logger

from reftree_engine import __version__

from .commands.config import config
from .commands.fields import fields
from .commands.tree import tree


def configure_logging(verbose: bool) -> None:
    logger.remove()
    logger.add(sys.stderr, level="DEBUG" if verbose else "WARNING")


@click.group()
@click.version_option(version=__version__, prog_name="reftree")
@click.option("-v", "--verbose", is_flag=True, help="Log debug output to stderr")
def cli(verbose: bool):
    """Reftree CLI - Build entity reference trees from site documents."""
    configure_logging(verbose)


cli.add_command(tree)
cli.add_command(fields)
cli.add_command(config)


if __name__ == "__main__":
    cli()
