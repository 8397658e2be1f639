"""zakat-engine CLI — entry point for methodology listing and calculations."""

import sys

import click
from loguru import logger

from zakat_engine import __version__


@click.group()
@click.version_option(version=__version__, package_name="zakat-engine")
@click.option("--verbose", "-v", is_flag=True, help="Show debug logging on stderr.")
def main(verbose: bool) -> None:
    """zakat-engine — calculate zakat under different scholarly methodologies."""
    logger.remove()
    logger.add(sys.stderr, level="DEBUG" if verbose else "WARNING")


# Register subcommands (lazy imports keep startup fast)
from .calculate_cmd import calculate, compare
from .methodologies_cmd import methodologies, show

main.add_command(methodologies)
main.add_command(show)
main.add_command(calculate)
main.add_command(compare)
