"""
Command line entry point for SIS_POLICY.
"""

import logging

import click

from .. import __version__
from .commands import evaluate, policies


@click.group()
@click.version_option(version=__version__, prog_name="sis-policy")
@click.option("--verbose", "-v", is_flag=True, help="Enable debug logging")
def cli(verbose: bool) -> None:
    """Evaluate and inspect SIS access policies."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


cli.add_command(evaluate)
cli.add_command(policies)


if __name__ == "__main__":
    cli()
