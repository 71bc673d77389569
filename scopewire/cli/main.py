"""
SCOPEWIRE command-line entry point.

    scopewire inspect myapp.wiring:container --hierarchy
    scopewire resolve myapp.wiring:container Config
"""

import click

from .. import __version__
from .commands.inspect import inspect_container
from .commands.resolve import resolve_token


@click.group()
@click.version_option(__version__, prog_name="scopewire")
def cli() -> None:
    """Inspect and exercise SCOPEWIRE containers."""


cli.add_command(inspect_container)
cli.add_command(resolve_token)


if __name__ == "__main__":
    cli()
