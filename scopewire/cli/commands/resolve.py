"""
Resolve command for CLI.

Resolves a string token from a container and prints the result.
"""

from pathlib import Path

import click

from ...exceptions import ScopewireError
from ..utils import load_container


@click.command("resolve")
@click.argument("target")
@click.argument("token")
@click.option(
    "--app-dir",
    type=click.Path(exists=True, file_okay=False, path_type=Path),
    default=".",
    help="Directory to import TARGET from",
)
def resolve_token(target: str, token: str, app_dir: Path) -> None:
    """
    Resolve TOKEN from the container at TARGET and print its repr.

    TARGET: Import path of a container, as MODULE:ATTRIBUTE
    TOKEN: String token to resolve

    Examples:
        scopewire resolve myapp.wiring:container Config
    """
    container = load_container(target, app_dir)
    try:
        instance = container.resolve(token)
    except ScopewireError as e:
        raise click.ClickException(str(e)) from e
    click.echo(repr(instance))
