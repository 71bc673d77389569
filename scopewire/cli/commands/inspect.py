"""
Inspect command for CLI.

Lists the bindings registered in a container.
"""

from pathlib import Path

import click

from ..utils import describe_bindings, format_bindings, load_container


@click.command("inspect")
@click.argument("target")
@click.option(
    "--format",
    "-f",
    "format_type",
    type=click.Choice(["pretty", "json"]),
    default="pretty",
    help="Output format",
)
@click.option(
    "--hierarchy",
    is_flag=True,
    help="Include bindings of parent containers",
)
@click.option(
    "--app-dir",
    type=click.Path(exists=True, file_okay=False, path_type=Path),
    default=".",
    help="Directory to import TARGET from",
)
def inspect_container(target: str, format_type: str, hierarchy: bool, app_dir: Path) -> None:
    """
    List the bindings of the container at TARGET.

    TARGET: Import path of a container, as MODULE:ATTRIBUTE

    Examples:
        scopewire inspect myapp.wiring:container
        scopewire inspect myapp.wiring:request_container --hierarchy --format json
    """
    container = load_container(target, app_dir)
    rows = describe_bindings(container, hierarchy=hierarchy)
    click.echo(format_bindings(rows, format_type))
