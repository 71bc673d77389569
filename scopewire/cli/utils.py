"""
Utility functions for CLI commands.

Containers are located by import path (``package.module:attribute``). The
attribute may be a container or a zero-argument callable returning one.
"""

import importlib
import json
import sys
from pathlib import Path
from typing import Any

import click

from ..di.bindings import Binding
from ..di.container import Container
from ..di.tokens import describe_token


def load_container(target: str, app_dir: Path | None = None) -> Container:
    """
    Import and return the container at ``target``.

    Args:
        target: ``module:attribute`` import path
        app_dir: Directory added to ``sys.path`` before importing

    Raises:
        click.ClickException: If the path is malformed, cannot be imported
            or does not name a container
    """
    module_name, sep, attribute = target.partition(":")
    if not sep or not module_name or not attribute:
        raise click.ClickException(f"Expected MODULE:ATTRIBUTE, got {target!r}")

    if app_dir is not None:
        path = str(app_dir.resolve())
        if path not in sys.path:
            sys.path.insert(0, path)

    try:
        module = importlib.import_module(module_name)
    except ImportError as e:
        raise click.ClickException(f"Cannot import module {module_name!r}: {e}") from e

    obj: Any = module
    for part in attribute.split("."):
        try:
            obj = getattr(obj, part)
        except AttributeError as e:
            raise click.ClickException(
                f"Module {module_name!r} has no attribute {attribute!r}"
            ) from e

    if not isinstance(obj, Container) and callable(obj):
        obj = obj()

    if not isinstance(obj, Container):
        raise click.ClickException(
            f"{target} is {type(obj).__name__}, expected a Container"
        )
    return obj


def _binding_row(binding: Binding, level: int) -> dict[str, Any]:
    return {
        "token": describe_token(binding.token),
        "kind": binding.kind.value,
        "scope": binding.scope.value,
        "cached": binding.has_cached_instance,
        "level": level,
    }


def describe_bindings(container: Container, hierarchy: bool = False) -> list[dict[str, Any]]:
    """
    Describe the bindings of ``container``.

    Args:
        container: Container to describe
        hierarchy: Include ancestor bindings; ``level`` counts parents up
            from ``container`` (0)

    Returns:
        One row per binding, nearest container first
    """
    rows: list[dict[str, Any]] = []
    level = 0
    current: Container | None = container
    while current is not None:
        rows.extend(_binding_row(b, level) for b in current.bindings().values())
        if not hierarchy:
            break
        current = current.get_parent()
        level += 1
    return rows


def format_bindings(rows: list[dict[str, Any]], format_type: str) -> str:
    """
    Format binding rows for output.

    Args:
        rows: Rows from :func:`describe_bindings`
        format_type: Output format ('json' or 'pretty')
    """
    if format_type == "json":
        return json.dumps(rows, indent=2, ensure_ascii=False)

    if not rows:
        return "No bindings."

    width = max(len(row["token"]) for row in rows)
    lines = []
    for row in rows:
        cached = " (cached)" if row["cached"] else ""
        prefix = f"[{row['level']}] " if row["level"] else ""
        lines.append(
            f"{prefix}{row['token'].ljust(width)}  {row['kind']:<7}  {row['scope']}{cached}"
        )
    return "\n".join(lines)
