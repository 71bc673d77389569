"""
Fixtures for CLI tests.

Writes a throwaway wiring module to a temporary directory so commands can
import it with ``--app-dir``.
"""

import sys
import textwrap
import uuid

import pytest

WIRING_SOURCE = textwrap.dedent(
    """
    from scopewire import Container

    container = Container(name="wiring")
    container.bind("Config").to_value({"debug": True})
    container.bind("Clock").to_factory(lambda c: "system clock").in_singleton_scope()
    container.bind("Broken").to_factory(lambda c: c.resolve("Missing"))
    container.resolve("Config")

    child = container.create_child_container(name="child")
    child.bind("Config").to_value({"debug": False})

    empty = Container(name="empty")


    def build():
        return child


    not_a_container = 42
    """
)


@pytest.fixture
def wiring_module(tmp_path, monkeypatch):
    """Write the wiring module and return its importable name."""
    monkeypatch.setattr(sys, "path", list(sys.path))
    module_name = f"wiring_{uuid.uuid4().hex}"
    (tmp_path / f"{module_name}.py").write_text(WIRING_SOURCE)
    yield module_name
    sys.modules.pop(module_name, None)
