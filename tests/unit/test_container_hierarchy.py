"""
Unit tests for the container hierarchy.

Tests closest-binding-wins lookup, non-destructive overrides and the
global container.
"""

import pytest

from scopewire import ContainerOptions
from scopewire.di import Container, Scope
from scopewire.exceptions import UnboundTokenError


class Clock:
    pass


class Scheduler:
    def __init__(self, clock: Clock):
        self.clock = clock


class TestChildContainers:
    """Test parent fall-through and overrides."""

    def test_child_resolves_parent_binding(self, container):
        container.bind("Config").to_value({"env": "prod"})
        child = container.create_child_container()

        assert child.resolve("Config") == {"env": "prod"}

    def test_closest_binding_wins(self, container):
        container.bind("Config").to_value({"env": "prod"})
        child = container.create_child_container()
        child.bind("Config").to_value({"env": "test"})

        assert child.resolve("Config") == {"env": "test"}
        assert container.resolve("Config") == {"env": "prod"}

    def test_unbind_in_child_restores_parent_value(self, container):
        container.bind("Config").to_value({"env": "prod"})
        child = container.create_child_container()
        child.bind("Config").to_value({"env": "test"})

        child.unbind("Config")

        assert child.resolve("Config") == {"env": "prod"}
        assert container.is_bound("Config")

    def test_rebind_in_child_does_not_touch_parent(self, container):
        parent_binding = container.bind("Config").to_value({"env": "prod"})
        child = container.create_child_container()

        child.rebind("Config").to_value({"env": "staging"})

        assert container.registry.get("Config") is parent_binding
        assert child.resolve("Config") == {"env": "staging"}

    def test_parent_singleton_shared_through_children(self, container):
        container.bind("Pool").to_factory(lambda c: object()).in_singleton_scope()
        first_child = container.create_child_container()
        second_child = container.create_child_container()

        assert first_child.resolve("Pool") is second_child.resolve("Pool")
        assert first_child.resolve("Pool") is container.resolve("Pool")

    def test_child_singleton_is_separate(self, container):
        container.bind("Pool").to_factory(lambda c: object()).in_singleton_scope()
        child = container.create_child_container()
        child.bind("Pool").to_factory(lambda c: object()).in_singleton_scope()

        assert child.resolve("Pool") is not container.resolve("Pool")

    def test_parent_binding_resolves_in_parent(self, container, registry):
        """A binding owned by the parent is materialized by the parent."""
        registry.register(Scheduler)
        container.bind(Clock).to_factory(lambda c: "parent-clock")
        container.bind(Scheduler).to_self()
        child = container.create_child_container()
        child.bind(Clock).to_factory(lambda c: "child-clock")

        assert child.resolve(Scheduler).clock == "parent-clock"

    def test_arbitrary_depth(self, container):
        container.bind("Level").to_value(0)
        container.bind("Root").to_value("root")
        current = container
        for depth in range(1, 5):
            current = current.create_child_container()
            current.bind("Level").to_value(depth)

        assert current.resolve("Level") == 4
        assert current.resolve("Root") == "root"

        current.unbind("Level")
        assert current.resolve("Level") == 3

    def test_unbound_everywhere(self, container):
        child = container.create_child_container()
        with pytest.raises(UnboundTokenError):
            child.resolve("Missing")


class TestContainerQueries:
    """Test is_bound, parent access and options sharing."""

    def test_is_bound_recursive(self, container):
        container.bind("Config").to_value({})
        grandchild = container.create_child_container().create_child_container()

        assert grandchild.is_bound("Config")
        assert "Config" in grandchild
        assert not grandchild.is_bound("Missing")

    def test_get_parent(self, container):
        child = container.create_child_container(name="child")

        assert child.get_parent() is container
        assert child.parent is container
        assert container.get_parent() is None
        assert child.name == "child"

    def test_child_shares_options_and_descriptors(self, registry):
        options = ContainerOptions(auto_resolve=False, default_scope=Scope.TRANSIENT)
        root = Container(options, descriptors=registry)
        child = root.create_child_container()

        assert child.options is options
        assert child.descriptors is registry

    def test_unbind_missing_is_noop(self, container):
        container.unbind("Missing")
        assert not container.is_bound("Missing")

    def test_rebind_clears_singleton(self, container):
        container.bind("Pool").to_factory(lambda c: object()).in_singleton_scope()
        first = container.resolve("Pool")

        container.rebind("Pool").to_factory(lambda c: object()).in_singleton_scope()

        assert container.resolve("Pool") is not first

    def test_bindings_snapshot_is_local(self, container):
        container.bind("Config").to_value({})
        child = container.create_child_container()
        child.bind("Logger").to_value("logger")

        assert set(child.bindings()) == {"Logger"}

    def test_repr(self, container):
        container.bind("Config").to_value({})
        assert repr(container) == "<Container 'test' bindings=1>"


class TestGlobalContainer:
    """Test the process-wide convenience container."""

    def test_get_global_is_stable(self):
        assert Container.get_global() is Container.get_global()

    def test_set_global(self, container):
        Container.set_global(container)
        assert Container.get_global() is container

    def test_reset_global(self):
        first = Container.get_global()
        Container.reset_global()
        assert Container.get_global() is not first
