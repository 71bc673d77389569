"""
Unit tests for the dependency resolver.

Tests synchronous and asynchronous resolution, error surfaces and metrics.
"""

import asyncio
from typing import Annotated

import pytest

from scopewire import ContainerOptions
from scopewire.di import (Binding, BindingKind, Container, Inject,
                          InjectionToken, InjectProperty, Scope)
from scopewire.exceptions import (AsyncFactoryError, CircularDependencyError,
                                  MissingBindingPayloadError,
                                  NotConstructibleError, UnboundTokenError)
from scopewire.observability.metrics import get_metrics_collector


class ConsoleLogger:
    def log(self, message: str) -> str:
        return f"[console] {message}"


class Unregistered:
    pass


class TestSynchronousResolve:
    """Test resolve()."""

    def test_value_is_returned_by_identity(self, container):
        config = {"api_url": "https://x", "timeout": 5000}
        container.bind("Config").to_value(config)
        assert container.resolve("Config") is config

    def test_factory_receives_container(self, container):
        received = []
        container.bind("Logger").to_factory(lambda c: received.append(c) or ConsoleLogger())

        container.resolve("Logger")

        assert received == [container]

    def test_factory_can_resolve_other_tokens(self, container):
        container.bind("Prefix").to_value("app")
        container.bind("Name").to_factory(lambda c: f"{c.resolve('Prefix')}-logger")
        assert container.resolve("Name") == "app-logger"

    def test_injection_token(self, container):
        logger_token = InjectionToken("Logger")
        container.bind(logger_token).to_factory(lambda c: ConsoleLogger()).in_singleton_scope()
        assert container.resolve(logger_token) is container.resolve(logger_token)

    def test_unbound_token(self, container):
        with pytest.raises(UnboundTokenError) as exc_info:
            container.resolve("Missing")

        assert exc_info.value.token == "Missing"
        assert "No binding found for token: 'Missing'" in str(exc_info.value)
        assert isinstance(exc_info.value, LookupError)

    def test_factory_error_propagates_unmodified(self, container):
        error = ValueError("database unreachable")

        def factory(c):
            raise error

        container.bind("Database").to_factory(factory)

        with pytest.raises(ValueError) as exc_info:
            container.resolve("Database")

        assert exc_info.value is error

    def test_failed_singleton_is_not_cached(self, container):
        attempts = []

        def flaky(c):
            attempts.append(1)
            if len(attempts) == 1:
                raise ConnectionError("first attempt fails")
            return "connected"

        container.bind("Connection").to_factory(flaky).in_singleton_scope()

        with pytest.raises(ConnectionError):
            container.resolve("Connection")

        assert container.resolve("Connection") == "connected"

    def test_async_factory_rejected_on_sync_path(self, container):
        async def connect(c):
            return "connection"

        container.bind("Database").to_factory(connect)

        with pytest.raises(AsyncFactoryError, match="use resolve_async"):
            container.resolve("Database")

    def test_missing_factory_payload(self, container):
        container.registry.register(Binding(token="Broken", kind=BindingKind.FACTORY))

        with pytest.raises(MissingBindingPayloadError) as exc_info:
            container.resolve("Broken")

        assert str(exc_info.value) == "Factory binding for 'Broken' has no factory function"

    def test_missing_implementation_payload(self, container):
        container.registry.register(Binding(token="Broken", kind=BindingKind.CLASS))

        with pytest.raises(MissingBindingPayloadError, match="has no implementation class"):
            container.resolve("Broken")

    def test_unregistered_class_binding(self, container):
        container.bind(Unregistered).to_self()

        with pytest.raises(NotConstructibleError, match="Unregistered is not registered"):
            container.resolve(Unregistered)


class TestTryResolve:
    """Test try_resolve()."""

    def test_returns_none_for_unbound(self, container):
        assert container.try_resolve("Missing") is None

    def test_returns_default_for_unbound(self, container):
        assert container.try_resolve("Missing", default="fallback") == "fallback"

    def test_swallows_factory_errors(self, container):
        def factory(c):
            raise RuntimeError("boom")

        container.bind("Broken").to_factory(factory)
        assert container.try_resolve("Broken") is None

    def test_returns_value_when_bound(self, container):
        container.bind("Config").to_value({"debug": True})
        assert container.try_resolve("Config") == {"debug": True}

    def test_unhashable_token_returns_default(self, container):
        assert container.try_resolve({"not": "hashable"}, default="fallback") == "fallback"


class TestAsynchronousResolve:
    """Test resolve_async()."""

    @pytest.mark.asyncio
    async def test_awaits_async_factory(self, container):
        async def connect(c):
            await asyncio.sleep(0)
            return "connection"

        container.bind("Database").to_factory(connect)

        assert await container.resolve_async("Database") == "connection"

    @pytest.mark.asyncio
    async def test_sync_factory_and_value(self, container):
        container.bind("Logger").to_factory(lambda c: "logger")
        container.bind("Config").to_value({"debug": True})

        assert await container.resolve_async("Logger") == "logger"
        assert await container.resolve_async("Config") == {"debug": True}

    @pytest.mark.asyncio
    async def test_async_singleton_cached(self, container):
        calls = []

        async def connect(c):
            calls.append(1)
            return object()

        container.bind("Database").to_factory(connect).in_singleton_scope()

        first = await container.resolve_async("Database")
        second = await container.resolve_async("Database")

        assert first is second
        assert len(calls) == 1
        assert container.resolve("Database") is first

    @pytest.mark.asyncio
    async def test_concurrent_async_singleton_first_completion_wins(self, container):
        async def connect(c):
            await asyncio.sleep(0)
            return object()

        container.bind("Database").to_factory(connect).in_singleton_scope()

        results = await asyncio.gather(
            container.resolve_async("Database"), container.resolve_async("Database")
        )

        assert results[0] is results[1]
        assert container.registry.get("Database").cached_instance is results[0]

    @pytest.mark.asyncio
    async def test_async_request_scope(self, container):
        async def open_session(c):
            return object()

        container.bind("Session").to_factory(open_session).in_request_scope()

        with container.request_scope():
            first = await container.resolve_async("Session")
            second = await container.resolve_async("Session")

        assert first is second
        assert await container.resolve_async("Session") is not first

    @pytest.mark.asyncio
    async def test_async_falls_back_to_parent(self, container):
        async def connect(c):
            return "parent-connection"

        container.bind("Database").to_factory(connect)
        child = container.create_child_container()

        assert await child.resolve_async("Database") == "parent-connection"

    @pytest.mark.asyncio
    async def test_async_unbound(self, container):
        with pytest.raises(UnboundTokenError):
            await container.resolve_async("Missing")

    @pytest.mark.asyncio
    async def test_async_factory_error_propagates(self, container):
        async def connect(c):
            raise TimeoutError("connect timeout")

        container.bind("Database").to_factory(connect)

        with pytest.raises(TimeoutError, match="connect timeout"):
            await container.resolve_async("Database")

    @pytest.mark.asyncio
    async def test_async_class_constructor_cycle_detected(self, container, registry):
        class Left:
            def __init__(self, right: Annotated[object, Inject("Right")]):
                self.right = right

        registry.register(Left)
        container.bind("Right").to_factory(lambda c: c.resolve(Left))

        with pytest.raises(CircularDependencyError):
            await container.resolve_async(Left)

    @pytest.mark.asyncio
    async def test_async_singleton_property_refers_back(self, container, registry):
        class Bus:
            owner = InjectProperty("Bus")

        registry.register(Bus, scope=Scope.SINGLETON)
        container.bind("Bus").to_factory(lambda c: c.resolve(Bus))

        bus = await container.resolve_async(Bus)

        assert bus.owner is bus


class TestResolveMetrics:
    """Test metrics recorded by top-level resolves."""

    def test_top_level_resolve_recorded_once(self, container, registry):
        class Service:
            def __init__(self, logger: ConsoleLogger):
                self.logger = logger

        registry.register(ConsoleLogger)
        registry.register(Service)
        container.bind(Service).to_self()

        container.resolve(Service)

        assert get_metrics_collector().get_operation_count("container.resolve") == 1

    def test_failure_recorded(self, container):
        with pytest.raises(UnboundTokenError):
            container.resolve("Missing")

        summary = get_metrics_collector().get_summary()["summary"]
        assert summary["container.resolve"]["error_count"] == 1

    def test_container_name_tag(self, container):
        container.bind("Config").to_value({})
        container.resolve("Config")

        metrics = get_metrics_collector().get_metrics("container.resolve")["metrics"]
        assert "container.resolve[container=test]" in metrics

    def test_metrics_disabled(self, registry):
        quiet = Container(ContainerOptions(record_metrics=False), descriptors=registry)
        quiet.bind("Config").to_value({})

        quiet.resolve("Config")

        assert get_metrics_collector().get_operation_count("container.resolve") == 0

    @pytest.mark.asyncio
    async def test_async_resolve_recorded_once_through_parent(self, container):
        container.bind("Config").to_value({})
        child = container.create_child_container()

        await child.resolve_async("Config")

        collector = get_metrics_collector()
        assert collector.get_operation_count("container.resolve_async") == 1


class TestValueScope:
    """Value bindings are singletons."""

    def test_value_binding_scope(self, container):
        assert container.bind("Config").to_value(1).scope == Scope.SINGLETON
