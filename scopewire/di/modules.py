"""
Container modules: reusable groups of bindings.

    database_module = ContainerModule(
        lambda c: c.bind(Database).to_class(PostgresDatabase).in_singleton_scope()
    )
    container.load_module(database_module)
"""

from collections.abc import Awaitable, Callable
from typing import TYPE_CHECKING, Any

from ..constants import METRIC_LOAD_MODULE
from ..observability.metrics import timed_operation

if TYPE_CHECKING:
    from .container import Container

ContainerModuleCallback = Callable[["Container"], Any]
AsyncContainerModuleCallback = Callable[["Container"], Awaitable[Any]]


class ContainerModule:
    """A collection of bindings applied to a container by ``load``."""

    def __init__(self, callback: ContainerModuleCallback) -> None:
        self._callback = callback

    @timed_operation(METRIC_LOAD_MODULE)
    def load(self, container: "Container") -> None:
        self._callback(container)


class ConditionalModule(ContainerModule):
    """A module that only loads when ``condition()`` is true at load time."""

    def __init__(self, condition: Callable[[], bool], callback: ContainerModuleCallback) -> None:
        super().__init__(callback)
        self._condition = condition

    def load(self, container: "Container") -> None:
        if self._condition():
            super().load(container)


class AsyncContainerModule:
    """A module whose bindings are applied by an async callback."""

    def __init__(self, callback: AsyncContainerModuleCallback) -> None:
        self._callback = callback

    @timed_operation(METRIC_LOAD_MODULE, kind="async")
    async def load(self, container: "Container") -> None:
        await self._callback(container)
