"""
Fluent binding configuration.

    container.bind("Config").to_value({"api_url": "https://x"})
    container.bind(LOGGER).to_factory(lambda c: ConsoleLogger()).in_singleton_scope()
    container.bind(UserService).to_class(UserService).in_request_scope()

Class and factory bindings are registered as transient as soon as
``to_class``/``to_factory`` is called; the scope selector only changes the
scope of the registered binding. Nothing is validated here: an incomplete
binding fails when it is resolved.
"""

import logging
from collections.abc import Callable
from typing import Any, Generic, TypeVar

from .bindings import Binding, BindingKind
from .registry import BindingRegistry
from .scopes import Scope
from .tokens import describe_token

logger = logging.getLogger(__name__)

T = TypeVar("T")


class ScopeBuilder(Generic[T]):
    """Selects the scope of a registered binding."""

    def __init__(self, binding: Binding) -> None:
        self._binding = binding

    @property
    def binding(self) -> Binding:
        return self._binding

    def in_scope(self, scope: Scope) -> Binding:
        """Use the given scope and return the binding."""
        self._binding.scope = Scope(scope)
        self._binding.clear_cache()
        logger.debug(
            f"Scope of {describe_token(self._binding.token)} set to {self._binding.scope.value}"
        )
        return self._binding

    def in_singleton_scope(self) -> Binding:
        """Use singleton scope (one instance per container)."""
        return self.in_scope(Scope.SINGLETON)

    def in_transient_scope(self) -> Binding:
        """Use transient scope (new instance each time)."""
        return self.in_scope(Scope.TRANSIENT)

    def in_request_scope(self) -> Binding:
        """Use request scope (one instance per resolution tree)."""
        return self.in_scope(Scope.REQUEST)


class BindingBuilder(Generic[T]):
    """Chooses what a token is bound to."""

    def __init__(self, registry: BindingRegistry, token: Any) -> None:
        self._registry = registry
        self._token = token

    def to_class(self, implementation: type[T]) -> ScopeBuilder[T]:
        """Bind to a class constructed with its declared dependencies."""
        binding = Binding(
            token=self._token, kind=BindingKind.CLASS, implementation=implementation
        )
        self._registry.register(binding)
        return ScopeBuilder(binding)

    def to_self(self) -> ScopeBuilder[T]:
        """Bind a class token to itself."""
        return self.to_class(self._token)

    def to_value(self, value: T) -> Binding:
        """Bind to a literal value. Registered immediately."""
        binding = Binding(
            token=self._token, kind=BindingKind.VALUE, scope=Scope.SINGLETON, value=value
        )
        self._registry.register(binding)
        return binding

    def to_factory(self, factory: Callable[[Any], Any]) -> ScopeBuilder[T]:
        """Bind to a factory receiving the container; it may return an awaitable."""
        binding = Binding(token=self._token, kind=BindingKind.FACTORY, factory=factory)
        self._registry.register(binding)
        return ScopeBuilder(binding)
