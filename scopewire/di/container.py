"""
Dependency Injection Container

A container holds a binding registry and an optional parent. Lookups fall
through to the parent when a token is unbound locally, so the closest
binding wins and child overrides never touch the parent.
"""

import logging
import threading
from collections.abc import Iterable, Iterator
from contextlib import contextmanager
from typing import Any, Optional, TypeVar

from ..config import ContainerOptions
from ..exceptions import CircularDependencyError
from .bindings import Binding
from .builder import BindingBuilder
from .descriptors import DescriptorProvider, DescriptorRegistry, default_registry
from .instance import InstanceCreator
from .modules import AsyncContainerModule, ContainerModule
from .registry import BindingRegistry
from .resolver import DependencyResolver
from .scopes import Scope, ScopeManager
from .tokens import describe_token

logger = logging.getLogger(__name__)

T = TypeVar("T")


class Container:
    """
    Dependency Injection Container with hierarchical lookup.

    Supports three scopes:
    - SINGLETON: One instance per binding (cached on the owning container)
    - TRANSIENT: New instance on every resolve
    - REQUEST: One instance per resolution tree

    Usage:
        container = Container()

        container.bind("Config").to_value({"api_url": "https://x", "timeout": 5000})
        container.bind(LOGGER).to_factory(lambda c: ConsoleLogger()).in_singleton_scope()
        container.bind(UserService).to_class(UserService).in_transient_scope()

        service = container.resolve(UserService)

        # Scoped overrides
        child = container.create_child_container()
        child.bind("Config").to_value(test_config)
    """

    _global_instance: Optional["Container"] = None

    def __init__(
        self,
        options: ContainerOptions | None = None,
        *,
        descriptors: DescriptorProvider | None = None,
        name: str | None = None,
    ) -> None:
        """
        Initialize a root container.

        Args:
            options: Container options (defaults to ``ContainerOptions()``)
            descriptors: Dependency descriptor provider (defaults to the
                process-wide ``default_registry``)
            name: Optional name used in logs and the CLI
        """
        self._options = options or ContainerOptions()
        self._descriptors = descriptors if descriptors is not None else default_registry
        self._parent: Container | None = None
        self.name = name
        self._registry = BindingRegistry()
        self._auto_register_lock = threading.Lock()
        self._resolver = DependencyResolver(
            self, self._registry, InstanceCreator(self, self._descriptors)
        )

    # ------------------------------------------------------------------
    # Global instance
    # ------------------------------------------------------------------

    @classmethod
    def get_global(cls) -> "Container":
        """Get the global container instance, creating it on first use."""
        if cls._global_instance is None:
            cls._global_instance = Container(name="global")
        return cls._global_instance

    @classmethod
    def set_global(cls, container: "Container") -> None:
        """Set the global container instance."""
        cls._global_instance = container

    @classmethod
    def reset_global(cls) -> None:
        """Reset the global container (useful for testing)."""
        cls._global_instance = None

    # ------------------------------------------------------------------
    # Properties
    # ------------------------------------------------------------------

    @property
    def options(self) -> ContainerOptions:
        return self._options

    @property
    def descriptors(self) -> DescriptorProvider:
        return self._descriptors

    @property
    def registry(self) -> BindingRegistry:
        """The container-local binding registry."""
        return self._registry

    @property
    def parent(self) -> Optional["Container"]:
        return self._parent

    def get_parent(self) -> Optional["Container"]:
        """Get the parent container, or None for a root container."""
        return self._parent

    # ------------------------------------------------------------------
    # Binding
    # ------------------------------------------------------------------

    def bind(self, token: Any) -> BindingBuilder:
        """
        Start a binding for ``token``.

        Returns:
            Builder exposing ``to_value``, ``to_factory`` and ``to_class``
        """
        return BindingBuilder(self._registry, token)

    def unbind(self, token: Any) -> None:
        """Remove the local binding for ``token``. Parent bindings are untouched."""
        if self._registry.remove(token) is None:
            logger.debug(f"unbind({describe_token(token)}): not bound in this container")

    def rebind(self, token: Any) -> BindingBuilder:
        """Unbind ``token`` and start a new binding for it."""
        self.unbind(token)
        return self.bind(token)

    def is_bound(self, token: Any) -> bool:
        """Check if a token is bound in this container or any ancestor."""
        if self._registry.has(token):
            return True
        return self._parent is not None and self._parent.is_bound(token)

    def bindings(self) -> dict[Any, Binding]:
        """Snapshot of the bindings registered in this container only."""
        return self._registry.all()

    def __contains__(self, token: Any) -> bool:
        """Support 'in' operator for checking bindings."""
        return self.is_bound(token)

    # ------------------------------------------------------------------
    # Resolution
    # ------------------------------------------------------------------

    def resolve(self, token: Any) -> Any:
        """
        Resolve an instance for ``token``.

        Raises:
            UnboundTokenError: If no binding exists anywhere in the chain
            CircularDependencyError: If ``token`` is already being resolved
            NotConstructibleError: If a class binding has no descriptor
            MissingBindingPayloadError: If a binding lacks its payload
            DependencyResolutionError: If a constructor dependency fails
        """
        self._auto_register_if_needed(token)
        return self._resolver.resolve(token)

    def try_resolve(self, token: Any, default: Any = None) -> Any:
        """Resolve ``token``, returning ``default`` instead of raising."""
        try:
            return self.resolve(token)
        except Exception as e:
            logger.debug(f"try_resolve({describe_token(token)}) returned default: {e}")
            return default

    async def resolve_async(self, token: Any) -> Any:
        """
        Resolve ``token``, awaiting factories that return awaitables.

        Unlike ``resolve`` this entry point does not check for cycles.
        """
        self._auto_register_if_needed(token)
        return await self._resolver.resolve_async(token)

    def resolve_optional(self, token: Any) -> tuple[bool, Any]:
        """
        Resolve ``token``, reporting failure as ``(False, None)``.

        A failing factory counts as absent too. Circular dependencies are
        re-raised.
        """
        try:
            self._auto_register_if_needed(token)
            if not self.is_bound(token):
                return False, None
            return True, self._resolver.resolve(token)
        except CircularDependencyError:
            raise
        except Exception as e:
            logger.debug(f"Optional dependency {describe_token(token)} unavailable: {e}")
            return False, None

    @contextmanager
    def request_scope(self) -> Iterator[dict[Any, Any]]:
        """
        Share request-scoped instances across every resolve in the block.

        Instances with a ``dispose()`` method are disposed on exit.
        """
        with ScopeManager.request() as scope_dict:
            yield scope_dict

    # ------------------------------------------------------------------
    # Hierarchy
    # ------------------------------------------------------------------

    def create_child_container(self, name: str | None = None) -> "Container":
        """Create a child sharing this container's options and descriptor provider."""
        child = Container(self._options, descriptors=self._descriptors, name=name)
        child._parent = self
        return child

    # ------------------------------------------------------------------
    # Modules
    # ------------------------------------------------------------------

    def load_module(self, module: ContainerModule) -> None:
        module.load(self)

    def load_modules(self, modules: Iterable[ContainerModule]) -> None:
        for module in modules:
            self.load_module(module)

    async def load_async_module(self, module: AsyncContainerModule) -> None:
        await module.load(self)

    async def load_async_modules(self, modules: Iterable[AsyncContainerModule]) -> None:
        for module in modules:
            await self.load_async_module(module)

    # ------------------------------------------------------------------
    # Auto-registration
    # ------------------------------------------------------------------

    def auto_register_all(self) -> None:
        """Bind every known injectable class and token mapping not bound yet."""
        registry = self._require_registry()
        if registry is None:
            return

        for cls, options in registry.injectables().items():
            if not self.is_bound(cls):
                self._bind_injectable(cls, cls, options.scope)

        for token, implementation in registry.token_mappings().items():
            if not self.is_bound(token):
                options = registry.get_options(implementation)
                self._bind_injectable(token, implementation, options.scope if options else None)

    def _auto_register_if_needed(self, token: Any) -> bool:
        if not self._options.auto_resolve or self.is_bound(token):
            return False

        registry = self._require_registry()
        if registry is None:
            return False

        with self._auto_register_lock:
            # Another thread may have bound it while we waited
            if self.is_bound(token):
                return False
            return self._auto_register_from(registry, token)

    def _auto_register_from(self, registry: DescriptorRegistry, token: Any) -> bool:
        if registry.is_constructible(token):
            options = registry.get_options(token)
            self._bind_injectable(token, token, options.scope if options else None)
            return True

        implementation = registry.implementation_for(token)
        if implementation is not None:
            options = registry.get_options(implementation)
            self._bind_injectable(token, implementation, options.scope if options else None)
            return True

        return False

    def _bind_injectable(self, token: Any, implementation: type, scope: Scope | None) -> None:
        self.bind(token).to_class(implementation).in_scope(scope or self._options.default_scope)
        logger.debug(f"Auto-registered {describe_token(token)} -> {implementation.__qualname__}")

    def _require_registry(self) -> DescriptorRegistry | None:
        # Auto-registration needs the registry's enumeration, not just the provider protocol
        if isinstance(self._descriptors, DescriptorRegistry):
            return self._descriptors
        return None

    def __repr__(self) -> str:
        label = f" {self.name!r}" if self.name else ""
        return f"<Container{label} bindings={len(self._registry)}>"
