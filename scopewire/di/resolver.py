"""
Dependency Resolver

Orchestrates lookup, cycle detection, instance materialization and scope
caching for one container.

Class bindings that cache their instance (singleton and request scope) are
cached before their properties are injected, outside the cycle guard, so a
property may refer back to its owner. Transient class bindings inject their
properties while still guarded.

The asynchronous path does not run the cycle guard: it is meant for
factory-backed leaves, and only its top-level factory may be awaited.
Constructor dependencies of class bindings are still resolved through the
synchronous path, which does guard against cycles.
"""

import inspect
import time
from typing import TYPE_CHECKING, Any

from ..constants import METRIC_RESOLVE, METRIC_RESOLVE_ASYNC
from ..exceptions import (AsyncFactoryError, MissingBindingPayloadError,
                          UnboundTokenError)
from ..observability.logging import get_logger, log_operation, resolution_context
from ..observability.metrics import record_operation
from .bindings import Binding, BindingKind
from .cycles import ResolutionStack, resolution_stack
from .instance import InstanceCreator
from .registry import BindingRegistry
from .scopes import Scope, ScopeManager
from .tokens import describe_token

if TYPE_CHECKING:
    from .container import Container

logger = get_logger(__name__)


class DependencyResolver:
    """Resolves tokens for a single container, delegating to its parent when unbound."""

    def __init__(
        self,
        container: "Container",
        registry: BindingRegistry,
        instance_creator: InstanceCreator,
    ) -> None:
        self._container = container
        self._registry = registry
        self._instance_creator = instance_creator

    # ------------------------------------------------------------------
    # Synchronous path
    # ------------------------------------------------------------------

    def resolve(self, token: Any) -> Any:
        with resolution_stack() as (stack, is_root):
            if not is_root:
                return self._resolve_guarded(token, stack)

            start_time = time.time()
            success = True
            try:
                with self._root_context(token), ScopeManager.resolution_tree():
                    return self._resolve_guarded(token, stack)
            except Exception:
                success = False
                raise
            finally:
                self._record(METRIC_RESOLVE, token, start_time, success)

    def _resolve_guarded(self, token: Any, stack: ResolutionStack) -> Any:
        stack.check_cycle(token)

        binding = self._registry.get(token)
        if binding is None:
            parent = self._container.get_parent()
            if parent is not None:
                return parent.resolve(token)
            raise UnboundTokenError(token)

        if binding.scope == Scope.SINGLETON and binding.has_cached_instance:
            return binding.cached_instance

        with stack.guard(token):
            instance, created = self._apply_scope(binding)

        if created and _caches_before_properties(binding):
            self._inject_cached_properties(binding, instance)
        return instance

    def _apply_scope(self, binding: Binding) -> tuple[Any, bool]:
        """Return ``(instance, created)`` for the binding's scope."""
        if binding.scope == Scope.SINGLETON:
            with binding.lock:
                if binding.has_cached_instance:
                    return binding.cached_instance, False
                instance = self._materialize(binding)
                binding.cached_instance = instance
                logger.debug(f"Created singleton: {describe_token(binding.token)}")
                return instance, True

        if binding.scope == Scope.REQUEST:
            found, instance = ScopeManager.lookup(binding)
            if found:
                return instance, False
            return ScopeManager.store(binding, self._materialize(binding)), True

        return self._materialize(binding), True

    def _materialize(self, binding: Binding) -> Any:
        if binding.kind == BindingKind.VALUE:
            return binding.value

        if binding.kind == BindingKind.FACTORY:
            factory = self._require_factory(binding)
            result = factory(self._container)
            if inspect.isawaitable(result):
                if inspect.iscoroutine(result):
                    result.close()
                raise AsyncFactoryError(binding.token)
            return result

        if binding.kind == BindingKind.CLASS:
            implementation = self._require_implementation(binding)
            if _caches_before_properties(binding):
                return self._instance_creator.construct(implementation)
            return self._instance_creator.create_instance(implementation)

        raise MissingBindingPayloadError(binding.token, binding.kind, "known binding kind")

    def _inject_cached_properties(self, binding: Binding, instance: Any) -> None:
        try:
            self._instance_creator.inject_properties(binding.implementation, instance)
        except Exception:
            # Never leave a half-injected instance in a cache
            if binding.scope == Scope.SINGLETON:
                with binding.lock:
                    if binding.cached_instance is instance:
                        binding.clear_cache()
            else:
                ScopeManager.discard(binding)
            raise

    # ------------------------------------------------------------------
    # Asynchronous path
    # ------------------------------------------------------------------

    async def resolve_async(self, token: Any) -> Any:
        start_time = time.time()
        success = True
        try:
            with self._root_context(token), ScopeManager.resolution_tree():
                return await self._resolve_async_unguarded(token)
        except Exception:
            success = False
            raise
        finally:
            self._record(METRIC_RESOLVE_ASYNC, token, start_time, success)

    async def _resolve_async_unguarded(self, token: Any) -> Any:
        binding = self._registry.get(token)
        if binding is None:
            parent = self._container.get_parent()
            if parent is not None:
                # Skip the parent's entry point so only the top-level call is timed
                return await parent._resolver._resolve_async_unguarded(token)
            raise UnboundTokenError(token)

        if binding.scope == Scope.SINGLETON and binding.has_cached_instance:
            return binding.cached_instance

        if binding.scope == Scope.REQUEST:
            found, instance = ScopeManager.lookup(binding)
            if found:
                return instance

        instance = await self._materialize_async(binding)

        if binding.scope == Scope.SINGLETON:
            with binding.lock:
                # First completed instance wins
                if binding.has_cached_instance:
                    return binding.cached_instance
                binding.cached_instance = instance
                logger.debug(f"Created singleton: {describe_token(binding.token)}")
        elif binding.scope == Scope.REQUEST:
            cached = ScopeManager.store(binding, instance)
            if cached is not instance:
                return cached

        if _caches_before_properties(binding):
            with resolution_stack():
                self._inject_cached_properties(binding, instance)
        return instance

    async def _materialize_async(self, binding: Binding) -> Any:
        if binding.kind == BindingKind.FACTORY:
            factory = self._require_factory(binding)
            result = factory(self._container)
            if inspect.isawaitable(result):
                result = await result
            return result

        if binding.kind == BindingKind.VALUE:
            return binding.value

        if binding.kind == BindingKind.CLASS:
            # Constructor dependencies share one stack, so they are cycle checked
            with resolution_stack():
                return self._materialize(binding)

        raise MissingBindingPayloadError(binding.token, binding.kind, "known binding kind")

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    @staticmethod
    def _require_factory(binding: Binding):
        if binding.factory is None or not callable(binding.factory):
            raise MissingBindingPayloadError(binding.token, binding.kind, "factory function")
        return binding.factory

    @staticmethod
    def _require_implementation(binding: Binding) -> type:
        if binding.implementation is None:
            raise MissingBindingPayloadError(
                binding.token, binding.kind, "implementation class"
            )
        return binding.implementation

    def _root_context(self, token: Any):
        return resolution_context(self._container.name, token=describe_token(token))

    def _record(self, operation: str, token: Any, start_time: float, success: bool) -> None:
        duration_ms = (time.time() - start_time) * 1000
        log_operation(
            logger, operation, token=describe_token(token), success=success, duration_ms=duration_ms
        )
        if not self._container.options.record_metrics:
            return
        if self._container.name:
            record_operation(operation, duration_ms, success, container=self._container.name)
        else:
            record_operation(operation, duration_ms, success)


def _caches_before_properties(binding: Binding) -> bool:
    return binding.kind == BindingKind.CLASS and binding.scope != Scope.TRANSIENT
