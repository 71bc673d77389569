"""
Binding Scopes

Defines binding lifetimes:
- SINGLETON: Created once per owning container, shared afterwards
- TRANSIENT: Created fresh on every resolve
- REQUEST: Created once per resolution tree (or explicit request scope)
"""

import logging
from collections.abc import Iterator
from contextlib import contextmanager
from contextvars import ContextVar
from enum import Enum
from typing import Any

logger = logging.getLogger(__name__)

# Context variable for request-scoped instances, keyed by binding
_request_scope: ContextVar[dict[Any, Any] | None] = ContextVar(
    "scopewire_request_scope", default=None
)


class Scope(str, Enum):
    """
    Binding lifetime scopes.

    SINGLETON: One instance per binding, cached on the owning container.
               Use for: configuration, connection pools, caches.

    TRANSIENT: New instance created every time it's resolved.
               Use for: stateless services, utilities.

    REQUEST: One instance per resolution tree. Every dependent that asks
             for the token while the same top-level resolve is running
             receives the same instance.
             Use for: unit of work, request context.
    """

    SINGLETON = "singleton"
    TRANSIENT = "transient"
    REQUEST = "request"


class ScopeManager:
    """
    Manages request-scoped instance lifecycles.

    A request scope is opened implicitly by every top-level resolve and
    explicitly by ``Container.request_scope()`` or the FastAPI middleware:

        with container.request_scope():
            a = container.resolve(UnitOfWork)
            b = container.resolve(UnitOfWork)  # same instance as ``a``
    """

    @classmethod
    def get_request_scope(cls) -> dict[Any, Any] | None:
        """Get the current request scope dictionary."""
        return _request_scope.get()

    @classmethod
    def store(cls, key: Any, instance: Any) -> Any:
        """Store an instance unless one is already cached, returning the cached one."""
        scope_dict = _request_scope.get()
        if scope_dict is None:
            raise RuntimeError("No active request scope.")
        return scope_dict.setdefault(key, instance)

    @classmethod
    def lookup(cls, key: Any) -> tuple[bool, Any]:
        """Return ``(found, instance)`` for ``key`` in the active request scope."""
        scope_dict = _request_scope.get()
        if scope_dict is None or key not in scope_dict:
            return False, None
        return True, scope_dict[key]

    @classmethod
    def discard(cls, key: Any) -> None:
        """Drop ``key`` from the active request scope without disposing it."""
        scope_dict = _request_scope.get()
        if scope_dict is not None:
            scope_dict.pop(key, None)

    @classmethod
    @contextmanager
    def resolution_tree(cls) -> Iterator[dict[Any, Any]]:
        """
        Join the active request scope, or open one for the duration of the block.

        Scopes opened here are discarded without disposal; only explicit
        request scopes dispose their instances.
        """
        scope_dict = _request_scope.get()
        if scope_dict is not None:
            yield scope_dict
            return

        reset_token = _request_scope.set({})
        try:
            yield _request_scope.get()
        finally:
            _request_scope.reset(reset_token)

    @classmethod
    @contextmanager
    def request(cls) -> Iterator[dict[Any, Any]]:
        """Open an explicit request scope that disposes its instances on exit."""
        reset_token = _request_scope.set({})
        try:
            yield _request_scope.get()
        finally:
            scope_dict = _request_scope.get()
            _request_scope.reset(reset_token)
            if scope_dict:
                _dispose_all(scope_dict)
            logger.debug("Request scope ended")


def _dispose_all(scope_dict: dict[Any, Any]) -> None:
    for instance in scope_dict.values():
        if hasattr(instance, "dispose"):
            try:
                instance.dispose()
            except (AttributeError, RuntimeError, TypeError) as e:
                logger.warning(f"Error disposing {type(instance).__name__}: {e}")
    scope_dict.clear()
