"""
Binding model.

A binding is the registered recipe for producing an instance for a token:
a literal value, a factory ``(container) -> instance`` (possibly returning an
awaitable) or a class constructed through the descriptor provider.
"""

import threading
from collections.abc import Callable
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from .scopes import Scope


class BindingKind(str, Enum):
    """How a binding produces its instance."""

    VALUE = "value"
    FACTORY = "factory"
    CLASS = "class"


class _NotSet:
    """Marker for an empty singleton cache slot (``None`` is a valid instance)."""

    _instance = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "NOT_SET"

    def __bool__(self) -> bool:
        return False


NOT_SET = _NotSet()


@dataclass(eq=False)
class Binding:
    """
    Registered recipe for a token.

    Bindings hash by identity so they can key request-scope caches.
    """

    token: Any
    kind: BindingKind
    scope: Scope = Scope.TRANSIENT
    value: Any = None
    factory: Callable[..., Any] | None = None
    implementation: type | None = None
    cached_instance: Any = field(default=NOT_SET, repr=False)
    lock: threading.RLock = field(default_factory=threading.RLock, repr=False)

    @property
    def has_cached_instance(self) -> bool:
        return self.cached_instance is not NOT_SET

    def clear_cache(self) -> None:
        """Forget the cached singleton instance."""
        self.cached_instance = NOT_SET
