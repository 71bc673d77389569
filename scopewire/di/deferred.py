"""
Deferred references.

A ``DeferredReference`` stands in for a dependency whose resolution would
otherwise recurse into a cycle. Nothing is resolved when it is created; the
first attribute read, write or delete (or call, iteration, etc.) resolves the
target token through the owning container and caches the instance on the
reference itself. Resolution errors surface at that first access.
"""

import logging
import threading
from typing import TYPE_CHECKING, Any

from .bindings import NOT_SET
from .tokens import describe_token

if TYPE_CHECKING:
    from .container import Container

logger = logging.getLogger(__name__)


class DeferredReference:
    """Lazily resolving proxy for ``target_token``."""

    # Prefixed so attributes of the target are not shadowed by the proxy's own
    __slots__ = ("_deferred_container", "_deferred_token", "_deferred_instance", "_deferred_lock")

    def __init__(self, container: "Container", target_token: Any) -> None:
        object.__setattr__(self, "_deferred_container", container)
        object.__setattr__(self, "_deferred_token", target_token)
        object.__setattr__(self, "_deferred_instance", NOT_SET)
        object.__setattr__(self, "_deferred_lock", threading.RLock())

    def __getattr__(self, name: str) -> Any:
        return getattr(_resolve(self), name)

    def __setattr__(self, name: str, value: Any) -> None:
        setattr(_resolve(self), name, value)

    def __delattr__(self, name: str) -> None:
        delattr(_resolve(self), name)

    def __call__(self, *args: Any, **kwargs: Any) -> Any:
        return _resolve(self)(*args, **kwargs)

    def __getitem__(self, key: Any) -> Any:
        return _resolve(self)[key]

    def __setitem__(self, key: Any, value: Any) -> None:
        _resolve(self)[key] = value

    def __delitem__(self, key: Any) -> None:
        del _resolve(self)[key]

    def __contains__(self, item: Any) -> bool:
        return item in _resolve(self)

    def __iter__(self):
        return iter(_resolve(self))

    def __len__(self) -> int:
        return len(_resolve(self))

    def __bool__(self) -> bool:
        return bool(_resolve(self))

    def __str__(self) -> str:
        return str(_resolve(self))

    def __repr__(self) -> str:
        token = object.__getattribute__(self, "_deferred_token")
        instance = object.__getattribute__(self, "_deferred_instance")
        if instance is NOT_SET:
            return f"DeferredReference({describe_token(token)}, unresolved)"
        return f"DeferredReference({describe_token(token)}, {instance!r})"


def is_deferred(value: Any) -> bool:
    """Tell whether ``value`` is a deferred reference, without resolving it."""
    return type(value) is DeferredReference


def is_resolved(reference: DeferredReference) -> bool:
    """Tell whether a deferred reference has resolved its target yet."""
    return object.__getattribute__(reference, "_deferred_instance") is not NOT_SET


def unwrap(value: Any) -> Any:
    """Return the real instance behind a deferred reference (resolving it if needed)."""
    if is_deferred(value):
        return _resolve(value)
    return value


def _resolve(reference: DeferredReference) -> Any:
    instance = object.__getattribute__(reference, "_deferred_instance")
    if instance is not NOT_SET:
        return instance

    with object.__getattribute__(reference, "_deferred_lock"):
        instance = object.__getattribute__(reference, "_deferred_instance")
        if instance is NOT_SET:
            container = object.__getattribute__(reference, "_deferred_container")
            token = object.__getattribute__(reference, "_deferred_token")
            logger.debug(f"Resolving deferred reference to {describe_token(token)}")
            instance = container.resolve(token)
            object.__setattr__(reference, "_deferred_instance", instance)
    return instance
