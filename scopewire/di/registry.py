"""
Per-container binding registry.

The registry never consults a parent container; hierarchy fall-through is
handled by the resolver.
"""

import logging
import threading
from typing import Any

from .bindings import Binding
from .tokens import describe_token

logger = logging.getLogger(__name__)


class BindingRegistry:
    """Map from token to binding. Last registration for a token wins."""

    def __init__(self) -> None:
        self._bindings: dict[Any, Binding] = {}
        self._lock = threading.RLock()

    def register(self, binding: Binding) -> None:
        """Store a binding, replacing any binding for the same token."""
        with self._lock:
            self._bindings[binding.token] = binding
        logger.debug(
            f"Registered {binding.kind.value} binding for {describe_token(binding.token)} "
            f"as {binding.scope.value}"
        )

    def get(self, token: Any) -> Binding | None:
        """Get the binding for a token, or None if it is not bound here."""
        with self._lock:
            return self._bindings.get(token)

    def has(self, token: Any) -> bool:
        with self._lock:
            return token in self._bindings

    def remove(self, token: Any) -> Binding | None:
        """Remove the binding for a token and clear its cached instance."""
        with self._lock:
            binding = self._bindings.pop(token, None)
        if binding is not None:
            binding.clear_cache()
            logger.debug(f"Removed binding for {describe_token(token)}")
        return binding

    def all(self) -> dict[Any, Binding]:
        """Return an independent snapshot of the registered bindings."""
        with self._lock:
            return dict(self._bindings)

    def __len__(self) -> int:
        with self._lock:
            return len(self._bindings)

    def __contains__(self, token: Any) -> bool:
        return self.has(token)
