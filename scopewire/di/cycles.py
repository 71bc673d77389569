"""
Circular dependency detection.

The resolution stack lives in a context variable: the outermost synchronous
resolve creates it and drops it when it returns, so concurrent threads and
tasks never see each other's in-flight tokens.
"""

from collections.abc import Iterator
from contextlib import contextmanager
from contextvars import ContextVar
from typing import Any

from ..exceptions import CircularDependencyError

_active_stack: ContextVar["ResolutionStack | None"] = ContextVar(
    "scopewire_resolution_stack", default=None
)


class ResolutionStack:
    """Ordered set of tokens currently being materialized."""

    def __init__(self) -> None:
        # dict preserves insertion order and gives O(1) membership
        self._tokens: dict[Any, None] = {}

    def check_cycle(self, token: Any) -> None:
        """Raise CircularDependencyError if ``token`` is already in flight."""
        if token in self._tokens:
            raise CircularDependencyError(token, self.chain())

    def enter(self, token: Any) -> None:
        self._tokens[token] = None

    def exit(self, token: Any) -> None:
        self._tokens.pop(token, None)

    def is_resolving(self, token: Any) -> bool:
        return token in self._tokens

    def chain(self) -> list[Any]:
        return list(self._tokens)

    @contextmanager
    def guard(self, token: Any) -> Iterator[None]:
        """Keep ``token`` on the stack for the duration of the block."""
        self.enter(token)
        try:
            yield
        finally:
            self.exit(token)

    def __len__(self) -> int:
        return len(self._tokens)


def current_stack() -> ResolutionStack | None:
    """Return the resolution stack of the running call chain, if any."""
    return _active_stack.get()


@contextmanager
def resolution_stack() -> Iterator[tuple[ResolutionStack, bool]]:
    """
    Join the active resolution stack or create a fresh one.

    Yields ``(stack, is_root)`` where ``is_root`` tells whether this call
    created the stack and therefore is the top-level resolve.
    """
    stack = _active_stack.get()
    if stack is not None:
        yield stack, False
        return

    stack = ResolutionStack()
    reset_token = _active_stack.set(stack)
    try:
        yield stack, True
    finally:
        _active_stack.reset(reset_token)
