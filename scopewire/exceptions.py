"""
Custom exceptions for SCOPEWIRE.

These exceptions provide specific error types for binding and resolution
failures while maintaining compatibility with RuntimeError.
"""

from typing import Any, Dict, List, Optional

from .constants import CHAIN_SEPARATOR
from .di.tokens import describe_token


class ScopewireError(RuntimeError):
    """
    Base exception for SCOPEWIRE errors.

    Attributes:
        message: Error message
        context: Optional dictionary with additional context (token,
                 owner type, position, etc.)
    """

    def __init__(self, message: str, context: Optional[Dict[str, Any]] = None) -> None:
        """
        Initialize the exception.

        Args:
            message: Error message
            context: Optional dictionary with additional context information
        """
        super().__init__(message)
        self.message = message
        self.context = context or {}

    def __str__(self) -> str:
        """Return formatted error message with context if available."""
        if self.context:
            context_str = ", ".join(f"{k}={v}" for k, v in self.context.items())
            return f"{self.message} (context: {context_str})"
        return self.message


class ConfigurationError(ScopewireError):
    """
    Raised when container configuration is invalid.

    Attributes:
        message: Error message
        config_key: Configuration key that caused the error (if available)
        config_value: Configuration value that caused the error (if available)
        context: Additional context information
    """

    def __init__(
        self,
        message: str,
        config_key: Optional[str] = None,
        config_value: Optional[Any] = None,
        context: Optional[Dict[str, Any]] = None,
    ) -> None:
        context = context or {}
        if config_key:
            context["config_key"] = config_key
        if config_value is not None:
            context["config_value"] = config_value
        super().__init__(message, context=context)
        self.config_key = config_key
        self.config_value = config_value


class UnboundTokenError(ScopewireError, LookupError):
    """
    Raised when no binding exists for a token anywhere in the container chain.

    Attributes:
        token: The token that could not be resolved
    """

    def __init__(self, token: Any) -> None:
        super().__init__(f"No binding found for token: {describe_token(token)}")
        self.token = token


class CircularDependencyError(ScopewireError):
    """
    Raised when a token is re-entered while it is still being materialized.

    Attributes:
        token: The token that closed the cycle
        chain: Tokens on the resolution stack, ending with ``token``
    """

    def __init__(self, token: Any, chain: Optional[List[Any]] = None) -> None:
        self.token = token
        self.chain = list(chain or []) + [token]
        rendered = CHAIN_SEPARATOR.join(describe_token(t) for t in self.chain)
        super().__init__(
            f"Circular dependency detected while resolving {describe_token(token)}",
            context={"chain": rendered},
        )


class NotConstructibleError(ScopewireError):
    """
    Raised when a class binding refers to a class without a dependency descriptor.

    Attributes:
        implementation: The offending class
        reason: Why the class cannot be constructed
    """

    def __init__(self, implementation: Any, reason: Optional[str] = None) -> None:
        name = getattr(implementation, "__qualname__", repr(implementation))
        message = f"Class {name} is not registered as injectable"
        if reason:
            message = f"Class {name} cannot be constructed: {reason}"
        super().__init__(message)
        self.implementation = implementation
        self.reason = reason


class MissingBindingPayloadError(ScopewireError):
    """
    Raised at resolve time when a binding lacks the payload its kind requires.

    Attributes:
        token: Token of the incomplete binding
        kind: The binding kind
    """

    def __init__(self, token: Any, kind: Any, detail: str) -> None:
        kind_name = str(getattr(kind, "value", kind)).capitalize()
        super().__init__(f"{kind_name} binding for {describe_token(token)} has no {detail}")
        self.token = token
        self.kind = kind


class AsyncFactoryError(ScopewireError):
    """Raised when a synchronous resolve meets a factory that returned an awaitable."""

    def __init__(self, token: Any) -> None:
        super().__init__(
            f"Factory for {describe_token(token)} returned an awaitable, "
            f"use resolve_async instead"
        )
        self.token = token


class DependencyResolutionError(ScopewireError):
    """
    Wraps a failure raised while resolving a constructor dependency.

    The original failure stays available as ``__cause__``.

    Attributes:
        owner: Class whose dependency failed
        position: Parameter position of the dependency
        token: Token of the dependency
    """

    def __init__(self, owner: Any, position: Any, token: Any, cause: BaseException) -> None:
        owner_name = getattr(owner, "__qualname__", repr(owner))
        super().__init__(
            f"Error resolving dependency at position {position} for {owner_name}: {cause}",
            context={"token": describe_token(token)},
        )
        self.owner = owner
        self.position = position
        self.token = token


class PropertyInjectionError(DependencyResolutionError):
    """
    Raised when a property (setter) injection fails after construction.

    Attributes:
        property_key: Attribute that could not be populated
    """

    def __init__(self, owner: Any, property_key: str, token: Any, cause: BaseException) -> None:
        super().__init__(owner, property_key, token, cause)
        owner_name = getattr(owner, "__qualname__", repr(owner))
        self.message = (
            f"Error performing property injection for {property_key} in {owner_name}: {cause}"
        )
        self.args = (self.message,)
        self.property_key = property_key
