"""
SCOPEWIRE - Dependency Resolution Engine

Hierarchical dependency injection with singleton, transient and request
scopes, cycle detection and deferred references.
"""

# Resolution engine (imported first: config depends on di.scopes)
from .di import (AsyncContainerModule, Binding, BindingKind, ConditionalModule,
                 Container, ContainerModule, DeferredReference,
                 DescriptorProvider, DescriptorRegistry, Inject,
                 InjectionToken, InjectProperty, Lazy, Named, OptionalDep,
                 Scope, default_registry, injectable, named)
# Configuration
from .config import ContainerOptions
# Errors
from .exceptions import (AsyncFactoryError, CircularDependencyError,
                         ConfigurationError, DependencyResolutionError,
                         MissingBindingPayloadError, NotConstructibleError,
                         PropertyInjectionError, ScopewireError,
                         UnboundTokenError)

__version__ = "0.1.0"

__all__ = [
    # Core
    "Container",
    "ContainerOptions",
    "Scope",
    "Binding",
    "BindingKind",
    # Tokens
    "InjectionToken",
    "named",
    # Descriptors
    "DescriptorProvider",
    "DescriptorRegistry",
    "default_registry",
    "injectable",
    "Inject",
    "Lazy",
    "OptionalDep",
    "Named",
    "InjectProperty",
    "DeferredReference",
    # Modules
    "ContainerModule",
    "AsyncContainerModule",
    "ConditionalModule",
    # Errors
    "ScopewireError",
    "ConfigurationError",
    "UnboundTokenError",
    "CircularDependencyError",
    "NotConstructibleError",
    "MissingBindingPayloadError",
    "AsyncFactoryError",
    "DependencyResolutionError",
    "PropertyInjectionError",
]
