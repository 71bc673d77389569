"""
SCOPEWIRE Dependency Injection Module

Hierarchical container with three binding lifetimes:
- SINGLETON: One instance per binding, cached on the owning container
- TRANSIENT: New instance on every resolve
- REQUEST: One instance per resolution tree or explicit request scope

Usage:
    from scopewire.di import Container, InjectionToken, injectable

    LOGGER = InjectionToken("Logger")

    @injectable
    class UserService:
        def __init__(self, repo: UserRepository, logger: Annotated[Logger, Inject(LOGGER)]):
            ...

    container = Container()
    container.bind(LOGGER).to_factory(lambda c: ConsoleLogger()).in_singleton_scope()
    container.bind(UserRepository).to_self().in_request_scope()

    service = container.resolve(UserService)
"""

from .bindings import NOT_SET, Binding, BindingKind
from .builder import BindingBuilder, ScopeBuilder
from .container import Container
from .cycles import ResolutionStack
from .deferred import DeferredReference, is_deferred, is_resolved, unwrap
from .descriptors import (DependencyDescriptor, DescriptorProvider,
                          DescriptorRegistry, Inject, InjectableOptions,
                          InjectProperty, Lazy, Named, OptionalDep,
                          default_registry, injectable)
from .modules import AsyncContainerModule, ConditionalModule, ContainerModule
from .registry import BindingRegistry
from .scopes import Scope, ScopeManager
from .tokens import InjectionToken, NamedToken, Token, describe_token, named

__all__ = [
    # Container
    "Container",
    "BindingBuilder",
    "ScopeBuilder",
    "BindingRegistry",
    "Binding",
    "BindingKind",
    "NOT_SET",
    # Scopes
    "Scope",
    "ScopeManager",
    "ResolutionStack",
    # Tokens
    "Token",
    "InjectionToken",
    "NamedToken",
    "named",
    "describe_token",
    # Descriptors
    "DescriptorProvider",
    "DescriptorRegistry",
    "DependencyDescriptor",
    "InjectableOptions",
    "default_registry",
    "injectable",
    "Inject",
    "Lazy",
    "OptionalDep",
    "Named",
    "InjectProperty",
    # Deferred references
    "DeferredReference",
    "is_deferred",
    "is_resolved",
    "unwrap",
    # Modules
    "ContainerModule",
    "AsyncContainerModule",
    "ConditionalModule",
]
