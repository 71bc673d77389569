"""
Instance creation with constructor and property injection.
"""

import logging
from typing import TYPE_CHECKING, Any

from ..exceptions import (CircularDependencyError, DependencyResolutionError,
                          NotConstructibleError, PropertyInjectionError)
from .deferred import DeferredReference
from .descriptors import DescriptorProvider
from .tokens import named

if TYPE_CHECKING:
    from .container import Container

logger = logging.getLogger(__name__)


class PropertyInjector:
    """Populates declared properties after construction (setter injection)."""

    def __init__(self, container: "Container", descriptors: DescriptorProvider) -> None:
        self._container = container
        self._descriptors = descriptors

    def inject_properties(self, cls: type, instance: Any) -> None:
        for property_key, token in self._descriptors.get_property_injections(cls):
            try:
                dependency = self._container.resolve(token)
            except CircularDependencyError:
                raise
            except Exception as e:
                raise PropertyInjectionError(cls, property_key, token, e) from e
            setattr(instance, property_key, dependency)


class InstanceCreator:
    """
    Creates instances of registered classes.

    Dependencies are materialized in declaration order, depth first, before
    the constructor runs. Deferred positions receive a ``DeferredReference``
    and optional positions receive ``None`` when their token is not bound
    anywhere.
    """

    def __init__(self, container: "Container", descriptors: DescriptorProvider) -> None:
        self._container = container
        self._descriptors = descriptors
        self._property_injector = PropertyInjector(container, descriptors)

    def create_deferred(self, token: Any) -> DeferredReference:
        return DeferredReference(self._container, token)

    def create_instance(self, cls: type) -> Any:
        """Construct ``cls`` and populate its declared properties."""
        instance = self.construct(cls)
        self.inject_properties(cls, instance)
        return instance

    def inject_properties(self, cls: type, instance: Any) -> None:
        self._property_injector.inject_properties(cls, instance)

    def construct(self, cls: type) -> Any:
        """Construct ``cls`` with its resolved constructor arguments only."""
        if not self._descriptors.is_constructible(cls):
            raise NotConstructibleError(cls)

        tokens = self._descriptors.get_dependency_tokens(cls)
        optional = self._descriptors.get_optional_positions(cls)
        deferred = self._descriptors.get_deferred_positions(cls)
        variants = self._descriptors.get_named_positions(cls)
        names = self._descriptors.get_parameter_names(cls)

        args: list[Any] = []
        kwargs: dict[str, Any] = {}

        for index, token in enumerate(tokens):
            if index in variants:
                token = named(token, variants[index])

            value = self._resolve_argument(cls, index, token, index in optional, index in deferred)

            name = names[index] if index < len(names) else None
            if name is None:
                args.append(value)
            else:
                kwargs[name] = value

        return cls(*args, **kwargs)

    def _resolve_argument(
        self, cls: type, index: int, token: Any, is_optional: bool, is_deferred: bool
    ) -> Any:
        if is_deferred:
            return self.create_deferred(token)

        try:
            if is_optional:
                found, value = self._container.resolve_optional(token)
                return value if found else None
            return self._container.resolve(token)
        except CircularDependencyError:
            raise
        except Exception as e:
            raise DependencyResolutionError(cls, index, token, e) from e
