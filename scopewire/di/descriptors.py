"""
Dependency Descriptors

Describes, for each constructible class, the ordered dependency tokens of
its constructor and which of them are optional, deferred or named variants,
plus the properties populated after construction.

Classes are registered explicitly with a ``DescriptorRegistry``. A
process-wide ``default_registry`` is created once at import time (never
reset) and backs the ``@injectable`` decorator unless ``registry=`` is given.

Usage:
    @injectable(scope=Scope.SINGLETON)
    class UserService:
        audit = InjectProperty(AUDIT_LOG)

        def __init__(
            self,
            repo: UserRepository,
            auth: Annotated[AuthService, Lazy()],
            cache: Annotated[Cache, OptionalDep()],
            db: Annotated[Database, Named("primary")],
        ):
            ...

    # Or without annotations
    registry.register(Report, dependencies=[CONFIG, Clock], optional={1})
"""

import inspect
import logging
import threading
import types
import typing
from collections.abc import Iterable
from dataclasses import dataclass, field
from typing import Any, Protocol, Union, runtime_checkable

from ..exceptions import NotConstructibleError
from .scopes import Scope

logger = logging.getLogger(__name__)

_EMPTY = inspect.Parameter.empty

# Annotations left to their defaults instead of being resolved
_PRIMITIVES = (str, int, float, bool, bytes)


# ============================================================================
# PARAMETER MARKERS
# ============================================================================


@dataclass(frozen=True)
class Inject:
    """Use ``token`` instead of the parameter's annotation."""

    token: Any


@dataclass(frozen=True)
class Lazy:
    """Inject a deferred reference, optionally for an explicit ``token``."""

    token: Any = None


@dataclass(frozen=True)
class OptionalDep:
    """Inject ``None`` when the dependency is not bound anywhere."""


@dataclass(frozen=True)
class Named:
    """Resolve the ``name`` variant of the parameter's token."""

    name: str


class InjectProperty:
    """
    Class attribute populated with a resolved dependency after construction.

    Setter injection breaks cycles without deferred references: the
    constructor never needs the dependency.
    """

    def __init__(self, token: Any) -> None:
        self.token = token
        self.name: str | None = None

    def __set_name__(self, owner: type, name: str) -> None:
        self.name = name

    def __get__(self, instance: Any, owner: type | None = None) -> Any:
        if instance is None:
            return self
        raise AttributeError(
            f"Property '{self.name}' of {type(instance).__qualname__} has not been injected"
        )

    def __repr__(self) -> str:
        return f"InjectProperty({self.token!r})"


# ============================================================================
# PROVIDER INTERFACE
# ============================================================================


@runtime_checkable
class DescriptorProvider(Protocol):
    """Interface the resolution engine consumes for constructible classes."""

    def is_constructible(self, cls: Any) -> bool: ...

    def get_dependency_tokens(self, cls: type) -> list[Any]: ...

    def get_optional_positions(self, cls: type) -> set[int]: ...

    def get_deferred_positions(self, cls: type) -> set[int]: ...

    def get_named_positions(self, cls: type) -> dict[int, str]: ...

    def get_parameter_names(self, cls: type) -> list[str | None]: ...

    def get_property_injections(self, cls: type) -> list[tuple[str, Any]]: ...


@dataclass
class InjectableOptions:
    """Options a class was registered with."""

    scope: Scope | None = None
    token: Any = None
    dependencies: list[Any] | None = None
    optional: frozenset[int] = frozenset()
    deferred: frozenset[int] = frozenset()
    named: dict[int, str] = field(default_factory=dict)
    properties: dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class DependencyDescriptor:
    """Resolved dependency metadata of one class."""

    tokens: tuple[Any, ...]
    names: tuple[str | None, ...]
    optional: frozenset[int]
    deferred: frozenset[int]
    named: dict[int, str]
    properties: tuple[tuple[str, Any], ...]


# ============================================================================
# REGISTRY
# ============================================================================


class DescriptorRegistry:
    """
    Explicit registry of injectable classes.

    Descriptors are computed on first use and cached, so annotations may
    refer to classes defined later in the module (mutually dependent
    classes).
    """

    def __init__(self) -> None:
        self._injectables: dict[type, InjectableOptions] = {}
        self._token_mappings: dict[Any, type] = {}
        self._descriptors: dict[type, DependencyDescriptor] = {}
        self._lock = threading.RLock()

    def register(
        self,
        cls: type,
        *,
        dependencies: Iterable[Any] | None = None,
        optional: Iterable[int] = (),
        deferred: Iterable[int] = (),
        named: dict[int, str] | None = None,
        properties: dict[str, Any] | None = None,
        scope: Scope | None = None,
        token: Any = None,
    ) -> type:
        """
        Register a class as injectable.

        Args:
            cls: The class to register
            dependencies: Explicit ordered constructor tokens (skips annotation
                introspection; arguments are passed positionally)
            optional: Positions injected as ``None`` when unbound
            deferred: Positions injected as deferred references
            named: Position -> variant name
            properties: Attribute -> token for setter injection
            scope: Scope used when the class is auto-registered
            token: Token this class implements for auto-resolution

        Returns:
            The class, so the method can be used as a decorator body
        """
        if not inspect.isclass(cls):
            raise NotConstructibleError(cls, "only classes can be registered")

        options = InjectableOptions(
            scope=Scope(scope) if scope is not None else None,
            token=token,
            dependencies=list(dependencies) if dependencies is not None else None,
            optional=frozenset(optional),
            deferred=frozenset(deferred),
            named=dict(named or {}),
            properties=dict(properties or {}),
        )
        with self._lock:
            self._injectables[cls] = options
            self._descriptors.pop(cls, None)
            if token is not None:
                self._token_mappings[token] = cls
        logger.debug(f"Registered injectable {cls.__qualname__}")
        return cls

    def injectable(self, cls: type | None = None, **options: Any) -> Any:
        """Decorator form of :meth:`register`, usable bare or with options."""

        def decorator(target: type) -> type:
            return self.register(target, **options)

        if cls is not None:
            return decorator(cls)
        return decorator

    def is_registered(self, cls: Any) -> bool:
        with self._lock:
            return cls in self._injectables

    def get_options(self, cls: type) -> InjectableOptions | None:
        with self._lock:
            return self._injectables.get(cls)

    def implementation_for(self, token: Any) -> type | None:
        """Get the class registered as implementing ``token``."""
        with self._lock:
            return self._token_mappings.get(token)

    def injectables(self) -> dict[type, InjectableOptions]:
        with self._lock:
            return dict(self._injectables)

    def token_mappings(self) -> dict[Any, type]:
        with self._lock:
            return dict(self._token_mappings)

    def describe(self, cls: type) -> DependencyDescriptor:
        """
        Get the dependency descriptor of a registered class.

        Raises:
            NotConstructibleError: If the class is not registered or its
                constructor cannot be described
        """
        with self._lock:
            cached = self._descriptors.get(cls)
            if cached is not None:
                return cached
            options = self._injectables.get(cls)

        if options is None:
            raise NotConstructibleError(cls)

        descriptor = _build_descriptor(cls, options)
        with self._lock:
            self._descriptors[cls] = descriptor
        return descriptor

    # DescriptorProvider interface

    def is_constructible(self, cls: Any) -> bool:
        return inspect.isclass(cls) and self.is_registered(cls)

    def get_dependency_tokens(self, cls: type) -> list[Any]:
        return list(self.describe(cls).tokens)

    def get_optional_positions(self, cls: type) -> set[int]:
        return set(self.describe(cls).optional)

    def get_deferred_positions(self, cls: type) -> set[int]:
        return set(self.describe(cls).deferred)

    def get_named_positions(self, cls: type) -> dict[int, str]:
        return dict(self.describe(cls).named)

    def get_parameter_names(self, cls: type) -> list[str | None]:
        return list(self.describe(cls).names)

    def get_property_injections(self, cls: type) -> list[tuple[str, Any]]:
        return list(self.describe(cls).properties)


default_registry = DescriptorRegistry()


def injectable(
    cls: type | None = None, *, registry: DescriptorRegistry | None = None, **options: Any
) -> Any:
    """
    Mark a class as injectable.

    Usage:
        @injectable
        class Clock: ...

        @injectable(scope=Scope.SINGLETON, token=CLOCK)
        class SystemClock: ...
    """
    target_registry = registry if registry is not None else default_registry
    return target_registry.injectable(cls, **options)


# ============================================================================
# INTROSPECTION
# ============================================================================


def _build_descriptor(cls: type, options: InjectableOptions) -> DependencyDescriptor:
    optional = set(options.optional)
    deferred = set(options.deferred)
    named = dict(options.named)

    if options.dependencies is not None:
        tokens = list(options.dependencies)
        names: list[str | None] = [None] * len(tokens)
    else:
        tokens, names = _introspect_constructor(cls, optional, deferred, named)

    return DependencyDescriptor(
        tokens=tuple(tokens),
        names=tuple(names),
        optional=frozenset(optional),
        deferred=frozenset(deferred),
        named=named,
        properties=tuple(_collect_properties(cls, options.properties)),
    )


def _introspect_constructor(
    cls: type, optional: set[int], deferred: set[int], named: dict[int, str]
) -> tuple[list[Any], list[str | None]]:
    init = cls.__init__
    if init is object.__init__:
        return [], []

    try:
        signature = inspect.signature(init)
    except (TypeError, ValueError) as e:
        raise NotConstructibleError(cls, f"cannot read constructor signature: {e}") from e

    try:
        hints = typing.get_type_hints(init, include_extras=True)
    except (NameError, TypeError, AttributeError) as e:
        raise NotConstructibleError(cls, f"cannot evaluate constructor annotations: {e}") from e

    tokens: list[Any] = []
    names: list[str | None] = []
    # Positional-only arguments are passed by position, so none may follow a skipped one
    skipped_positional: str | None = None
    parameters = list(signature.parameters.values())[1:]  # skip self

    for param in parameters:
        if param.kind in (param.VAR_POSITIONAL, param.VAR_KEYWORD):
            continue

        position = len(tokens)
        token, markers = _split_annotation(hints.get(param.name, _EMPTY))
        is_optional = _is_optional_union(token)
        is_deferred = False
        variant = None

        if is_optional:
            token = _strip_none(token)

        for marker in markers:
            if isinstance(marker, Inject):
                token = marker.token
            elif isinstance(marker, Lazy):
                is_deferred = True
                if marker.token is not None:
                    token = marker.token
            elif isinstance(marker, OptionalDep):
                is_optional = True
            elif isinstance(marker, Named):
                variant = marker.name

        if token in _PRIMITIVES and not markers and param.default is not _EMPTY:
            if param.kind is param.POSITIONAL_ONLY:
                skipped_positional = skipped_positional or param.name
            continue

        if token is _EMPTY:
            if param.default is not _EMPTY:
                # Left to the constructor default
                if param.kind is param.POSITIONAL_ONLY:
                    skipped_positional = skipped_positional or param.name
                continue
            raise NotConstructibleError(
                cls, f"no token for constructor parameter '{param.name}'"
            )

        if param.kind is param.POSITIONAL_ONLY and skipped_positional is not None:
            raise NotConstructibleError(
                cls,
                f"positional-only parameter '{param.name}' follows '{skipped_positional}', "
                "which is left to its default",
            )

        if is_optional:
            optional.add(position)
        if is_deferred:
            deferred.add(position)
        if variant is not None:
            named[position] = variant
        tokens.append(token)
        names.append(None if param.kind is param.POSITIONAL_ONLY else param.name)

    return tokens, names


def _split_annotation(annotation: Any) -> tuple[Any, tuple[Any, ...]]:
    if typing.get_origin(annotation) is typing.Annotated:
        base, *metadata = typing.get_args(annotation)
        return base, tuple(metadata)
    return annotation, ()


def _is_optional_union(annotation: Any) -> bool:
    if typing.get_origin(annotation) not in (Union, types.UnionType):
        return False
    args = typing.get_args(annotation)
    return len(args) == 2 and type(None) in args


def _strip_none(annotation: Any) -> Any:
    return next(arg for arg in typing.get_args(annotation) if arg is not type(None))


def _collect_properties(cls: type, explicit: dict[str, Any]) -> list[tuple[str, Any]]:
    found: dict[str, Any] = {}
    for klass in reversed(cls.__mro__):
        for name, attribute in vars(klass).items():
            if isinstance(attribute, InjectProperty):
                found[name] = attribute.token
    found.update(explicit)
    return list(found.items())
