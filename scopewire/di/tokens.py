"""
Tokens identify what a container can resolve.

A token is any hashable object. Strings compare by value, classes by
identity, and :class:`InjectionToken` handles by identity even when two of
them share a description.
"""

import inspect
from dataclasses import dataclass
from typing import Any, Generic, Hashable, TypeVar

T = TypeVar("T")

Token = Hashable


class InjectionToken(Generic[T]):
    """
    Named handle for dependencies that have no natural class or string key.

    Usage:
        LOGGER = InjectionToken[Logger]("Logger")
        container.bind(LOGGER).to_factory(lambda c: ConsoleLogger())
    """

    __slots__ = ("description",)

    def __init__(self, description: str) -> None:
        self.description = description

    def __repr__(self) -> str:
        return f"InjectionToken({self.description})"


@dataclass(frozen=True)
class NamedToken:
    """A named variant of another token. Compared by value."""

    token: Any
    name: str

    def __str__(self) -> str:
        return f"{describe_token(self.token)}:{self.name}"


def named(token: Any, name: str) -> NamedToken:
    """Return the token identifying the ``name`` variant of ``token``."""
    return NamedToken(token, name)


def describe_token(token: Any) -> str:
    """Render a token for error messages and logs."""
    if isinstance(token, NamedToken):
        return str(token)
    if inspect.isclass(token):
        return token.__qualname__
    return repr(token)
