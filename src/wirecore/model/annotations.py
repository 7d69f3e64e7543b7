"""
Markers that qualify, scope and select injection points.

Qualifiers and scopes are passed to binding calls and placed inside
``Annotated`` hints; ``Inject`` and ``@inject`` select the fields and methods an
``InjectableDescriptor`` populates after construction.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from typing import Any, TypeVar

from ..errors import IllegalComponentError

T = TypeVar("T")
F = TypeVar("F", bound=Callable[..., Any])

SCOPE_ATTRIBUTE = "__wirecore_scope__"
INJECT_ATTRIBUTE = "__wirecore_inject__"


@dataclass(frozen=True)
class Qualifier:
    """
    Base class for qualifiers.

    Qualifiers compare and hash by class and field values, so a plain marker
    works as is:

        class Primary(Qualifier):
            pass

        Primary() == Primary()  # True

    Subclasses carrying values should be frozen dataclasses themselves, like ``Id``.
    """


@dataclass(frozen=True)
class Id(Qualifier):
    """A named qualifier, e.g. ``Annotated[Database, Id("replica")]``."""

    value: str

    def __repr__(self) -> str:
        return f"Id({self.value!r})"


class Scope:
    """
    Base class for scope markers.

    The scope id of a marker is its class, so both ``Singleton`` and
    ``Singleton()`` refer to the same scope.
    """


class Singleton(Scope):
    """Instances are created once and shared for the lifetime of the context."""


class Inject:
    """Marks a class attribute for field injection: ``Annotated[T, Inject]``."""


def is_qualifier(annotation: Any) -> bool:
    """Check if an annotation is a qualifier value."""
    return isinstance(annotation, Qualifier)


def scope_type_of(annotation: Any) -> type[Scope] | None:
    """Get the scope id an annotation stands for, or None if it is not a scope marker."""
    if isinstance(annotation, type) and issubclass(annotation, Scope):
        return annotation
    if isinstance(annotation, Scope):
        return type(annotation)
    return None


def is_inject_marker(annotation: Any) -> bool:
    return annotation is Inject or isinstance(annotation, Inject)


def scoped(scope: type[Scope] | Scope) -> Callable[[type[T]], type[T]]:
    """
    Declare the default scope of an implementation class.

    The declared scope applies whenever the class is bound without an explicit
    scope annotation.
    """
    scope_type = scope_type_of(scope)
    if scope_type is None:
        raise IllegalComponentError(scope, "not a scope marker")

    def decorate(cls: type[T]) -> type[T]:
        if SCOPE_ATTRIBUTE in vars(cls):
            raise IllegalComponentError(cls, "more than one scope declared")
        setattr(cls, SCOPE_ATTRIBUTE, scope_type)
        return cls

    return decorate


def singleton(cls: type[T]) -> type[T]:
    """Declare an implementation class as singleton scoped."""
    return scoped(Singleton)(cls)


def declared_scope(cls: type) -> type[Scope] | None:
    """Get the scope declared on the class itself (not inherited)."""
    scope: type[Scope] | None = vars(cls).get(SCOPE_ATTRIBUTE)
    return scope


def inject(method: F) -> F:
    """Mark a method to be called with resolved arguments after construction."""
    setattr(method, INJECT_ATTRIBUTE, True)
    return method


def is_inject_method(member: Any) -> bool:
    return callable(member) and getattr(member, INJECT_ATTRIBUTE, False) is True
