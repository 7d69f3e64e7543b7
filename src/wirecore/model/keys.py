"""
Component identities and resolution requests.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from enum import Enum
from typing import Any, get_args, get_origin


class Deferred[T]:
    """
    A lazy handle to a component.

    Used as a type hint (``Deferred[Service]``) to request deferred delivery, and
    returned by the context for deferred refs. Each call to ``get`` resolves the
    component again through its provider, so scoping is decided by the binding.
    """

    def __init__(self, supplier: Callable[[], T], component: Component | None = None):
        self._supplier = supplier
        self._component = component

    def get(self) -> T:
        """Resolve the component now."""
        return self._supplier()

    def __repr__(self) -> str:
        return f"Deferred[{self._component}]" if self._component else "Deferred"


class Container(Enum):
    """Wrapper kinds a caller may ask a component to be delivered in."""

    DEFERRED = "deferred"
    LIST = "list"


@dataclass(frozen=True)
class Component:
    """The (type, qualifier) identity used for every registry lookup."""

    component_type: type
    qualifier: Any = None

    def __str__(self) -> str:
        qualifier_str = f" @{self.qualifier!r}" if self.qualifier is not None else ""
        type_name = getattr(self.component_type, "__name__", str(self.component_type))
        return f"{type_name}{qualifier_str}"


@dataclass(frozen=True)
class ComponentRef:
    """
    A request for a component, optionally wrapped in a container kind.

    A direct ref asks for the instance itself; a ``DEFERRED`` ref asks for a
    lazy handle which resolves the instance when invoked.
    """

    component: Component
    container: Container | None = None

    @classmethod
    def of(cls, target: Any, qualifier: Any = None) -> ComponentRef:
        """
        Create a ref from a type or a parameterized container type.

        ``Deferred[T]`` produces a deferred ref to ``T`` and ``list[T]`` produces
        a (unsupported) list ref to ``T``. Any other target is a direct ref.
        """
        container = _container_of(target)
        if container is not None:
            args = get_args(target)
            if len(args) != 1:
                raise TypeError(f"Container type {target!r} must have exactly one type argument")
            return cls(Component(args[0], qualifier), container)
        return cls(Component(target, qualifier))

    @property
    def component_type(self) -> type:
        return self.component.component_type

    @property
    def qualifier(self) -> Any:
        return self.component.qualifier

    def is_container(self) -> bool:
        """Check if this ref asks for a wrapped value rather than the instance itself."""
        return self.container is not None

    def is_deferred(self) -> bool:
        return self.container is Container.DEFERRED

    def __str__(self) -> str:
        if self.container is None:
            return str(self.component)
        return f"{self.container.value}[{self.component}]"


def _container_of(target: Any) -> Container | None:
    origin = get_origin(target)
    if origin is None:
        return None
    if origin is list:
        return Container.LIST
    if origin is Deferred:
        return Container.DEFERRED
    return None
