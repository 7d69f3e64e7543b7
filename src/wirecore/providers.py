"""
Providers produce the instance bound to a component.
"""

from __future__ import annotations

import logging
import threading
from abc import ABC, abstractmethod
from collections.abc import Callable
from typing import TYPE_CHECKING, Any

from .descriptor import Descriptor
from .errors import CyclicDependencyError
from .model.keys import Component, ComponentRef

if TYPE_CHECKING:
    from .context import Context

logger = logging.getLogger(__name__)


class ComponentProvider(ABC):
    """Knows how to produce one instance of a component and what it needs to do so."""

    @abstractmethod
    def produce(self, context: Context) -> Any:
        """Produce an instance, resolving dependencies against the context."""

    def dependencies(self) -> list[ComponentRef]:
        """Get the refs this provider resolves while producing."""
        return []


ScopeDecorator = Callable[[ComponentProvider], ComponentProvider]
"""Wraps a provider to change the lifetime of the instances it produces."""


class InstanceProvider(ComponentProvider):
    """Always produces the same pre-built value."""

    def __init__(self, instance: Any):
        self._instance = instance

    def produce(self, context: Context) -> Any:  # noqa: ARG002
        return self._instance

    def __repr__(self) -> str:
        return f"InstanceProvider({self._instance!r})"


class DescriptorProvider(ComponentProvider):
    """
    Builds a new instance on every call by delegating to a descriptor.

    Constructor arguments are resolved and passed to ``instantiate``; the
    remaining dependencies are resolved afterwards and passed to ``populate``.
    Asking the provider for an instance while it is still constructing one on
    the same thread raises ``CyclicDependencyError`` naming ``component``, the
    identity the provider is bound to. Without one the implementation type is
    reported instead.
    """

    def __init__(self, descriptor: Descriptor, component: Component | None = None):
        self._descriptor = descriptor
        self._component = component or Component(descriptor.implementation)
        self._state = threading.local()

    def produce(self, context: Context) -> Any:
        if getattr(self._state, "constructing", False):
            raise CyclicDependencyError([self._component, self._component])

        self._state.constructing = True
        try:
            arguments = [context.get(ref) for ref in self._descriptor.constructor_dependencies()]
            instance = self._descriptor.instantiate(arguments)
            values = [context.get(ref) for ref in self._descriptor.member_dependencies()]
            self._descriptor.populate(instance, values)
            return instance
        finally:
            self._state.constructing = False

    def dependencies(self) -> list[ComponentRef]:
        return self._descriptor.dependencies()

    def __repr__(self) -> str:
        return f"DescriptorProvider({self._descriptor!r})"


class SingletonProvider(ComponentProvider):
    """
    Caches the first instance produced by the wrapped provider.

    A failed production is not cached; the next call tries again.
    """

    def __init__(self, provider: ComponentProvider):
        self._provider = provider
        self._lock = threading.RLock()
        self._computed = False
        self._instance: Any = None

    def produce(self, context: Context) -> Any:
        if self._computed:
            return self._instance

        with self._lock:
            if not self._computed:
                instance = self._provider.produce(context)
                self._instance = instance
                self._computed = True
                logger.debug("Computed singleton instance from %r", self._provider)
        return self._instance

    def dependencies(self) -> list[ComponentRef]:
        return self._provider.dependencies()

    def __repr__(self) -> str:
        return f"SingletonProvider({self._provider!r})"
