"""
The finalized, read-only resolver over a validated registry.
"""

from __future__ import annotations

from collections.abc import Mapping
from types import MappingProxyType
from typing import Any

from .model.keys import Component, ComponentRef, Container, Deferred
from .providers import ComponentProvider


class Context:
    """
    Resolves component refs to instances.

    A Context is produced by ``ContextConfig.finalize()`` once the whole graph
    has been validated. It never changes afterwards and may be shared between
    threads for lookups.
    """

    def __init__(self, components: Mapping[Component, ComponentProvider]):
        self._components: Mapping[Component, ComponentProvider] = MappingProxyType(dict(components))

    def get(self, target: ComponentRef | Any, qualifier: Any = None) -> Any:
        """
        Resolve a ref, returning None when nothing is bound for it.

        Args:
            target: A ComponentRef, or a type (``Service``, ``Deferred[Service]``)
                turned into one with ``ComponentRef.of``
            qualifier: Qualifier used when ``target`` is a type

        Returns:
            The instance for a direct ref, a ``Deferred`` handle for a deferred
            ref, or None if the component is not bound or the container kind is
            not supported
        """
        ref = _as_ref(target, qualifier)

        if ref.container is Container.DEFERRED:
            provider = self._components.get(ref.component)
            if provider is None:
                return None
            return Deferred(lambda: provider.produce(self), ref.component)

        if ref.is_container():
            return None

        provider = self._components.get(ref.component)
        if provider is None:
            return None
        return provider.produce(self)

    def has(self, target: ComponentRef | Any, qualifier: Any = None) -> bool:
        """Check if ``get`` would find something for the ref."""
        ref = _as_ref(target, qualifier)
        if ref.is_container() and not ref.is_deferred():
            return False
        return ref.component in self._components

    def components(self) -> frozenset[Component]:
        """Get every bound component identity."""
        return frozenset(self._components)

    def __len__(self) -> int:
        return len(self._components)


def _as_ref(target: ComponentRef | Any, qualifier: Any) -> ComponentRef:
    if isinstance(target, ComponentRef):
        return target
    return ComponentRef.of(target, qualifier)
