"""
Dependency graph validation.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping

from .errors import CyclicDependencyError, DependencyNotFoundError
from .model.keys import Component
from .providers import ComponentProvider

logger = logging.getLogger(__name__)


class DependencyGraph:
    """
    Validates a registry of providers before it is used.

    Every bound component is checked, not just those reachable from some root,
    since any of them may be resolved later. Container refs (e.g. deferred) only
    need their target to be bound: they are resolved at call time and never
    take part in cycle detection.
    """

    def __init__(self, components: Mapping[Component, ComponentProvider]):
        self._components = components

    def validate(self) -> None:
        """
        Check the whole graph.

        Raises:
            DependencyNotFoundError: If a component requires an unbound component
            CyclicDependencyError: If components depend on each other through direct refs
        """
        validated: set[Component] = set()
        for component in self._components:
            if component not in validated:
                self._check(component, [component], validated)
        logger.debug("Validated dependency graph of %d components", len(self._components))

    def _check(self, component: Component, path: list[Component], validated: set[Component]) -> None:
        for ref in self._components[component].dependencies():
            dependency = ref.component
            if dependency not in self._components:
                raise DependencyNotFoundError(component, dependency)

            if ref.is_container():
                continue

            if dependency in path:
                cycle_start = path.index(dependency)
                raise CyclicDependencyError(path[cycle_start:] + [dependency])

            if dependency in validated:
                continue

            path.append(dependency)
            self._check(dependency, path, validated)
            path.pop()

        validated.add(component)
