"""
Exceptions raised by the wirecore container.
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from .model.keys import Component


class ContainerError(Exception):
    """Base class for all container errors."""


class IllegalComponentError(ContainerError):
    """Raised when a binding or an injectable class is structurally invalid."""

    def __init__(self, subject: Any, reason: str):
        self.subject = subject
        self.reason = reason
        subject_name = getattr(subject, "__qualname__", None) or str(subject)
        super().__init__(f"Illegal component {subject_name}: {reason}")


class DependencyNotFoundError(ContainerError):
    """Raised when a bound component requires a component that is not bound."""

    def __init__(self, owner: Component, missing: Component):
        self.owner = owner
        self.missing = missing
        super().__init__(f"No binding found for {missing} (required by {owner})")


class CyclicDependencyError(ContainerError):
    """Raised when components depend on each other directly or transitively."""

    def __init__(self, components: Sequence[Component]):
        self.components = list(components)
        cycle_str = " -> ".join(str(component) for component in self.components)
        super().__init__(f"Cyclic dependency detected: {cycle_str}")

    def component_types(self) -> set[type]:
        """Get the distinct types taking part in the cycle."""
        return {component.component_type for component in self.components}
