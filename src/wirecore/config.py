"""
Binding registry: the configuration phase of a container.
"""

from __future__ import annotations

import inspect
import logging
from collections.abc import Callable, Iterable
from typing import Any, TypeVar

from .context import Context
from .descriptor import Descriptor, FunctionDescriptor, InjectableDescriptor
from .errors import IllegalComponentError
from .graph import DependencyGraph
from .model.annotations import Scope, Singleton, is_qualifier, scope_type_of
from .model.keys import Component
from .providers import (
    ComponentProvider,
    DescriptorProvider,
    InstanceProvider,
    ScopeDecorator,
    SingletonProvider,
)

T = TypeVar("T")

logger = logging.getLogger(__name__)


class ContextConfig:
    """
    Collects bindings and turns them into a validated Context.

    Example:
        config = ContextConfig()
        config.bind_instance(Settings, Settings(debug=True))
        config.bind_type(Repository, SqlRepository, Singleton)
        context = config.finalize()
        repository = context.get(Repository)
    """

    def __init__(self) -> None:
        self._components: dict[Component, ComponentProvider] = {}
        self._scopes: dict[type[Scope], ScopeDecorator] = {Singleton: SingletonProvider}

    def bind_instance(self, component_type: type[T] | Any, instance: T, *qualifiers: Any) -> None:
        """
        Bind a pre-built value.

        Without qualifiers the unqualified identity is bound; otherwise one
        identity per qualifier is bound, all sharing the same instance.

        Raises:
            IllegalComponentError: If any of the qualifiers is not a Qualifier
        """
        for qualifier in qualifiers:
            if not is_qualifier(qualifier):
                raise IllegalComponentError(component_type, f"{qualifier!r} is not a qualifier")
        self._register(component_type, qualifiers, InstanceProvider(instance))

    def bind_type(
        self, component_type: type[T] | Any, implementation: type[T] | Descriptor, *annotations: Any
    ) -> None:
        """
        Bind an implementation built by injection.

        Args:
            component_type: The type the binding is looked up by
            implementation: An implementation class, or a Descriptor for it
            annotations: Qualifiers and at most one scope marker. When no scope
                is given, the scope declared on the implementation class is used.

        Raises:
            IllegalComponentError: If the implementation cannot be injected, an
                annotation is neither a qualifier nor a scope, more than one
                scope is given, or the scope is not registered
        """
        if isinstance(implementation, Descriptor):
            descriptor = implementation
        else:
            descriptor = InjectableDescriptor.of(implementation)
        self._bind_descriptor(component_type, descriptor, annotations)

    def bind_factory(
        self, component_type: type[T] | Any, factory: Callable[..., T], *annotations: Any
    ) -> None:
        """Bind a factory function whose parameters are injected."""
        self._bind_descriptor(component_type, FunctionDescriptor(factory), annotations)

    def bind(self, component_type: type[T] | Any, target: Any, *annotations: Any) -> None:
        """Bind a class or Descriptor by injection, anything else as an instance."""
        if inspect.isclass(target) or isinstance(target, Descriptor):
            self.bind_type(component_type, target, *annotations)
        else:
            self.bind_instance(component_type, target, *annotations)

    def register_scope(self, scope: type[Scope] | Scope, decorator: ScopeDecorator) -> None:
        """
        Register how bindings in a scope wrap their provider.

        Raises:
            IllegalComponentError: If ``scope`` is not a scope marker
        """
        scope_type = scope_type_of(scope)
        if scope_type is None:
            raise IllegalComponentError(scope, "not a scope marker")
        self._scopes[scope_type] = decorator
        logger.debug("Registered scope %s", scope_type.__name__)

    def finalize(self) -> Context:
        """
        Validate every binding and create a Context over them.

        The Context gets a snapshot of the current bindings; binding more
        components afterwards does not affect it.

        Raises:
            DependencyNotFoundError: If a bound component requires an unbound one
            CyclicDependencyError: If bound components depend on each other
        """
        DependencyGraph(self._components).validate()
        logger.debug("Finalized context with %d components", len(self._components))
        return Context(self._components)

    def _bind_descriptor(
        self, component_type: type[T] | Any, descriptor: Descriptor, annotations: Iterable[Any]
    ) -> None:
        qualifiers: list[Any] = []
        scopes: list[type[Scope]] = []
        for annotation in annotations:
            scope_type = scope_type_of(annotation)
            if scope_type is not None:
                scopes.append(scope_type)
            elif is_qualifier(annotation):
                qualifiers.append(annotation)
            else:
                raise IllegalComponentError(
                    component_type, f"{annotation!r} is neither a qualifier nor a scope"
                )

        if len(scopes) > 1:
            raise IllegalComponentError(component_type, "more than one scope given")

        scope = scopes[0] if scopes else descriptor.declared_scope()
        bound = Component(component_type, qualifiers[0] if qualifiers else None)
        provider: ComponentProvider = DescriptorProvider(descriptor, bound)
        if scope is not None:
            decorator = self._scopes.get(scope)
            if decorator is None:
                raise IllegalComponentError(component_type, f"scope {scope.__name__} is not registered")
            provider = decorator(provider)

        self._register(component_type, qualifiers, provider)

    def _register(self, component_type: type | Any, qualifiers: Iterable[Any], provider: ComponentProvider) -> None:
        components = [Component(component_type, qualifier) for qualifier in qualifiers]
        if not components:
            components = [Component(component_type)]

        for component in components:
            if component in self._components:
                logger.debug("Rebinding %s, replacing %r", component, self._components[component])
            self._components[component] = provider
            logger.debug("Bound %s to %r", component, provider)
