"""
wirecore - a small inversion-of-control container.

Bindings are collected in a ContextConfig; finalizing it validates the whole
dependency graph (missing dependencies and cycles) and yields a Context that
builds fully wired instances on demand:

    config = ContextConfig()
    config.bind_instance(Settings, Settings())
    config.bind_type(Service, ServiceImpl, Singleton)
    service = config.finalize().get(Service)

Deferred[T] dependencies are resolved lazily and may legitimately close a
cycle; qualifiers (e.g. Id("primary")) keep several bindings of one type apart.
"""

from .config import ContextConfig
from .context import Context
from .descriptor import Descriptor, FunctionDescriptor, InjectableDescriptor
from .errors import ContainerError, CyclicDependencyError, DependencyNotFoundError, IllegalComponentError
from .model import (
    Component,
    ComponentRef,
    Container,
    Deferred,
    Id,
    Inject,
    Qualifier,
    Scope,
    Singleton,
    inject,
    scoped,
    singleton,
)
from .providers import ComponentProvider, DescriptorProvider, InstanceProvider, ScopeDecorator, SingletonProvider

__all__ = [
    "Component",
    "ComponentProvider",
    "ComponentRef",
    "Container",
    "ContainerError",
    "Context",
    "ContextConfig",
    "CyclicDependencyError",
    "Deferred",
    "DependencyNotFoundError",
    "Descriptor",
    "DescriptorProvider",
    "FunctionDescriptor",
    "Id",
    "IllegalComponentError",
    "Inject",
    "InjectableDescriptor",
    "InstanceProvider",
    "Qualifier",
    "Scope",
    "ScopeDecorator",
    "Singleton",
    "SingletonProvider",
    "inject",
    "scoped",
    "singleton",
]
