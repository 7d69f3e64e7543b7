"""
Model subpackage containing component identities and binding markers.
"""

from .annotations import Id, Inject, Qualifier, Scope, Singleton, inject, scoped, singleton
from .keys import Component, ComponentRef, Container, Deferred

__all__ = [
    "Component",
    "ComponentRef",
    "Container",
    "Deferred",
    "Id",
    "Inject",
    "Qualifier",
    "Scope",
    "Singleton",
    "inject",
    "scoped",
    "singleton",
]
