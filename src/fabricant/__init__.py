"""Fabricant dependency injection container.

Fabricant builds objects at runtime from a registry of type bindings. It checks
that a requested type can be built before building it, resolves constructor
dependencies recursively, injects marked members after construction and drives
a fixed lifecycle (awake, start, enable) on objects that opt into one.

Key Features:
    - Interface to implementation bindings with singleton, immediate and
      access-restricted policies
    - Constructor injection driven by standard type hints, with cycle detection
    - Explicit construction arguments matched by type and by base class
    - Field, property and method injection via ``Annotated`` markers and decorators
    - Explicit and automatically synthesised factories
    - Per-requester loggers from a pluggable logging provider

Basic Usage:
    >>> from fabricant import Container
    >>>
    >>> container = Container()
    >>> container.bind(Greeter, EnglishGreeter).as_singleton()
    >>> container.bind(Lobby)
    >>>
    >>> lobby = container.resolve(Lobby)

The package consists of several modules:
    - container: The container façade (binding, resolution, construction)
    - bindings: Binding records, builders and the binding registry
    - validation: Creatability checks, cycle detection and access control
    - arguments: Matching explicit arguments to constructor parameters
    - injection: Post-construction member injection
    - lifecycle: Lifecycle objects, the lifecycle driver and the update loop
    - factories: Factories producing instances through the container
    - metadata: Cached introspection of constructible types
    - markers: Injection markers and decorators
    - options: Container settings
    - logging_provider: Loggers injected into requesting types
    - errors: Framework-specific exceptions
"""

from fabricant.bindings import BindingState
from fabricant.container import Container
from fabricant.errors import (
    BindingConflict,
    CircularDependency,
    DependencyError,
    IllegalInjectionAccess,
    InvalidBindingShape,
    LifecycleError,
    UnresolvableDependency,
)
from fabricant.factories import Factory, InstanceCreator
from fabricant.lifecycle import LifecycleObject, LifecycleState, UpdateLoop
from fabricant.logging_provider import DefaultLoggingProvider, LoggingProvider
from fabricant.markers import Inject, InjectIgnore, InjectOptional, inject, inject_optional
from fabricant.options import ContainerOptions

__all__ = [
    "BindingConflict",
    "BindingState",
    "CircularDependency",
    "Container",
    "ContainerOptions",
    "DefaultLoggingProvider",
    "DependencyError",
    "Factory",
    "IllegalInjectionAccess",
    "Inject",
    "InjectIgnore",
    "InjectOptional",
    "InstanceCreator",
    "InvalidBindingShape",
    "LifecycleError",
    "LifecycleObject",
    "LifecycleState",
    "LoggingProvider",
    "UnresolvableDependency",
    "UpdateLoop",
    "inject",
    "inject_optional",
]
