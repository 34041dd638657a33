"""Creatability checks, cycle detection and injection access control."""

import inspect
import logging
from typing import Any, Iterable, Optional

from fabricant.bindings import AnyBinding, BindingRegistry, FactoryBinding, ObjectBinding
from fabricant.domain import ParameterDescriptor
from fabricant.errors import CircularDependency, IllegalInjectionAccess, UnresolvableDependency
from fabricant.metadata import (
    TypeCatalog,
    factory_element_type,
    is_assignable,
    is_factory_shaped,
    is_logger,
    type_name,
)
from fabricant.options import ContainerOptions

__all__ = ["DependencyValidator"]


class DependencyValidator:
    """Decides whether the container can build a type from its current bindings.

    Positive verdicts are memoised in the creatable-type cache. Negative and
    circular verdicts never are: bindings registered later may make a type
    creatable, or break a cycle by supplying an instance.
    """

    def __init__(
        self,
        logger: logging.Logger,
        options: ContainerOptions,
        objects: BindingRegistry[ObjectBinding],
        factories: BindingRegistry[FactoryBinding],
        catalog: TypeCatalog,
    ):
        self._logger = logger
        self._options = options
        self._objects = objects
        self._factories = factories
        self._catalog = catalog
        self._creatable: set[type] = set()
        self._evaluating: set[type] = set()

    @property
    def creatable_types(self) -> frozenset[type]:
        return frozenset(self._creatable)

    def can_create(self, requested: type, throw_on_not_found: bool = False) -> bool:
        """Check that every injected constructor parameter of a type can be satisfied.

        Args:
            requested: The concrete type to check.
            throw_on_not_found: Raise instead of returning False when a parameter
                cannot be satisfied.

        Returns:
            True if the container can build the type.

        Raises:
            CircularDependency: If a parameter's constructor graph leads back to
                ``requested``. Raised regardless of ``throw_on_not_found``.
            UnresolvableDependency: If ``requested`` is abstract or not a class,
                or in strict mode when a parameter cannot be satisfied.
        """
        if requested in self._creatable:
            return True

        self._require_constructible(requested)

        if requested in self._evaluating:
            # reached again through a factory producing the type itself
            return True

        self._evaluating.add(requested)
        try:
            missing = [
                parameter.name
                for parameter in self._injected_parameters(requested)
                if not self._can_satisfy(requested, parameter, throw_on_not_found)
            ]
        finally:
            self._evaluating.discard(requested)

        if missing:
            message = (
                f"Type {type_name(requested)} cannot be created by the container, "
                f"unresolvable parameters: {missing}"
            )
            if throw_on_not_found:
                raise UnresolvableDependency(message)
            if self._options.log_tracing:
                self._logger.debug(message)
            return False

        self._creatable.add(requested)
        return True

    def check_circular_injection(self, requested: type, arguments: Iterable[Any]):
        """Check a type built with explicit arguments for constructor cycles.

        Parameters satisfied by an explicit argument are not walked.

        Raises:
            CircularDependency: If a remaining parameter leads back to ``requested``.
        """
        self._require_constructible(requested)
        argument_types = [type(argument) for argument in arguments]

        for parameter in self._injected_parameters(requested):
            if any(is_assignable(t, parameter.annotation) for t in argument_types):
                continue
            self._check_circular(requested, parameter)

    def check_illegal_injection(self, binding: AnyBinding, requester: Optional[type]):
        """Enforce a binding's allowed injector list.

        Raises:
            IllegalInjectionAccess: If ``requester`` is not a subclass of any
                allowed injector.
        """
        if requester is None or not binding.allowed_injectors:
            return

        if not any(is_assignable(requester, allowed) for allowed in binding.allowed_injectors):
            raise IllegalInjectionAccess(
                f"{type_name(requester)} requested {type_name(binding.interface)} "
                f"when it is not allowed to"
            )

    def _can_satisfy(self, requested: type, parameter: ParameterDescriptor, throw: bool) -> bool:
        self._check_circular(requested, parameter)
        return self._can_inject_as_object(parameter.annotation) or self._can_inject_as_factory(
            parameter.annotation, throw
        )

    def _can_inject_as_object(self, target: Any) -> bool:
        if target is None:
            return False
        return is_logger(target) or (
            self._objects.find(target, self._options.structural_lookup) is not None
        )

    def _can_inject_as_factory(self, target: Any, throw: bool) -> bool:
        if target is None:
            return False

        if self._factories.find(target, self._options.structural_lookup) is not None:
            return True

        if not (self._options.use_auto_factories and is_factory_shaped(target)):
            return False

        element = factory_element_type(target)
        if element is None:
            self._logger.warning(
                "Factory %s does not declare the type it produces", type_name(target)
            )
            return False

        if inspect.isabstract(element) and not throw:
            return False

        return self.can_create(element, throw)

    def _check_circular(self, requested: type, parameter: ParameterDescriptor):
        if self._in_dependency_tree(parameter.annotation, requested):
            raise CircularDependency(
                f"Requested type {type_name(requested)} contains a circular dependency "
                f"through parameter '{parameter.name}'"
            )

    def _in_dependency_tree(self, start: Any, root: type) -> bool:
        pending = [start]
        visited: set[type] = set()

        while pending:
            target = self._walk_target(pending.pop())
            if target is None or target in visited:
                continue
            if target is root:
                return True
            visited.add(target)
            pending.extend(p.annotation for p in self._injected_parameters(target))

        return False

    def _walk_target(self, target: Any) -> Optional[type]:
        """Map a parameter type to the concrete type the container would build for it.

        Returns None where construction stops: pre-supplied instances, loggers,
        factories (which build lazily), builtins, abstract unbound types and
        types whose constructor cannot be inspected.
        """
        if target is None or is_logger(target) or is_factory_shaped(target):
            return None

        binding = self._objects.find(target, self._options.structural_lookup)
        if binding is not None:
            return binding.concrete if binding.instance is None else None

        if not (
            inspect.isclass(target)
            and target.__module__ != "builtins"
            and not inspect.isabstract(target)
        ):
            return None

        try:
            self._catalog.describe(target)
        except UnresolvableDependency as error:
            # not constructible, so nothing below it can be reached
            if self._options.log_tracing:
                self._logger.debug("Dependency walk stops at %s: %s", type_name(target), error)
            return None
        return target

    def _injected_parameters(self, target: type) -> list[ParameterDescriptor]:
        return [
            parameter
            for parameter in self._catalog.describe(target).constructor.parameters
            if not parameter.ignored
            and not (parameter.has_default and not self._options.inject_into_defaults)
        ]

    @staticmethod
    def _require_constructible(requested: Any):
        if not inspect.isclass(requested) or inspect.isabstract(requested):
            raise UnresolvableDependency(
                f"Cannot create an instance of {type_name(requested)}"
            )
