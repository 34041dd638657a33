"""The container: binding registration, resolution and construction.

Example:
    >>> container = Container()
    >>> container.bind(Greeter, EnglishGreeter).as_singleton()
    >>> container.bind(Lobby).immediate()
    >>> greeter = container.resolve(Greeter)
    >>> widget = container.create(Widget, Colour("red"))
"""

import inspect
import logging
from typing import Any, Optional, TypeVar

from fabricant.arguments import RESOLVE, USE_DEFAULT, ArgumentResolver, ResolvedArguments
from fabricant.bindings import (
    BindingRegistry,
    FactoryBinding,
    FactoryBindingBuilder,
    ObjectBinding,
    ObjectBindingBuilder,
)
from fabricant.domain import LoggerKey
from fabricant.errors import (
    BindingConflict,
    CircularDependency,
    InvalidBindingShape,
    UnresolvableDependency,
)
from fabricant.factories import Factory, InstanceCreator
from fabricant.injection import PostConstructionInjector
from fabricant.lifecycle import LifecycleDriver, UpdateLoop
from fabricant.metadata import (
    TypeCatalog,
    factory_element_type,
    is_assignable,
    is_factory_shaped,
    is_logger,
    type_name,
)
from fabricant.options import ContainerOptions
from fabricant.validation import DependencyValidator

__all__ = ["Container"]

T = TypeVar("T")


class Container(InstanceCreator):
    """Registers bindings and builds objects from them.

    The container binds itself (as ``Container`` and ``InstanceCreator``) and its
    :class:`~fabricant.lifecycle.UpdateLoop`, so both can be injected like any
    other dependency.

    Bindings flagged ``immediate()`` are built by the first ``resolve`` call whose
    sweep finds their dependencies satisfiable; until then they stay pending, so
    start-up code may bind types before the types they depend on.
    """

    def __init__(self, options: Optional[ContainerOptions] = None):
        self._options = options or ContainerOptions()
        self._logger = self._options.logging_provider.get_logger(Container, self._options)
        self._logger.setLevel(self._options.logging_level)
        self._objects: BindingRegistry[ObjectBinding] = BindingRegistry()
        self._factories: BindingRegistry[FactoryBinding] = BindingRegistry()
        self._catalog = TypeCatalog()
        self._validator = DependencyValidator(
            self._logger, self._options, self._objects, self._factories, self._catalog
        )
        self._arguments = ArgumentResolver(self._logger, self._options, self._catalog)
        self._injector = PostConstructionInjector(
            self._logger, self._options, self._catalog, self._resolve_member
        )
        self._update_loop = UpdateLoop()
        self._lifecycle = LifecycleDriver(self._update_loop)
        self._sweeping = False
        self._resolving: list[type] = []

        self.bind(Container, type(self)).from_instance(self)
        self.bind(InstanceCreator, type(self)).from_instance(self)
        self.bind(UpdateLoop).from_instance(self._update_loop)

    @property
    def options(self) -> ContainerOptions:
        return self._options

    @property
    def update_loop(self) -> UpdateLoop:
        return self._update_loop

    def bind(self, interface: Any, concrete: Optional[type] = None) -> ObjectBindingBuilder:
        """Bind a type to the concrete type built when it is requested.

        Args:
            interface: The type dependants request.
            concrete: The class to construct; defaults to ``interface``.

        Returns:
            A builder for configuring the binding.

        Raises:
            BindingConflict: If ``interface`` is already bound.
            InvalidBindingShape: If either type is factory-shaped, ``interface`` is
                bound as a factory, or ``concrete`` is not a subclass of ``interface``.
        """
        concrete = interface if concrete is None else concrete

        if interface in self._objects:
            raise BindingConflict(f"Type {type_name(interface)} is already bound")
        if interface in self._factories:
            raise InvalidBindingShape(
                f"Type {type_name(interface)} is already bound as a factory"
            )
        if is_factory_shaped(interface):
            raise InvalidBindingShape(f"Cannot bind factory {type_name(interface)} as object")
        if is_factory_shaped(concrete):
            raise InvalidBindingShape(f"Cannot bind factory {type_name(concrete)} as object")
        if not is_assignable(concrete, interface):
            raise InvalidBindingShape(
                f"{type_name(concrete)} is not a subclass of {type_name(interface)}"
            )

        binding = ObjectBinding(interface, concrete)
        self._objects.insert(interface, binding)
        return ObjectBindingBuilder(binding)

    def bind_factory(
        self,
        interface: Any,
        concrete: Optional[type] = None,
        produced: Optional[type] = None,
    ) -> FactoryBindingBuilder:
        """Bind a factory-shaped type to the factory class that implements it.

        Args:
            interface: The factory type dependants request.
            concrete: The factory class to construct; defaults to ``interface``.
            produced: The type the factory creates; defaults to the type declared
                by the factory's ``Factory[...]`` base.

        Returns:
            A builder for configuring the binding.

        Raises:
            BindingConflict: If ``interface`` is already bound as a factory.
            InvalidBindingShape: If either type is not factory-shaped, ``interface``
                is bound as an object, or no produced type can be determined.
        """
        concrete = interface if concrete is None else concrete

        if interface in self._factories:
            raise BindingConflict(f"Factory {type_name(interface)} is already bound")
        if interface in self._objects:
            raise InvalidBindingShape(
                f"Type {type_name(interface)} is already bound as an object"
            )
        if not is_factory_shaped(interface):
            raise InvalidBindingShape(f"Cannot bind type {type_name(interface)} as factory")
        if not (inspect.isclass(concrete) and is_factory_shaped(concrete)):
            raise InvalidBindingShape(f"Cannot bind type {type_name(concrete)} as factory")

        produced = produced or factory_element_type(concrete) or factory_element_type(interface)
        if produced is None:
            raise InvalidBindingShape(
                f"Factory {type_name(concrete)} does not declare the type it produces"
            )

        binding = FactoryBinding(interface, concrete, produced)
        self._factories.insert(interface, binding)
        return FactoryBindingBuilder(binding)

    def resolve(
        self,
        requested: type[T],
        requester: Optional[type] = None,
        throw_on_not_found: bool = True,
    ) -> Optional[T]:
        """Return an instance for a requested type.

        Pending immediate bindings are processed first. Loggers are created once
        per requester; factory-shaped types resolve to an explicitly bound or
        automatically synthesised factory; everything else resolves through its
        object binding, reusing singleton instances.

        Args:
            requested: The type to resolve.
            requester: The type asking for it, checked against allowed injectors.
            throw_on_not_found: If False, return None instead of raising
                :class:`UnresolvableDependency`.

        Raises:
            UnresolvableDependency: If no binding or factory is found and
                ``throw_on_not_found`` is True.
            IllegalInjectionAccess: If ``requester`` may not resolve the binding.
            CircularDependency: If construction reaches a dependency cycle.
        """
        self.process_pending_bindings()

        try:
            return self._resolve(requested, requester)
        except UnresolvableDependency:
            if throw_on_not_found:
                raise
            return None

    def create(
        self,
        requested_type: type[T],
        *arguments: Any,
        defer_lifecycle: bool = False,
        throw_on_not_found: bool = True,
    ) -> Optional[T]:
        """Construct a new instance of a concrete type.

        Explicit arguments are matched to constructor parameters by type and by
        the base classes they implement; every other parameter is resolved
        through the container with ``requested_type`` as the requester.

        Args:
            requested_type: The class to construct.
            *arguments: Explicit constructor arguments, in any order.
            defer_lifecycle: If True, awake/start/enable are left to a later
                :meth:`initialise` call.
            throw_on_not_found: If False, return None instead of raising
                :class:`UnresolvableDependency`.

        Returns:
            The new instance.
        """
        try:
            if arguments:
                self._validator.check_circular_injection(requested_type, arguments)
            else:
                self._validator.can_create(requested_type, throw_on_not_found=True)
            return self._create(requested_type, arguments, defer_lifecycle)
        except UnresolvableDependency:
            if throw_on_not_found:
                raise
            return None

    def can_create(self, requested_type: type, throw_on_not_found: bool = False) -> bool:
        return self._validator.can_create(requested_type, throw_on_not_found)

    def inject_into(self, instance: Any):
        """Inject marked members into an object the container did not build.

        Fields, properties and methods are filled exactly as for created
        objects, with the instance's type as the requester. Lifecycle objects
        are attached to the update loop but not started; call :meth:`initialise`
        for that.

        Raises:
            UnresolvableDependency: If a required member cannot be resolved.
        """
        self.process_pending_bindings()
        self._injector.inject_into(instance)
        self._lifecycle.prepare(instance)

    def initialise(self, instance: Any):
        """Run the lifecycle of an instance created with ``defer_lifecycle=True``."""
        self._lifecycle.run(instance)

    def process_pending_bindings(self):
        """Try to build every immediate binding that has not been built yet.

        Bindings whose dependencies are still missing stay pending for the next
        call. Calls made while a sweep is running return immediately.
        """
        if self._sweeping:
            return

        self._sweeping = True
        try:
            for binding in self._objects.values():
                if binding.immediate and not binding.locked:
                    self._process_immediate_binding(binding)
        finally:
            self._sweeping = False

    def _process_immediate_binding(self, binding: ObjectBinding):
        try:
            if not self._validator.can_create(binding.concrete):
                self._trace("Immediate binding for %s deferred", binding.interface)
                return
            created = self._create(binding.concrete, (), defer_lifecycle=False)
        except UnresolvableDependency as error:
            self._trace("Immediate binding for %s deferred: %s", binding.interface, error)
            return

        binding.set_instance(created)
        self._logger.info(
            "Immediate binding for type %s was created", type_name(binding.interface)
        )

    def _resolve(self, requested: Any, requester: Optional[type]) -> Any:
        self._trace("Resolving %s for %s", requested, requester)

        if is_logger(requested):
            return self._resolve_logger(requester)
        if is_factory_shaped(requested):
            return self._resolve_factory(requested, requester)
        return self._resolve_object(requested, requester)

    def _resolve_logger(self, requester: Optional[type]) -> logging.Logger:
        key = LoggerKey(requester)
        binding = self._objects.lookup_exact(key)
        if binding is None:
            logger = self._options.logging_provider.get_logger(requester, self._options)
            binding = ObjectBinding(logging.Logger, type(logger), logger)
            binding.lock()
            self._objects.insert(key, binding)
        return binding.instance

    def _resolve_factory(self, requested: Any, requester: Optional[type]) -> Factory:
        binding = self._factories.find(requested, self._options.structural_lookup)
        if binding is not None:
            self._validator.check_illegal_injection(binding, requester)
            return self._make_factory(binding.concrete, binding.produced)

        if not self._options.use_auto_factories:
            raise UnresolvableDependency(f"No factory is bound for {type_name(requested)}")

        element = factory_element_type(requested)
        if element is None:
            raise UnresolvableDependency(
                f"Factory {type_name(requested)} does not declare the type it produces"
            )
        concrete = requested if inspect.isclass(requested) else Factory
        return self._make_factory(concrete, element)

    def _make_factory(self, concrete: type, produced: type) -> Factory:
        factory = self._create(concrete, (), defer_lifecycle=False)
        factory.bind_product(produced)
        return factory

    def _resolve_object(self, requested: Any, requester: Optional[type]) -> Any:
        binding = self._objects.find(requested, self._options.structural_lookup)
        if binding is None:
            raise UnresolvableDependency(f"Failed to resolve type {type_name(requested)}")

        self._validator.check_illegal_injection(binding, requester)

        if binding.instance is not None:
            return binding.instance

        concrete = binding.concrete
        if concrete in self._resolving:
            chain = " -> ".join(type_name(t) for t in self._resolving + [concrete])
            raise CircularDependency(f"Injected members form a circular dependency: {chain}")

        self._validator.can_create(concrete, throw_on_not_found=True)
        self._resolving.append(concrete)
        try:
            created = self._create(concrete, (), defer_lifecycle=False)
        finally:
            self._resolving.pop()

        if binding.singleton:
            binding.set_instance(created)
        return created

    def _resolve_member(self, requested: Any, requester: type, required: bool) -> Any:
        if requested is None:
            if required:
                raise UnresolvableDependency(
                    f"Injected member of {type_name(requester)} is not annotated"
                )
            return None
        return self.resolve(requested, requester, throw_on_not_found=required)

    def _create(self, requested: type, arguments: tuple[Any, ...], defer_lifecycle: bool) -> Any:
        resolved = self._arguments.resolve(requested, arguments)
        args, kwargs = self._call_arguments(requested, resolved)

        created = resolved.constructor.func(*args, **kwargs)
        self._injector.inject_into(created)
        self._lifecycle.prepare(created)

        if not defer_lifecycle:
            self._lifecycle.run(created)
        return created

    def _call_arguments(
        self, requested: type, resolved: ResolvedArguments
    ) -> tuple[list[Any], dict[str, Any]]:
        args = []
        kwargs = {}

        for parameter, value in resolved.values:
            if value is USE_DEFAULT:
                if not parameter.has_default:
                    raise UnresolvableDependency(
                        f"Ignored parameter '{parameter.name}' of {type_name(requested)} "
                        "has no default and no explicit argument"
                    )
                if parameter.positional_only:
                    args.append(parameter.default)
                continue

            if value is RESOLVE:
                if parameter.annotation is None:
                    raise UnresolvableDependency(
                        f"Parameter '{parameter.name}' of {type_name(requested)} is not annotated"
                    )
                value = self.resolve(parameter.annotation, requested, throw_on_not_found=True)

            if parameter.positional_only:
                args.append(value)
            else:
                kwargs[parameter.name] = value

        return args, kwargs

    def _trace(self, message: str, *args: Any):
        if self._options.log_tracing:
            self._logger.debug(message, *args)
