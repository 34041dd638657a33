"""Introspection of constructible types into cached :class:`TypeDescriptor` objects.

Constructor signatures, injection targets and capability sets are read once per
type and kept in a :class:`TypeCatalog` owned by the container, so resolution
never re-inspects a class it has already seen.
"""

import inspect
import logging
from abc import ABC
from typing import (
    Annotated,
    Any,
    Callable,
    Generic,
    Optional,
    Protocol,
    get_args,
    get_origin,
    get_type_hints,
)

from fabricant.domain import (
    ConstructorDescriptor,
    FieldTarget,
    InjectionTarget,
    MethodTarget,
    ParameterDescriptor,
    PropertyTarget,
    TypeDescriptor,
)
from fabricant.errors import UnresolvableDependency
from fabricant.factories import Factory
from fabricant.markers import InjectIgnore, InjectionMarker, marker_of

__all__ = [
    "TypeCatalog",
    "is_assignable",
    "is_factory_shaped",
    "is_logger",
    "factory_element_type",
    "type_name",
    "capabilities_of",
]


def type_name(target: Any) -> str:
    if inspect.isclass(target):
        return target.__qualname__
    return str(target)


def is_assignable(sub: Any, sup: Any) -> bool:
    """True if ``sub`` is a class and a subclass of the class ``sup``."""
    if not (inspect.isclass(sub) and inspect.isclass(sup)):
        return False
    try:
        return issubclass(sub, sup)
    except TypeError:
        # non-runtime protocols refuse issubclass checks
        return sup in sub.__mro__


def is_logger(target: Any) -> bool:
    return is_assignable(target, logging.Logger)


def is_factory_shaped(target: Any) -> bool:
    """True for ``Factory`` subclasses and parameterised aliases like ``Factory[Widget]``."""
    return is_assignable(get_origin(target) or target, Factory)


def factory_element_type(target: Any) -> Optional[type]:
    """Return the type a factory-shaped type produces, if it declares one.

    Example:
        >>> factory_element_type(Factory[Widget])   # Widget
        >>> class WidgetFactory(Factory[Widget]): ...
        >>> factory_element_type(WidgetFactory)     # Widget
        >>> factory_element_type(Factory)           # None
    """
    origin = get_origin(target)
    if origin is not None and is_assignable(origin, Factory):
        args = get_args(target)
        return args[0] if args and inspect.isclass(args[0]) else None

    if not inspect.isclass(target):
        return None

    for klass in target.__mro__:
        for base in getattr(klass, "__orig_bases__", ()):
            element = factory_element_type(base) if get_origin(base) else None
            if element is not None:
                return element
    return None


_NOT_CAPABILITIES = (object, Generic, Protocol, ABC)


def capabilities_of(cls: type) -> frozenset[type]:
    """Every base class ``cls`` satisfies, excluding itself and marker bases such as ``ABC``."""
    return frozenset(klass for klass in cls.__mro__[1:] if klass not in _NOT_CAPABILITIES)


def _split_annotation(annotation: Any) -> tuple[Any, list[Any]]:
    if get_origin(annotation) is Annotated:
        base_type, *metadata = get_args(annotation)
        return base_type, metadata
    return annotation, []


def _hints(target: Any, owner: Any) -> dict[str, Any]:
    try:
        return get_type_hints(target, include_extras=True)
    except NameError as error:
        raise UnresolvableDependency(
            f"Cannot evaluate annotations of {type_name(owner)}: {error}"
        ) from error


def _signature(target: Callable, owner: Any) -> inspect.Signature:
    try:
        return inspect.signature(target)
    except (TypeError, ValueError) as error:
        raise UnresolvableDependency(
            f"Cannot inspect constructor of {type_name(owner)}"
        ) from error


def _make_parameters(
    signature: inspect.Signature, hints: dict[str, Any]
) -> tuple[ParameterDescriptor, ...]:
    parameters = []
    for name, parameter in signature.parameters.items():
        if parameter.kind in (parameter.VAR_POSITIONAL, parameter.VAR_KEYWORD):
            continue

        annotation, metadata = _split_annotation(hints.get(name))
        has_default = parameter.default is not parameter.empty
        parameters.append(
            ParameterDescriptor(
                name,
                annotation,
                has_default,
                parameter.default if has_default else None,
                any(isinstance(m, InjectIgnore) for m in metadata),
                parameter.kind is parameter.POSITIONAL_ONLY,
            )
        )
    return tuple(parameters)


def _method_parameters(func: Callable, owner: type) -> tuple[ParameterDescriptor, ...]:
    signature = _signature(func, owner)
    # drop self
    unbound = signature.replace(parameters=list(signature.parameters.values())[1:])
    return _make_parameters(unbound, _hints(func, owner))


class TypeCatalog:
    """Builds and caches a :class:`TypeDescriptor` per type."""

    def __init__(self):
        self._descriptors: dict[type, TypeDescriptor] = {}

    def __contains__(self, item: type) -> bool:
        return item in self._descriptors

    def describe(self, cls: type) -> TypeDescriptor:
        """Return the cached descriptor for ``cls``, building it on first use.

        Raises:
            UnresolvableDependency: If ``cls`` is not a class or its annotations
                cannot be evaluated.
        """
        descriptor = self._descriptors.get(cls)
        if descriptor is None:
            if not inspect.isclass(cls):
                raise UnresolvableDependency(f"{cls!r} is not a class")
            descriptor = TypeDescriptor(
                cls,
                self._select_constructor(cls),
                self._injection_targets(cls),
                capabilities_of(cls),
            )
            self._descriptors[cls] = descriptor
        return descriptor

    def _select_constructor(self, cls: type) -> ConstructorDescriptor:
        """Choose the constructor used for injection.

        An alternative constructor classmethod marked with ``@inject`` wins over
        ``__init__``. Classes are searched in MRO order and members in
        declaration order, so the choice is deterministic.
        """
        for klass in cls.__mro__:
            for name, member in vars(klass).items():
                if isinstance(member, classmethod) and marker_of(member) is not None:
                    bound = getattr(cls, name)
                    return ConstructorDescriptor(
                        name,
                        bound,
                        _make_parameters(
                            _signature(bound, cls), _hints(member.__func__, cls)
                        ),
                    )

        init = cls.__init__
        hints = _hints(init, cls) if inspect.isfunction(init) else {}
        return ConstructorDescriptor(
            "__init__", cls, _make_parameters(_signature(cls, cls), hints)
        )

    def _injection_targets(self, cls: type) -> tuple[InjectionTarget, ...]:
        targets: dict[str, InjectionTarget] = {}

        for name, hint in _hints(cls, cls).items():
            annotation, metadata = _split_annotation(hint)
            marker = next((m for m in metadata if isinstance(m, InjectionMarker)), None)
            ignored = any(isinstance(m, InjectIgnore) for m in metadata)
            if marker is not None and not ignored:
                targets[name] = FieldTarget(name, annotation, marker.required)

        for klass in reversed(cls.__mro__):
            if klass is object:
                continue
            for name, member in vars(klass).items():
                target = self._member_target(cls, name, member)
                if target is not None:
                    targets[name] = target
                elif name in targets and not isinstance(targets[name], FieldTarget):
                    # overridden without a marker
                    del targets[name]

        return tuple(targets.values())

    def _member_target(self, cls: type, name: str, member: Any) -> Optional[InjectionTarget]:
        if isinstance(member, property):
            marker = marker_of(member.fset) if member.fset else None
            if marker is None:
                return None
            parameters = _method_parameters(member.fset, cls)
            if len(parameters) != 1:
                raise UnresolvableDependency(
                    f"Injected property {type_name(cls)}.{name} must take exactly one value"
                )
            return PropertyTarget(name, parameters[0].annotation, marker.required)

        if inspect.isfunction(member) and name != "__init__":
            marker = marker_of(member)
            if marker is None:
                return None
            return MethodTarget(name, _method_parameters(member, cls), marker.required)

        return None
