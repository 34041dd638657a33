"""Domain models used throughout the container."""

import enum
from dataclasses import dataclass, field
from typing import Any, Callable, FrozenSet, Optional, Union

__all__ = [
    "ParameterDescriptor",
    "ConstructorDescriptor",
    "TargetKind",
    "FieldTarget",
    "PropertyTarget",
    "MethodTarget",
    "InjectionTarget",
    "TypeDescriptor",
    "LoggerKey",
]


@dataclass(frozen=True)
class ParameterDescriptor:
    """A single parameter of a constructor or injection method.

    Attributes:
        name: The parameter name in the callable's signature.
        annotation: The declared type with any ``Annotated`` metadata stripped,
            or None if the parameter is not annotated.
        has_default: Whether the signature declares a default value.
        default: The declared default, if any.
        ignored: True if the parameter is annotated with ``InjectIgnore``.
        positional_only: True if the parameter cannot be passed by keyword.
    """

    name: str
    annotation: Optional[Any]
    has_default: bool = False
    default: Any = None
    ignored: bool = False
    positional_only: bool = False


@dataclass(frozen=True)
class ConstructorDescriptor:
    """The constructor chosen for injection.

    Attributes:
        name: ``__init__`` or the name of the alternative constructor classmethod.
        func: The callable invoked to build an instance.
        parameters: Parameters in declaration order.
    """

    name: str
    func: Callable
    parameters: tuple[ParameterDescriptor, ...]


class TargetKind(enum.Enum):
    FIELD = "field"
    PROPERTY = "property"
    METHOD = "method"


@dataclass(frozen=True)
class FieldTarget:
    name: str
    annotation: Any
    required: bool = True
    kind: TargetKind = field(default=TargetKind.FIELD, init=False)


@dataclass(frozen=True)
class PropertyTarget:
    name: str
    annotation: Any
    required: bool = True
    kind: TargetKind = field(default=TargetKind.PROPERTY, init=False)


@dataclass(frozen=True)
class MethodTarget:
    name: str
    parameters: tuple[ParameterDescriptor, ...]
    required: bool = True
    kind: TargetKind = field(default=TargetKind.METHOD, init=False)


InjectionTarget = Union[FieldTarget, PropertyTarget, MethodTarget]


@dataclass(frozen=True)
class TypeDescriptor:
    """Cached metadata about a constructible type.

    Attributes:
        type: The described class.
        constructor: The constructor chosen for injection.
        targets: Members filled after construction, base classes first.
        capabilities: Every base class the type satisfies, excluding itself.
    """

    type: type
    constructor: ConstructorDescriptor
    targets: tuple[InjectionTarget, ...]
    capabilities: FrozenSet[type]


@dataclass(frozen=True)
class LoggerKey:
    """Registry key of the logger binding created for one requester type."""

    requester: Optional[type]
