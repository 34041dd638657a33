"""Object and factory bindings, their builders, and the registry holding them.

A binding maps a requested (interface) type to the concrete type the container
builds for it, together with the policy used to build it. Object bindings move
through a small state machine:

    UNBOUND ──configure──▶ CONFIGURED ──lock──▶ LOCKED
       └──────────────────lock─────────────────────┘

Assigning an instance always locks the binding; once locked, its singleton flag
and instance can no longer change.
"""

import enum
from dataclasses import dataclass, field
from typing import Any, Generic, Hashable, Iterator, Optional, TypeVar, Union

from fabricant.errors import BindingConflict, InvalidBindingShape
from fabricant.metadata import is_assignable, type_name

__all__ = [
    "BindingState",
    "ObjectBinding",
    "FactoryBinding",
    "ObjectBindingBuilder",
    "FactoryBindingBuilder",
    "BindingRegistry",
]


class BindingState(enum.Enum):
    UNBOUND = "unbound"
    CONFIGURED = "configured"
    LOCKED = "locked"


_TRANSITIONS: dict[BindingState, frozenset[BindingState]] = {
    BindingState.UNBOUND: frozenset({BindingState.CONFIGURED, BindingState.LOCKED}),
    BindingState.CONFIGURED: frozenset({BindingState.CONFIGURED, BindingState.LOCKED}),
    BindingState.LOCKED: frozenset(),
}


class ObjectBinding:
    """Registry entry for a type resolved to an object."""

    def __init__(self, interface: Any, concrete: type, instance: Any = None):
        self.interface = interface
        self.concrete = concrete
        self.immediate = False
        self.allowed_injectors: list[type] = []
        self._singleton = False
        self._instance = None
        self._state = BindingState.UNBOUND
        if instance is not None:
            self.set_instance(instance)

    def __repr__(self) -> str:
        return (
            f"ObjectBinding({type_name(self.interface)} -> {type_name(self.concrete)}, "
            f"state={self._state.value})"
        )

    @property
    def state(self) -> BindingState:
        return self._state

    @property
    def locked(self) -> bool:
        return self._state is BindingState.LOCKED

    @property
    def singleton(self) -> bool:
        return self._singleton

    @property
    def instance(self) -> Any:
        return self._instance

    def set_singleton(self, value: bool):
        if value == self._singleton:
            return
        self._transition(BindingState.CONFIGURED, "change singleton setting of")
        self._singleton = value

    def set_instance(self, value: Any):
        if value is None:
            raise InvalidBindingShape(
                f"Cannot assign None as the instance of {type_name(self.interface)}"
            )
        if value is self._instance:
            return
        self._transition(BindingState.LOCKED, "assign instance to")
        self._singleton = True
        self._instance = value

    def set_immediate(self):
        self.immediate = True
        if not self.locked:
            self._state = BindingState.CONFIGURED

    def lock(self):
        self._state = BindingState.LOCKED

    def _transition(self, target: BindingState, action: str):
        if target not in _TRANSITIONS[self._state]:
            raise BindingConflict(
                f"Cannot {action} binding for {type_name(self.interface)} "
                f"after it has been locked"
            )
        self._state = target


@dataclass
class FactoryBinding:
    """Registry entry for a factory-shaped type.

    Attributes:
        interface: The factory type requested by dependants.
        concrete: The factory class the container instantiates.
        produced: The type the factory creates.
        allowed_injectors: Requester types allowed to resolve this binding.
    """

    interface: Any
    concrete: type
    produced: type
    allowed_injectors: list[type] = field(default_factory=list)


class ObjectBindingBuilder:
    """Fluent configuration of an :class:`ObjectBinding`.

    Example:
        >>> container.bind(Greeter, EnglishGreeter).as_singleton().when_injected_into(Lobby)
    """

    def __init__(self, binding: ObjectBinding):
        self._binding = binding

    @property
    def binding(self) -> ObjectBinding:
        return self._binding

    def as_singleton(self) -> "ObjectBindingBuilder":
        self._binding.set_singleton(True)
        return self

    def immediate(self) -> "ObjectBindingBuilder":
        self._binding.set_immediate()
        return self

    def when_injected_into(self, *allowed: type) -> "ObjectBindingBuilder":
        self._binding.allowed_injectors.extend(allowed)
        return self

    def from_instance(self, value: Any) -> "ObjectBindingBuilder":
        self._binding.set_instance(value)
        return self


class FactoryBindingBuilder:
    def __init__(self, binding: FactoryBinding):
        self._binding = binding

    @property
    def binding(self) -> FactoryBinding:
        return self._binding

    def when_injected_into(self, *allowed: type) -> "FactoryBindingBuilder":
        self._binding.allowed_injectors.extend(allowed)
        return self


B = TypeVar("B", ObjectBinding, FactoryBinding)


class BindingRegistry(Generic[B]):
    """Bindings keyed by requested type, with exact and structural lookup.

    Structural lookup matches a requested class against every bound class it
    is a subclass of, and only succeeds when exactly one binding qualifies.
    Zero or several candidates are not an error; the lookup simply misses.
    """

    def __init__(self):
        self._bindings: dict[Hashable, B] = {}

    def __contains__(self, key: Hashable) -> bool:
        return key in self._bindings

    def __len__(self) -> int:
        return len(self._bindings)

    def __iter__(self) -> Iterator[Hashable]:
        return iter(self._bindings)

    def values(self) -> list[B]:
        return list(self._bindings.values())

    def insert(self, key: Hashable, binding: B):
        if key in self._bindings:
            raise BindingConflict(f"Type {type_name(key)} is already bound")
        self._bindings[key] = binding

    def lookup_exact(self, key: Hashable) -> Optional[B]:
        return self._bindings.get(key)

    def lookup_assignable(self, requested: Any) -> Optional[B]:
        candidates = [
            binding
            for key, binding in self._bindings.items()
            if is_assignable(requested, key)
        ]
        return candidates[0] if len(candidates) == 1 else None

    def find(self, requested: Hashable, structural: bool = False) -> Optional[B]:
        binding = self.lookup_exact(requested)
        if binding is None and structural:
            binding = self.lookup_assignable(requested)
        return binding


AnyBinding = Union[ObjectBinding, FactoryBinding]
