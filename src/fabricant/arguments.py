"""Matching explicit construction arguments to constructor parameters."""

import logging
from dataclasses import dataclass
from typing import Any

from fabricant.domain import ConstructorDescriptor, ParameterDescriptor
from fabricant.metadata import TypeCatalog, capabilities_of, type_name
from fabricant.options import ContainerOptions

__all__ = ["USE_DEFAULT", "RESOLVE", "ResolvedArguments", "ArgumentResolver"]


class _Slot:
    def __init__(self, name: str):
        self._name = name

    def __repr__(self) -> str:
        return self._name


USE_DEFAULT = _Slot("USE_DEFAULT")
"""The parameter keeps the default declared in its signature."""

RESOLVE = _Slot("RESOLVE")
"""The parameter must be resolved through the container."""


@dataclass(frozen=True)
class ResolvedArguments:
    """The chosen constructor and one value (or slot marker) per parameter.

    Attributes:
        constructor: The constructor to invoke.
        values: Pairs of parameter and either the explicit argument bound to it,
            ``USE_DEFAULT`` or ``RESOLVE``, in declaration order.
    """

    constructor: ConstructorDescriptor
    values: tuple[tuple[ParameterDescriptor, Any], ...]

    @property
    def unresolved(self) -> list[ParameterDescriptor]:
        return [parameter for parameter, value in self.values if value is RESOLVE]


class ArgumentResolver:
    """Assigns explicit arguments to the parameters of a type's constructor.

    Each argument is offered under its exact type and under every capability
    (base class) it implements. When two arguments offer the same capability
    neither is used for it: the capability is dropped and the ambiguity logged,
    so a parameter of that type falls through to container resolution.
    """

    def __init__(self, logger: logging.Logger, options: ContainerOptions, catalog: TypeCatalog):
        self._logger = logger
        self._options = options
        self._catalog = catalog

    def resolve(self, requested: type, arguments: tuple[Any, ...] = ()) -> ResolvedArguments:
        """Match ``arguments`` to the constructor of ``requested``.

        Args:
            requested: The type about to be constructed.
            arguments: Explicit construction arguments, in any order.

        Returns:
            The constructor together with a value or slot marker per parameter.
        """
        constructor = self._catalog.describe(requested).constructor
        direct = self._by_exact_type(requested, arguments)
        expanded = self._by_capability(requested, direct)

        values = []
        for parameter in constructor.parameters:
            if parameter.has_default and not self._options.inject_into_defaults:
                values.append((parameter, USE_DEFAULT))
                continue

            annotation = parameter.annotation
            if annotation in direct:
                values.append((parameter, direct[annotation]))
            elif annotation in expanded:
                values.append((parameter, expanded[annotation]))
            elif parameter.ignored:
                values.append((parameter, USE_DEFAULT))
            else:
                values.append((parameter, RESOLVE))

        return ResolvedArguments(constructor, tuple(values))

    def _by_exact_type(self, requested: type, arguments: tuple[Any, ...]) -> dict[type, Any]:
        direct: dict[type, Any] = {}
        ambiguous: set[type] = set()

        for argument in arguments:
            argument_type = type(argument)
            if argument_type in ambiguous:
                continue
            if argument_type in direct:
                del direct[argument_type]
                ambiguous.add(argument_type)
                self._warn_ambiguous(requested, argument_type)
                continue
            direct[argument_type] = argument

        return direct

    def _by_capability(self, requested: type, direct: dict[type, Any]) -> dict[type, Any]:
        expanded: dict[type, Any] = {}
        ambiguous: set[type] = set()

        for argument_type, argument in direct.items():
            for capability in capabilities_of(argument_type):
                if capability in ambiguous:
                    continue
                if capability in expanded:
                    del expanded[capability]
                    ambiguous.add(capability)
                    self._warn_ambiguous(requested, capability)
                    continue
                expanded[capability] = argument

        return expanded

    def _warn_ambiguous(self, requested: type, capability: type):
        self._logger.warning(
            "Several arguments for %s provide %s, none of them will be injected for it",
            type_name(requested),
            type_name(capability),
        )
