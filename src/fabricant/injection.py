"""Filling injection targets of an object after it has been constructed."""

import logging
from typing import Any, Callable, Optional

from fabricant.domain import InjectionTarget, MethodTarget
from fabricant.metadata import TypeCatalog, type_name
from fabricant.options import ContainerOptions

__all__ = ["PostConstructionInjector"]

Resolve = Callable[[Any, Optional[type], bool], Any]


class PostConstructionInjector:
    """Injects fields, properties and methods marked for injection.

    Each target is resolved with the same rules as constructor parameters, with
    the instance's type as the requester. Required targets that cannot be
    resolved raise :class:`~fabricant.errors.UnresolvableDependency`; optional
    ones are left untouched.
    """

    def __init__(
        self,
        logger: logging.Logger,
        options: ContainerOptions,
        catalog: TypeCatalog,
        resolve: Resolve,
    ):
        self._logger = logger
        self._options = options
        self._catalog = catalog
        self._resolve = resolve

    def inject_into(self, instance: Any):
        requester = type(instance)
        for target in self._catalog.describe(requester).targets:
            if isinstance(target, MethodTarget):
                self._inject_method(instance, target)
            else:
                self._inject_member(instance, target)

    def _inject_member(self, instance: Any, target: InjectionTarget):
        value = self._resolve(target.annotation, type(instance), target.required)
        if value is None:
            self._skipped(instance, target)
            return
        setattr(instance, target.name, value)

    def _inject_method(self, instance: Any, target: MethodTarget):
        args = []
        kwargs = {}

        for parameter in target.parameters:
            if parameter.ignored or (
                parameter.has_default and not self._options.inject_into_defaults
            ):
                if parameter.positional_only and parameter.has_default:
                    args.append(parameter.default)
                continue

            value = self._resolve(parameter.annotation, type(instance), target.required)
            if value is None:
                self._skipped(instance, target)
                return

            if parameter.positional_only:
                args.append(value)
            else:
                kwargs[parameter.name] = value

        getattr(instance, target.name)(*args, **kwargs)

    def _skipped(self, instance: Any, target: InjectionTarget):
        if self._options.log_tracing:
            self._logger.debug(
                "Optional %s %s.%s left unresolved",
                target.kind.value,
                type_name(type(instance)),
                target.name,
            )
