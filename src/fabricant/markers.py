"""Markers used to declare injection targets.

Constructors and members opt into injection in two ways:

    - Decorators (``inject`` / ``inject_optional``) on an alternative constructor
      classmethod, on ``__init__``, on a property setter or on a plain method.
    - ``Annotated`` metadata (``Inject()`` / ``InjectOptional()``) on class-level
      field annotations, and ``InjectIgnore()`` on constructor parameters the
      container must not try to resolve.

Example:
    >>> class Greeter:
    ...     printer: Annotated[Printer, Inject()]
    ...
    ...     def __init__(self, name: Annotated[str, InjectIgnore()] = "world"):
    ...         self.name = name
    ...
    ...     @inject
    ...     def attach(self, logger: logging.Logger):
    ...         self.logger = logger
"""

from dataclasses import dataclass
from typing import Any, Callable, Optional

__all__ = [
    "Inject",
    "InjectOptional",
    "InjectIgnore",
    "InjectionMarker",
    "inject",
    "inject_optional",
    "marker_of",
]


@dataclass(frozen=True)
class InjectionMarker:
    required: bool = True


@dataclass(frozen=True)
class Inject(InjectionMarker):
    required: bool = True


@dataclass(frozen=True)
class InjectOptional(InjectionMarker):
    required: bool = False


@dataclass(frozen=True)
class InjectIgnore:
    """Excludes a constructor parameter from validation and resolution."""

    pass


def _set_marker(target: Any, marker: InjectionMarker) -> Any:
    func = getattr(target, "__func__", target)
    func.__inject__ = marker
    return target


def inject(target: Callable) -> Callable:
    """Mark a constructor, property setter or method as a required injection target."""
    return _set_marker(target, Inject())


def inject_optional(target: Callable) -> Callable:
    """Mark a property setter or method as an optional injection target."""
    return _set_marker(target, InjectOptional())


def marker_of(target: Any) -> Optional[InjectionMarker]:
    func = getattr(target, "__func__", target)
    return getattr(func, "__inject__", None)
