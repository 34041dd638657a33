"""Factories producing instances on demand through the container."""

from abc import ABC, abstractmethod
from typing import Any, Generic, Optional, TypeVar

from fabricant.errors import InvalidBindingShape

__all__ = ["InstanceCreator", "Factory"]

T = TypeVar("T")


class InstanceCreator(ABC):
    """The part of the container a factory needs to build instances."""

    @abstractmethod
    def create(
        self,
        requested_type: type,
        *arguments: Any,
        defer_lifecycle: bool = False,
        throw_on_not_found: bool = True,
    ) -> Any:
        pass


class Factory(Generic[T]):
    """Builds instances of its produced type through the full container create path.

    Requesting ``Factory[Widget]`` without an explicit factory binding yields an
    automatically synthesised factory when auto-factories are enabled. Subclasses
    bound with ``bind_factory`` may add their own constructor dependencies.

    Example:
        >>> class Spawner:
        ...     def __init__(self, widgets: Factory[Widget]):
        ...         self._widgets = widgets
        ...
        ...     def spawn(self) -> Widget:
        ...         return self._widgets.create()
    """

    def __init__(self, container: InstanceCreator):
        self._container = container
        self._produced_type: Optional[type] = None

    @property
    def produced_type(self) -> Optional[type]:
        return self._produced_type

    def bind_product(self, produced_type: type):
        self._produced_type = produced_type

    def create(self, *arguments: Any, defer_lifecycle: bool = False) -> T:
        """Create an instance of the produced type.

        Args:
            *arguments: Explicit constructor arguments, matched by type.
            defer_lifecycle: If True, lifecycle hooks are not run.

        Returns:
            The created instance.
        """
        if self._produced_type is None:
            raise InvalidBindingShape(f"Factory {type(self).__name__} has no produced type")
        return self._container.create(
            self._produced_type, *arguments, defer_lifecycle=defer_lifecycle
        )

    def create_as(self, concrete: type, *arguments: Any, defer_lifecycle: bool = False) -> T:
        """Create an instance of a subclass of the produced type."""
        if self._produced_type is None or not issubclass(concrete, self._produced_type):
            raise InvalidBindingShape(
                f"{concrete.__name__} is not assignable to {self._produced_type}"
            )
        return self._container.create(concrete, *arguments, defer_lifecycle=defer_lifecycle)
