"""Logging providers supplying a standard library logger per requester type."""

import logging
from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Optional

if TYPE_CHECKING:
    from fabricant.options import ContainerOptions

__all__ = ["LoggingProvider", "DefaultLoggingProvider"]


class LoggingProvider(ABC):
    """Supplies the logger injected wherever a ``logging.Logger`` is requested."""

    @abstractmethod
    def get_logger(
        self, requester: Optional[type], options: "ContainerOptions"
    ) -> logging.Logger:
        pass


class DefaultLoggingProvider(LoggingProvider):
    """Names loggers after the requester's module and qualified name.

    Levels and handlers are left to the application's logging configuration.
    """

    def get_logger(
        self, requester: Optional[type], options: "ContainerOptions"
    ) -> logging.Logger:
        if requester is None:
            name = "fabricant"
        else:
            name = f"{requester.__module__}.{requester.__qualname__}"
        return logging.getLogger(name)
