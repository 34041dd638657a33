"""Settings controlling container features."""

import logging
from dataclasses import dataclass, field

from fabricant.logging_provider import DefaultLoggingProvider, LoggingProvider

__all__ = ["ContainerOptions"]


@dataclass(frozen=True)
class ContainerOptions:
    """Container configuration.

    Attributes:
        use_auto_factories: Synthesise a ``Factory[T]`` for factory-shaped
            requests that have no explicit factory binding.
        inject_into_defaults: Resolve constructor parameters that declare a
            default value instead of leaving the default in place.
        structural_lookup: Fall back to the unique binding whose interface the
            requested type is a subclass of when no exact binding exists.
        logging_level: Level applied to the container's own logger.
        log_tracing: Log every resolution at debug level.
        logging_provider: Supplies loggers for the container and for injection.
    """

    use_auto_factories: bool = True
    inject_into_defaults: bool = False
    structural_lookup: bool = False
    logging_level: int = logging.WARNING
    log_tracing: bool = False
    logging_provider: LoggingProvider = field(default_factory=DefaultLoggingProvider)
