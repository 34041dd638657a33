__all__ = [
    "DependencyError",
    "BindingConflict",
    "InvalidBindingShape",
    "UnresolvableDependency",
    "CircularDependency",
    "IllegalInjectionAccess",
    "LifecycleError",
]


class DependencyError(Exception):
    """Base class for every error raised by the container."""

    pass


class BindingConflict(DependencyError):
    """Raised when a type is bound twice, or a locked binding is modified."""

    pass


class InvalidBindingShape(DependencyError):
    """Raised when a factory is bound as an object or an object as a factory."""

    pass


class UnresolvableDependency(DependencyError):
    """Raised when a requested type or constructor parameter cannot be resolved."""

    pass


class CircularDependency(DependencyError):
    """Raised when a type's constructor graph leads back to the type itself."""

    pass


class IllegalInjectionAccess(DependencyError):
    """Raised when a requester is not on a binding's allowed injector list."""

    pass


class LifecycleError(DependencyError):
    """Raised on an invalid lifecycle transition."""

    pass
