"""Decorators attaching declarative metadata to injectors, modules and classes."""

import inspect
from typing import Any, Callable, Hashable, Optional

from bindery.binder import PROVIDES_ATTRIBUTE, ModuleDescriptor
from bindery.errors import DependencyError

__all__ = ["modules", "provides", "implemented_by"]


def set_metadata(target: Any, attribute: str, **kwargs) -> Any:
    metadata = dict(getattr(target, attribute, None) or {})
    metadata.update(kwargs)
    setattr(target, attribute, metadata)
    return target


def modules(*module_classes: Any) -> Callable[[type], type]:
    """Attach modules to an injector interface.

    Each argument is a module class or a
    :class:`~bindery.binder.ModuleDescriptor` carrying its own factory.
    Modules attached to base interfaces are inherited.

    Example:
        >>> @modules(DatabaseModule, ModuleDescriptor(CacheModule, lambda: CacheModule(64)))
        ... class AppInjector(Injector):
        ...     def service(self) -> Service: ...
    """
    descriptors = tuple(ModuleDescriptor.of(m) for m in module_classes)

    def decorator(cls: type) -> type:
        cls.__injector_modules__ = descriptors
        return cls

    return decorator


def provides(qualifier: Optional[Hashable] = None) -> Callable:
    """Mark a module method as a provider for its return type.

    The method's annotated parameters are its dependencies.

    Example:
        >>> class ConfigModule(Module):
        ...     @provides(qualifier="dsn")
        ...     def dsn(self, settings: Settings) -> str:
        ...         return settings.database_url
    """
    if inspect.isfunction(qualifier):
        raise DependencyError("@provides must be called: use @provides()")

    def decorator(func: Callable) -> Callable:
        return set_metadata(func, PROVIDES_ATTRIBUTE, qualifier=qualifier)

    return decorator


def implemented_by(implementation: type) -> Callable[[type], type]:
    """Name the default implementation used when an interface has no explicit binding."""

    def decorator(cls: type) -> type:
        cls.__implemented_by__ = implementation
        return cls

    return decorator
