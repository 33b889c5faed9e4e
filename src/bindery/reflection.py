"""Introspection of injector interfaces, modules and injectable classes.

Everything the resolver knows about Python declarations goes through
:class:`Reflection`, so tests and tools can substitute their own view of a
type hierarchy.
"""

import inspect
from dataclasses import dataclass
from typing import Any, Callable, TypeVar, get_origin, get_type_hints

from bindery.binder import Module
from bindery.domain import ASSISTED, INJECT, Key, has_marker
from bindery.errors import DependencyError, ModuleInstantiationError

__all__ = ["MethodDescriptor", "Reflection", "VOID"]

VOID = type(None)

_NON_INJECTABLE = frozenset(
    {int, float, complex, str, bytes, bool, list, tuple, dict, set, frozenset, object, VOID, inspect.Parameter.empty}
)


@dataclass(frozen=True)
class MethodDescriptor:
    """A public method declared on an interface.

    Attributes:
        owner: The class the method was declared on.
        name: The method name.
        parameters: ``(name, annotation)`` pairs, excluding ``self``. Unannotated
            parameters carry ``inspect.Parameter.empty``.
        return_type: The return annotation; :data:`VOID` when absent or ``None``.
    """

    owner: type
    name: str
    parameters: tuple[tuple[str, Any], ...]
    return_type: Any

    @property
    def parameter_types(self) -> tuple[Any, ...]:
        return tuple(annotation for _, annotation in self.parameters)

    @property
    def returns_void(self) -> bool:
        return self.return_type is VOID

    def __str__(self) -> str:
        params = ", ".join(f"{name}: {_type_name(annotation)}" for name, annotation in self.parameters)
        return f"{self.owner.__qualname__}.{self.name}({params}) -> {_type_name(self.return_type)}"


def _type_name(annotation: Any) -> str:
    if annotation is inspect.Parameter.empty:
        return "?"
    if annotation is VOID:
        return "None"
    return getattr(annotation, "__qualname__", None) or repr(annotation)


def _hints(func: Callable, owner: Any) -> dict[str, Any]:
    try:
        return get_type_hints(func, include_extras=True)
    except (NameError, TypeError) as e:
        raise DependencyError(f"Cannot read annotations of {owner}: {e}") from e


class Reflection:
    """Default reflection service built on :mod:`inspect` and :mod:`typing`."""

    def methods_of(self, cls: type) -> list[MethodDescriptor]:
        """Describe every public method of ``cls``, including inherited ones.

        Methods are listed from the most derived class outwards, each name once.

        Raises:
            DependencyError: If a method's annotations cannot be evaluated.
        """
        methods: dict[str, MethodDescriptor] = {}
        for klass in cls.__mro__:
            if klass is object:
                continue
            for name, member in vars(klass).items():
                if name.startswith("_") or name in methods or not inspect.isfunction(member):
                    continue
                methods[name] = self._describe(klass, name, member)
        return list(methods.values())

    def _describe(self, owner: type, name: str, func: Callable) -> MethodDescriptor:
        hints = _hints(func, f"{owner.__qualname__}.{name}")
        parameters = list(inspect.signature(func).parameters)[1:]
        return_type = hints.get("return", VOID)
        if return_type is None:
            return_type = VOID
        return MethodDescriptor(
            owner,
            name,
            tuple((p, hints.get(p, inspect.Parameter.empty)) for p in parameters),
            return_type,
        )

    def constructor_of(self, descriptor: Any) -> Callable[[], Any]:
        """Return a zero-argument callable that creates the described module.

        Args:
            descriptor: A :class:`~bindery.binder.ModuleDescriptor`.

        Raises:
            ModuleInstantiationError: If the class is not a module or its
                constructor requires arguments.
        """
        module_class = descriptor.module_class
        if descriptor.factory is not None:
            return descriptor.factory
        if not (inspect.isclass(module_class) and issubclass(module_class, Module)):
            raise ModuleInstantiationError(f"Error creating module: {module_class!r} is not a Module")
        try:
            signature = inspect.signature(module_class)
        except (TypeError, ValueError):
            return module_class
        required = [
            name
            for name, parameter in signature.parameters.items()
            if parameter.default is inspect.Parameter.empty
            and parameter.kind not in (inspect.Parameter.VAR_POSITIONAL, inspect.Parameter.VAR_KEYWORD)
        ]
        if required:
            raise ModuleInstantiationError(
                f"Error creating module: {module_class.__qualname__} has no no-argument "
                f"constructor (requires {', '.join(required)})"
            )
        return module_class

    def constructor_parameters(self, cls: type) -> list[tuple[str, Any]]:
        """List the ``(name, annotation)`` pairs a constructor needs injected.

        Parameters with defaults and variadic parameters are skipped.

        Raises:
            DependencyError: If a required parameter is not annotated.
        """
        init = cls.__init__
        if init is object.__init__:
            return []
        hints = _hints(init, cls.__qualname__)
        parameters = []
        for name, parameter in list(inspect.signature(init).parameters.items())[1:]:
            if parameter.kind in (inspect.Parameter.VAR_POSITIONAL, inspect.Parameter.VAR_KEYWORD):
                continue
            if parameter.default is not inspect.Parameter.empty:
                continue
            if name not in hints:
                raise DependencyError(f"Dependency {name} of {cls.__qualname__} is not annotated")
            parameters.append((name, hints[name]))
        return parameters

    def callable_dependencies(self, provider: Callable) -> tuple[Key, ...]:
        """Keys for the parameters of a provider function, method or callable object.

        Raises:
            DependencyError: If a parameter is not annotated.
        """
        target = provider if inspect.isfunction(provider) or inspect.ismethod(provider) else provider.__call__
        name = getattr(provider, "__qualname__", type(provider).__qualname__)
        hints = _hints(getattr(target, "__func__", target), name)
        keys = []
        for parameter in inspect.signature(target).parameters:
            if parameter not in hints:
                raise DependencyError(f"Dependency {parameter} of {name} is not annotated")
            keys.append(Key.of(hints[parameter]))
        return tuple(keys)

    def constructor_dependencies(self, cls: type) -> tuple[Key, ...]:
        """Keys needed to construct ``cls`` and then inject its members.

        Raises:
            DependencyError: If a constructor parameter is unannotated or assisted.
        """
        keys = []
        for name, annotation in self.constructor_parameters(cls):
            if has_marker(annotation, ASSISTED):
                raise DependencyError(
                    f"Dependency {name} of {cls.__qualname__} is assisted; only a factory can create it"
                )
            keys.append(Key.of(annotation))
        keys.extend(self.member_dependencies(cls))
        return tuple(dict.fromkeys(keys))

    def member_dependencies(self, cls: type) -> tuple[Key, ...]:
        """Keys for the class attributes annotated with :data:`~bindery.domain.INJECT`."""
        hints = _hints(cls, cls.__qualname__)
        return tuple(Key.of(annotation) for annotation in hints.values() if has_marker(annotation, INJECT))

    def is_class_or_interface(self, annotation: Any) -> bool:
        """True for nominal classes; False for builtins, generic aliases and type variables."""
        return (
            inspect.isclass(annotation)
            and not isinstance(annotation, TypeVar)
            and get_origin(annotation) is None
            and annotation not in _NON_INJECTABLE
        )

    def is_abstract(self, cls: type) -> bool:
        return inspect.isabstract(cls) or bool(getattr(cls, "_is_protocol", False))
