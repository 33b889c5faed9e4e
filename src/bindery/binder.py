"""Modules, the binder they configure, and the elements they produce.

A module declares bindings by calling methods on a :class:`Binder` from its
``configure`` method, and by defining methods decorated with
:func:`~bindery.decorators.provides`. :func:`elements_of` replays a module into
the flat element sequence consumed by the
:class:`~bindery.element_visitor.ElementVisitor`.

Example:
    >>> class DatabaseModule(Module):
    ...     def configure(self, binder):
    ...         binder.bind(Database).to(PostgresDatabase)
    ...         binder.bind(str, qualifier="dsn").to_instance("postgresql://localhost/app")
"""

import inspect
from dataclasses import dataclass, field
from typing import Any, Callable, Hashable, Mapping, Optional, get_type_hints

from bindery.domain import Key
from bindery.elements import (
    Element,
    FactoryModuleElement,
    InstanceElement,
    LinkedKeyElement,
    PrivateElements,
    ProviderInstanceElement,
    ProviderKeyElement,
    UntargettedElement,
)
from bindery.errors import DependencyError

__all__ = [
    "Injector",
    "Module",
    "PrivateModule",
    "FactoryModule",
    "ModuleDescriptor",
    "Binder",
    "BindingBuilder",
    "elements_of",
]

PROVIDES_ATTRIBUTE = "__bindery_provides__"


class Injector:
    """Base class for injector interfaces.

    Each public method is either a provision method (no parameters, returns the
    type to provide) or a member-injection method (one parameter, returns None).
    """


class Module:
    """A declarative unit contributing bindings to a scope."""

    def configure(self, binder: "Binder") -> None:
        pass


class PrivateModule(Module):
    """A module whose bindings are hidden from the enclosing scope unless exposed."""


@dataclass(frozen=True)
class FactoryModule:
    """Declares a factory interface whose methods create implementations.

    Attributes:
        factory_type: The factory interface.
        implementations: Maps a method's return type (or key) to the concrete
            class it should create. Return types without an entry are created
            directly.
        qualifier: Optional qualifier under which the factory is bound.

    Example:
        >>> binder.install(FactoryModule(WidgetFactory, {Widget: FancyWidget}))
    """

    factory_type: type
    implementations: Mapping[Any, type] = field(default_factory=dict)
    qualifier: Optional[Hashable] = None

    @property
    def key(self) -> Key:
        return Key(self.factory_type, self.qualifier)

    def implementation_for(self, key: Key) -> Any:
        for declared, implementation in self.implementations.items():
            if Key.of(declared) == key:
                return implementation
        return key.type


@dataclass(frozen=True)
class ModuleDescriptor:
    """Identity of a module class plus, optionally, how to create it.

    Attributes:
        module_class: The module class; descriptors are deduplicated on it.
        factory: Zero-argument callable creating the module. Defaults to the
            class's own constructor.
    """

    module_class: type
    factory: Optional[Callable[[], Module]] = None

    @staticmethod
    def of(target: Any) -> "ModuleDescriptor":
        if isinstance(target, ModuleDescriptor):
            return target
        return ModuleDescriptor(target)


def _source_of(module: Any) -> str:
    return type(module).__qualname__


class BindingBuilder:
    """Completes a ``binder.bind(...)`` statement.

    Without a call to one of the ``to*`` methods the binding is untargetted.
    """

    def __init__(self, elements: list, index: int, key: Key, source: str):
        self._elements = elements
        self._index = index
        self._key = key
        self._source = source

    def to(self, target: Any, qualifier: Optional[Hashable] = None) -> None:
        self._elements[self._index] = LinkedKeyElement(self._key, Key.of(target, qualifier), self._source)

    def to_instance(self, instance: Any) -> None:
        self._elements[self._index] = InstanceElement(self._key, instance, self._source)

    def to_provider(self, provider: Any) -> None:
        """Bind to a provider class (built by injection) or a provider callable.

        Raises:
            DependencyError: If ``provider`` is neither a class nor callable.
        """
        if inspect.isclass(provider):
            element = ProviderKeyElement(self._key, provider, self._source)
        elif callable(provider):
            element = ProviderInstanceElement(self._key, provider, self._source)
        else:
            raise DependencyError(f"{provider!r} bound to {self._key} is not a provider")
        self._elements[self._index] = element


class Binder:
    """Records the elements declared by a module and everything it installs."""

    def __init__(self, source: str, private: bool = False, installed: Optional[set[type]] = None):
        self._source = source
        self._private = private
        self._elements: list[Element] = []
        self._exposed: dict[Key, None] = {}
        self._installed: set[type] = set() if installed is None else installed

    @property
    def elements(self) -> list[Element]:
        return list(self._elements)

    @property
    def exposed(self) -> tuple[Key, ...]:
        return tuple(self._exposed)

    def bind(self, interface: Any, qualifier: Optional[Hashable] = None) -> BindingBuilder:
        key = Key.of(interface, qualifier)
        self._elements.append(UntargettedElement(key, self._source))
        return BindingBuilder(self._elements, len(self._elements) - 1, key, self._source)

    def expose(self, interface: Any, qualifier: Optional[Hashable] = None) -> None:
        """Make a key bound in this private module visible to the enclosing scope.

        Raises:
            DependencyError: If called from a non-private module.
        """
        if not self._private:
            raise DependencyError(f"{self._source} cannot expose {Key.of(interface, qualifier)}: it is not private")
        self._exposed[Key.of(interface, qualifier)] = None

    def install(self, module: Any) -> None:
        """Install a module, private module or factory module into this binder.

        Installing the same non-private module class twice is a no-op.
        """
        if isinstance(module, FactoryModule):
            self._elements.append(FactoryModuleElement(module, self._source))
        elif isinstance(module, PrivateModule):
            self._elements.extend(elements_of(module))
        elif isinstance(module, Module):
            if type(module) in self._installed:
                return
            self._installed.add(type(module))
            _configure(module, self)
        else:
            raise DependencyError(f"{module!r} installed by {self._source} is not a module")


def _configure(module: Module, binder: Binder) -> None:
    previous, binder._source = binder._source, _source_of(module)
    try:
        module.configure(binder)
        _add_provider_methods(module, binder)
    finally:
        binder._source = previous


def _add_provider_methods(module: Module, binder: Binder) -> None:
    seen: set[str] = set()
    for klass in type(module).__mro__:
        for name, member in vars(klass).items():
            metadata = getattr(member, PROVIDES_ATTRIBUTE, None)
            if metadata is None or name in seen:
                continue
            seen.add(name)
            method = getattr(module, name)
            key = Key.of(_return_annotation(method, module), metadata.get("qualifier"))
            binder._elements.append(
                ProviderInstanceElement(key, method, f"{_source_of(module)}.{name}")
            )


def _return_annotation(method: Callable, module: Module) -> Any:
    try:
        hints = get_type_hints(method.__func__, include_extras=True)
    except NameError as e:
        raise DependencyError(f"Cannot read annotations of {_source_of(module)}.{method.__name__}: {e}") from e
    if hints.get("return") in (None, type(None)):
        raise DependencyError(
            f"Provider method {_source_of(module)}.{method.__name__} has no return annotation"
        )
    return hints["return"]


def elements_of(module: Module, installed: Optional[set[type]] = None) -> list[Element]:
    """Replay a module's declarations as elements.

    A private module yields a single :class:`~bindery.elements.PrivateElements`
    and keeps its own record of installed modules.

    Args:
        module: The module to replay.
        installed: Module classes already configured in the same scope. Pass
            one set for every module of a scope so a module installed by
            several of them is configured once.

    Raises:
        Exception: Whatever the module's ``configure`` raises.
    """
    if isinstance(module, PrivateModule):
        binder = Binder(_source_of(module), private=True)
        _configure(module, binder)
        return [PrivateElements(tuple(binder.elements), binder.exposed, _source_of(module))]
    installed = set() if installed is None else installed
    if type(module) in installed:
        return []
    installed.add(type(module))
    binder = Binder(_source_of(module), installed=installed)
    _configure(module, binder)
    return binder.elements
