"""Binding definitions: the ways a key's value can be produced.

Every definition exposes ``dependencies``, the keys that must be bound in the
same scope or an ancestor before the definition is usable.
"""

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Callable

from bindery.domain import Key

if TYPE_CHECKING:
    from bindery.scope_node import ScopeNode

__all__ = [
    "Binding",
    "LinkedBinding",
    "InstanceBinding",
    "ProviderInstanceBinding",
    "ProviderTypeBinding",
    "ConstructorBinding",
    "FactoryMethod",
    "FactoryBinding",
    "InjectorBinding",
    "ParentBinding",
    "ExposedChildBinding",
]


class Binding:
    """Base class for binding definitions."""

    dependencies: tuple[Key, ...]


@dataclass(frozen=True)
class LinkedBinding(Binding):
    """Explicit target: ``bind(Foo).to(FooImpl)``."""

    target: Key

    @property
    def dependencies(self) -> tuple[Key, ...]:
        return (self.target,)


@dataclass(frozen=True)
class InstanceBinding(Binding):
    instance: Any = field(compare=False)

    @property
    def dependencies(self) -> tuple[Key, ...]:
        return ()


@dataclass(frozen=True)
class ProviderInstanceBinding(Binding):
    """A callable invoked with its annotated parameters, or a ``@provides`` method."""

    provider: Callable
    dependencies: tuple[Key, ...]


@dataclass(frozen=True)
class ProviderTypeBinding(Binding):
    """A provider class; the provider itself is constructed from its own bindings."""

    provider_type: type

    @property
    def dependencies(self) -> tuple[Key, ...]:
        return (Key(self.provider_type),)


@dataclass(frozen=True)
class ConstructorBinding(Binding):
    """Build ``implementation`` by calling its constructor, then inject its members."""

    implementation: type
    dependencies: tuple[Key, ...]


@dataclass(frozen=True)
class FactoryMethod:
    """One method of a factory interface and the implementation it creates.

    Attributes:
        name: Method name on the factory interface.
        returns: Key returned by the method.
        implementation: Concrete class the method instantiates.
        assisted: Constructor parameter names supplied by the method's caller.
    """

    name: str
    returns: Key
    implementation: type
    assisted: tuple[str, ...]


@dataclass(frozen=True)
class FactoryBinding(Binding):
    factory_type: type
    methods: tuple[FactoryMethod, ...]
    implementations: tuple[type, ...]
    dependencies: tuple[Key, ...]


@dataclass(frozen=True)
class InjectorBinding(Binding):
    """The injector bound to itself."""

    injector_type: type

    @property
    def dependencies(self) -> tuple[Key, ...]:
        return ()


@dataclass(frozen=True)
class ParentBinding(Binding):
    """The key is satisfied by the parent scope."""

    key: Key

    @property
    def dependencies(self) -> tuple[Key, ...]:
        return ()


@dataclass(frozen=True)
class ExposedChildBinding(Binding):
    """The key is bound inside a private child scope and exposed to this one."""

    key: Key
    child: "ScopeNode"

    @property
    def dependencies(self) -> tuple[Key, ...]:
        return ()
