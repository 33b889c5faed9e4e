"""Declarative elements recorded from a module's ``configure`` method.

Elements are a closed set of variants; :class:`~bindery.element_visitor.ElementVisitor`
dispatches on the variant type.
"""

from dataclasses import dataclass, field
from typing import Any, Callable, Union

from bindery.domain import Key

__all__ = [
    "Element",
    "BOUND_ELEMENTS",
    "LinkedKeyElement",
    "InstanceElement",
    "ProviderInstanceElement",
    "ProviderKeyElement",
    "UntargettedElement",
    "PrivateElements",
    "FactoryModuleElement",
]


@dataclass(frozen=True)
class LinkedKeyElement:
    key: Key
    target: Key
    source: str


@dataclass(frozen=True)
class InstanceElement:
    key: Key
    instance: Any = field(compare=False)
    source: str


@dataclass(frozen=True)
class ProviderInstanceElement:
    key: Key
    provider: Callable
    source: str


@dataclass(frozen=True)
class ProviderKeyElement:
    key: Key
    provider_type: type
    source: str


@dataclass(frozen=True)
class UntargettedElement:
    """``bind(Foo)`` with no target: Foo is built from its own constructor."""

    key: Key
    source: str


@dataclass(frozen=True)
class PrivateElements:
    """The elements of a private module, visible to the parent only where exposed.

    Attributes:
        elements: Elements declared inside the private module.
        exposed: Keys the private module makes visible to its enclosing scope.
        source: Name of the private module.
    """

    elements: tuple
    exposed: tuple[Key, ...]
    source: str


@dataclass(frozen=True)
class FactoryModuleElement:
    factory_module: Any
    source: str


Element = Union[
    LinkedKeyElement,
    InstanceElement,
    ProviderInstanceElement,
    ProviderKeyElement,
    UntargettedElement,
    PrivateElements,
    FactoryModuleElement,
]

BOUND_ELEMENTS = (
    LinkedKeyElement,
    InstanceElement,
    ProviderInstanceElement,
    ProviderKeyElement,
    UntargettedElement,
)
"""Element types that bind a key, for use with ``isinstance``."""
