"""Domain models used throughout the resolver."""

from dataclasses import dataclass
from typing import Annotated, Any, Hashable, Optional, get_args, get_origin

__all__ = ["Key", "INJECT", "ASSISTED", "BindingContext", "BindingEntry"]


class _Marker:
    """Annotation metadata with a special meaning; never used as a qualifier."""

    def __init__(self, name: str):
        self._name = name

    def __repr__(self) -> str:
        return self._name


INJECT = _Marker("INJECT")
"""Marks a class attribute as a member-injection point.

Example:
    >>> class Widget:
    ...     printer: Annotated[Printer, INJECT]
"""

ASSISTED = _Marker("ASSISTED")
"""Marks a constructor parameter as supplied by the caller of a factory method."""


def _metadata(annotation: Any) -> tuple[Any, tuple]:
    if get_origin(annotation) is Annotated:
        base_type, *metadata = get_args(annotation)
        return base_type, tuple(metadata)
    return annotation, ()


def has_marker(annotation: Any, marker: _Marker) -> bool:
    """Check whether an ``Annotated`` type carries the given marker."""
    return any(m is marker for m in _metadata(annotation)[1])


@dataclass(frozen=True)
class Key:
    """A bindable dependency: a type, optionally qualified.

    Two keys identify the same binding target iff both type and qualifier
    are equal.

    Attributes:
        type: The type being bound.
        qualifier: Optional discriminator, usually a string name.
    """

    type: Any
    qualifier: Optional[Hashable] = None

    @staticmethod
    def of(annotation: Any, qualifier: Optional[Hashable] = None) -> "Key":
        """Build a key from a type annotation.

        ``Annotated[T, "name"]`` yields ``Key(T, "name")``; markers such as
        :data:`INJECT` are skipped. An explicit ``qualifier`` wins over one
        found in the annotation.

        Example:
            >>> Key.of(Annotated[str, "greeting"])
            Key(type=<class 'str'>, qualifier='greeting')
        """
        if isinstance(annotation, Key):
            return annotation if qualifier is None else Key(annotation.type, qualifier)
        base_type, metadata = _metadata(annotation)
        if qualifier is None:
            qualifier = next((m for m in metadata if not isinstance(m, _Marker)), None)
        return Key(base_type, qualifier)

    def __str__(self) -> str:
        name = getattr(self.type, "__qualname__", None) or repr(self.type)
        if self.qualifier is None:
            return name
        return f"{name}[{self.qualifier!r}]"


@dataclass(frozen=True)
class BindingContext:
    """Where a binding came from, for diagnostics only."""

    description: str

    @staticmethod
    def for_text(text: str) -> "BindingContext":
        return BindingContext(text)

    def __str__(self) -> str:
        return self.description


@dataclass(frozen=True)
class BindingEntry:
    """A binding definition paired with its provenance.

    Attributes:
        binding: One of the definitions in :mod:`bindery.bindings`.
        context: Where the binding was declared or synthesized.
    """

    binding: Any
    context: BindingContext
