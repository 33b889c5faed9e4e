"""Consistency checks over the finished module set.

The pipeline hands the validator the loaded modules together with an
:class:`ImplicitBindingsModule` that binds every key the resolver created on
its own authority, so those keys are not reported again.
"""

import inspect
import logging
from typing import Any, Iterable, Protocol, Sequence, get_origin

from bindery.binder import Binder, Module, elements_of
from bindery.domain import Key
from bindery.elements import BOUND_ELEMENTS, LinkedKeyElement, PrivateElements
from bindery.errors import DependencyError

__all__ = ["GraphValidator", "ImplicitBindingsModule", "ModuleGraphValidator"]

logger = logging.getLogger(__name__)


def _implicit_placeholder() -> Any:
    raise DependencyError("Implicit bindings are placeholders and cannot be provided")


class ImplicitBindingsModule(Module):
    """Binds every implicitly created key to a placeholder provider.

    Example:
        >>> implicit = ImplicitBindingsModule()
        >>> implicit.register(Key(Printer))
        >>> implicit.keys
        (Key(type=<class 'Printer'>, qualifier=None),)
    """

    def __init__(self):
        self._keys: dict[Key, None] = {}

    @property
    def keys(self) -> tuple[Key, ...]:
        return tuple(self._keys)

    def register(self, key: Key) -> None:
        self._keys[key] = None

    def configure(self, binder: Binder) -> None:
        for key in self._keys:
            binder.bind(key.type, qualifier=key.qualifier).to_provider(_implicit_placeholder)


class GraphValidator(Protocol):
    """Checks a finished module set; raises to reject it."""

    def validate(self, modules: Sequence[Module], overrides: Module) -> None: ...


class ModuleGraphValidator:
    """Default validator: re-derives the elements and checks linked bindings.

    Reports, in one exception:
      - bindings linked to themselves,
      - linked targets that are not subclasses of the bound type,
      - cycles among linked bindings,
      - keys exposed by a private module but never bound inside it.

    Keys bound by ``overrides`` replace any binding for the same key.
    """

    def validate(self, modules: Sequence[Module], overrides: Module) -> None:
        """Check the modules and raise one error listing every problem found.

        Raises:
            DependencyError: If any problem is found.
        """
        overridden = {element.key for element in elements_of(overrides) if isinstance(element, BOUND_ELEMENTS)}
        installed: set[type] = set()
        elements = [element for module in modules for element in elements_of(module, installed)]

        problems: list[str] = []
        self._check_scope(elements, overridden, problems)
        if problems:
            raise DependencyError("; ".join(problems))
        logger.debug("Validated %d module(s)", len(modules))

    def _check_scope(self, elements: Iterable[Any], overridden: set[Key], problems: list[str]) -> None:
        linked: dict[Key, LinkedKeyElement] = {}
        for element in elements:
            if isinstance(element, PrivateElements):
                self._check_scope(element.elements, overridden, problems)
                bound = {e.key for e in element.elements if isinstance(e, BOUND_ELEMENTS)}
                # A nested private module re-exports what it exposes.
                bound.update(k for e in element.elements if isinstance(e, PrivateElements) for k in e.exposed)
                for key in element.exposed:
                    if key not in bound and key not in overridden:
                        problems.append(f"{key} is exposed by {element.source} but never bound there")
            elif isinstance(element, LinkedKeyElement) and element.key not in overridden:
                linked[element.key] = element

        for key, element in linked.items():
            if element.target == key:
                problems.append(f"Binding for {key} in {element.source} points to itself")
            elif _is_class(key.type) and _is_class(element.target.type) and not issubclass(
                element.target.type, key.type
            ):
                problems.append(f"{element.target} bound in {element.source} is not a subclass of {key}")

        order = {key: index for index, key in enumerate(linked)}
        for start in linked:
            chain = [start]
            current = linked[start].target
            while current in linked and current not in chain:
                chain.append(current)
                current = linked[current].target
            if current == start and len(chain) > 1 and min(order[k] for k in chain) == order[start]:
                problems.append("Cycle in linked bindings: " + " -> ".join(str(k) for k in chain + [start]))


def _is_class(t: Any) -> bool:
    return inspect.isclass(t) and get_origin(t) is None
