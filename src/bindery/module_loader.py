"""Collects and instantiates the modules attached to an injector interface."""

import logging
from typing import Optional

from bindery.binder import Module, ModuleDescriptor
from bindery.error_aggregator import ErrorAggregator
from bindery.errors import ModuleInstantiationError
from bindery.reflection import Reflection

__all__ = ["ModuleLoader"]

logger = logging.getLogger(__name__)


class ModuleLoader:
    """Walk an injector's type hierarchy and create each attached module once."""

    def __init__(self, errors: ErrorAggregator, reflection: Reflection):
        self._errors = errors
        self._reflection = reflection

    def load(self, injector_type: type) -> list[Module]:
        """Instantiate every module attached to ``injector_type`` or its bases.

        Modules attached to the interface itself come first, then those of each
        base in declaration order. A module class reachable along several paths
        is created once. Modules that fail to instantiate are logged and skipped.

        Returns:
            The created modules, in discovery order.
        """
        modules: list[Module] = []
        self._populate(injector_type, modules, set())
        logger.debug("Loaded %d module(s) for %s", len(modules), injector_type.__qualname__)
        return modules

    def _populate(self, injector_type: type, modules: list[Module], added: set[type]) -> None:
        for descriptor in vars(injector_type).get("__injector_modules__", ()):
            if descriptor.module_class in added:
                continue

            # Only created modules count as added; a failure is retried on every path.
            module = self._instantiate(descriptor)
            if module is not None:
                added.add(descriptor.module_class)
                modules.append(module)

        for ancestor in injector_type.__bases__:
            if ancestor is not object:
                self._populate(ancestor, modules, added)

    def _instantiate(self, descriptor: ModuleDescriptor) -> Optional[Module]:
        name = getattr(descriptor.module_class, "__qualname__", repr(descriptor.module_class))
        try:
            module = self._reflection.constructor_of(descriptor)()
        except ModuleInstantiationError as e:
            self._errors.log(e)
            return None
        except Exception as e:
            self._errors.log(ModuleInstantiationError(f"Error creating module: {name}: {e}"), e)
            return None

        if not isinstance(module, Module):
            self._errors.log(
                ModuleInstantiationError(f"Error creating module: {name} produced {type(module).__qualname__}")
            )
            return None
        return module
