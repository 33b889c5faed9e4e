"""Builds up the bindings and scopes for an injector interface.

The pipeline runs four phases, each followed by a checkpoint; a checkpoint that
finds new errors ends the run with a :class:`ResolutionResult` describing where
it stopped.
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Optional

from bindery.binder import Module
from bindery.domain import Key
from bindery.element_visitor import ElementVisitor
from bindery.error_aggregator import ErrorAggregator
from bindery.errors import DependencyError, ExternalValidationError, ResolutionFailed
from bindery.factory_expander import FactoryExpander
from bindery.graph_validator import GraphValidator, ImplicitBindingsModule, ModuleGraphValidator
from bindery.method_validator import MethodValidator
from bindery.module_loader import ModuleLoader
from bindery.reflection import Reflection
from bindery.resolver import Resolver
from bindery.scope_node import ScopeNode
from bindery.settings import ResolverSettings

__all__ = ["Phase", "ResolutionResult", "BindingsProcessor"]

logger = logging.getLogger(__name__)


class Phase(Enum):
    """Pipeline phases, each ending in a checkpoint."""

    METHOD_VALIDATION = "method_validation"
    MODULE_BINDINGS = "module_bindings"
    RESOLUTION = "resolution"
    GRAPH_VALIDATION = "graph_validation"


@dataclass(frozen=True)
class ResolutionResult:
    """Outcome of a pipeline run.

    Attributes:
        root: The root of the scope tree; fully resolved when ``ok``.
        modules: The modules loaded for the injector.
        errors: Every error logged, in order.
        implicit_keys: Keys bound on the resolver's own authority.
        aborted_after: The phase whose checkpoint stopped the run, if any.
    """

    root: ScopeNode
    modules: tuple[Module, ...]
    errors: tuple[DependencyError, ...]
    implicit_keys: tuple[Key, ...]
    aborted_after: Optional[Phase] = None

    @property
    def ok(self) -> bool:
        return self.aborted_after is None and not self.errors

    def raise_for_errors(self) -> None:
        """Raise :class:`~bindery.errors.ResolutionFailed` if the run logged any error."""
        if self.errors:
            raise ResolutionFailed(self.errors)


class BindingsProcessor:
    """Resolve the complete binding graph of one injector interface.

    Example:
        >>> result = BindingsProcessor(AppInjector).process()
        >>> result.raise_for_errors()
        >>> result.root.bindings[Key(Service)].binding
        ConstructorBinding(implementation=<class 'Service'>, dependencies=(...))
    """

    def __init__(
        self,
        injector_type: type,
        *,
        settings: Optional[ResolverSettings] = None,
        reflection: Optional[Reflection] = None,
        graph_validator: Optional[GraphValidator] = None,
    ):
        self._injector_type = injector_type
        self._settings = settings or ResolverSettings()
        self._reflection = reflection or Reflection()
        self._graph_validator = graph_validator or ModuleGraphValidator()

    def process(self) -> ResolutionResult:
        errors = ErrorAggregator()
        implicit_bindings = ImplicitBindingsModule()
        root = ScopeNode(self._injector_type.__qualname__)
        modules: list[Module] = []

        def finish(aborted_after: Optional[Phase] = None) -> ResolutionResult:
            if aborted_after is not None:
                logger.info("Aborted after %s with %d error(s)", aborted_after.value, len(errors.errors))
            return ResolutionResult(root, tuple(modules), errors.errors, implicit_bindings.keys, aborted_after)

        logger.info("Processing bindings for %s", root.name)
        if not MethodValidator(errors, self._reflection).validate(self._injector_type):
            return finish(Phase.METHOD_VALIDATION)

        visitor = ElementVisitor(root, errors, self._reflection, implicit_bindings)
        visitor.register_injector(self._injector_type, self._reflection.methods_of(self._injector_type))
        modules.extend(ModuleLoader(errors, self._reflection).load(self._injector_type))
        visitor.visit_modules(modules)
        if not errors.checkpoint():
            return finish(Phase.MODULE_BINDINGS)

        factory_expander = FactoryExpander(errors, self._reflection, implicit_bindings)
        Resolver(errors, self._reflection, factory_expander, implicit_bindings, self._settings).resolve(root)
        if not errors.checkpoint():
            return finish(Phase.RESOLUTION)

        if self._settings.validate_graph:
            self._validate_graph(modules, implicit_bindings, errors)
            if not errors.checkpoint():
                return finish(Phase.GRAPH_VALIDATION)

        logger.info("Resolved %d scope(s) for %s", sum(1 for _ in root.walk()), root.name)
        return finish()

    def _validate_graph(
        self, modules: list[Module], implicit_bindings: ImplicitBindingsModule, errors: ErrorAggregator
    ) -> None:
        try:
            self._graph_validator.validate(modules, implicit_bindings)
        except Exception as e:
            errors.log(ExternalValidationError(f"Errors from graph validation: {e}"), e)
