"""Expands factory modules into factory bindings and member-injection requests.

A factory interface declares methods that create implementations, some of
whose constructor parameters are supplied by the caller (marked
:data:`~bindery.domain.ASSISTED`) and the rest by injection:

    >>> class WidgetFactory:
    ...     def create(self, label: str) -> Widget: ...
    >>> class FancyWidget(Widget):
    ...     def __init__(self, label: Annotated[str, ASSISTED], printer: Printer): ...
    >>> binder.install(FactoryModule(WidgetFactory, {Widget: FancyWidget}))
"""

import logging

from bindery.binder import FactoryModule
from bindery.bindings import FactoryBinding, FactoryMethod
from bindery.domain import ASSISTED, BindingContext, BindingEntry, Key, has_marker
from bindery.error_aggregator import ErrorAggregator
from bindery.errors import DependencyError, DuplicateBindingError, FactoryConfigurationError
from bindery.graph_validator import ImplicitBindingsModule
from bindery.reflection import MethodDescriptor, Reflection
from bindery.scope_node import ScopeNode

__all__ = ["FactoryExpander", "build_factory_binding"]

logger = logging.getLogger(__name__)


class FactoryExpander:
    """Bind each factory queued on a node and request injection of what it creates."""

    def __init__(
        self,
        errors: ErrorAggregator,
        reflection: Reflection,
        implicit_bindings: ImplicitBindingsModule,
    ):
        self._errors = errors
        self._reflection = reflection
        self._implicit_bindings = implicit_bindings

    def expand(self, node: ScopeNode) -> None:
        for factory_module in node.factory_modules:
            self._implicit_bindings.register(factory_module.key)

            try:
                binding = build_factory_binding(factory_module, self._reflection)
            except FactoryConfigurationError as e:
                self._errors.log(e, e.__cause__)
                continue

            try:
                node.add_binding(
                    factory_module.key,
                    BindingEntry(binding, BindingContext.for_text(f"Bound using factory in {node.name}")),
                )
            except DuplicateBindingError as e:
                self._errors.log(e)
                continue

            # Implementations from several factories share one request each.
            node.add_member_inject_requests(binding.implementations)
            logger.debug("Bound factory %s in %s", factory_module.key, node.name)


def build_factory_binding(factory_module: FactoryModule, reflection: Reflection) -> FactoryBinding:
    """Describe how a factory interface's methods create their implementations.

    Args:
        factory_module: The factory interface and its implementation mapping.
        reflection: Used to inspect the interface and the implementations.

    Returns:
        A :class:`~bindery.bindings.FactoryBinding` whose dependencies are the
        injected (non-assisted) constructor parameters of every implementation.

    Raises:
        FactoryConfigurationError: If the factory cannot be created.
    """
    key = factory_module.key
    factory_type = factory_module.factory_type
    if not reflection.is_class_or_interface(factory_type):
        raise FactoryConfigurationError(f"Factory {key} could not be created: it is not a class")

    try:
        descriptors = reflection.methods_of(factory_type)
        if not descriptors:
            raise DependencyError("it declares no factory methods")

        methods = []
        dependencies: dict[Key, None] = {}
        for descriptor in descriptors:
            method, method_dependencies = _factory_method(factory_module, descriptor, reflection)
            methods.append(method)
            dependencies.update(dict.fromkeys(method_dependencies))
    except DependencyError as e:
        raise FactoryConfigurationError(f"Factory {key} could not be created: {e}") from e

    implementations = tuple(dict.fromkeys(method.implementation for method in methods))
    return FactoryBinding(factory_type, tuple(methods), implementations, tuple(dependencies))


def _factory_method(
    factory_module: FactoryModule, descriptor: MethodDescriptor, reflection: Reflection
) -> tuple[FactoryMethod, list[Key]]:
    if descriptor.returns_void:
        raise DependencyError(f"{descriptor} must return the type it creates")

    returns = Key.of(descriptor.return_type)
    implementation = factory_module.implementation_for(returns)
    if not reflection.is_class_or_interface(implementation) or reflection.is_abstract(implementation):
        raise DependencyError(f"{descriptor} has no concrete implementation for {returns}")
    if reflection.is_class_or_interface(returns.type) and not issubclass(implementation, returns.type):
        raise DependencyError(f"{implementation.__qualname__} is not a subclass of {returns}")

    method_parameters = dict(descriptor.parameters)
    assisted = []
    dependencies = []
    for name, annotation in reflection.constructor_parameters(implementation):
        if not has_marker(annotation, ASSISTED):
            dependencies.append(Key.of(annotation))
            continue
        if name not in method_parameters:
            raise DependencyError(
                f"assisted parameter {name} of {implementation.__qualname__} is not a parameter of {descriptor}"
            )
        if Key.of(method_parameters[name]).type != Key.of(annotation).type:
            raise DependencyError(
                f"assisted parameter {name} of {implementation.__qualname__} does not match {descriptor}"
            )
        assisted.append(name)

    unused = [name for name in method_parameters if name not in assisted]
    if unused:
        raise DependencyError(
            f"{descriptor} passes {', '.join(unused)} which {implementation.__qualname__} does not accept as assisted"
        )
    return FactoryMethod(descriptor.name, returns, implementation, tuple(assisted)), dependencies
