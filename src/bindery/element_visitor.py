"""Turns module elements into explicit bindings on the scope tree."""

import logging
from functools import singledispatchmethod
from typing import Callable, Iterable, Optional, Sequence

from bindery.binder import Module, elements_of
from bindery.bindings import (
    Binding,
    ConstructorBinding,
    ExposedChildBinding,
    InjectorBinding,
    InstanceBinding,
    LinkedBinding,
    ProviderInstanceBinding,
    ProviderTypeBinding,
)
from bindery.domain import BindingContext, BindingEntry, Key
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
from bindery.error_aggregator import ErrorAggregator
from bindery.errors import DependencyError, DuplicateBindingError, ModuleConfigurationError
from bindery.graph_validator import ImplicitBindingsModule
from bindery.reflection import MethodDescriptor, Reflection
from bindery.scope_node import ScopeNode

__all__ = ["ElementVisitor"]

logger = logging.getLogger(__name__)


class ElementVisitor:
    """Record the elements of a scope's modules as bindings on its node.

    Private modules open a child node which is visited by a visitor of its own.
    Errors are logged and visiting continues with the next element.
    """

    def __init__(
        self,
        node: ScopeNode,
        errors: ErrorAggregator,
        reflection: Reflection,
        implicit_bindings: Optional[ImplicitBindingsModule] = None,
    ):
        self._node = node
        self._errors = errors
        self._reflection = reflection
        self._implicit_bindings = implicit_bindings

    def register_injector(self, injector_type: type, methods: Sequence[MethodDescriptor]) -> None:
        """Bind the injector to itself and require what its methods need.

        Provision methods require their return key; member-injection methods
        request injection of their parameter's type.
        """
        key = Key(injector_type)
        self._add(key, lambda: InjectorBinding(injector_type), "Binding for injector")
        if self._implicit_bindings is not None:
            self._implicit_bindings.register(key)

        for method in methods:
            if not method.parameters and not method.returns_void:
                self._node.require(Key.of(method.return_type))
            elif len(method.parameters) == 1:
                self._node.add_member_inject_requests([Key.of(method.parameter_types[0]).type])

    def visit_modules(self, modules: Iterable[Module]) -> None:
        installed: set[type] = set()
        for module in modules:
            try:
                elements = elements_of(module, installed)
            except Exception as e:
                self._errors.log(
                    ModuleConfigurationError(f"Error configuring module {type(module).__qualname__}: {e}"), e
                )
                continue
            self.visit_all(elements)

    def visit_all(self, elements: Iterable[Element]) -> None:
        for element in elements:
            self.visit(element)

    @singledispatchmethod
    def visit(self, element: Element) -> None:
        raise TypeError(f"Unknown element {element!r}")

    @visit.register(LinkedKeyElement)
    def _(self, element: LinkedKeyElement) -> None:
        self._add(element.key, lambda: LinkedBinding(element.target), f"Bound in {element.source}")

    @visit.register(InstanceElement)
    def _(self, element: InstanceElement) -> None:
        self._add(element.key, lambda: InstanceBinding(element.instance), f"Bound in {element.source}")

    @visit.register(ProviderInstanceElement)
    def _(self, element: ProviderInstanceElement) -> None:
        self._add(
            element.key,
            lambda: ProviderInstanceBinding(
                element.provider, self._reflection.callable_dependencies(element.provider)
            ),
            f"Provided by {element.source}",
        )

    @visit.register(ProviderKeyElement)
    def _(self, element: ProviderKeyElement) -> None:
        self._add(element.key, lambda: ProviderTypeBinding(element.provider_type), f"Provided by {element.source}")

    @visit.register(UntargettedElement)
    def _(self, element: UntargettedElement) -> None:
        self._add(element.key, lambda: self._untargetted(element.key), f"Bound in {element.source}")

    @visit.register(PrivateElements)
    def _(self, element: PrivateElements) -> None:
        child = self._node.create_child(element.source)
        logger.debug("Opened private scope %s under %s", child.name, self._node.name)
        ElementVisitor(child, self._errors, self._reflection, self._implicit_bindings).visit_all(element.elements)

        for key in element.exposed:
            child.require(key)
            self._add(key, lambda: ExposedChildBinding(key, child), f"Exposed by {element.source}")

    @visit.register(FactoryModuleElement)
    def _(self, element: FactoryModuleElement) -> None:
        self._node.add_factory_module(element.factory_module)

    def _untargetted(self, key: Key) -> Binding:
        if key.qualifier is not None or not self._reflection.is_class_or_interface(key.type):
            raise DependencyError(f"{key} has no target and cannot be constructed")
        if self._reflection.is_abstract(key.type):
            raise DependencyError(f"{key} has no target and is abstract")
        return ConstructorBinding(key.type, self._reflection.constructor_dependencies(key.type))

    def _add(self, key: Key, make_binding: Callable[[], Binding], context: str) -> None:
        try:
            binding = make_binding()
        except DependencyError as e:
            self._errors.log(ModuleConfigurationError(f"Cannot bind {key} ({context}): {e}"), e)
            return

        try:
            self._node.add_binding(key, BindingEntry(binding, BindingContext.for_text(context)))
        except DuplicateBindingError as e:
            self._errors.log(e)
