import re

import pytest

from bindery.binder import FactoryModule
from bindery.bindings import FactoryBinding, FactoryMethod
from bindery.domain import BindingContext, Key
from bindery.error_aggregator import ErrorAggregator
from bindery.errors import FactoryConfigurationError
from bindery.factory_expander import FactoryExpander, build_factory_binding
from bindery.graph_validator import ImplicitBindingsModule
from bindery.reflection import Reflection
from bindery.scope_node import ScopeNode

from example import Clock, FancyWidget, GadgetFactory, Printer, Widget, WidgetFactory


class BrokenFactory:
    def build(self) -> None: ...


class EmptyFactory:
    pass


class MislabelledFactory:
    def create(self, label: str) -> Widget: ...


class OverloadedFactory:
    def create(self, name: str, size: int) -> Widget: ...


@pytest.fixture
def errors() -> ErrorAggregator:
    return ErrorAggregator()


@pytest.fixture
def implicit_bindings() -> ImplicitBindingsModule:
    return ImplicitBindingsModule()


@pytest.fixture
def expander(errors, implicit_bindings) -> FactoryExpander:
    return FactoryExpander(errors, Reflection(), implicit_bindings)


@pytest.fixture
def root() -> ScopeNode:
    return ScopeNode("root")


def test_factory_binding_describes_each_method():
    binding = build_factory_binding(FactoryModule(WidgetFactory, {Widget: FancyWidget}), Reflection())

    assert binding == FactoryBinding(
        WidgetFactory,
        (FactoryMethod("create", Key(Widget), FancyWidget, ("name",)),),
        (FancyWidget,),
        (Key(Printer),),
    )


def test_expansion_binds_factory_and_requests_member_injection(expander, root, implicit_bindings):
    root.require(Key(WidgetFactory))
    root.add_factory_module(FactoryModule(WidgetFactory, {Widget: FancyWidget}))

    expander.expand(root)

    assert root.bindings[Key(WidgetFactory)].context == BindingContext("Bound using factory in root")
    assert root.unresolved == (Key(Printer),)
    assert root.member_inject_requests == (FancyWidget,)
    assert implicit_bindings.keys == (Key(WidgetFactory),)


def test_implementations_shared_by_factories_are_requested_once(expander, root):
    root.add_factory_module(FactoryModule(WidgetFactory, {Widget: FancyWidget}))
    root.add_factory_module(FactoryModule(GadgetFactory, {Widget: FancyWidget}))

    expander.expand(root)

    assert list(root.bindings) == [Key(WidgetFactory), Key(GadgetFactory)]
    assert root.member_inject_requests == (FancyWidget,)


def test_broken_factory_does_not_stop_the_others(expander, root, errors):
    root.add_factory_module(FactoryModule(BrokenFactory))
    root.add_factory_module(FactoryModule(WidgetFactory, {Widget: FancyWidget}))

    expander.expand(root)

    [error] = errors.errors
    assert isinstance(error, FactoryConfigurationError)
    assert str(error) == (
        "Factory BrokenFactory could not be created: BrokenFactory.build() -> None must return the type it creates"
    )
    assert list(root.bindings) == [Key(WidgetFactory)]


@pytest.mark.parametrize(
    "factory_module, message",
    [
        (FactoryModule(EmptyFactory), "EmptyFactory could not be created: it declares no factory methods"),
        (
            FactoryModule(WidgetFactory, {Widget: Clock}),
            "WidgetFactory could not be created: Clock is not a subclass of Widget",
        ),
        (
            FactoryModule(WidgetFactory),
            "WidgetFactory.create(name: str) -> Widget has no concrete implementation for Widget",
        ),
        (
            FactoryModule(MislabelledFactory, {Widget: FancyWidget}),
            "assisted parameter name of FancyWidget is not a parameter of MislabelledFactory.create",
        ),
        (
            FactoryModule(OverloadedFactory, {Widget: FancyWidget}),
            "passes size which FancyWidget does not accept as assisted",
        ),
    ],
)
def test_invalid_factories_are_rejected(factory_module, message):
    with pytest.raises(FactoryConfigurationError, match=re.escape(message)):
        build_factory_binding(factory_module, Reflection())
