import pytest

from bindery.binder import Module, elements_of
from bindery.domain import Key
from bindery.elements import ProviderInstanceElement
from bindery.errors import DependencyError
from bindery.graph_validator import ImplicitBindingsModule, ModuleGraphValidator

from example import Clock, LeakyModule, Printer, PrinterModule, ReexportModule, SecretsModule


class First:
    pass


class Second:
    pass


class SelfLinkModule(Module):
    def configure(self, binder):
        binder.bind(Clock).to(Clock)


class WrongTypeModule(Module):
    def configure(self, binder):
        binder.bind(Printer).to(Clock)


class CycleModule(Module):
    def configure(self, binder):
        binder.bind(First).to(Second)
        binder.bind(Second).to(First)


@pytest.fixture
def validator() -> ModuleGraphValidator:
    return ModuleGraphValidator()


def test_consistent_modules_pass(validator):
    validator.validate([PrinterModule(), SecretsModule()], ImplicitBindingsModule())


def test_self_linked_binding_is_rejected(validator):
    with pytest.raises(DependencyError, match=r"Binding for Clock in SelfLinkModule points to itself"):
        validator.validate([SelfLinkModule()], ImplicitBindingsModule())


def test_linked_target_must_be_a_subclass(validator):
    with pytest.raises(DependencyError, match=r"Clock bound in WrongTypeModule is not a subclass of Printer"):
        validator.validate([WrongTypeModule()], ImplicitBindingsModule())


def test_cycles_are_reported_once(validator):
    with pytest.raises(DependencyError) as e:
        validator.validate([CycleModule()], ImplicitBindingsModule())

    message = str(e.value)
    assert "Cycle in linked bindings: First -> Second -> First" in message
    assert message.count("Cycle in linked bindings") == 1


def test_overrides_replace_module_bindings(validator):
    overrides = ImplicitBindingsModule()
    overrides.register(Key(Printer))

    validator.validate([WrongTypeModule()], overrides)


def test_exposed_key_must_be_bound_in_its_private_module(validator):
    with pytest.raises(DependencyError, match=r"Printer is exposed by LeakyModule but never bound there"):
        validator.validate([LeakyModule()], ImplicitBindingsModule())


def test_nested_private_module_can_reexport(validator):
    validator.validate([ReexportModule()], ImplicitBindingsModule())


def test_implicit_bindings_module_binds_placeholders():
    implicit = ImplicitBindingsModule()
    implicit.register(Key(Clock))
    implicit.register(Key(str, "token"))
    implicit.register(Key(Clock))

    elements = elements_of(implicit)

    assert implicit.keys == (Key(Clock), Key(str, "token"))
    assert [e.key for e in elements] == [Key(Clock), Key(str, "token")]
    assert all(isinstance(e, ProviderInstanceElement) for e in elements)
    with pytest.raises(DependencyError, match=r"placeholders"):
        elements[0].provider()
