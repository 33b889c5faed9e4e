import pytest

from bindery.binder import Injector
from bindery.bindings import ExposedChildBinding, FactoryBinding, InjectorBinding, ParentBinding
from bindery.builders import make_processor, resolve_injector
from bindery.decorators import modules
from bindery.domain import Key
from bindery.errors import (
    DuplicateBindingError,
    ExternalValidationError,
    MissingBindingError,
    ResolutionFailed,
)
from bindery.processor import BindingsProcessor, Phase
from bindery.settings import ResolverSettings

from example import (
    AuditLog,
    Clock,
    ConsolePrinter,
    Dashboard,
    FancyWidget,
    GadgetFactory,
    Greeter,
    GreeterInjector,
    OtherPrinterModule,
    Printer,
    PrinterModule,
    ReexportInjector,
    Secrets,
    SharedInjector,
    VaultInjector,
    WidgetFactory,
    WidgetInjector,
)


class InvalidInjector(Injector):
    def returns_nothing(self) -> None: ...


@modules(PrinterModule, OtherPrinterModule)
class DoubleBoundInjector(Injector):
    def greeter(self) -> Greeter: ...


class UnboundInjector(Injector):
    def printer(self) -> Printer: ...


class RecordingValidator:
    def __init__(self, error=None):
        self.calls = []
        self._error = error

    def validate(self, modules, overrides):
        self.calls.append((list(modules), overrides))
        if self._error is not None:
            raise self._error


@pytest.fixture
def settings() -> ResolverSettings:
    return ResolverSettings(implicit_bindings=True, validate_graph=True)


def snapshot(result):
    scopes = [
        (node.name, [(key, type(entry.binding).__name__, str(entry.context)) for key, entry in node.bindings.items()])
        for node in result.root.walk()
    ]
    return scopes, [str(e) for e in result.errors], result.implicit_keys


def test_resolves_an_injector(settings):
    result = BindingsProcessor(GreeterInjector, settings=settings).process()

    assert result.ok
    assert result.aborted_after is None
    assert [type(m) for m in result.modules] == [PrinterModule]
    assert result.root.name == "GreeterInjector"
    assert result.root.resolved
    assert result.root.bindings[Key(GreeterInjector)].binding == InjectorBinding(GreeterInjector)
    assert result.implicit_keys == (Key(GreeterInjector), Key(Greeter), Key(ConsolePrinter), Key(Clock))
    result.raise_for_errors()


def test_private_scopes_are_resolved_and_exposed(settings):
    result = BindingsProcessor(VaultInjector, settings=settings).process()

    assert result.ok
    secrets, audit = result.root.children
    assert result.root.bindings[Key(Secrets)].binding == ExposedChildBinding(Key(Secrets), secrets)
    assert result.root.bindings[Key(AuditLog)].binding == ExposedChildBinding(Key(AuditLog), audit)
    assert audit.bindings[Key(Printer)].binding == ParentBinding(Key(Printer))
    assert Key(str, "token") in secrets.bindings
    assert Key(str, "token") not in result.root.bindings


def test_factories_and_member_injection(settings):
    result = BindingsProcessor(WidgetInjector, settings=settings).process()

    assert result.ok
    root = result.root
    assert isinstance(root.bindings[Key(WidgetFactory)].binding, FactoryBinding)
    assert isinstance(root.bindings[Key(GadgetFactory)].binding, FactoryBinding)
    assert root.member_inject_requests == (Dashboard, FancyWidget)
    assert Key(Clock) in root.bindings


def test_private_module_reexports_a_key_from_a_nested_private_module(settings):
    result = BindingsProcessor(ReexportInjector, settings=settings).process()

    assert result.ok
    [outer] = result.root.children
    [inner] = outer.children
    assert result.root.bindings[Key(Printer)].binding == ExposedChildBinding(Key(Printer), outer)
    assert outer.bindings[Key(Printer)].binding == ExposedChildBinding(Key(Printer), inner)


def test_sub_module_installed_by_two_modules_is_not_double_bound(settings):
    result = BindingsProcessor(SharedInjector, settings=settings).process()

    assert result.ok
    assert result.errors == ()
    assert str(result.root.bindings[Key(Printer)].context) == "Bound in SharedPrinterModule"

def test_invalid_methods_abort_before_modules_are_loaded(settings):
    result = BindingsProcessor(InvalidInjector, settings=settings).process()

    assert result.aborted_after is Phase.METHOD_VALIDATION
    assert not result.ok
    assert result.modules == ()
    assert result.root.bindings == {}


def test_duplicate_binding_aborts_before_resolution(settings):
    result = BindingsProcessor(DoubleBoundInjector, settings=settings).process()

    assert result.aborted_after is Phase.MODULE_BINDINGS
    [error] = result.errors
    assert isinstance(error, DuplicateBindingError)
    assert not result.root.resolved
    assert Key(Greeter) not in result.root.bindings


def test_missing_binding_aborts_after_resolution(settings):
    validator = RecordingValidator()

    result = BindingsProcessor(UnboundInjector, settings=settings, graph_validator=validator).process()

    assert result.aborted_after is Phase.RESOLUTION
    [error] = result.errors
    assert isinstance(error, MissingBindingError)
    assert validator.calls == []
    with pytest.raises(ResolutionFailed, match=r"1 error\(s\) while resolving bindings"):
        result.raise_for_errors()


def test_graph_validator_receives_modules_and_implicit_bindings(settings):
    validator = RecordingValidator()

    result = BindingsProcessor(GreeterInjector, settings=settings, graph_validator=validator).process()

    assert result.ok
    [(validated_modules, overrides)] = validator.calls
    assert validated_modules == list(result.modules)
    assert overrides.keys == result.implicit_keys


def test_graph_validator_failure_is_reported(settings):
    validator = RecordingValidator(ValueError("nope"))

    result = BindingsProcessor(GreeterInjector, settings=settings, graph_validator=validator).process()

    assert result.aborted_after is Phase.GRAPH_VALIDATION
    [error] = result.errors
    assert isinstance(error, ExternalValidationError)
    assert str(error) == "Errors from graph validation: nope"
    assert isinstance(error.__cause__, ValueError)


def test_graph_validation_can_be_disabled():
    validator = RecordingValidator(ValueError("nope"))

    result = BindingsProcessor(
        GreeterInjector, settings=ResolverSettings(validate_graph=False), graph_validator=validator
    ).process()

    assert result.ok
    assert validator.calls == []


@pytest.mark.parametrize("injector", [VaultInjector, WidgetInjector, DoubleBoundInjector, UnboundInjector])
def test_runs_are_deterministic(settings, injector):
    first = BindingsProcessor(injector, settings=settings).process()
    second = BindingsProcessor(injector, settings=settings).process()

    assert snapshot(first) == snapshot(second)


def test_builders(settings):
    processor = make_processor(GreeterInjector, settings)

    assert isinstance(processor, BindingsProcessor)
    assert resolve_injector(GreeterInjector, settings).ok
