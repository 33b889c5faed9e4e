import pytest

from bindery.binder import Injector
from bindery.error_aggregator import ErrorAggregator
from bindery.errors import MethodSignatureError
from bindery.method_validator import MethodValidator
from bindery.reflection import Reflection

from example import Clock, Dashboard, Greeter


class ValidInjector(Injector):
    def greeter(self) -> Greeter: ...

    def inject(self, dashboard: Dashboard) -> None: ...

    def inject_without_return_annotation(self, dashboard: Dashboard): ...


class InvalidInjector(Injector):
    def too_many(self, first: Clock, second: Clock) -> None: ...

    def scalar(self, count: int) -> None: ...

    def returns_from_member_inject(self, clock: Clock) -> Clock: ...

    def returns_nothing(self) -> None: ...


class InheritingInjector(ValidInjector):
    def generic(self, clocks: list[Clock]) -> None: ...


class UnreadableInjector(Injector):
    def service(self) -> "MissingService": ...  # noqa: F821


@pytest.fixture
def errors() -> ErrorAggregator:
    return ErrorAggregator()


@pytest.fixture
def validator(errors) -> MethodValidator:
    return MethodValidator(errors, Reflection())


def test_provision_and_member_injection_methods_are_valid(validator, errors):
    assert validator.validate(ValidInjector)
    assert errors.errors == ()


def test_every_invalid_method_is_reported(validator, errors):
    assert not validator.validate(InvalidInjector)

    assert all(isinstance(e, MethodSignatureError) for e in errors.errors)
    assert [str(e) for e in errors.errors] == [
        "Injector methods cannot have more than one parameter, found: "
        "InvalidInjector.too_many(first: Clock, second: Clock) -> None",
        "Injector method parameter types must be a class or interface, found: "
        "InvalidInjector.scalar(count: int) -> None",
        "Injector methods with a parameter must have a None return type, found: "
        "InvalidInjector.returns_from_member_inject(clock: Clock) -> Clock",
        "Injector methods with no parameters cannot return None, found: "
        "InvalidInjector.returns_nothing() -> None",
    ]


def test_inherited_methods_are_validated(validator, errors):
    assert not validator.validate(InheritingInjector)

    [error] = errors.errors
    assert "InheritingInjector.generic" in str(error)
    assert "must be a class or interface" in str(error)


def test_unreadable_annotations_are_reported(validator, errors):
    assert not validator.validate(UnreadableInjector)

    [error] = errors.errors
    assert isinstance(error, MethodSignatureError)
    assert "MissingService" in str(error)
