"""Checks that injector methods have one of the two permitted shapes."""

from bindery.domain import Key
from bindery.error_aggregator import ErrorAggregator
from bindery.errors import DependencyError, MethodSignatureError
from bindery.reflection import Reflection

__all__ = ["MethodValidator"]


class MethodValidator:
    """Validate provision and member-injection methods of an injector.

    A provision method takes no parameters and returns what it provides. A
    member-injection method takes one class-typed parameter and returns None.
    """

    def __init__(self, errors: ErrorAggregator, reflection: Reflection):
        self._errors = errors
        self._reflection = reflection

    def validate(self, injector_type: type) -> bool:
        """Log a :class:`~bindery.errors.MethodSignatureError` per invalid method.

        Returns:
            The checkpoint result: True if no error was logged.
        """
        try:
            methods = self._reflection.methods_of(injector_type)
        except DependencyError as e:
            self._errors.log(MethodSignatureError(str(e)), e)
            return self._errors.checkpoint()

        for method in methods:
            parameters = method.parameter_types
            if len(parameters) > 1:
                self._errors.log(
                    MethodSignatureError(f"Injector methods cannot have more than one parameter, found: {method}")
                )

            if len(parameters) == 1:
                # Member inject method.
                if not self._reflection.is_class_or_interface(Key.of(parameters[0]).type):
                    self._errors.log(
                        MethodSignatureError(
                            f"Injector method parameter types must be a class or interface, found: {method}"
                        )
                    )
                if not method.returns_void:
                    self._errors.log(
                        MethodSignatureError(
                            f"Injector methods with a parameter must have a None return type, found: {method}"
                        )
                    )
            elif not parameters and method.returns_void:
                self._errors.log(
                    MethodSignatureError(f"Injector methods with no parameters cannot return None, found: {method}")
                )

        return self._errors.checkpoint()
