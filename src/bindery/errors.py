"""Exceptions reported while resolving an injector's binding graph.

Every error derives from :class:`DependencyError`. Components never raise these
across a phase boundary; they log them to an
:class:`~bindery.error_aggregator.ErrorAggregator` and carry on, so a single run
surfaces as many problems as possible.
"""

from typing import Iterable

__all__ = [
    "DependencyError",
    "MethodSignatureError",
    "DuplicateBindingError",
    "ModuleInstantiationError",
    "ModuleConfigurationError",
    "FactoryConfigurationError",
    "MissingBindingError",
    "ExternalValidationError",
    "ResolutionFailed",
]


class DependencyError(Exception):
    """Raised when a binding cannot be resolved or is misdeclared."""

    pass


class MethodSignatureError(DependencyError):
    """An injector method is neither a provision nor a member-injection method."""


class DuplicateBindingError(DependencyError):
    """The same key was bound twice in one scope."""


class ModuleInstantiationError(DependencyError):
    """A module class could not be instantiated."""


class ModuleConfigurationError(DependencyError):
    """A module raised while declaring its bindings."""


class FactoryConfigurationError(DependencyError):
    """A factory module's binding could not be built."""


class MissingBindingError(DependencyError):
    """A key reached the root scope unbound and no implicit binding was possible."""


class ExternalValidationError(DependencyError):
    """The graph validator rejected the finished module set."""


class ResolutionFailed(DependencyError):
    """Summarises every error recorded by an aborted pipeline run.

    Args:
        errors: The errors in the order they were recorded.
    """

    def __init__(self, errors: Iterable[DependencyError]) -> None:
        self.errors = list(errors)
        lines = "\n".join(f"  {type(e).__name__}: {e}" for e in self.errors)
        super().__init__(f"{len(self.errors)} error(s) while resolving bindings:\n{lines}")
