"""Collects errors for one pipeline run."""

import logging
from typing import Optional

from bindery.errors import DependencyError

__all__ = ["ErrorAggregator"]

logger = logging.getLogger(__name__)


class ErrorAggregator:
    """Records errors without interrupting the current phase.

    One aggregator is created per run and passed to every component. Phases end
    with :meth:`checkpoint`, which tells the pipeline whether to go on.

    Example:
        >>> errors = ErrorAggregator()
        >>> errors.log(MissingBindingError("No binding for Printer"))
        >>> errors.checkpoint()
        False
    """

    def __init__(self):
        self._errors: list[DependencyError] = []
        self._checked = 0

    @property
    def errors(self) -> tuple[DependencyError, ...]:
        return tuple(self._errors)

    @property
    def has_errors(self) -> bool:
        return len(self._errors) > 0

    def log(self, error: DependencyError, cause: Optional[BaseException] = None) -> None:
        """Record an error, chaining ``cause`` as its ``__cause__``."""
        if cause is not None:
            error.__cause__ = cause
        self._errors.append(error)
        logger.error("%s: %s", type(error).__name__, error, exc_info=cause)

    def checkpoint(self) -> bool:
        """Return False if any error was logged since the previous checkpoint."""
        clean = len(self._errors) == self._checked
        self._checked = len(self._errors)
        return clean
