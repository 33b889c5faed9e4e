"""High level entry points for resolving injectors."""

import logging
from typing import Optional

from bindery.graph_validator import GraphValidator
from bindery.processor import BindingsProcessor, ResolutionResult
from bindery.settings import ResolverSettings

__all__ = ["make_processor", "resolve_injector"]


def make_processor(
    injector_type: type,
    settings: Optional[ResolverSettings] = None,
    graph_validator: Optional[GraphValidator] = None,
) -> BindingsProcessor:
    """Create a :class:`BindingsProcessor` for the given injector interface.

    Args:
        injector_type: A subclass of :class:`~bindery.binder.Injector`.
        settings: Resolver options; read from the environment when omitted.
        graph_validator: Replaces the default
            :class:`~bindery.graph_validator.ModuleGraphValidator`.

    Returns:
        A processor ready to :meth:`~BindingsProcessor.process`.
    """
    return BindingsProcessor(injector_type, settings=settings, graph_validator=graph_validator)


def resolve_injector(
    injector_type: type,
    settings: Optional[ResolverSettings] = None,
    graph_validator: Optional[GraphValidator] = None,
) -> ResolutionResult:
    """Resolve the complete binding graph of an injector interface.

    Modules attached to the injector (and its bases) are loaded, their bindings
    recorded per scope, and every required key resolved bottom-up through the
    scope tree.

    Args:
        injector_type: A subclass of :class:`~bindery.binder.Injector`.
        settings: Resolver options; read from the environment when omitted.
        graph_validator: Replaces the default graph validator.

    Returns:
        The :class:`ResolutionResult`; call ``raise_for_errors()`` to turn
        recorded errors into an exception.

    Example:
        >>> result = resolve_injector(AppInjector)
        >>> result.raise_for_errors()
        >>> [node.name for node in result.root.walk()]
        ['AppInjector', 'SecretsModule']
    """
    settings = settings or ResolverSettings()
    if settings.log_level is not None:
        logging.getLogger("bindery").setLevel(settings.log_level)
    return make_processor(injector_type, settings, graph_validator).process()
