"""Bindery: static binding resolution for dependency injection.

Bindery computes, ahead of any object creation, exactly one binding for every
key an injector interface needs. Injectors declare what they provide through
their methods and which modules configure them through :func:`modules`; private
modules open child scopes whose bindings stay hidden unless exposed.

Key Features:
    - Declarative modules, provider methods and private scopes
    - Just-in-time constructor bindings for concrete classes
    - Factory modules with assisted parameters
    - Bottom-up resolution with escalation from child to parent scopes
    - All errors of a phase collected before the run stops

Basic Usage:
    >>> from bindery import Injector, Module, modules, resolve_injector
    >>>
    >>> class PrinterModule(Module):
    ...     def configure(self, binder):
    ...         binder.bind(Printer).to(ConsolePrinter)
    >>>
    >>> @modules(PrinterModule)
    ... class AppInjector(Injector):
    ...     def service(self) -> Service: ...
    >>>
    >>> result = resolve_injector(AppInjector)
    >>> result.raise_for_errors()

The package consists of:
    - builders: High-level entry points
    - processor: The phased pipeline and its result
    - binder, decorators: Declaring injectors and modules
    - resolver, factory_expander, element_visitor, module_loader: The engine
    - errors: Framework-specific exceptions
"""

import logging

from bindery.binder import FactoryModule, Injector, Module, ModuleDescriptor, PrivateModule
from bindery.builders import make_processor, resolve_injector
from bindery.decorators import implemented_by, modules, provides
from bindery.domain import ASSISTED, INJECT, Key
from bindery.errors import DependencyError, ResolutionFailed
from bindery.processor import BindingsProcessor, Phase, ResolutionResult
from bindery.settings import ResolverSettings

__all__ = [
    "ASSISTED",
    "INJECT",
    "BindingsProcessor",
    "DependencyError",
    "FactoryModule",
    "Injector",
    "Key",
    "Module",
    "ModuleDescriptor",
    "Phase",
    "PrivateModule",
    "ResolutionFailed",
    "ResolutionResult",
    "ResolverSettings",
    "implemented_by",
    "make_processor",
    "modules",
    "provides",
    "resolve_injector",
]

logging.getLogger(__name__).addHandler(logging.NullHandler())
