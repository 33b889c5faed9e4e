"""Bottom-up resolution of the scope tree.

Children are resolved before their parent because resolving a child can add
requirements to the parent: a key a child cannot satisfy itself is escalated
to the parent's unresolved set. Visiting each node on the way up the tree means
every node is processed exactly once, after all escalations into it are known.
"""

import logging
from typing import Optional

from bindery.bindings import Binding, ConstructorBinding, ExposedChildBinding, LinkedBinding, ParentBinding
from bindery.domain import BindingContext, BindingEntry, Key
from bindery.error_aggregator import ErrorAggregator
from bindery.errors import DependencyError, MissingBindingError
from bindery.factory_expander import FactoryExpander
from bindery.graph_validator import ImplicitBindingsModule
from bindery.reflection import Reflection
from bindery.scope_node import ScopeNode
from bindery.settings import ResolverSettings

__all__ = ["Resolver"]

logger = logging.getLogger(__name__)


class _ImplicitBindingUnavailable(Exception):
    """No implicit binding can be created for a key in the current scope."""


class Resolver:
    """Resolve every node of a scope tree, children first.

    Per node: expand its factory modules, then drain its unresolved keys. Each
    key is satisfied by, in order of preference:

      1. a binding already in the node,
      2. an explicit binding in the nearest ancestor that has one,
      3. an implicit binding created in the node,
      4. escalation to the parent.

    A key that cannot be satisfied in the root is a
    :class:`~bindery.errors.MissingBindingError`.
    """

    def __init__(
        self,
        errors: ErrorAggregator,
        reflection: Reflection,
        factory_expander: FactoryExpander,
        implicit_bindings: ImplicitBindingsModule,
        settings: Optional[ResolverSettings] = None,
    ):
        self._errors = errors
        self._reflection = reflection
        self._factory_expander = factory_expander
        self._implicit_bindings = implicit_bindings
        self._settings = settings or ResolverSettings()

    def resolve(self, node: ScopeNode) -> None:
        """Resolve ``node`` and its subtree; a resolved node is left untouched."""
        if node.resolved:
            return
        for child in node.children:
            self.resolve(child)

        self._factory_expander.expand(node)
        self._resolve_bindings(node)
        node.mark_resolved()

    def _resolve_bindings(self, node: ScopeNode) -> None:
        logger.debug("Resolving %s (%d unresolved)", node.name, len(node.unresolved))
        for implementation in node.member_inject_requests:
            try:
                dependencies = self._reflection.member_dependencies(implementation)
            except DependencyError as e:
                self._errors.log(MissingBindingError(f"Cannot inject members of {implementation.__qualname__}: {e}"), e)
                continue
            for key in dependencies:
                node.require(key)

        failed: set[Key] = set()
        key = node.next_unresolved()
        while key is not None:
            if key not in failed and not self._resolve_key(node, key):
                failed.add(key)
            key = node.next_unresolved()

    def _resolve_key(self, node: ScopeNode, key: Key) -> bool:
        if node.is_bound(key):
            return True

        bound_in_ancestor, exposed_from = self._find_in_ancestors(node, key)
        if bound_in_ancestor:
            self._bind_to_parent(node, key)
            return True

        try:
            binding = self._create_implicit_binding(key)
        except _ImplicitBindingUnavailable as e:
            # Escalating would come straight back to this node.
            if exposed_from is node:
                self._errors.log(
                    MissingBindingError(f"{key} is exposed from {node.name} but not bound there: {e}")
                )
                return False
            if node.parent is not None:
                self._bind_to_parent(node, key)
                return True
            self._errors.log(MissingBindingError(f"No binding found for {key} in {node.name}: {e}"))
            return False

        logger.debug("Created implicit binding for %s in %s", key, node.name)
        self._implicit_bindings.register(key)
        node.add_binding(key, BindingEntry(binding, BindingContext.for_text(f"Implicit binding for {key}")))
        return True

    def _find_in_ancestors(self, node: ScopeNode, key: Key) -> tuple[bool, Optional[ScopeNode]]:
        """Look for an explicit binding of ``key`` above ``node``.

        Factory modules queued on an ancestor count as explicit bindings; they
        are only expanded once the ancestor itself is resolved.

        Returns:
            ``(found, exposed_from)``. An ancestor whose binding only exposes
            the key from ``node`` or one of its ancestors does not count as
            found; ``exposed_from`` is then the exposing scope.
        """
        path = [node]
        for ancestor in node.ancestors():
            entry = ancestor.bindings.get(key)
            if entry is not None:
                binding = entry.binding
                if isinstance(binding, ExposedChildBinding) and any(binding.child is p for p in path):
                    return False, binding.child
                return True, None
            if any(factory_module.key == key for factory_module in ancestor.factory_modules):
                return True, None
            path.append(ancestor)
        return False, None

    def _bind_to_parent(self, node: ScopeNode, key: Key) -> None:
        logger.debug("Escalating %s from %s to %s", key, node.name, node.parent.name)
        node.add_binding(key, BindingEntry(ParentBinding(key), BindingContext.for_text(f"Inherited by {node.name}")))
        node.parent.require(key)

    def _create_implicit_binding(self, key: Key) -> Binding:
        if not self._settings.implicit_bindings:
            raise _ImplicitBindingUnavailable("implicit bindings are disabled")
        if key.qualifier is not None:
            raise _ImplicitBindingUnavailable(f"{key} is qualified and must be bound explicitly")

        target = key.type
        if not self._reflection.is_class_or_interface(target):
            raise _ImplicitBindingUnavailable(f"{key} is not a class that can be constructed")

        implementation = vars(target).get("__implemented_by__")
        if implementation is not None and implementation is not target:
            return LinkedBinding(Key(implementation))

        if self._reflection.is_abstract(target):
            raise _ImplicitBindingUnavailable(f"{key} is abstract and has no explicit binding")
        try:
            return ConstructorBinding(target, self._reflection.constructor_dependencies(target))
        except DependencyError as e:
            raise _ImplicitBindingUnavailable(str(e)) from e
