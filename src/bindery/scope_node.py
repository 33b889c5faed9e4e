"""Nodes of the scope tree built for an injector.

The root node holds the injector's own bindings; each private module
encountered while visiting elements adds a child node. A child may rely on
bindings from its ancestors, but an ancestor only sees what a child explicitly
exposes.
"""

from typing import Iterable, Iterator, Optional

from bindery.binder import FactoryModule
from bindery.domain import BindingEntry, Key
from bindery.errors import DuplicateBindingError

__all__ = ["ScopeNode"]


class ScopeNode:
    """Bindings of one scope, plus what remains to be resolved in it.

    Attributes:
        name: Human-readable scope name used in diagnostics.
        bindings: Insertion-ordered mapping from key to binding entry.
        children: Private child scopes, in declaration order.
        factory_modules: Factory modules awaiting expansion.

    Example:
        >>> root = ScopeNode("AppInjector")
        >>> child = root.create_child("SecretsModule")
        >>> child.parent is root
        True
    """

    def __init__(self, name: str, parent: Optional["ScopeNode"] = None):
        self.name = name
        self._parent = parent
        self.bindings: dict[Key, BindingEntry] = {}
        self.children: list[ScopeNode] = []
        self.factory_modules: list[FactoryModule] = []
        self._unresolved: dict[Key, None] = {}
        self._member_inject_requests: dict[type, None] = {}
        self._resolved = False

    @property
    def parent(self) -> Optional["ScopeNode"]:
        return self._parent

    @property
    def resolved(self) -> bool:
        return self._resolved

    @property
    def unresolved(self) -> tuple[Key, ...]:
        return tuple(self._unresolved)

    @property
    def member_inject_requests(self) -> tuple[type, ...]:
        return tuple(self._member_inject_requests)

    def create_child(self, name: str) -> "ScopeNode":
        child = ScopeNode(name, self)
        self.children.append(child)
        return child

    def ancestors(self) -> Iterator["ScopeNode"]:
        node = self._parent
        while node is not None:
            yield node
            node = node.parent

    def walk(self) -> Iterator["ScopeNode"]:
        """Yield this node and all its descendants, parents before children."""
        yield self
        for child in self.children:
            yield from child.walk()

    def is_bound(self, key: Key) -> bool:
        return key in self.bindings

    def add_binding(self, key: Key, entry: BindingEntry) -> None:
        """Bind a key in this scope and require the binding's dependencies here.

        Raises:
            DuplicateBindingError: If the key is already bound in this scope.
        """
        existing = self.bindings.get(key)
        if existing is not None:
            raise DuplicateBindingError(
                f"Double-bound: {key} in {self.name}. "
                f"First bound by {existing.context}; bound again by {entry.context}"
            )
        self.bindings[key] = entry
        self._unresolved.pop(key, None)
        for dependency in entry.binding.dependencies:
            self.require(dependency)

    def require(self, key: Key) -> None:
        """Record that ``key`` must be bound here or in an ancestor."""
        if key not in self.bindings:
            self._unresolved[key] = None

    def next_unresolved(self) -> Optional[Key]:
        """Remove and return the oldest unresolved key, or None when there are none."""
        if not self._unresolved:
            return None
        key = next(iter(self._unresolved))
        del self._unresolved[key]
        return key

    def add_factory_module(self, factory_module: FactoryModule) -> None:
        self.factory_modules.append(factory_module)

    def add_member_inject_requests(self, types: Iterable[type]) -> None:
        for t in types:
            self._member_inject_requests[t] = None

    def mark_resolved(self) -> None:
        self._resolved = True

    def __repr__(self) -> str:
        return f"ScopeNode({self.name!r})"
