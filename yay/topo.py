"""Dependency graph with layered topological ordering."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, Hashable, Optional

from yay import text


class TopoError(Exception):
    """Base class for dependency graph errors."""


class SelfReferentialError(TopoError):
    def __init__(self, message: str = "self-referential dependencies not allowed") -> None:
        super().__init__(message)


class ConflictingAliasError(TopoError):
    def __init__(self, message: str = "alias already defined") -> None:
        super().__init__(message)


class CircularDependencyError(TopoError):
    def __init__(self, message: str = "circular dependencies not allowed") -> None:
        super().__init__(message)


@dataclass
class NodeInfo:
    """Display attributes and payload attached to a graph node."""

    color: str = ""
    background: str = ""
    value: Any = None


@dataclass
class DependencyInfo:
    """The node providing a name, with the dependency it satisfies."""

    provider: Hashable
    depend: Any


CheckFn = Callable[[Hashable, Any], None]
DepMap = dict  # node -> set of nodes


def _remove_from_dep_map(dep_map: DepMap, key: Hashable, node: Hashable) -> bool:
    """Remove node from the set under key; return True if the key was dropped."""
    nodes = dep_map.get(key)
    if nodes is not None and len(nodes) == 1:
        del dep_map[key]
        return True
    if nodes is not None:
        nodes.discard(node)
    return False


def _add_to_dep_map(dep_map: DepMap, key: Hashable, node: Hashable) -> None:
    dep_map.setdefault(key, set()).add(node)


class Graph:
    """Directed graph of nodes where a child depends on its parents."""

    def __init__(self) -> None:
        self._nodes: dict[Hashable, None] = {}
        self._node_info: dict[Hashable, NodeInfo] = {}
        self._provides: dict[Hashable, DependencyInfo] = {}
        # child -> parents
        self._dependencies: DepMap = {}
        # parent -> children
        self._dependents: DepMap = {}

    def __len__(self) -> int:
        return len(self._nodes)

    def exists(self, node: Hashable) -> bool:
        return node in self._nodes

    def add_node(self, node: Hashable) -> None:
        self._nodes[node] = None

    def provides_exists(self, provides: Hashable) -> bool:
        return provides in self._provides

    def get_provider_node(self, provides: Hashable) -> Optional[DependencyInfo]:
        return self._provides.get(provides)

    def provides(self, provides: Hashable, dep_info: Any, node: Hashable) -> None:
        """Record that node provides the given name."""
        self._provides[provides] = DependencyInfo(provider=node, depend=dep_info)

    def for_each(self, fn: CheckFn) -> None:
        """Call fn with every node and its value; exceptions propagate."""
        for node in list(self._nodes):
            info = self._node_info.get(node)
            fn(node, info.value if info is not None else None)

    def set_node_info(self, node: Hashable, info: NodeInfo) -> None:
        self._node_info[node] = info

    def get_node_info(self, node: Hashable) -> Optional[NodeInfo]:
        return self._node_info.get(node)

    def depend_on(self, child: Hashable, parent: Hashable) -> None:
        """Make child depend on parent."""
        if child == parent:
            raise SelfReferentialError()
        if self.depends_on(parent, child):
            raise CircularDependencyError()

        self.add_node(parent)
        self.add_node(child)
        _add_to_dep_map(self._dependents, parent, child)
        _add_to_dep_map(self._dependencies, child, parent)

    def __str__(self) -> str:
        lines = [
            "digraph {\n",
            "compound=true;\n",
            "concentrate=true;\n",
            "node [shape = record, ordering=out];\n",
        ]
        for node in self._nodes:
            extra = ""
            info = self._node_info.get(node)
            if info is not None and (info.background or info.color):
                extra = (
                    f"[color = {info.color}, style = filled, fillcolor = {info.background}]"
                )
            lines.append(f'\t"{node}"{extra};\n')

        for key, others in self._dependencies.items():
            for other in others:
                lines.append(f'\t"{key}" -> "{other}";\n')

        lines.append("}")
        return "".join(lines)

    def depends_on(self, child: Hashable, parent: Hashable) -> bool:
        return parent in self.dependencies(child)

    def has_dependent(self, parent: Hashable, child: Hashable) -> bool:
        return child in self.dependents(parent)

    def _leaves_map(self) -> dict[Hashable, Any]:
        leaves: dict[Hashable, Any] = {}
        for node in self._nodes:
            if node not in self._dependencies:
                info = self._node_info.get(node)
                leaves[node] = info.value if info is not None else None
        return leaves

    def topo_sorted_layer_map(self, check_fn: Optional[CheckFn] = None) -> list[dict[Hashable, Any]]:
        """Return the nodes in layers, leaves first, mapped to their values.

        If check_fn raises for any node, an empty list is returned.
        """
        layers: list[dict[Hashable, Any]] = []
        shrinking = self._clone()

        while True:
            leaves = shrinking._leaves_map()
            if not leaves:
                break
            layers.append(leaves)
            for leaf, value in leaves.items():
                if check_fn is not None:
                    try:
                        check_fn(leaf, value)
                    except Exception:
                        return []
                shrinking._remove(leaf)

        return layers

    def prune(self, node: Hashable) -> list[Hashable]:
        """Remove node, the dependents that need it and dependencies left unused."""
        pruned = [node]

        children = self._dependents.get(node, set())
        for dependent in list(children):
            if dependent not in children:
                continue
            last = _remove_from_dep_map(self._dependencies, dependent, node)
            text.debugln("pruning dependent", dependent, last)
            if last:
                pruned.extend(self.prune(dependent))
        self._dependents.pop(node, None)

        parents = self._dependencies.get(node, set())
        for dependency in list(parents):
            if dependency not in parents:
                continue
            last = _remove_from_dep_map(self._dependents, dependency, node)
            text.debugln("pruning dependency", dependency, last)
            if last:
                pruned.extend(self.prune(dependency))
        self._dependencies.pop(node, None)

        self._nodes.pop(node, None)
        return pruned

    def _remove(self, node: Hashable) -> None:
        for dependent in list(self._dependents.get(node, ())):
            _remove_from_dep_map(self._dependencies, dependent, node)
        self._dependents.pop(node, None)

        for dependency in list(self._dependencies.get(node, ())):
            _remove_from_dep_map(self._dependents, dependency, node)
        self._dependencies.pop(node, None)

        self._nodes.pop(node, None)

    def dependencies(self, child: Hashable) -> set:
        """All nodes child depends on, directly or transitively."""
        return self._build_transitive(child, self.immediate_dependencies)

    def immediate_dependencies(self, node: Hashable) -> set:
        return set(self._dependencies.get(node, ()))

    def dependents(self, parent: Hashable) -> set:
        """All nodes depending on parent, directly or transitively."""
        return self._build_transitive(parent, self._immediate_dependents)

    def _immediate_dependents(self, node: Hashable) -> set:
        return set(self._dependents.get(node, ()))

    def _clone(self) -> "Graph":
        clone = Graph()
        clone._nodes = dict(self._nodes)
        clone._dependencies = {key: set(value) for key, value in self._dependencies.items()}
        clone._dependents = {key: set(value) for key, value in self._dependents.items()}
        clone._node_info = self._node_info  # shared; never modified by the clone
        return clone

    def _build_transitive(
        self, root: Hashable, next_fn: Callable[[Hashable], set]
    ) -> set:
        if root not in self._nodes:
            return set()

        found: set = set()
        search_next = [root]
        while search_next:
            discovered = []
            for node in search_next:
                for next_node in next_fn(node):
                    if next_node not in found:
                        found.add(next_node)
                        discovered.append(next_node)
            search_next = discovered
        return found