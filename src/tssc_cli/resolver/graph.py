"""Dependency graph: name resolution, cycle detection and install order."""

from __future__ import annotations

import heapq
from types import MappingProxyType

from .collection import Collection
from .errors import CircularDependencyError, DependencyNotFoundError

# DFS markers
_UNVISITED, _IN_PROGRESS, _DONE = 0, 1, 2


class DependencyGraph:
    """Directed graph where an edge A -> B means "A depends on B".

    B therefore installs before A. Construction resolves every dependency
    name against the collection.
    """

    def __init__(self, collection: Collection):
        """Build the graph.

        Args:
            collection: Loaded dependency collection.

        Raises:
            DependencyNotFoundError: For the first dependency name (components
                in ascending name order, dependencies in declared order) that
                is not in the collection.
        """
        edges: dict[str, tuple[str, ...]] = {}
        for name in sorted(collection):
            component = collection[name]
            for dependency in component.depends_on:
                if dependency not in collection:
                    raise DependencyNotFoundError(component=name, dependency=dependency)
            edges[name] = component.depends_on
        self._edges = MappingProxyType(edges)

    def find_cycle(self) -> list[str] | None:
        """Find a cycle with a three-state depth-first traversal.

        Returns:
            The cycle path, starting and ending with the same component, or
            None when the graph is acyclic.
        """
        state = dict.fromkeys(self._edges, _UNVISITED)

        for root in self._edges:
            if state[root] != _UNVISITED:
                continue
            # Iterative DFS; each stack frame is (node, iterator over deps).
            path = [root]
            stack = [(root, iter(self._edges[root]))]
            state[root] = _IN_PROGRESS
            while stack:
                node, deps = stack[-1]
                advanced = False
                for dep in deps:
                    if state[dep] == _IN_PROGRESS:
                        start = path.index(dep)
                        return path[start:] + [dep]
                    if state[dep] == _UNVISITED:
                        state[dep] = _IN_PROGRESS
                        path.append(dep)
                        stack.append((dep, iter(self._edges[dep])))
                        advanced = True
                        break
                if not advanced:
                    state[node] = _DONE
                    path.pop()
                    stack.pop()
        return None

    def check_acyclic(self) -> None:
        """Raise CircularDependencyError when the graph has a cycle."""
        cycle = self.find_cycle()
        if cycle is not None:
            raise CircularDependencyError(path=cycle)

    def topological_order(self) -> list[str]:
        """Return an install order, dependencies first.

        Among components with no remaining unmet dependency the smallest
        name goes first, which makes the order reproducible.

        Raises:
            CircularDependencyError: If the graph has a cycle.
        """
        self.check_acyclic()

        remaining = {name: len(set(deps)) for name, deps in self._edges.items()}
        dependents: dict[str, list[str]] = {name: [] for name in self._edges}
        for name, deps in self._edges.items():
            for dep in set(deps):
                dependents[dep].append(name)

        ready = [name for name, count in remaining.items() if count == 0]
        heapq.heapify(ready)

        order = []
        while ready:
            name = heapq.heappop(ready)
            order.append(name)
            for dependent in dependents[name]:
                remaining[dependent] -= 1
                if remaining[dependent] == 0:
                    heapq.heappush(ready, dependent)
        return order
