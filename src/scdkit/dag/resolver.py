"""Artifact dependency graph — build order, cycle detection, parallel groups."""

from __future__ import annotations
from collections import deque
from dataclasses import dataclass, field


@dataclass
class DAGNode:
    """An artifact and its direct neighbours."""
    name: str
    upstream: set[str] = field(default_factory=set)
    downstream: set[str] = field(default_factory=set)


class CycleError(Exception):
    """Raised when artifacts depend on each other in a loop."""
    def __init__(self, cycle: list[str]):
        self.cycle = cycle
        super().__init__(f"Dependency cycle detected: {' → '.join(cycle)}")


class DAGResolver:
    """Orders artifacts so every artifact builds after the ones it reads."""

    def __init__(self):
        self._nodes: dict[str, DAGNode] = {}

    @property
    def nodes(self) -> dict[str, DAGNode]:
        return self._nodes

    def add_artifact(self, name: str) -> None:
        if name not in self._nodes:
            self._nodes[name] = DAGNode(name=name)

    def add_dependency(self, upstream: str, downstream: str) -> None:
        """`downstream` reads from `upstream`."""
        self.add_artifact(upstream)
        self.add_artifact(downstream)
        self._nodes[upstream].downstream.add(downstream)
        self._nodes[downstream].upstream.add(upstream)

    def add_dependencies(self, artifact: str, depends_on: list[str] | tuple[str, ...]) -> None:
        self.add_artifact(artifact)
        for dep in depends_on:
            self.add_dependency(upstream=dep, downstream=artifact)

    def get_upstream(self, name: str) -> set[str]:
        """All transitive upstream dependencies of `name`."""
        seen: set[str] = set()
        queue = deque(self._nodes[name].upstream if name in self._nodes else ())
        while queue:
            node = queue.popleft()
            if node in seen:
                continue
            seen.add(node)
            if node in self._nodes:
                queue.extend(self._nodes[node].upstream)
        return seen

    def detect_cycles(self) -> list[str] | None:
        """Return one cycle as a path, or None."""
        WHITE, GRAY, BLACK = 0, 1, 2
        color = {n: WHITE for n in self._nodes}
        stack: list[str] = []

        def visit(node: str) -> list[str] | None:
            color[node] = GRAY
            stack.append(node)
            for child in sorted(self._nodes[node].downstream):
                if color[child] == GRAY:
                    return stack[stack.index(child):] + [child]
                if color[child] == WHITE:
                    found = visit(child)
                    if found:
                        return found
            stack.pop()
            color[node] = BLACK
            return None

        for node in sorted(self._nodes):
            if color[node] == WHITE:
                found = visit(node)
                if found:
                    return found
        return None

    def parallel_groups(self) -> list[list[str]]:
        """Groups of artifacts; each group depends only on earlier groups.

        Raises CycleError if the graph is not acyclic.
        """
        cycle = self.detect_cycles()
        if cycle:
            raise CycleError(cycle)

        in_degree = {n: len(node.upstream) for n, node in self._nodes.items()}
        current = [n for n, d in in_degree.items() if d == 0]
        groups = []
        while current:
            groups.append(sorted(current))
            following = []
            for name in current:
                for child in self._nodes[name].downstream:
                    in_degree[child] -= 1
                    if in_degree[child] == 0:
                        following.append(child)
            current = following
        return groups

    def topological_sort(self) -> list[str]:
        """Artifacts in build order, upstream first. Deterministic for a given graph."""
        return [name for group in self.parallel_groups() for name in group]

    def to_dict(self) -> dict:
        return {
            "nodes": sorted(self._nodes),
            "edges": [
                {"upstream": name, "downstream": child}
                for name in sorted(self._nodes)
                for child in sorted(self._nodes[name].downstream)
            ],
            "groups": self.parallel_groups(),
        }
