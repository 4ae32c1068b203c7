"""Dependency graph structure backed by networkx.

A -> B means A depends on B. Nodes are keyed by `ArtifactIdentifier`; parallel
edges between the same pair are keyed by their scope label, so the same
relationship declared twice with the same scope collapses into one edge.
"""

from __future__ import annotations

from dataclasses import dataclass
import networkx as nx

from maven_graph.models import Artifact, ArtifactIdentifier, DEFAULT_TYPE


@dataclass(frozen=True)
class Vertex:
    """A graph node: coordinates plus the resolved (or placeholder) payload."""

    identifier: ArtifactIdentifier
    artifact: Artifact

    @property
    def resolved(self) -> bool:
        return self.artifact.resolved

    @property
    def size(self) -> int:
        return self.artifact.size


@dataclass(frozen=True)
class Edge:
    """A kept dependency relationship."""

    source: ArtifactIdentifier
    target: ArtifactIdentifier
    scope: str
    type: str = DEFAULT_TYPE
    optional: bool = False


class Graph:
    """Dependency graph. Read-only once `freeze()` has been called."""

    def __init__(self, root: ArtifactIdentifier) -> None:
        self._root = root
        self._g = nx.MultiDiGraph()
        self._edges: list[Edge] = []

    @property
    def root(self) -> ArtifactIdentifier:
        return self._root

    @property
    def frozen(self) -> bool:
        return nx.is_frozen(self._g)

    def _add_vertex(self, vertex: Vertex) -> None:
        self._g.add_node(vertex.identifier, vertex=vertex)

    def _add_edge(self, edge: Edge) -> bool:
        """Add an edge unless one with the same scope already joins the pair."""
        if self._g.has_edge(edge.source, edge.target, key=edge.scope):
            return False
        self._g.add_edge(edge.source, edge.target, key=edge.scope, edge=edge)
        self._edges.append(edge)
        return True

    def freeze(self) -> "Graph":
        nx.freeze(self._g)
        return self

    def vertices(self) -> list[Vertex]:
        """Vertices in insertion (breadth-first discovery) order."""
        return [data["vertex"] for _, data in self._g.nodes(data=True)]

    def edges(self) -> list[Edge]:
        """Edges in insertion order."""
        return list(self._edges)

    def vertex(self, identifier: ArtifactIdentifier) -> Vertex:
        """Look up a vertex.

        Raises:
            KeyError: If the identifier is not in the graph.
        """
        if identifier not in self._g:
            raise KeyError(identifier.compact())
        return self._g.nodes[identifier]["vertex"]

    def out_edges(self, identifier: ArtifactIdentifier) -> list[Edge]:
        return [data["edge"] for _, _, data in self._g.out_edges(identifier, data=True)]

    def to_networkx(self) -> nx.MultiDiGraph:
        """Return a frozen copy with plain attribute data, for analysis."""
        out = nx.MultiDiGraph()
        for vertex in self.vertices():
            out.add_node(
                vertex.identifier.compact(),
                group_id=vertex.identifier.group_id,
                artifact_id=vertex.identifier.artifact_id,
                version=vertex.identifier.version,
                size=vertex.size,
                resolved=vertex.resolved,
            )
        for edge in self._edges:
            out.add_edge(
                edge.source.compact(),
                edge.target.compact(),
                key=edge.scope,
                scope=edge.scope,
                type=edge.type,
                optional=edge.optional,
            )
        return nx.freeze(out)

    def __contains__(self, identifier: object) -> bool:
        return identifier in self._g

    def __len__(self) -> int:
        return self._g.number_of_nodes()
