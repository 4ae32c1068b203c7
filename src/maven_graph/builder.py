"""Breadth-first construction of an artifact's dependency graph."""

from __future__ import annotations

import logging
from collections import deque

from maven_graph.exceptions import ArtifactResolutionError
from maven_graph.graph import Edge, Graph, Vertex
from maven_graph.models import ArtifactIdentifier, ResolvedArtifact, UnresolvedArtifact
from maven_graph.options import DependencyFilter, DependencyOptions
from maven_graph.resolver import ArtifactResolver

logger = logging.getLogger(__name__)


class BreadthFirstGraphBuilder:
    """Build dependency graphs level by level from a root artifact.

    Each artifact is resolved at most once per build: a target is enqueued the
    first time an edge reaches it, and later edges to it are recorded without
    enqueueing it again. This is also what stops traversal on cycles.

    The builder holds no per-build state, so one instance can serve many
    reports. The resolver is the only shared collaborator.
    """

    def __init__(self, resolver: ArtifactResolver, dependency_filter: DependencyFilter | None = None) -> None:
        self.resolver = resolver
        self.dependency_filter = dependency_filter or DependencyFilter()

    def _resolve(self, identifier: ArtifactIdentifier) -> ResolvedArtifact | UnresolvedArtifact:
        try:
            return self.resolver.resolve(identifier)
        except ArtifactResolutionError as exc:
            logger.warning("Could not resolve %s: %s", identifier.compact(), exc)
            return UnresolvedArtifact(reason=str(exc))

    def build_graph(self, root: ArtifactIdentifier, options: DependencyOptions) -> Graph:
        """Resolve `root` and its dependencies into a graph.

        Args:
            root: Coordinates of the artifact to analyze.
            options: Which scopes to follow and how far.

        Returns:
            A frozen `Graph`. Unresolvable artifacts, the root included, appear
            as placeholder vertices without outgoing edges.
        """
        graph = Graph(root)
        queue: deque[ArtifactIdentifier] = deque([root])
        visited: set[ArtifactIdentifier] = {root}
        unresolved = 0

        while queue:
            current = queue.popleft()
            artifact = self._resolve(current)
            graph._add_vertex(Vertex(identifier=current, artifact=artifact))
            if not artifact.resolved:
                unresolved += 1
                continue

            direct = current == root
            for dependency in artifact.dependencies:
                target = dependency.target
                if not self.dependency_filter.accepts(target):
                    logger.debug("Excluded %s -> %s", current.compact(), target.compact())
                    continue
                if not options.accepts(dependency, direct=direct):
                    continue

                graph._add_edge(
                    Edge(
                        source=current,
                        target=target,
                        scope=dependency.scope,
                        type=dependency.type,
                        optional=dependency.optional,
                    )
                )
                if target not in visited:
                    visited.add(target)
                    queue.append(target)

        logger.info(
            "Built %s graph for %s: %d vertices, %d edges",
            options.name,
            root.compact(),
            len(graph),
            len(graph.edges()),
        )
        if unresolved:
            logger.warning("%d artifact(s) could not be resolved for %s", unresolved, options.name)
        return graph.freeze()
