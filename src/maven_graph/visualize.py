"""Rich rendering utilities for dependency graph previews."""

from __future__ import annotations

from rich.markup import escape
from rich.tree import Tree

from maven_graph.graph import Edge, Graph, Vertex


def _vertex_label(vertex: Vertex, show_version: bool) -> str:
    identifier = vertex.identifier
    text = identifier.compact() if show_version else f"{identifier.group_id}:{identifier.artifact_id}"
    text = escape(text)
    if not vertex.resolved:
        return f"[red]{text}[/red] [dim](unresolved)[/dim]"
    return text


def _edge_suffix(edge: Edge, show_edge_labels: bool) -> str:
    if not show_edge_labels:
        return ""
    suffix = f" [dim]({edge.scope})[/dim]"
    if edge.optional:
        suffix += " [dim](optional)[/dim]"
    return suffix


def build_dependency_tree(graph: Graph, show_version: bool = True, show_edge_labels: bool = True) -> Tree:
    """Build a Rich Tree representing the graph as seen from its root.

    Each vertex is expanded once, at its shallowest position; later
    occurrences are marked instead of expanded again.

    Args:
        graph: A built dependency graph.
        show_version: Include versions in node labels.
        show_edge_labels: Append the scope to each dependency.

    Returns:
        A Rich Tree object for rendering.
    """
    root_vertex = graph.vertex(graph.root)
    tree = Tree(f"[bold]{_vertex_label(root_vertex, show_version)}[/bold]")
    edges = graph.out_edges(graph.root)
    if not edges:
        tree.add("[dim]No dependencies found[/dim]")
        return tree

    expanded = {graph.root}
    level: list[tuple[Tree, Edge]] = [(tree, edge) for edge in edges]
    while level:
        next_level: list[tuple[Tree, Edge]] = []
        for parent, edge in level:
            vertex = graph.vertex(edge.target)
            label = _vertex_label(vertex, show_version) + _edge_suffix(edge, show_edge_labels)
            if edge.target in expanded:
                parent.add(f"{label} [dim](already shown)[/dim]")
                continue
            expanded.add(edge.target)
            branch = parent.add(label)
            next_level.extend((branch, child) for child in graph.out_edges(edge.target))
        level = next_level
    return tree
