from __future__ import annotations

from rich.console import Console

from conftest import StaticResolver, dep, gav
from maven_graph.builder import BreadthFirstGraphBuilder
from maven_graph.options import DependencyOptions, GraphType
from maven_graph.visualize import build_dependency_tree


def _render(tree) -> str:
    console = Console(width=200, record=True)
    console.print(tree)
    return console.export_text()


def test_tree_marks_repeated_vertices() -> None:
    resolver = StaticResolver(
        {
            "g:root:1": [dep("g:a:1"), dep("g:b:1")],
            "g:a:1": [dep("g:shared:1")],
            "g:b:1": [dep("g:shared:1")],
        }
    )
    graph = BreadthFirstGraphBuilder(resolver).build_graph(gav("g:root:1"), DependencyOptions(GraphType.COMPILE))

    text = _render(build_dependency_tree(graph))

    assert text.count("g:shared:1") == 2
    assert text.count("already shown") == 1
    assert "(compile)" in text


def test_tree_without_dependencies() -> None:
    graph = BreadthFirstGraphBuilder(StaticResolver({})).build_graph(
        gav("g:root:1"), DependencyOptions(GraphType.COMPILE)
    )

    text = _render(build_dependency_tree(graph, show_version=False, show_edge_labels=False))

    assert "g:root" in text
    assert "No dependencies found" in text
