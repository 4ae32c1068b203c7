"""Render dependency graphs as GraphML using lxml."""

from __future__ import annotations

import io
from dataclasses import dataclass, field
from typing import IO, Any, Protocol

from lxml import etree

from maven_graph.exceptions import GraphWriteError
from maven_graph.graph import Graph, Vertex


GRAPHML_NS = "http://graphml.graphdrawing.org/xmlns"
XSI_NS = "http://www.w3.org/2001/XMLSchema-instance"
GRAPHML_SCHEMA = f"{GRAPHML_NS} {GRAPHML_NS}/1.0/graphml.xsd"


@dataclass(frozen=True)
class AttributeKey:
    """A GraphML `<key>` declaration for a node attribute."""

    name: str
    type: str = "string"


@dataclass(frozen=True)
class VertexRendering:
    label: str
    attributes: dict[str, Any] = field(default_factory=dict)


class VertexRenderer(Protocol):
    """Turns a vertex into a display label plus extra node attributes."""

    keys: tuple[AttributeKey, ...]

    def render(self, vertex: Vertex) -> VertexRendering: ...


class SimpleVertexRenderer:
    """Label vertices with the artifactId, optionally followed by the version.

    Also reports groupId, artifact size in bytes, and whether resolution
    succeeded. The version attribute is only written when versions are shown.
    """

    keys = (
        AttributeKey("groupId"),
        AttributeKey("version"),
        AttributeKey("size", "long"),
        AttributeKey("resolved", "boolean"),
    )

    def __init__(self, show_version: bool = True) -> None:
        self.show_version = show_version

    def render(self, vertex: Vertex) -> VertexRendering:
        identifier = vertex.identifier
        lines = [identifier.artifact_id]
        if self.show_version:
            lines.append(identifier.version)
        if identifier.classifier:
            lines.append(identifier.classifier)

        attributes: dict[str, Any] = {"groupId": identifier.group_id}
        if self.show_version:
            attributes["version"] = identifier.version
        attributes["size"] = vertex.size
        attributes["resolved"] = vertex.resolved
        return VertexRendering(label="\n".join(lines), attributes=attributes)


@dataclass(frozen=True)
class RenderOptions:
    vertex_renderer: VertexRenderer = field(default_factory=SimpleVertexRenderer)
    show_edge_labels: bool = True


def _format_value(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


class GraphMLSerializer:
    """Write a `Graph` as a GraphML document.

    Node ids are `n0, n1, ...` in vertex order and edge ids `e0, e1, ...` in
    edge order, so serializing the same graph with the same options always
    yields the same bytes.
    """

    def to_element(self, graph: Graph, options: RenderOptions) -> etree._Element:
        root = etree.Element(f"{{{GRAPHML_NS}}}graphml", nsmap={None: GRAPHML_NS, "xsi": XSI_NS})
        root.set(f"{{{XSI_NS}}}schemaLocation", GRAPHML_SCHEMA)

        node_keys: dict[str, str] = {}
        declarations = [("node", AttributeKey("label"))]
        declarations += [("node", key) for key in options.vertex_renderer.keys]
        for index, (domain, key) in enumerate(declarations):
            key_id = f"d{index}"
            node_keys[key.name] = key_id
            self._add_key(root, key_id, domain, key)
        edge_label_key = f"d{len(declarations)}"
        self._add_key(root, edge_label_key, "edge", AttributeKey("label"))

        graph_el = etree.SubElement(root, f"{{{GRAPHML_NS}}}graph", id="G", edgedefault="directed")

        node_ids: dict[Any, str] = {}
        for index, vertex in enumerate(graph.vertices()):
            node_id = f"n{index}"
            node_ids[vertex.identifier] = node_id
            rendering = options.vertex_renderer.render(vertex)
            node_el = etree.SubElement(graph_el, f"{{{GRAPHML_NS}}}node", id=node_id)
            self._add_data(node_el, node_keys["label"], rendering.label)
            for key in options.vertex_renderer.keys:
                if key.name in rendering.attributes:
                    self._add_data(node_el, node_keys[key.name], rendering.attributes[key.name])

        for index, edge in enumerate(graph.edges()):
            edge_el = etree.SubElement(
                graph_el,
                f"{{{GRAPHML_NS}}}edge",
                id=f"e{index}",
                source=node_ids[edge.source],
                target=node_ids[edge.target],
            )
            if options.show_edge_labels:
                self._add_data(edge_el, edge_label_key, edge.scope)

        return root

    def to_bytes(self, graph: Graph, options: RenderOptions) -> bytes:
        return etree.tostring(
            self.to_element(graph, options),
            encoding="UTF-8",
            xml_declaration=True,
            pretty_print=True,
        )

    def serialize(self, graph: Graph, stream: IO[Any], options: RenderOptions) -> None:
        """Write the GraphML document to a binary or text stream.

        Raises:
            GraphWriteError: If the stream cannot be written.
        """
        data = self.to_bytes(graph, options)
        try:
            if isinstance(stream, io.TextIOBase):
                stream.write(data.decode("utf-8"))
            else:
                stream.write(data)
            stream.flush()
        except (OSError, ValueError) as exc:
            raise GraphWriteError(f"Can't write graph for {graph.root.compact()}: {exc}") from exc

    @staticmethod
    def _add_key(parent: etree._Element, key_id: str, domain: str, key: AttributeKey) -> None:
        etree.SubElement(
            parent,
            f"{{{GRAPHML_NS}}}key",
            {"id": key_id, "for": domain, "attr.name": key.name, "attr.type": key.type},
        )

    @staticmethod
    def _add_data(parent: etree._Element, key_id: str, value: Any) -> None:
        data_el = etree.SubElement(parent, f"{{{GRAPHML_NS}}}data", key=key_id)
        data_el.text = _format_value(value)
