"""Run a batch of report definitions: build each graph and write it as GraphML."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Sequence

from maven_graph.builder import BreadthFirstGraphBuilder
from maven_graph.exceptions import GraphWriteError
from maven_graph.graphml import GraphMLSerializer, RenderOptions
from maven_graph.models import ArtifactIdentifier
from maven_graph.options import DependencyOptions

logger = logging.getLogger(__name__)

GRAPHML_EXTENSION = "graphml"


@dataclass(frozen=True)
class ReportResult:
    options: DependencyOptions
    path: Path
    vertices: int = 0
    edges: int = 0
    error: GraphWriteError | None = None

    @property
    def ok(self) -> bool:
        return self.error is None


def output_file_name(
    root: ArtifactIdentifier,
    options: DependencyOptions,
    final_name: str | None = None,
    extension: str = GRAPHML_EXTENSION,
) -> str:
    """Return `<artifactId>-<version>-<TYPE>[-TRANSITIVE]-deps.<ext>`.

    A non-blank `final_name` replaces everything before `-deps.<ext>`.
    """
    if final_name and final_name.strip():
        stem = final_name.strip()
    else:
        stem = f"{root.artifact_id}-{root.version}-{options.name}"
    return f"{stem}-deps.{extension}"


def _discard(*paths: Path) -> None:
    """Remove the partial file and any previous report at the same path."""
    for path in paths:
        if path.is_file():
            path.unlink(missing_ok=True)


def write_graph_file(
    builder: BreadthFirstGraphBuilder,
    root: ArtifactIdentifier,
    options: DependencyOptions,
    output_dir: Path,
    render_options: RenderOptions,
    final_name: str | None = None,
) -> ReportResult:
    """Build one report and write it into `output_dir`.

    Raises:
        GraphWriteError: If the output file cannot be created or written.
    """
    graph = builder.build_graph(root, options)
    path = output_dir / output_file_name(root, options, final_name)
    partial = path.with_name(f".{path.name}.part")
    try:
        output_dir.mkdir(parents=True, exist_ok=True)
        with partial.open("wb") as fh:
            GraphMLSerializer().serialize(graph, fh, render_options)
        partial.replace(path)
    except GraphWriteError:
        _discard(partial, path)
        raise
    except OSError as exc:
        _discard(partial, path)
        raise GraphWriteError(f"Can't write to file {path}: {exc}") from exc
    logger.info("Created dependency graph in %s", path)
    return ReportResult(options=options, path=path, vertices=len(graph), edges=len(graph.edges()))


def generate_reports(
    builder: BreadthFirstGraphBuilder,
    root: ArtifactIdentifier,
    reports: Sequence[DependencyOptions],
    output_dir: Path,
    render_options: RenderOptions,
    final_name: str | None = None,
) -> list[ReportResult]:
    """Write every report. A write failure stops only that report."""
    results: list[ReportResult] = []
    for options in reports:
        try:
            results.append(write_graph_file(builder, root, options, output_dir, render_options, final_name))
        except GraphWriteError as exc:
            logger.error("Report %s failed: %s", options.name, exc)
            results.append(
                ReportResult(
                    options=options,
                    path=output_dir / output_file_name(root, options, final_name),
                    error=exc,
                )
            )
    return results
