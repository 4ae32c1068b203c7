"""Typer CLI entry point for maven-graph."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Annotated, List, Optional

import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table

from maven_graph.builder import BreadthFirstGraphBuilder
from maven_graph.config import GraphConfig
from maven_graph.exceptions import MavenGraphError
from maven_graph.graphml import RenderOptions, SimpleVertexRenderer
from maven_graph.models import ArtifactIdentifier
from maven_graph.options import DependencyOptions, parse_report_definitions
from maven_graph.parser import parse_pom
from maven_graph.report import generate_reports
from maven_graph.resolver import CachingArtifactResolver, LocalRepositoryResolver
from maven_graph.visualize import build_dependency_tree

logger = logging.getLogger(__name__)

app = typer.Typer(add_completion=False, help="Build Maven dependency graphs and export them as GraphML.")
console = Console()
err_console = Console(stderr=True)

PomArgument = Annotated[
    Optional[Path],
    typer.Argument(help="Project pom.xml; the root coordinates are read from it."),
]
CoordinatesOption = Annotated[
    Optional[str],
    typer.Option("--coordinates", "-c", help="Root coordinates groupId:artifactId:version[:classifier]."),
]
RepositoryOption = Annotated[
    Optional[Path],
    typer.Option("--repository", help="Local Maven repository (default: ~/.m2/repository)."),
]
ExcludeGroupOption = Annotated[
    Optional[List[str]],
    typer.Option("--exclude-group", help="Exclude artifacts of this groupId (wildcards allowed, repeatable)."),
]
ExcludeArtifactOption = Annotated[
    Optional[List[str]],
    typer.Option("--exclude-artifact", help="Exclude artifacts with this artifactId (wildcards allowed, repeatable)."),
]
IncludeGroupOption = Annotated[
    Optional[str],
    typer.Option("--include-group", help="Only keep artifacts of this groupId."),
]
ShowVersionOption = Annotated[
    Optional[bool],
    typer.Option("--show-version/--hide-version", help="Show artifact versions."),
]
EdgeLabelsOption = Annotated[
    Optional[bool],
    typer.Option("--edge-labels/--no-edge-labels", help="Show dependency scopes on edges."),
]
VerboseOption = Annotated[bool, typer.Option("--verbose", "-v", help="Log every fetched artifact.")]


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(message)s",
        handlers=[RichHandler(console=err_console, show_path=False)],
        force=True,
    )


def _load_config(
    repository: Path | None,
    exclude_group: list[str] | None,
    exclude_artifact: list[str] | None,
    include_group: str | None,
    show_version: bool | None,
    edge_labels: bool | None,
) -> GraphConfig:
    """Environment configuration with command line overrides applied."""
    config = GraphConfig.from_env()
    if repository is not None:
        config.repository = repository
    if exclude_group:
        config.excluded_group_ids = tuple(exclude_group)
    if exclude_artifact:
        config.excluded_artifact_ids = tuple(exclude_artifact)
    if include_group:
        config.include_group_id = include_group
    if show_version is not None:
        config.show_version = show_version
    if edge_labels is not None:
        config.show_edge_labels = edge_labels
    return config


def _root_and_resolver(
    pom: Path | None, coordinates: str | None, config: GraphConfig
) -> tuple[ArtifactIdentifier, CachingArtifactResolver]:
    if pom is not None:
        root = parse_pom(pom).project
        overrides = {root: pom}
    elif coordinates:
        root = ArtifactIdentifier.parse(coordinates)
        overrides = {}
    else:
        raise typer.BadParameter("Pass a pom.xml or --coordinates.")
    resolver = LocalRepositoryResolver(config.repository, overrides=overrides)
    return root, CachingArtifactResolver(resolver)


@app.command()
def graph(
    pom: PomArgument = None,
    coordinates: CoordinatesOption = None,
    reports: Annotated[
        Optional[str],
        typer.Option("--reports", help="Comma separated report definitions, e.g. COMPILE,TEST-TRANSITIVE."),
    ] = None,
    out: Annotated[Optional[Path], typer.Option("--out", help="Output directory.")] = None,
    final_name: Annotated[
        Optional[str],
        typer.Option("--final-name", help="Use NAME-deps.graphml instead of the generated file name."),
    ] = None,
    repository: RepositoryOption = None,
    exclude_group: ExcludeGroupOption = None,
    exclude_artifact: ExcludeArtifactOption = None,
    include_group: IncludeGroupOption = None,
    show_version: ShowVersionOption = None,
    edge_labels: EdgeLabelsOption = None,
    verbose: VerboseOption = False,
) -> None:
    """Build one GraphML dependency graph per report definition."""
    _configure_logging(verbose)
    try:
        config = _load_config(repository, exclude_group, exclude_artifact, include_group, show_version, edge_labels)
        if reports:
            config.reports = reports
        if out is not None:
            config.output_dir = out
        report_definitions = parse_report_definitions(config.reports)
        config.validate()

        root, resolver = _root_and_resolver(pom, coordinates, config)
        logger.info("Using includeGroupId=%s", config.include_group_id)
        logger.info("Using excludedGroupIds=%s", ",".join(config.excluded_group_ids) or "<none>")

        results = generate_reports(
            BreadthFirstGraphBuilder(resolver, config.dependency_filter()),
            root,
            report_definitions,
            config.output_dir,
            RenderOptions(SimpleVertexRenderer(config.show_version), config.show_edge_labels),
            final_name,
        )
    except (MavenGraphError, ValueError) as exc:
        console.print(f"[bold red]Error:[/bold red] {exc}")
        raise typer.Exit(code=1) from None

    table = Table(title=f"Dependency graphs for {root.compact()}")
    table.add_column("Report")
    table.add_column("Vertices", justify="right")
    table.add_column("Edges", justify="right")
    table.add_column("File")
    for result in results:
        if result.ok:
            table.add_row(result.options.name, str(result.vertices), str(result.edges), str(result.path))
        else:
            table.add_row(result.options.name, "-", "-", f"[bold red]{result.error}[/bold red]")
    console.print(table)

    if not all(result.ok for result in results):
        raise typer.Exit(code=1)


@app.command()
def tree(
    pom: PomArgument = None,
    coordinates: CoordinatesOption = None,
    report: Annotated[str, typer.Option("--report", help="A single report definition.")] = "COMPILE",
    repository: RepositoryOption = None,
    exclude_group: ExcludeGroupOption = None,
    exclude_artifact: ExcludeArtifactOption = None,
    include_group: IncludeGroupOption = None,
    show_version: ShowVersionOption = None,
    edge_labels: EdgeLabelsOption = None,
    verbose: VerboseOption = False,
) -> None:
    """Build one dependency graph and print it as a tree."""
    _configure_logging(verbose)
    try:
        config = _load_config(repository, exclude_group, exclude_artifact, include_group, show_version, edge_labels)
        options = DependencyOptions.parse(report)
        config.validate()

        root, resolver = _root_and_resolver(pom, coordinates, config)
        built = BreadthFirstGraphBuilder(resolver, config.dependency_filter()).build_graph(root, options)
        console.print(build_dependency_tree(built, config.show_version, config.show_edge_labels))
    except (MavenGraphError, ValueError) as exc:
        console.print(f"[bold red]Error:[/bold red] {exc}")
        raise typer.Exit(code=1) from None


def main() -> None:
    """Console-script entry point."""
    app()
