"""Runtime configuration module.

Configuration is read from environment variables; command line options
override individual values.
"""
from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path

from maven_graph.exceptions import ConfigurationError
from maven_graph.options import DEFAULT_REPORTS, DependencyFilter


def _split_list(value: str | None) -> tuple[str, ...]:
    return tuple(part.strip() for part in (value or "").split(",") if part.strip())


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    value = raw.strip().lower()
    if value in ("1", "true", "yes", "on"):
        return True
    if value in ("0", "false", "no", "off"):
        return False
    raise ConfigurationError(f"{name} must be a boolean, got {raw!r}")


@dataclass
class GraphConfig:
    """Graph generation configuration container.

    Attributes:
        repository: Local Maven repository root
        reports: Comma separated report definitions
        output_dir: Directory receiving the GraphML files
        excluded_group_ids: groupId patterns whose artifacts are left out
        excluded_artifact_ids: artifactId patterns whose artifacts are left out
        include_group_id: If set, only artifacts of this groupId pattern are kept
        show_version: Show artifact versions on vertices
        show_edge_labels: Show scopes on edges
    """

    repository: Path = field(default_factory=lambda: Path.home() / ".m2" / "repository")
    reports: str = DEFAULT_REPORTS
    output_dir: Path = Path("target")
    excluded_group_ids: tuple[str, ...] = ()
    excluded_artifact_ids: tuple[str, ...] = ()
    include_group_id: str | None = None
    show_version: bool = True
    show_edge_labels: bool = True

    @classmethod
    def from_env(cls) -> "GraphConfig":
        """Create configuration from environment variables.

        Environment variables:
            MAVEN_GRAPH_REPOSITORY: local repository (default: "~/.m2/repository")
            MAVEN_GRAPH_REPORTS: report definitions (default: all five standard reports)
            MAVEN_GRAPH_OUTPUT_DIR: output directory (default: "target")
            MAVEN_GRAPH_EXCLUDED_GROUP_IDS: comma separated groupId patterns
            MAVEN_GRAPH_EXCLUDED_ARTIFACT_IDS: comma separated artifactId patterns
            MAVEN_GRAPH_INCLUDE_GROUP_ID: single groupId pattern to keep
            MAVEN_GRAPH_SHOW_VERSION: "true"/"false" (default: "true")
            MAVEN_GRAPH_SHOW_EDGE_LABELS: "true"/"false" (default: "true")

        Raises:
            ConfigurationError: If a boolean variable holds something else.
        """
        repository = os.getenv("MAVEN_GRAPH_REPOSITORY")
        return cls(
            repository=Path(repository).expanduser() if repository else Path.home() / ".m2" / "repository",
            reports=os.getenv("MAVEN_GRAPH_REPORTS") or DEFAULT_REPORTS,
            output_dir=Path(os.getenv("MAVEN_GRAPH_OUTPUT_DIR") or "target"),
            excluded_group_ids=_split_list(os.getenv("MAVEN_GRAPH_EXCLUDED_GROUP_IDS")),
            excluded_artifact_ids=_split_list(os.getenv("MAVEN_GRAPH_EXCLUDED_ARTIFACT_IDS")),
            include_group_id=os.getenv("MAVEN_GRAPH_INCLUDE_GROUP_ID") or None,
            show_version=_env_bool("MAVEN_GRAPH_SHOW_VERSION", True),
            show_edge_labels=_env_bool("MAVEN_GRAPH_SHOW_EDGE_LABELS", True),
        )

    def dependency_filter(self) -> DependencyFilter:
        return DependencyFilter.create(
            excluded_group_ids=self.excluded_group_ids,
            excluded_artifact_ids=self.excluded_artifact_ids,
            include_group_id=self.include_group_id,
        )

    def validate(self) -> None:
        """Validate the configuration.

        Raises:
            ConfigurationError: If the repository is not a directory or the output
                directory exists as a file.
        """
        if not self.repository.is_dir():
            raise ConfigurationError(f"Local repository not found: {self.repository}")
        if self.output_dir.exists() and not self.output_dir.is_dir():
            raise ConfigurationError(f"Output path is not a directory: {self.output_dir}")
