"""Report definitions and dependency filters."""

from __future__ import annotations

import enum
from dataclasses import dataclass
from fnmatch import fnmatchcase
from typing import Iterable

from maven_graph.exceptions import ReportDefinitionError
from maven_graph.models import DEFAULT_SCOPE, ArtifactIdentifier, DependencyEdge


DEFAULT_REPORTS = "PACKAGE,COMPILE,RUNTIME,TEST,COMPILE-TRANSITIVE"
TRANSITIVE_SUFFIX = "-TRANSITIVE"


class GraphType(enum.Enum):
    """Which dependency scopes a report follows.

    `direct_scopes` apply to the root's own dependencies, `transitive_scopes`
    to every dependency reached through another artifact.
    """

    PACKAGE = ("PACKAGE", frozenset({"compile", "runtime"}), frozenset({"compile", "runtime"}))
    COMPILE = ("COMPILE", frozenset({"compile", "provided", "system"}), frozenset({"compile"}))
    RUNTIME = ("RUNTIME", frozenset({"compile", "runtime"}), frozenset({"compile", "runtime"}))
    TEST = (
        "TEST",
        frozenset({"compile", "runtime", "provided", "system", "test"}),
        frozenset({"compile", "runtime"}),
    )

    def __init__(self, token: str, direct_scopes: frozenset[str], transitive_scopes: frozenset[str]) -> None:
        self.token = token
        self.direct_scopes = direct_scopes
        self.transitive_scopes = transitive_scopes

    def __str__(self) -> str:
        return self.token


@dataclass(frozen=True)
class DependencyOptions:
    """One report request: graph type plus transitivity."""

    graph_type: GraphType
    include_all_transitive_dependencies: bool = False

    @property
    def include_optional(self) -> bool:
        """Whether optional dependencies of non-root artifacts are followed."""
        return self.include_all_transitive_dependencies

    @property
    def name(self) -> str:
        suffix = TRANSITIVE_SUFFIX if self.include_all_transitive_dependencies else ""
        return f"{self.graph_type}{suffix}"

    def scopes_for(self, *, direct: bool) -> frozenset[str]:
        if direct or self.include_all_transitive_dependencies:
            return self.graph_type.direct_scopes
        return self.graph_type.transitive_scopes

    def accepts(self, dependency: DependencyEdge, *, direct: bool) -> bool:
        """Decide whether an edge is kept, ignoring exclusion filters.

        Args:
            dependency: The declared dependency.
            direct: True when the dependency is declared by the root artifact.
        """
        if dependency.transitive_only and not self.include_all_transitive_dependencies:
            return False
        if (dependency.scope or DEFAULT_SCOPE) not in self.scopes_for(direct=direct):
            return False
        if dependency.optional and not direct and not self.include_optional:
            return False
        return True

    @classmethod
    def parse(cls, token: str) -> "DependencyOptions":
        """Parse a single token like `COMPILE` or `COMPILE-TRANSITIVE`.

        Raises:
            ReportDefinitionError: If the token names no known graph type.
        """
        text = (token or "").strip().upper()
        transitive = text.endswith(TRANSITIVE_SUFFIX)
        if transitive:
            text = text[: -len(TRANSITIVE_SUFFIX)]
        try:
            graph_type = GraphType[text]
        except KeyError:
            known = ", ".join(t.token for t in GraphType)
            raise ReportDefinitionError(
                f"Unknown report definition {token!r} (expected one of {known}, optionally with {TRANSITIVE_SUFFIX})"
            ) from None
        return cls(graph_type=graph_type, include_all_transitive_dependencies=transitive)


def parse_report_definitions(reports: str) -> list[DependencyOptions]:
    """Parse a comma separated list of report definitions.

    Every token is validated before anything is returned, so a bad token
    fails the whole run up front.

    Raises:
        ReportDefinitionError: On an empty list or any unknown token.
    """
    tokens = [t.strip() for t in (reports or "").split(",") if t.strip()]
    if not tokens:
        raise ReportDefinitionError("No report definitions given")
    return [DependencyOptions.parse(t) for t in tokens]


def _matches(value: str, patterns: Iterable[str]) -> bool:
    return any(fnmatchcase(value, p) for p in patterns)


@dataclass(frozen=True)
class DependencyFilter:
    """Group/artifact exclusions and an optional single-group include filter.

    Patterns are shell-style wildcards; a plain string only matches itself.
    Exclusions are checked first, then the include filter.
    """

    excluded_group_ids: tuple[str, ...] = ()
    excluded_artifact_ids: tuple[str, ...] = ()
    include_group_id: str | None = None

    @classmethod
    def create(
        cls,
        excluded_group_ids: Iterable[str] | None = None,
        excluded_artifact_ids: Iterable[str] | None = None,
        include_group_id: str | None = None,
    ) -> "DependencyFilter":
        return cls(
            excluded_group_ids=tuple(g.strip() for g in excluded_group_ids or () if g.strip()),
            excluded_artifact_ids=tuple(a.strip() for a in excluded_artifact_ids or () if a.strip()),
            include_group_id=(include_group_id or "").strip() or None,
        )

    def accepts(self, target: ArtifactIdentifier) -> bool:
        if _matches(target.group_id, self.excluded_group_ids):
            return False
        if _matches(target.artifact_id, self.excluded_artifact_ids):
            return False
        if self.include_group_id is not None and not fnmatchcase(target.group_id, self.include_group_id):
            return False
        return True
