"""Pytest configuration and fixtures for maven-graph tests."""
from __future__ import annotations

import os
from pathlib import Path
from typing import Callable

import pytest

from maven_graph.models import ArtifactIdentifier, DependencyEdge, ResolvedArtifact, UnresolvedArtifact


def gav(text: str) -> ArtifactIdentifier:
    return ArtifactIdentifier.parse(text)


def dep(text: str, scope: str = "compile", **kwargs) -> DependencyEdge:
    return DependencyEdge(target=gav(text), scope=scope, **kwargs)


class StaticResolver:
    """In-memory resolver that records every call."""

    def __init__(self, artifacts: dict[str, list[DependencyEdge]], sizes: dict[str, int] | None = None,
                 failing: set[str] | None = None) -> None:
        self.artifacts = {gav(k): v for k, v in artifacts.items()}
        self.sizes = {gav(k): v for k, v in (sizes or {}).items()}
        self.failing = {gav(k) for k in (failing or set())}
        self.calls: list[ArtifactIdentifier] = []

    def resolve(self, identifier: ArtifactIdentifier):
        self.calls.append(identifier)
        if identifier in self.failing:
            return UnresolvedArtifact(reason=f"cannot build {identifier.compact()}")
        return ResolvedArtifact(
            size=self.sizes.get(identifier, 100),
            dependencies=tuple(self.artifacts.get(identifier, [])),
        )


@pytest.fixture(autouse=True)
def clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep the developer's MAVEN_GRAPH_* settings out of the tests."""
    for name in list(os.environ):
        if name.startswith("MAVEN_GRAPH_"):
            monkeypatch.delenv(name)


@pytest.fixture
def app_scenario() -> StaticResolver:
    """com.x:app:1.0 -> com.y:lib:2.0 (compile), com.z:test-lib:1.0 (test)."""
    return StaticResolver(
        {
            "com.x:app:1.0": [dep("com.y:lib:2.0"), dep("com.z:test-lib:1.0", scope="test")],
        }
    )


POM_TEMPLATE = """<?xml version="1.0" encoding="UTF-8"?>
<project xmlns="http://maven.apache.org/POM/4.0.0">
  <modelVersion>4.0.0</modelVersion>
{body}
</project>
"""


@pytest.fixture
def repo(tmp_path: Path) -> Callable[..., Path]:
    """Return a helper that installs a POM (and optionally a jar) into a temporary repository."""
    root = tmp_path / "repository"
    root.mkdir()

    def install(coordinates: str, body: str, jar_bytes: int | None = None, packaging: str = "jar") -> Path:
        group_id, artifact_id, version = coordinates.split(":")
        directory = root.joinpath(*group_id.split("."), artifact_id, version)
        directory.mkdir(parents=True, exist_ok=True)
        header = (
            f"  <groupId>{group_id}</groupId>\n"
            f"  <artifactId>{artifact_id}</artifactId>\n"
            f"  <version>{version}</version>\n"
            f"  <packaging>{packaging}</packaging>\n"
        )
        pom = directory / f"{artifact_id}-{version}.pom"
        pom.write_text(POM_TEMPLATE.format(body=header + body), encoding="utf-8")
        if jar_bytes is not None:
            extension = "jar" if packaging in ("jar", "bundle") else packaging
            (directory / f"{artifact_id}-{version}.{extension}").write_bytes(b"x" * jar_bytes)
        return pom

    install.root = root  # type: ignore[attr-defined]
    return install


def dependency_xml(coordinates: str, scope: str | None = None, optional: bool = False, extra: str = "") -> str:
    group_id, artifact_id, *rest = coordinates.split(":")
    lines = [f"<groupId>{group_id}</groupId>", f"<artifactId>{artifact_id}</artifactId>"]
    if rest:
        lines.append(f"<version>{rest[0]}</version>")
    if scope:
        lines.append(f"<scope>{scope}</scope>")
    if optional:
        lines.append("<optional>true</optional>")
    if extra:
        lines.append(extra)
    return "<dependency>" + "".join(lines) + "</dependency>"


def dependencies_xml(*deps: str) -> str:
    return "  <dependencies>" + "".join(deps) + "</dependencies>\n"
