from __future__ import annotations

import pytest
from pydantic import ValidationError

from maven_graph.models import ArtifactIdentifier, DependencyEdge, ResolvedArtifact, UnresolvedArtifact


def test_identifier_equality_and_hash() -> None:
    a = ArtifactIdentifier(group_id="g", artifact_id="a", version="1")
    b = ArtifactIdentifier.parse("g:a:1")
    classified = ArtifactIdentifier.parse("g:a:1:sources")

    assert a == b
    assert hash(a) == hash(b)
    assert a != classified
    assert len({a, b, classified}) == 2
    assert classified.compact() == "g:a:1:sources"


def test_identifier_is_immutable() -> None:
    identifier = ArtifactIdentifier.parse("g:a:1")
    with pytest.raises(ValidationError):
        identifier.version = "2"


@pytest.mark.parametrize("text", ["g:a", "g::1", "g:a:1:c:extra", ""])
def test_parse_rejects_bad_coordinates(text: str) -> None:
    with pytest.raises(ValueError):
        ArtifactIdentifier.parse(text)


def test_dependency_edge_defaults() -> None:
    edge = DependencyEdge(target=ArtifactIdentifier.parse("g:a:1"), optional=True, type="pom")

    assert edge.scope == "compile"
    assert edge.type == "pom"
    assert edge.optional
    assert not edge.transitive_only


def test_unresolved_artifact_is_an_empty_placeholder() -> None:
    placeholder = UnresolvedArtifact(reason="boom")

    assert not placeholder.resolved
    assert placeholder.size == 0
    assert placeholder.dependencies == ()
    assert ResolvedArtifact(size=5).resolved
