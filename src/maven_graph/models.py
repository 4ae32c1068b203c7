"""Pydantic models for Maven artifacts, dependencies and parsed POMs."""

from __future__ import annotations

from typing import Annotated, Literal, Union

from pydantic import BaseModel, ConfigDict, Field


UNKNOWN_VERSION = "Unknown"
DEFAULT_SCOPE = "compile"
DEFAULT_TYPE = "jar"


class ArtifactIdentifier(BaseModel):
    """Maven coordinates (GroupId, ArtifactId, Version, optional Classifier).

    Instances are immutable and hashable, so they double as graph node keys.
    """

    model_config = ConfigDict(frozen=True)

    group_id: str = Field(..., min_length=1)
    artifact_id: str = Field(..., min_length=1)
    version: str = Field(default=UNKNOWN_VERSION, min_length=1)
    classifier: str | None = None

    def compact(self) -> str:
        """Return a compact string representation.

        Returns:
            A string like `groupId:artifactId:version[:classifier]`.
        """
        base = f"{self.group_id}:{self.artifact_id}:{self.version}"
        if self.classifier:
            return f"{base}:{self.classifier}"
        return base

    @classmethod
    def parse(cls, text: str) -> "ArtifactIdentifier":
        """Parse `groupId:artifactId:version[:classifier]`.

        Raises:
            ValueError: If the text does not have three or four non-empty parts.
        """
        parts = [p.strip() for p in (text or "").split(":")]
        if len(parts) not in (3, 4) or not all(parts):
            raise ValueError(f"Expected groupId:artifactId:version[:classifier], got {text!r}")
        classifier = parts[3] if len(parts) == 4 else None
        return cls(group_id=parts[0], artifact_id=parts[1], version=parts[2], classifier=classifier)

    def __str__(self) -> str:
        return self.compact()


class DependencyEdge(BaseModel):
    """One declared dependency of a resolved artifact."""

    model_config = ConfigDict(frozen=True)

    target: ArtifactIdentifier
    scope: str = DEFAULT_SCOPE
    type: str = DEFAULT_TYPE
    optional: bool = False
    # Kept only by reports that include all transitive dependencies.
    transitive_only: bool = False


class ResolvedArtifact(BaseModel):
    """Payload of an artifact whose project metadata was resolved."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["resolved"] = "resolved"
    size: int = Field(default=0, ge=0)
    dependencies: tuple[DependencyEdge, ...] = ()
    managed_dependencies: tuple[DependencyEdge, ...] = ()

    @property
    def resolved(self) -> bool:
        return True


class UnresolvedArtifact(BaseModel):
    """Placeholder payload for an artifact that could not be resolved."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["unresolved"] = "unresolved"
    reason: str = ""

    @property
    def resolved(self) -> bool:
        return False

    @property
    def size(self) -> int:
        return 0

    @property
    def dependencies(self) -> tuple[DependencyEdge, ...]:
        return ()

    @property
    def managed_dependencies(self) -> tuple[DependencyEdge, ...]:
        return ()


Artifact = Annotated[Union[ResolvedArtifact, UnresolvedArtifact], Field(discriminator="kind")]


class PomDependency(BaseModel):
    """A raw `<dependency>` entry, before property interpolation and management."""

    group_id: str
    artifact_id: str
    version: str | None = None
    scope: str | None = None
    type: str | None = None
    classifier: str | None = None
    optional: bool | None = None


class Relocation(BaseModel):
    """A `<distributionManagement><relocation>` redirect. Missing parts keep the old value."""

    group_id: str | None = None
    artifact_id: str | None = None
    version: str | None = None

    def apply(self, identifier: ArtifactIdentifier) -> ArtifactIdentifier:
        return ArtifactIdentifier(
            group_id=self.group_id or identifier.group_id,
            artifact_id=self.artifact_id or identifier.artifact_id,
            version=self.version or identifier.version,
            classifier=identifier.classifier,
        )


class MavenProject(BaseModel):
    """A parsed Maven project model."""

    project: ArtifactIdentifier
    packaging: str = DEFAULT_TYPE
    parent: ArtifactIdentifier | None = None
    properties: dict[str, str] = Field(default_factory=dict)
    dependencies: list[PomDependency] = Field(default_factory=list)
    managed_dependencies: list[PomDependency] = Field(default_factory=list)
    relocation: Relocation | None = None
