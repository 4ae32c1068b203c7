"""Artifact resolvers: turn coordinates into sizes and declared dependencies."""

from __future__ import annotations

import logging
import threading
from pathlib import Path
from typing import Mapping, Protocol, Union

from maven_graph.exceptions import ArtifactResolutionError, PomNotFoundError, RelocationError
from maven_graph.models import (
    Artifact,
    ArtifactIdentifier,
    DEFAULT_SCOPE,
    DEFAULT_TYPE,
    DependencyEdge,
    MavenProject,
    PomDependency,
    ResolvedArtifact,
    UnresolvedArtifact,
)
from maven_graph.parser import interpolate, normalize_version, parse_pom, project_properties

logger = logging.getLogger(__name__)

ResolutionResult = Artifact

# Packaging values whose main artifact is not stored under the packaging name.
_PACKAGING_EXTENSIONS: dict[str, str] = {
    "pom": "pom",
    "jar": "jar",
    "war": "war",
    "ear": "ear",
    "rar": "rar",
    "bundle": "jar",
    "maven-plugin": "jar",
    "ejb": "jar",
}

_ManagementKey = tuple[str, str, str, Union[str, None]]


class ArtifactResolver(Protocol):
    """Resolves an artifact to its size and declared dependencies.

    Implementations must not raise for unresolvable artifacts; they return an
    `UnresolvedArtifact` instead.
    """

    def resolve(self, identifier: ArtifactIdentifier) -> ResolutionResult: ...


def _management_key(group_id: str, artifact_id: str, type_: str | None, classifier: str | None) -> _ManagementKey:
    return group_id, artifact_id, type_ or DEFAULT_TYPE, classifier


class LocalRepositoryResolver:
    """Resolve artifacts from a local Maven repository (`~/.m2/repository` layout).

    Args:
        repository: Root folder of the local repository.
        overrides: Explicit POM files for identifiers that are not installed,
            typically the project being analyzed.
    """

    max_parent_depth = 16
    max_relocations = 8
    max_import_depth = 8

    def __init__(
        self,
        repository: Path,
        overrides: Mapping[ArtifactIdentifier, Path] | None = None,
    ) -> None:
        self.repository = Path(repository)
        self._overrides = {self._pom_key(k): Path(v) for k, v in (overrides or {}).items()}

    @staticmethod
    def _pom_key(identifier: ArtifactIdentifier) -> ArtifactIdentifier:
        # A POM is shared by every classifier of the same coordinates.
        if identifier.classifier is None:
            return identifier
        return identifier.model_copy(update={"classifier": None})

    def _artifact_dir(self, identifier: ArtifactIdentifier) -> Path:
        return self.repository.joinpath(
            *identifier.group_id.split("."), identifier.artifact_id, identifier.version
        )

    def pom_path(self, identifier: ArtifactIdentifier) -> Path:
        override = self._overrides.get(self._pom_key(identifier))
        if override is not None:
            return override
        return self._artifact_dir(identifier) / f"{identifier.artifact_id}-{identifier.version}.pom"

    def artifact_path(self, identifier: ArtifactIdentifier, packaging: str) -> Path:
        extension = _PACKAGING_EXTENSIONS.get(packaging, DEFAULT_TYPE)
        name = f"{identifier.artifact_id}-{identifier.version}"
        if identifier.classifier:
            name += f"-{identifier.classifier}"
        return self._artifact_dir(identifier) / f"{name}.{extension}"

    def resolve(self, identifier: ArtifactIdentifier) -> ResolutionResult:
        try:
            return self._resolve(identifier)
        except ArtifactResolutionError as exc:
            logger.warning("Could not resolve %s: %s", identifier.compact(), exc)
            return UnresolvedArtifact(reason=str(exc))

    def _load(self, identifier: ArtifactIdentifier) -> MavenProject:
        logger.debug("Fetching artifact %s", identifier.compact())
        return parse_pom(self.pom_path(identifier))

    def _resolve(self, identifier: ArtifactIdentifier) -> ResolvedArtifact:
        current, project = self._follow_relocations(identifier, self._load(identifier))

        chain = self._parent_chain(project)
        props = self._effective_properties(chain)
        managed = self._effective_management(chain, props, depth=0)

        dependencies: list[DependencyEdge] = []
        declared: set[_ManagementKey] = set()
        # The project's own declarations come first; inherited ones follow.
        for model in chain:
            for dep in model.dependencies:
                edge = self._to_edge(dep, props, managed)
                key = _management_key(
                    edge.target.group_id, edge.target.artifact_id, edge.type, edge.target.classifier
                )
                if key in declared:
                    continue
                declared.add(key)
                dependencies.append(edge)

        artifact_file = self.artifact_path(current, project.packaging)
        size = artifact_file.stat().st_size if artifact_file.is_file() else 0

        return ResolvedArtifact(
            size=size,
            dependencies=tuple(dependencies),
            managed_dependencies=tuple(self._to_edge(dep, props, {}) for dep in managed.values()),
        )

    def _follow_relocations(
        self, identifier: ArtifactIdentifier, project: MavenProject
    ) -> tuple[ArtifactIdentifier, MavenProject]:
        current = identifier
        seen = {self._pom_key(identifier)}
        while project.relocation is not None:
            target = project.relocation.apply(current)
            if self._pom_key(target) == self._pom_key(current):
                break
            if self._pom_key(target) in seen or len(seen) > self.max_relocations:
                raise RelocationError(f"Relocation loop starting at {identifier.compact()}")
            logger.info("%s relocated to %s", current.compact(), target.compact())
            seen.add(self._pom_key(target))
            current = target
            project = self._load(current)
        return current, project

    def _parent_chain(self, project: MavenProject) -> list[MavenProject]:
        """Return the project followed by its ancestors, nearest first."""
        chain = [project]
        parent = project.parent
        while parent is not None and len(chain) <= self.max_parent_depth:
            try:
                model = self._load(parent)
            except PomNotFoundError:
                logger.debug("Parent %s not found, stopping inheritance", parent.compact())
                break
            chain.append(model)
            parent = model.parent
        return chain

    @staticmethod
    def _effective_properties(chain: list[MavenProject]) -> dict[str, str]:
        props: dict[str, str] = {}
        for model in reversed(chain):
            props.update(model.properties)
        child = chain[0]
        props.update(
            project_properties(
                child.project.group_id, child.project.artifact_id, child.project.version, child.parent
            )
        )
        return props

    def _effective_management(
        self, chain: list[MavenProject], props: Mapping[str, str], depth: int
    ) -> dict[_ManagementKey, PomDependency]:
        managed: dict[_ManagementKey, PomDependency] = {}
        boms: list[ArtifactIdentifier] = []
        for model in chain:
            for dep in model.managed_dependencies:
                group_id = interpolate(dep.group_id, props)
                artifact_id = interpolate(dep.artifact_id, props)
                scope = interpolate(dep.scope, props) if dep.scope else None
                type_ = interpolate(dep.type, props) if dep.type else None
                classifier = interpolate(dep.classifier, props) if dep.classifier else None
                if scope == "import":
                    boms.append(
                        ArtifactIdentifier(
                            group_id=group_id,
                            artifact_id=artifact_id,
                            version=normalize_version(dep.version, props),
                        )
                    )
                    continue
                key = _management_key(group_id, artifact_id, type_, classifier)
                managed.setdefault(
                    key,
                    dep.model_copy(
                        update={
                            "group_id": group_id,
                            "artifact_id": artifact_id,
                            "version": normalize_version(dep.version, props),
                            "scope": scope,
                            "type": type_,
                            "classifier": classifier,
                        }
                    ),
                )
        # Imported entries never override declared ones.
        if depth < self.max_import_depth:
            for bom in boms:
                for key, value in self._import_management(bom, depth + 1).items():
                    managed.setdefault(key, value)
        return managed

    def _import_management(
        self, bom: ArtifactIdentifier, depth: int
    ) -> dict[_ManagementKey, PomDependency]:
        try:
            chain = self._parent_chain(self._load(bom))
        except ArtifactResolutionError as exc:
            logger.warning("Could not import dependency management from %s: %s", bom.compact(), exc)
            return {}
        return self._effective_management(chain, self._effective_properties(chain), depth)

    @staticmethod
    def _to_edge(
        dep: PomDependency,
        props: Mapping[str, str],
        managed: Mapping[_ManagementKey, PomDependency],
    ) -> DependencyEdge:
        group_id = interpolate(dep.group_id, props)
        artifact_id = interpolate(dep.artifact_id, props)
        classifier = interpolate(dep.classifier, props) if dep.classifier else None
        type_ = interpolate(dep.type, props) if dep.type else None
        managed_dep = managed.get(_management_key(group_id, artifact_id, type_, classifier))

        version = dep.version
        scope = interpolate(dep.scope, props) if dep.scope else None
        if managed_dep is not None:
            version = version or managed_dep.version
            scope = scope or managed_dep.scope

        return DependencyEdge(
            target=ArtifactIdentifier(
                group_id=group_id,
                artifact_id=artifact_id,
                version=normalize_version(version, props),
                classifier=classifier,
            ),
            scope=scope or DEFAULT_SCOPE,
            type=type_ or DEFAULT_TYPE,
            optional=bool(dep.optional),
        )


class CachingArtifactResolver:
    """Memoize another resolver. Safe to share between threads."""

    def __init__(self, delegate: ArtifactResolver) -> None:
        self._delegate = delegate
        self._cache: dict[ArtifactIdentifier, ResolutionResult] = {}
        self._lock = threading.Lock()

    def resolve(self, identifier: ArtifactIdentifier) -> ResolutionResult:
        with self._lock:
            cached = self._cache.get(identifier)
        if cached is not None:
            return cached
        # Resolve outside the lock; the first stored result wins a race.
        result = self._delegate.resolve(identifier)
        with self._lock:
            return self._cache.setdefault(identifier, result)

    def __len__(self) -> int:
        return len(self._cache)
