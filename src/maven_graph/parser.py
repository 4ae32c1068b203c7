"""Parse Maven POM files using lxml."""

from __future__ import annotations

import re
from pathlib import Path
from typing import Mapping

from lxml import etree

from maven_graph.exceptions import PomModelError, PomNotFoundError, PomParseError
from maven_graph.models import (
    ArtifactIdentifier,
    MavenProject,
    PomDependency,
    Relocation,
    UNKNOWN_VERSION,
)


_PLACEHOLDER_RE = re.compile(r"\$\{([^}]+)\}")
# Properties may reference other properties; stop after this many rounds.
_MAX_EXPANSIONS = 5
_BOOLEANS = {"true": True, "false": False}

_PROJECT = "/*[local-name()='project']"


def _text_first(node: etree._Element, xpath_expr: str) -> str | None:
    """Stripped text of the first match of a `local-name()` XPath, or None when empty."""
    for found in node.xpath(xpath_expr):
        text = found.text if isinstance(found, etree._Element) else found
        if isinstance(text, str):
            return text.strip() or None
        return None
    return None


def _bool_text(value: str | None) -> bool | None:
    """Map `true`/`false` (any case) to a bool; anything else, or nothing, is None."""
    if value is None:
        return None
    return _BOOLEANS.get(value.strip().lower())


def _parse_xml(path: Path) -> etree._Element:
    """Load a POM without entity expansion or network access.

    Raises:
        PomNotFoundError: If `path` is not a file.
        PomParseError: If the file cannot be read or is not well-formed XML.
    """
    if not path.is_file():
        raise PomNotFoundError(f"pom not found: {path}")
    parser = etree.XMLParser(resolve_entities=False, no_network=True)
    try:
        return etree.parse(str(path), parser=parser).getroot()
    except (OSError, etree.XMLSyntaxError) as exc:
        raise PomParseError(f"Failed to parse pom {path}: {exc}") from exc


def interpolate(value: str, props: Mapping[str, str]) -> str:
    """Expand `${name}` references from `props`, nested ones included.

    A reference with no (or an empty) property value is left in the text.
    """
    for _ in range(_MAX_EXPANSIONS):
        expanded = _PLACEHOLDER_RE.sub(lambda m: props.get(m.group(1)) or m.group(0), value)
        if expanded == value:
            break
        value = expanded
    return value


def normalize_version(value: str | None, props: Mapping[str, str]) -> str:
    """Interpolate a version. Missing, blank or still-unresolved versions become `Unknown`."""
    resolved = interpolate(value, props).strip() if value else ""
    if not resolved or _PLACEHOLDER_RE.search(resolved):
        return UNKNOWN_VERSION
    return resolved


def _parse_properties(root: etree._Element) -> dict[str, str]:
    """`<properties>` children by element name, skipping empty values."""
    props: dict[str, str] = {}
    for element in root.xpath(f"{_PROJECT}/*[local-name()='properties']/*[text()]"):
        value = (element.text or "").strip()
        if value:
            props[etree.QName(element).localname] = value
    return props


def _parse_dependencies(root: etree._Element, xpath_expr: str) -> list[PomDependency]:
    deps: list[PomDependency] = []
    for dep in root.xpath(xpath_expr):
        dep_group_id = _text_first(dep, "./*[local-name()='groupId']")
        dep_artifact_id = _text_first(dep, "./*[local-name()='artifactId']")
        if dep_group_id is None or dep_artifact_id is None:
            continue

        deps.append(
            PomDependency(
                group_id=dep_group_id,
                artifact_id=dep_artifact_id,
                version=_text_first(dep, "./*[local-name()='version']"),
                scope=_text_first(dep, "./*[local-name()='scope']"),
                type=_text_first(dep, "./*[local-name()='type']"),
                classifier=_text_first(dep, "./*[local-name()='classifier']"),
                optional=_bool_text(_text_first(dep, "./*[local-name()='optional']")),
            )
        )
    return deps


def _parse_parent(root: etree._Element) -> ArtifactIdentifier | None:
    group_id = _text_first(root, f"{_PROJECT}/*[local-name()='parent']/*[local-name()='groupId']")
    artifact_id = _text_first(root, f"{_PROJECT}/*[local-name()='parent']/*[local-name()='artifactId']")
    version = _text_first(root, f"{_PROJECT}/*[local-name()='parent']/*[local-name()='version']")
    if group_id is None or artifact_id is None:
        return None
    return ArtifactIdentifier(group_id=group_id, artifact_id=artifact_id, version=version or UNKNOWN_VERSION)


def _parse_relocation(root: etree._Element) -> Relocation | None:
    nodes = root.xpath(
        f"{_PROJECT}/*[local-name()='distributionManagement']/*[local-name()='relocation']"
    )
    if not nodes:
        return None
    node = nodes[0]
    return Relocation(
        group_id=_text_first(node, "./*[local-name()='groupId']"),
        artifact_id=_text_first(node, "./*[local-name()='artifactId']"),
        version=_text_first(node, "./*[local-name()='version']"),
    )


def parse_pom(path: str | Path) -> MavenProject:
    """Parse a Maven POM and extract its raw model.

    Notes:
        - Namespace handling: uses `local-name()` XPath so it works with or without XML namespaces.
        - The project coordinates are interpolated with the POM's own properties. Dependency
          entries are kept raw so the resolver can interpolate them against the whole
          parent chain.

    Args:
        path: Path to a pom.xml or *.pom file.

    Raises:
        PomNotFoundError: If the file does not exist.
        PomParseError: If the XML is malformed.
        PomModelError: If required fields are missing.

    Returns:
        A `MavenProject` with coordinates, parent, properties, dependencies,
        dependency management and relocation.
    """
    pom_path = Path(path)
    root = _parse_xml(pom_path)

    raw_group_id = _text_first(root, f"{_PROJECT}/*[local-name()='groupId']")
    raw_artifact_id = _text_first(root, f"{_PROJECT}/*[local-name()='artifactId']")
    raw_version = _text_first(root, f"{_PROJECT}/*[local-name()='version']")
    packaging = _text_first(root, f"{_PROJECT}/*[local-name()='packaging']") or "jar"
    parent = _parse_parent(root)

    if raw_artifact_id is None:
        raise PomModelError(f"Missing required <artifactId> in {pom_path}")

    if parent is not None:
        raw_group_id = raw_group_id or parent.group_id
        raw_version = raw_version or parent.version

    if raw_group_id is None:
        raise PomModelError(f"Missing required <groupId> (or parent <groupId>) in {pom_path}")

    props = _parse_properties(root)
    effective_version = raw_version or UNKNOWN_VERSION
    merged_props = {**props, **project_properties(raw_group_id, raw_artifact_id, effective_version, parent)}

    project_id = ArtifactIdentifier(
        group_id=interpolate(raw_group_id, merged_props),
        artifact_id=raw_artifact_id,
        version=normalize_version(effective_version, merged_props),
    )

    return MavenProject(
        project=project_id,
        packaging=packaging,
        parent=parent,
        properties=props,
        dependencies=_parse_dependencies(
            root,
            f"{_PROJECT}/*[local-name()='dependencies']/*[local-name()='dependency']",
        ),
        managed_dependencies=_parse_dependencies(
            root,
            f"{_PROJECT}/*[local-name()='dependencyManagement']"
            "/*[local-name()='dependencies']/*[local-name()='dependency']",
        ),
        relocation=_parse_relocation(root),
    )


def project_properties(
    group_id: str,
    artifact_id: str,
    version: str,
    parent: ArtifactIdentifier | None = None,
) -> dict[str, str]:
    """Built-in `${project.*}` properties for interpolation."""
    builtins: dict[str, str] = {
        "project.groupId": group_id,
        "project.artifactId": artifact_id,
        "project.version": version,
        "pom.groupId": group_id,
        "pom.artifactId": artifact_id,
        "pom.version": version,
        "groupId": group_id,
        "artifactId": artifact_id,
        "version": version,
    }
    if parent is not None:
        builtins.update(
            {
                "project.parent.groupId": parent.group_id,
                "project.parent.artifactId": parent.artifact_id,
                "project.parent.version": parent.version,
            }
        )
    return builtins
