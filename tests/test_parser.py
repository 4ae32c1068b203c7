from __future__ import annotations

from pathlib import Path

import pytest

from maven_graph.exceptions import PomModelError, PomNotFoundError, PomParseError
from maven_graph.models import MavenProject
from maven_graph.parser import interpolate, normalize_version, parse_pom


def _write(tmp_path: Path, name: str, content: str) -> Path:
    path = tmp_path / name
    path.write_text(content, encoding="utf-8")
    return path


def test_parse_pom_without_namespace(tmp_path: Path) -> None:
    pom = """<?xml version=\"1.0\" encoding=\"UTF-8\"?>
<project>
  <modelVersion>4.0.0</modelVersion>
  <groupId>com.acme</groupId>
  <artifactId>demo</artifactId>
  <version>1.0.0</version>

  <dependencies>
    <dependency>
      <groupId>org.slf4j</groupId>
      <artifactId>slf4j-api</artifactId>
      <version>2.0.12</version>
      <scope>compile</scope>
    </dependency>
  </dependencies>
</project>
"""
    path = _write(tmp_path, "pom.xml", pom)
    model = parse_pom(path)

    assert isinstance(model, MavenProject)
    assert model.project.group_id == "com.acme"
    assert model.project.artifact_id == "demo"
    assert model.project.version == "1.0.0"
    assert model.packaging == "jar"
    assert len(model.dependencies) == 1
    assert model.dependencies[0].group_id == "org.slf4j"
    assert model.dependencies[0].artifact_id == "slf4j-api"
    assert model.dependencies[0].version == "2.0.12"


def test_parse_pom_with_namespace(tmp_path: Path) -> None:
    pom = """<?xml version=\"1.0\" encoding=\"UTF-8\"?>
<project xmlns=\"http://maven.apache.org/POM/4.0.0\">
  <modelVersion>4.0.0</modelVersion>
  <groupId>com.acme</groupId>
  <artifactId>demo</artifactId>
  <version>1.0.0</version>
  <packaging>war</packaging>

  <dependencies>
    <dependency>
      <groupId>junit</groupId>
      <artifactId>junit</artifactId>
      <version>4.13.2</version>
      <scope>test</scope>
      <type>test-jar</type>
      <classifier>tests</classifier>
      <optional>false</optional>
    </dependency>
  </dependencies>
</project>
"""
    path = _write(tmp_path, "pom.xml", pom)
    model = parse_pom(path)

    assert model.project.compact() == "com.acme:demo:1.0.0"
    assert model.packaging == "war"
    dep = model.dependencies[0]
    assert (dep.group_id, dep.artifact_id, dep.version) == ("junit", "junit", "4.13.2")
    assert dep.scope == "test"
    assert dep.type == "test-jar"
    assert dep.classifier == "tests"
    assert dep.optional is False


def test_dependency_placeholders_are_kept_raw(tmp_path: Path) -> None:
    pom = """<project>
  <groupId>com.acme</groupId>
  <artifactId>demo</artifactId>
  <version>1.0.0</version>
  <properties>
    <lib.version>2.3.4</lib.version>
  </properties>
  <dependencies>
    <dependency>
      <groupId>org.example</groupId>
      <artifactId>lib</artifactId>
      <version>${lib.version}</version>
    </dependency>
  </dependencies>
</project>
"""
    model = parse_pom(_write(tmp_path, "pom.xml", pom))

    assert model.dependencies[0].version == "${lib.version}"
    assert model.properties == {"lib.version": "2.3.4"}
    assert normalize_version(model.dependencies[0].version, model.properties) == "2.3.4"


def test_inherit_version_from_parent(tmp_path: Path) -> None:
    pom = """<?xml version=\"1.0\" encoding=\"UTF-8\"?>
<project xmlns=\"http://maven.apache.org/POM/4.0.0\">
  <modelVersion>4.0.0</modelVersion>

  <parent>
    <groupId>com.acme</groupId>
    <artifactId>parent</artifactId>
    <version>9.9.9</version>
  </parent>

  <artifactId>child</artifactId>
</project>
"""
    path = _write(tmp_path, "pom.xml", pom)
    model = parse_pom(path)
    assert model.project.compact() == "com.acme:child:9.9.9"
    assert model.parent is not None
    assert model.parent.compact() == "com.acme:parent:9.9.9"


def test_project_version_placeholder_is_resolved(tmp_path: Path) -> None:
    pom = """<project>
  <parent><groupId>com.acme</groupId><artifactId>parent</artifactId><version>3.1</version></parent>
  <artifactId>child</artifactId>
  <version>${project.parent.version}</version>
</project>
"""
    model = parse_pom(_write(tmp_path, "pom.xml", pom))
    assert model.project.version == "3.1"


def test_dependency_management_and_relocation(tmp_path: Path) -> None:
    pom = """<project>
  <groupId>com.acme</groupId>
  <artifactId>old</artifactId>
  <version>1</version>
  <dependencyManagement>
    <dependencies>
      <dependency><groupId>org.x</groupId><artifactId>y</artifactId><version>2</version></dependency>
    </dependencies>
  </dependencyManagement>
  <distributionManagement>
    <relocation><artifactId>new</artifactId></relocation>
  </distributionManagement>
</project>
"""
    model = parse_pom(_write(tmp_path, "pom.xml", pom))

    assert [(d.group_id, d.version) for d in model.managed_dependencies] == [("org.x", "2")]
    assert model.dependencies == []
    assert model.relocation is not None
    assert model.relocation.apply(model.project).compact() == "com.acme:new:1"


def test_missing_file_raises(tmp_path: Path) -> None:
    with pytest.raises(PomNotFoundError):
        parse_pom(tmp_path / "nope.xml")


def test_missing_artifact_id_raises(tmp_path: Path) -> None:
    with pytest.raises(PomModelError):
        parse_pom(_write(tmp_path, "pom.xml", "<project><groupId>g</groupId></project>"))


def test_interpolate_nested_and_unknown() -> None:
    props = {"a": "${b}", "b": "value"}
    assert interpolate("x-${a}", props) == "x-value"
    assert interpolate("${missing}", props) == "${missing}"
    assert normalize_version("${missing}", props) == "Unknown"
    assert normalize_version(None, props) == "Unknown"
    assert normalize_version("  ", props) == "Unknown"


def test_empty_properties_and_odd_optional_flags(tmp_path: Path) -> None:
    pom = """<project>
  <groupId>g</groupId><artifactId>a</artifactId><version>1</version>
  <properties><empty></empty><blank>  </blank><!-- note --><kept> v </kept></properties>
  <dependencies>
    <dependency><groupId>x</groupId><artifactId>one</artifactId><optional>TRUE</optional></dependency>
    <dependency><groupId>x</groupId><artifactId>two</artifactId><optional>maybe</optional></dependency>
    <dependency><groupId>x</groupId><artifactId>three</artifactId><scope> </scope></dependency>
  </dependencies>
</project>"""
    model = parse_pom(_write(tmp_path, "pom.xml", pom))

    assert model.properties == {"kept": "v"}
    assert [d.optional for d in model.dependencies] == [True, None, None]
    assert model.dependencies[2].scope is None


def test_malformed_xml_raises(tmp_path: Path) -> None:
    with pytest.raises(PomParseError, match="Failed to parse pom"):
        parse_pom(_write(tmp_path, "pom.xml", "<project><groupId>g</groupId>"))
