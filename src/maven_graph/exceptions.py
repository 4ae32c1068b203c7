"""Custom exceptions for maven-graph."""


class MavenGraphError(Exception):
    """Base exception for maven-graph."""


class ArtifactResolutionError(MavenGraphError):
    """Raised when an artifact's project metadata cannot be resolved."""


class PomNotFoundError(ArtifactResolutionError):
    """Raised when a pom file cannot be found."""


class PomParseError(ArtifactResolutionError):
    """Raised when a pom file cannot be parsed."""


class PomModelError(ArtifactResolutionError):
    """Raised when required Maven model fields are missing or invalid."""


class RelocationError(ArtifactResolutionError):
    """Raised when relocations loop or chain too deep."""


class ReportDefinitionError(MavenGraphError):
    """Raised when a report definition token cannot be parsed."""


class ConfigurationError(MavenGraphError):
    """Raised when the environment configuration is invalid."""


class GraphWriteError(MavenGraphError):
    """Raised when a serialized graph cannot be written to its destination."""
