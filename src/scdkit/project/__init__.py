"""In-process build layer: artifact registry, render context, project files."""

from scdkit.project.registry import Artifact, Project, UnknownArtifactError
from scdkit.project.context import RenderContext
from scdkit.project.loader import SCDDefinition, load_project, parse_project

__all__ = [
    "Artifact",
    "Project",
    "UnknownArtifactError",
    "RenderContext",
    "SCDDefinition",
    "load_project",
    "parse_project",
]
