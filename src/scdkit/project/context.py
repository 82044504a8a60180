"""RenderContext — the BuildContext a Project hands to query builders."""

from __future__ import annotations
from typing import TYPE_CHECKING

from scdkit.relations import RelationDescriptor, RelationRef

if TYPE_CHECKING:
    from scdkit.project.registry import Artifact, Project


class RenderContext:
    """Render-time view of one artifact in one materialization mode."""

    def __init__(self, project: "Project", artifact: "Artifact", incremental: bool = False):
        self.project = project
        self.artifact = artifact
        self.dialect = project.dialect
        self._incremental = incremental
        self.refs: list[RelationRef] = []

    def ref(self, relation: RelationDescriptor) -> str:
        target = self.project.resolve(relation)
        self.refs.append(target)
        return target.qualified_name

    def self_ref(self) -> str:
        return self.artifact.qualified_name

    def is_incremental(self) -> bool:
        return self._incremental

    def when(self, condition: bool, text: str) -> str:
        return text if condition else ""
