"""Project — an in-process artifact registry for SCD builders."""

from __future__ import annotations
import logging
from dataclasses import dataclass

from scdkit.dag.resolver import DAGResolver
from scdkit.project.context import RenderContext
from scdkit.dialects import get_dialect
from scdkit.relations import RelationDescriptor, RelationRef, parse_relation
from scdkit.scd.builder import ArtifactKind, ArtifactMetadata, QueryBuilder

logger = logging.getLogger("scdkit.project")


class UnknownArtifactError(KeyError):
    """Raised when an artifact name is not registered in the project."""
    def __init__(self, name: str, available: list[str]):
        self.name = name
        super().__init__(f"Artifact '{name}' not found. Available: {available}")


@dataclass
class Artifact:
    """A registered table or view and the builder that renders its SQL."""
    name: str
    kind: ArtifactKind
    metadata: ArtifactMetadata
    query_builder: QueryBuilder
    target: RelationRef

    @property
    def qualified_name(self) -> str:
        return self.target.qualified_name


class Project:
    """Holds artifacts, resolves references between them and renders their SQL."""

    def __init__(self, default_schema: str | None = None, dialect: str = "bigquery"):
        self.default_schema = default_schema
        self.dialect = get_dialect(dialect).name
        self._artifacts: dict[str, Artifact] = {}

    @property
    def artifacts(self) -> dict[str, Artifact]:
        return self._artifacts

    def publish(
        self,
        name: str,
        kind: ArtifactKind,
        metadata: ArtifactMetadata,
        query_builder: QueryBuilder,
    ) -> Artifact:
        target = RelationRef(name=name, schema=metadata.schema or self.default_schema)
        if name in self._artifacts:
            logger.warning(f"Replacing artifact '{name}'")
        artifact = Artifact(
            name=name,
            kind=ArtifactKind(kind),
            metadata=metadata,
            query_builder=query_builder,
            target=target,
        )
        self._artifacts[name] = artifact
        logger.info(f"Published {artifact.kind.value} '{name}' -> {target}")
        return artifact

    def get(self, name: str) -> Artifact:
        try:
            return self._artifacts[name]
        except KeyError:
            raise UnknownArtifactError(name, sorted(self._artifacts)) from None

    def resolve(self, relation: RelationDescriptor) -> RelationRef:
        """Turn a descriptor into a concrete target.

        A bare name that matches a registered artifact resolves to that
        artifact's target; any other bare name lands in the default schema.
        """
        ref = parse_relation(relation)
        if ref.schema is None:
            if ref.name in self._artifacts:
                return self._artifacts[ref.name].target
            return RelationRef(name=ref.name, schema=self.default_schema)
        return ref

    def render(self, name: str, incremental: bool = False) -> str:
        """Rendered SQL for one artifact in the given materialization mode."""
        artifact = self.get(name)
        ctx = RenderContext(self, artifact, incremental=incremental)
        sql = artifact.query_builder(ctx)
        logger.debug(f"Rendered {name} (incremental={incremental}):\n{sql}")
        return sql

    def references(self, name: str) -> set[str]:
        """Registered artifacts read by `name`'s query."""
        artifact = self.get(name)
        ctx = RenderContext(self, artifact, incremental=False)
        artifact.query_builder(ctx)
        by_target = {a.target: a.name for a in self._artifacts.values()}
        return {by_target[r] for r in ctx.refs if r in by_target and by_target[r] != name}

    def dag(self) -> DAGResolver:
        """Dependency graph from declared dependencies and resolved references.

        Declared dependencies that are not registered here stay in the graph
        as external nodes.
        """
        dag = DAGResolver()
        for name, artifact in self._artifacts.items():
            dag.add_dependencies(name, artifact.metadata.dependencies)
            for upstream in sorted(self.references(name)):
                dag.add_dependency(upstream, name)
        return dag
