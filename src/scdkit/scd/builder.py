"""Register the SCD2 historical table and its validity-window view."""

from __future__ import annotations
import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Protocol

from scdkit.relations import RelationRef
from scdkit.scd.queries import BuildContext, historical_query, view_query
from scdkit.scd.strategies import SCDConfig, scd_config

logger = logging.getLogger("scdkit.scd")

QueryBuilder = Callable[[BuildContext], str]


class ArtifactKind(str, Enum):
    INCREMENTAL_TABLE = "incremental_table"   # full load first, appends after
    VIEW = "view"                             # CREATE OR REPLACE VIEW


@dataclass(frozen=True)
class ArtifactMetadata:
    dependencies: tuple[str, ...] = ()
    tags: tuple[str, ...] = ()
    columns: dict[str, str] = field(default_factory=dict)
    schema: str | None = None
    description: str | None = None
    options: dict[str, Any] = field(default_factory=dict)   # engine-specific, e.g. partitioning


class ArtifactHandle(Protocol):
    name: str

    @property
    def target(self) -> RelationRef: ...


class Registry(Protocol):
    """Anything that can register artifacts built from query builders."""
    def publish(
        self,
        name: str,
        kind: ArtifactKind,
        metadata: ArtifactMetadata,
        query_builder: QueryBuilder,
    ) -> ArtifactHandle: ...


@dataclass(frozen=True)
class SCDArtifacts:
    historical: ArtifactHandle
    view: ArtifactHandle


def build_scd(registry: Registry, config: SCDConfig) -> SCDArtifacts:
    """Register `<name>_historical` and then `<name>_scd`.

    The view is built only after the historical table is registered, so its
    query references the historical table's resolved target.
    """
    columns = config.column_docs

    historical = registry.publish(
        config.historical_name,
        ArtifactKind.INCREMENTAL_TABLE,
        ArtifactMetadata(
            dependencies=config.dependencies,
            tags=config.tags,
            columns=columns,
            schema=config.schema,
            description=config.description,
            options=dict(config.materialization),
        ),
        lambda ctx: historical_query(config, ctx),
    )

    historical_target = historical.target
    view = registry.publish(
        config.view_name,
        ArtifactKind.VIEW,
        ArtifactMetadata(
            dependencies=(historical.name,),
            tags=config.tags,
            columns=dict(columns),
            schema=config.schema,
            description=config.description,
        ),
        lambda ctx: view_query(config, ctx, historical_target),
    )

    logger.info(
        f"Registered SCD '{config.name}' ({config.strategy.type.value}): "
        f"{historical_target} -> {view.target}"
    )
    return SCDArtifacts(historical=historical, view=view)


def scd(registry: Registry, name: str, **options: Any) -> SCDArtifacts:
    """Validate keyword options and build the SCD pair in one call."""
    return build_scd(registry, scd_config(name, **options))
