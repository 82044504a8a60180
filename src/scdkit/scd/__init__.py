"""Type-2 slowly changing dimension query synthesis."""

from scdkit.scd.errors import InvalidStrategy, MissingRequiredField, SCDConfigError
from scdkit.scd.strategies import (
    CheckStrategy,
    SCDConfig,
    StrategyType,
    TimestampStrategy,
    scd_config,
)
from scdkit.scd.expressions import change_predicate, identity_hash
from scdkit.scd.queries import (
    BuildContext,
    full_load_query,
    historical_query,
    incremental_query,
    view_query,
)
from scdkit.scd.builder import (
    ArtifactKind,
    ArtifactMetadata,
    Registry,
    SCDArtifacts,
    build_scd,
    scd,
)

__all__ = [
    "SCDConfigError",
    "InvalidStrategy",
    "MissingRequiredField",
    "StrategyType",
    "TimestampStrategy",
    "CheckStrategy",
    "SCDConfig",
    "scd_config",
    "identity_hash",
    "change_predicate",
    "BuildContext",
    "incremental_query",
    "full_load_query",
    "historical_query",
    "view_query",
    "ArtifactKind",
    "ArtifactMetadata",
    "Registry",
    "SCDArtifacts",
    "build_scd",
    "scd",
]
