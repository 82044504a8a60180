"""SCD2 query synthesizers — incremental append, full load, validity-window view.

Each builder is a pure function of an SCDConfig and a BuildContext. The
context is supplied by whatever build layer materializes the result; the
builders only ask it to resolve references and report the dialect.
"""

from __future__ import annotations
from typing import Protocol

from scdkit.dialects import get_dialect
from scdkit.relations import RelationDescriptor
from scdkit.scd.expressions import change_predicate, identity_hash, key_join, key_list
from scdkit.scd.strategies import (
    SCD_ID,
    VALID_FROM,
    VALID_TO,
    CheckStrategy,
    SCDConfig,
    TimestampStrategy,
)

VERSION_RANK = "scd_version_rank"


class BuildContext(Protocol):
    """Render-time capabilities of the build layer."""
    dialect: str

    def ref(self, relation: RelationDescriptor) -> str: ...
    def self_ref(self) -> str: ...
    def is_incremental(self) -> bool: ...
    def when(self, condition: bool, text: str) -> str: ...


def incremental_query(config: SCDConfig, ctx: BuildContext) -> str:
    """Rows to append: keys never seen before, or changed since their current version."""
    d = get_dialect(ctx.dialect)
    keys = config.unique_key
    order_col = config.strategy.version_column
    return f"""
SELECT
  s.*,
  {identity_hash(keys, "s", d)} AS {SCD_ID},
  {d.current_timestamp} AS {VALID_FROM},
  {d.null_timestamp()} AS {VALID_TO}
FROM {ctx.ref(config.source)} s
LEFT JOIN (
  SELECT *, ROW_NUMBER() OVER (PARTITION BY {key_list(keys)} ORDER BY {order_col} DESC) AS {VERSION_RANK}
  FROM {ctx.self_ref()}
) t
  ON {key_join(keys, "s", "t")} AND t.{VERSION_RANK} = 1
WHERE t.{keys[0]} IS NULL OR {change_predicate(config.strategy, "s", "t")}
""".strip()


def full_load_query(config: SCDConfig, ctx: BuildContext) -> str:
    """Every source row as a first version.

    Timestamp strategy stamps scd_valid_from with the upstream change time,
    check strategy with the load time.
    """
    d = get_dialect(ctx.dialect)
    if isinstance(config.strategy, TimestampStrategy):
        valid_from = f"s.{config.strategy.timestamp_col}"
    else:
        valid_from = d.current_timestamp
    return f"""
SELECT
  s.*,
  {identity_hash(config.unique_key, "s", d)} AS {SCD_ID},
  {valid_from} AS {VALID_FROM},
  {d.null_timestamp()} AS {VALID_TO}
FROM {ctx.ref(config.source)} s
""".strip()


def historical_query(config: SCDConfig, ctx: BuildContext) -> str:
    """Query for the historical table, switched on the materialization mode."""
    incremental = ctx.is_incremental()
    parts = [
        ctx.when(incremental, incremental_query(config, ctx)),
        ctx.when(not incremental, full_load_query(config, ctx)),
    ]
    return "\n".join(p for p in parts if p)


def view_query(config: SCDConfig, ctx: BuildContext, historical: RelationDescriptor) -> str:
    """Validity windows: each version ends where the next version of its key begins."""
    d = get_dialect(ctx.dialect)
    partition = key_list(config.unique_key)
    strategy = config.strategy

    if isinstance(strategy, TimestampStrategy):
        ts = strategy.timestamp_col
        return f"""
SELECT
  {d.star_except(VALID_FROM, VALID_TO)},
  {ts} AS {VALID_FROM},
  LEAD({ts}) OVER (PARTITION BY {partition} ORDER BY {ts} ASC) AS {VALID_TO}
FROM {ctx.ref(historical)}
""".strip()

    if isinstance(strategy, CheckStrategy):
        return f"""
SELECT
  {d.star_except(VALID_TO)},
  LEAD({VALID_FROM}) OVER (PARTITION BY {partition} ORDER BY {VALID_FROM} ASC) AS {VALID_TO}
FROM {ctx.ref(historical)}
ORDER BY {partition}, {VALID_FROM}
""".strip()

    raise TypeError(f"Unknown strategy variant: {type(strategy).__name__}")
