"""Expression builders shared by the three SCD query shapes."""

from __future__ import annotations

from scdkit.dialects import BIGQUERY, Dialect, get_dialect
from scdkit.scd.strategies import CheckStrategy, StrategyConfig, TimestampStrategy


def identity_hash(unique_key: tuple[str, ...], alias: str = "s", dialect: str | Dialect = BIGQUERY) -> str:
    """Hash expression for scd_id. Composite keys are concatenated in key order."""
    d = get_dialect(dialect)
    casts = [d.cast_string(f"{alias}.{k}") for k in unique_key]
    if len(casts) == 1:
        return d.hash(casts[0])
    return d.hash(f"CONCAT({', '.join(casts)})")


def change_predicate(strategy: StrategyConfig, new: str = "s", prev: str = "t") -> str:
    """Boolean SQL that holds when row `new` is a new version of row `prev`."""
    if isinstance(strategy, TimestampStrategy):
        col = strategy.timestamp_col
        return f"(CAST({new}.{col} AS TIMESTAMP) > {prev}.{col})"
    if isinstance(strategy, CheckStrategy):
        op = "IS DISTINCT FROM" if strategy.null_safe else "!="
        return " OR ".join(f"({new}.{c} {op} {prev}.{c})" for c in strategy.check_cols)
    raise TypeError(f"Unknown strategy variant: {type(strategy).__name__}")


def key_join(unique_key: tuple[str, ...], left: str = "s", right: str = "t") -> str:
    return " AND ".join(f"{left}.{k} = {right}.{k}" for k in unique_key)


def key_list(unique_key: tuple[str, ...]) -> str:
    """Unqualified key columns, used for PARTITION BY and ORDER BY."""
    return ", ".join(unique_key)
