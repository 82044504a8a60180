"""SCD2 configuration: the change-detection strategy variants and the full config."""

from __future__ import annotations
from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Union

from scdkit.relations import RelationDescriptor, parse_relation
from scdkit.scd.errors import InvalidStrategy, MissingRequiredField

VALID_FROM = "scd_valid_from"
VALID_TO = "scd_valid_to"
ACTIVE = "scd_active"
SCD_ID = "scd_id"

SCD_COLUMN_DOCS: dict[str, str] = {
    VALID_FROM: "Timestamp from which this row is valid",
    VALID_TO: "Timestamp until which this row is valid, or NULL if latest",
    ACTIVE: "1 if row is current, 0 otherwise",
    SCD_ID: "Generated hash based on primary key(s)",
}


class StrategyType(str, Enum):
    TIMESTAMP = "timestamp"     # newer upstream "last changed" timestamp
    CHECK = "check"             # any tracked column differs


@dataclass(frozen=True)
class TimestampStrategy:
    """Detect a change when the source timestamp is newer than the stored one."""
    timestamp_col: str

    def __post_init__(self):
        if not isinstance(self.timestamp_col, str) or not self.timestamp_col.strip():
            raise MissingRequiredField("timestamp_col", "timestamp strategy requires it")

    @property
    def type(self) -> StrategyType:
        return StrategyType.TIMESTAMP

    @property
    def version_column(self) -> str:
        """Column that orders versions of the same key."""
        return self.timestamp_col


@dataclass(frozen=True)
class CheckStrategy:
    """Detect a change when any of `check_cols` differs from the stored row."""
    check_cols: tuple[str, ...]
    null_safe: bool = False     # IS DISTINCT FROM instead of !=

    def __post_init__(self):
        cols = (self.check_cols,) if isinstance(self.check_cols, str) else tuple(self.check_cols or ())
        if not cols or not all(isinstance(c, str) and c.strip() for c in cols):
            raise MissingRequiredField("check_cols", "check strategy requires a non-empty list")
        object.__setattr__(self, "check_cols", cols)

    @property
    def type(self) -> StrategyType:
        return StrategyType.CHECK

    @property
    def version_column(self) -> str:
        return VALID_FROM


StrategyConfig = Union[TimestampStrategy, CheckStrategy]


@dataclass(frozen=True)
class SCDConfig:
    """Immutable configuration for one SCD2 historical table and view pair."""
    name: str
    strategy: StrategyConfig
    unique_key: tuple[str, ...]
    source: RelationDescriptor
    tags: tuple[str, ...] = ()
    columns: Mapping[str, str] = field(default_factory=dict)
    dependencies: tuple[str, ...] = ()
    schema: str | None = None
    description: str | None = None
    materialization: Mapping[str, Any] = field(default_factory=dict)  # historical table only

    def __post_init__(self):
        if not self.name:
            raise MissingRequiredField("name")
        object.__setattr__(self, "unique_key", normalize_unique_key(self.unique_key))
        if not self.source:
            raise MissingRequiredField("source")
        try:
            parse_relation(self.source)
        except ValueError as e:
            raise MissingRequiredField("source", str(e)) from None
        object.__setattr__(self, "tags", tuple(self.tags or ()))
        object.__setattr__(self, "dependencies", tuple(self.dependencies or ()))
        object.__setattr__(self, "columns", dict(self.columns or {}))
        object.__setattr__(self, "materialization", dict(self.materialization or {}))

    @property
    def historical_name(self) -> str:
        return f"{self.name}_historical"

    @property
    def view_name(self) -> str:
        return f"{self.name}_scd"

    @property
    def column_docs(self) -> dict[str, str]:
        """User column docs with the four SCD columns always documented."""
        return {**self.columns, **SCD_COLUMN_DOCS}


def normalize_unique_key(unique_key: str | list[str] | tuple[str, ...] | None) -> tuple[str, ...]:
    """Return the key as an ordered tuple. Order is part of the hash contract."""
    if isinstance(unique_key, str):
        keys = (unique_key.strip(),)
    else:
        keys = tuple(unique_key or ())
    if not keys:
        raise MissingRequiredField("unique_key")
    for k in keys:
        if not isinstance(k, str) or not k.strip():
            raise MissingRequiredField("unique_key", f"invalid key column {k!r}")
    return keys


def scd_config(
    name: str,
    strategy: str | None = None,
    unique_key: str | list[str] | None = None,
    source: RelationDescriptor | None = None,
    timestamp_col: str | None = None,
    check_cols: str | list[str] | None = None,
    null_safe: bool = False,
    tags: list[str] | None = None,
    columns: dict[str, str] | None = None,
    dependencies: list[str] | None = None,
    schema: str | None = None,
    description: str | None = None,
    materialization: dict[str, Any] | None = None,
) -> SCDConfig:
    """Validate loose keyword options into an SCDConfig.

    The strategy tag is checked first, so an unknown tag raises
    InvalidStrategy even when other fields are also missing.
    """
    try:
        kind = StrategyType(strategy)
    except ValueError:
        raise InvalidStrategy(strategy) from None

    if kind is StrategyType.TIMESTAMP:
        variant: StrategyConfig = TimestampStrategy(timestamp_col=timestamp_col or "")
    else:
        variant = CheckStrategy(check_cols=check_cols, null_safe=null_safe)

    return SCDConfig(
        name=name,
        strategy=variant,
        unique_key=unique_key,
        source=source,
        tags=tags or (),
        columns=columns or {},
        dependencies=dependencies or (),
        schema=schema,
        description=description,
        materialization=materialization or {},
    )
