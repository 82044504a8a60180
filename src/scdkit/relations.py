"""Relation descriptors passed between the SCD core and the build layer."""

from __future__ import annotations
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any, Union


@dataclass(frozen=True)
class RelationRef:
    """A table or view addressed by optional schema and name."""
    name: str
    schema: str | None = None

    @property
    def qualified_name(self) -> str:
        return f"{self.schema}.{self.name}" if self.schema else self.name

    def __str__(self) -> str:
        return self.qualified_name


# "schema.name" | "name" | {"schema": ..., "name": ...} | RelationRef
RelationDescriptor = Union[str, Mapping[str, Any], RelationRef]


def parse_relation(descriptor: RelationDescriptor) -> RelationRef:
    """Normalize any accepted relation descriptor into a RelationRef."""
    if isinstance(descriptor, RelationRef):
        return descriptor
    if isinstance(descriptor, Mapping):
        name = descriptor.get("name")
        if not name:
            raise ValueError(f"Relation descriptor is missing 'name': {dict(descriptor)}")
        return RelationRef(name=name, schema=descriptor.get("schema") or None)
    if isinstance(descriptor, str) and descriptor.strip():
        schema, _, name = descriptor.strip().rpartition(".")
        if name:
            return RelationRef(name=name, schema=schema or None)
    raise ValueError(f"Invalid relation descriptor: {descriptor!r}")
