"""Connectors — lazy imports to avoid requiring optional dependencies."""

from scdkit.connectors.base import Connector


def duckdb_local(*args, **kwargs):
    from scdkit.connectors.local_duckdb import duckdb_local as _duckdb_local
    return _duckdb_local(*args, **kwargs)


__all__ = ["Connector", "duckdb_local"]
