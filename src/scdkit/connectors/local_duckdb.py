"""Local DuckDB connector."""

from __future__ import annotations
from scdkit.connectors.base import Connector


class DuckDBConnector(Connector):
    """Run rendered SCD artifacts against a DuckDB file or in-memory database."""

    def __init__(self, database: str = ":memory:"):
        self.database = database
        self._conn = None

    async def connect(self) -> None:
        if self._conn is not None:
            return
        try:
            import duckdb
        except ImportError:
            raise ImportError("Install duckdb: pip install scdkit[duckdb]")
        self._conn = duckdb.connect(self.database)

    async def disconnect(self) -> None:
        if self._conn:
            self._conn.close()
            self._conn = None

    async def execute(self, query: str, params: list | None = None) -> None:
        if not self._conn:
            await self.connect()
        self._conn.execute(query, params or [])

    async def extract(self, query: str, params: list | None = None, **kwargs) -> list[dict]:
        if not self._conn:
            await self.connect()
        result = self._conn.execute(query, params or [])
        columns = [desc[0] for desc in result.description]
        return [dict(zip(columns, row)) for row in result.fetchall()]


def duckdb_local(database: str = ":memory:") -> DuckDBConnector:
    """Create a local DuckDB connector."""
    return DuckDBConnector(database=database)
