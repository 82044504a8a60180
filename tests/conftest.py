"""Shared test fixtures for scdkit tests."""

import pytest
import pytest_asyncio

from scdkit.project.registry import Project
from scdkit.relations import parse_relation


class StubContext:
    """Minimal BuildContext: references render as written, self is fixed."""

    def __init__(self, dialect="bigquery", incremental=False, self_name="analytics.t_historical"):
        self.dialect = dialect
        self._incremental = incremental
        self._self_name = self_name
        self.refs = []

    def ref(self, relation):
        self.refs.append(relation)
        return parse_relation(relation).qualified_name

    def self_ref(self):
        return self._self_name

    def is_incremental(self):
        return self._incremental

    def when(self, condition, text):
        return text if condition else ""


class RecordingExecutor:
    """SQL executor that records statements and tracks which tables exist."""

    def __init__(self):
        self.executed: list[str] = []
        self.tables: set[str] = set()
        self.views: set[str] = set()
        self._fail_on: str | None = None

    def fail_on(self, substring: str):
        self._fail_on = substring

    async def execute(self, query: str, params=None):
        q = query.strip()
        self.executed.append(q)
        if self._fail_on and self._fail_on in q:
            raise RuntimeError(f"Simulated failure on: {self._fail_on}")
        if q.startswith("CREATE TABLE"):
            self.tables.add(q.split()[2])
        elif q.startswith("DROP TABLE IF EXISTS"):
            self.tables.discard(q.split()[4])
        elif q.startswith("CREATE OR REPLACE VIEW"):
            self.views.add(q.split()[4])
        return "OK"

    async def extract(self, query: str, params=None, **kwargs):
        q = query.strip()
        self.executed.append(q)
        table = q.split("FROM")[-1].split()[0]
        if q.startswith("SELECT 1 FROM"):
            if table not in self.tables:
                raise Exception(f"Table {table} does not exist")
            return []
        if "COUNT(*)" in q:
            return [{"cnt": 3}]
        return []


@pytest.fixture
def make_ctx():
    def _make(**kwargs):
        return StubContext(**kwargs)
    return _make


@pytest.fixture
def project():
    return Project(default_schema="analytics")


@pytest.fixture
def executor():
    return RecordingExecutor()


@pytest_asyncio.fixture
async def duckdb_conn():
    """In-memory DuckDB connection; skips the test when duckdb is missing."""
    pytest.importorskip("duckdb")
    from scdkit.connectors.local_duckdb import DuckDBConnector

    conn = DuckDBConnector()
    await conn.connect()
    yield conn
    await conn.disconnect()
