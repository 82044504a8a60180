"""Project runner — materializes registered artifacts in dependency order."""

from __future__ import annotations
import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Protocol

from scdkit.project.registry import Artifact, Project
from scdkit.scd.builder import ArtifactKind

logger = logging.getLogger("scdkit.runner")


class SQLExecutor(Protocol):
    """Any connector that can execute SQL."""
    async def execute(self, query: str, params: Any = None) -> Any: ...
    async def extract(self, query: str, params: Any = None, **kwargs) -> list[dict]: ...


@dataclass
class RunResult:
    """Result of building a project."""
    status: str = "pending"  # pending | running | success | failed | partial
    started_at: datetime | None = None
    finished_at: datetime | None = None
    duration_ms: int | None = None
    results: dict[str, dict] = field(default_factory=dict)  # artifact name → stats
    failed: list[str] = field(default_factory=list)
    skipped: list[str] = field(default_factory=list)
    execution_order: list[list[str]] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "status": self.status,
            "started_at": self.started_at.isoformat() if self.started_at else None,
            "finished_at": self.finished_at.isoformat() if self.finished_at else None,
            "duration_ms": self.duration_ms,
            "results": self.results,
            "failed": self.failed,
            "skipped": self.skipped,
            "execution_order": self.execution_order,
        }


class ProjectRunner:
    """Executes a project's artifacts against a SQL engine."""

    def __init__(self, project: Project, executor: SQLExecutor, fail_fast: bool = False):
        """
        Args:
            project: Project whose artifacts are built
            executor: Connector implementing execute() and extract()
            fail_fast: If True, skip everything left once one artifact fails
        """
        self.project = project
        self.executor = executor
        self.fail_fast = fail_fast

    async def run(self, select: list[str] | None = None, full_refresh: bool = False) -> RunResult:
        """Build all artifacts, or `select` and everything they read from."""
        dag = self.project.dag()
        wanted = None
        if select:
            wanted = set()
            for name in select:
                self.project.get(name)
                wanted |= {name} | dag.get_upstream(name)

        groups = [
            [n for n in group if n in self.project.artifacts and (wanted is None or n in wanted)]
            for group in dag.parallel_groups()
        ]
        groups = [g for g in groups if g]

        result = RunResult(
            status="running",
            started_at=datetime.now(tz=timezone.utc),
            execution_order=groups,
        )
        failed_set: set[str] = set()

        for group in groups:
            for name in group:
                if (self.fail_fast and failed_set) or dag.get_upstream(name) & failed_set:
                    result.skipped.append(name)
                    logger.info(f"Skipping {name} — upstream artifact failed")
                    continue
                try:
                    logger.info(f"Building {name}")
                    result.results[name] = await self.materialize(name, full_refresh=full_refresh)
                except Exception as e:
                    logger.error(f"Artifact {name} failed: {e}")
                    failed_set.add(name)
                    result.failed.append(name)
                    result.results[name] = {"status": "failed", "error": str(e)}

        result.finished_at = datetime.now(tz=timezone.utc)
        result.duration_ms = int(
            (result.finished_at - result.started_at).total_seconds() * 1000
        )

        if result.failed:
            result.status = "partial" if len(result.failed) < len(result.results) else "failed"
        elif result.skipped:
            result.status = "partial"
        else:
            result.status = "success"
        return result

    async def materialize(self, name: str, full_refresh: bool = False) -> dict:
        """Build one artifact. Returns stats."""
        artifact = self.project.get(name)
        await self._ensure_schema(artifact)
        if artifact.kind is ArtifactKind.INCREMENTAL_TABLE:
            return await self._incremental_table(artifact, full_refresh)
        return await self._view(artifact)

    # ─── Incremental table ───

    async def _incremental_table(self, artifact: Artifact, full_refresh: bool) -> dict:
        table = artifact.qualified_name

        if full_refresh:
            await self.executor.execute(f"DROP TABLE IF EXISTS {table}")

        first_run = full_refresh or not await self._table_exists(table)
        sql = self.project.render(artifact.name, incremental=not first_run)

        if first_run:
            await self.executor.execute(f"CREATE TABLE {table} AS {sql}")
        else:
            before = await self._count_rows(table)
            await self.executor.execute(f"INSERT INTO {table} {sql}")

        rows = await self._count_rows(table)
        stats = {
            "status": "success",
            "kind": artifact.kind.value,
            "table": table,
            "rows": rows,
            "first_run": first_run,
        }
        if not first_run:
            stats["appended"] = rows - before
        return stats

    # ─── View ───

    async def _view(self, artifact: Artifact) -> dict:
        view = artifact.qualified_name
        sql = self.project.render(artifact.name)
        await self.executor.execute(f"CREATE OR REPLACE VIEW {view} AS {sql}")
        return {"status": "success", "kind": artifact.kind.value, "table": view}

    # ─── Helpers ───

    async def _ensure_schema(self, artifact: Artifact) -> None:
        if artifact.target.schema:
            await self.executor.execute(f"CREATE SCHEMA IF NOT EXISTS {artifact.target.schema}")

    async def _table_exists(self, table: str) -> bool:
        try:
            await self.executor.extract(f"SELECT 1 FROM {table} LIMIT 0")
            return True
        except Exception:
            return False

    async def _count_rows(self, table: str) -> int:
        rows = await self.executor.extract(f"SELECT COUNT(*) AS cnt FROM {table}")
        return rows[0]["cnt"] if rows else 0
