"""Execution of registered artifacts against a SQL engine."""

from scdkit.runner.engine import ProjectRunner, RunResult, SQLExecutor

__all__ = ["ProjectRunner", "RunResult", "SQLExecutor"]
