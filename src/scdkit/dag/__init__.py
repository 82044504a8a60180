"""Dependency resolution between registered artifacts."""

from scdkit.dag.resolver import CycleError, DAGNode, DAGResolver

__all__ = ["CycleError", "DAGNode", "DAGResolver"]
