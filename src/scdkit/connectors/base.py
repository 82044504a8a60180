"""Base connector interface."""

from __future__ import annotations
from abc import ABC, abstractmethod
from typing import Any


class Connector(ABC):
    """Base class for SQL engines the runner can build artifacts in."""

    @abstractmethod
    async def connect(self) -> None:
        ...

    @abstractmethod
    async def disconnect(self) -> None:
        ...

    @abstractmethod
    async def execute(self, query: str, params: Any = None) -> None:
        """Run a statement that returns no rows."""
        ...

    @abstractmethod
    async def extract(self, query: str, params: Any = None, **kwargs) -> list[dict]:
        """Run a query and return its rows as dicts."""
        ...

    async def __aenter__(self):
        await self.connect()
        return self

    async def __aexit__(self, *args):
        await self.disconnect()
