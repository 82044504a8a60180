"""Load SCD definitions from a project file into a Project."""

from __future__ import annotations
import logging
from pathlib import Path
from typing import Any

from pydantic import BaseModel, Field, ValidationError

from scdkit.core.config import ProjectFileError, SCDKitSettings, get_settings, load_toml
from scdkit.project.registry import Project
from scdkit.scd.builder import build_scd
from scdkit.scd.strategies import SCDConfig, scd_config

logger = logging.getLogger("scdkit.project")


class ProjectSection(BaseModel):
    default_schema: str | None = None
    dialect: str | None = None

    model_config = {"extra": "forbid"}


class SCDDefinition(BaseModel):
    """One `[scd.<name>]` table of a project file."""
    strategy: str | None = None
    unique_key: str | list[str] | None = None
    timestamp_col: str | None = None
    check_cols: list[str] | None = None
    null_safe: bool = False
    source: str | dict[str, str] | None = None
    tags: list[str] | None = None
    columns: dict[str, str] | None = None
    dependencies: list[str] | None = None
    target_schema: str | None = Field(default=None, alias="schema")
    description: str | None = None
    materialization: dict[str, Any] | None = None

    model_config = {"extra": "forbid", "populate_by_name": True}

    def to_config(self, name: str) -> SCDConfig:
        return scd_config(
            name,
            strategy=self.strategy,
            unique_key=self.unique_key,
            source=self.source,
            timestamp_col=self.timestamp_col,
            check_cols=self.check_cols,
            null_safe=self.null_safe,
            tags=self.tags,
            columns=self.columns,
            dependencies=self.dependencies,
            schema=self.target_schema,
            description=self.description,
            materialization=self.materialization,
        )


class ProjectFile(BaseModel):
    project: ProjectSection = Field(default_factory=ProjectSection)
    scd: dict[str, SCDDefinition] = Field(default_factory=dict)

    model_config = {"extra": "forbid"}


def parse_project(data: dict[str, Any], source: str = "<project>") -> ProjectFile:
    try:
        return ProjectFile.model_validate(data)
    except ValidationError as e:
        raise ProjectFileError(f"Invalid project file {source}:\n{e}") from e


def load_project(
    path: str | Path,
    settings: SCDKitSettings | None = None,
    dialect: str | None = None,
) -> Project:
    """Build every SCD declared in the file.

    All definitions are validated before the first one is registered, so a
    bad definition never leaves a partially built project behind.
    SCDConfigError propagates unchanged.
    """
    settings = settings or get_settings()
    parsed = parse_project(load_toml(path), source=str(path))

    configs = [definition.to_config(name) for name, definition in parsed.scd.items()]

    project = Project(
        default_schema=parsed.project.default_schema or settings.default_schema,
        dialect=dialect or parsed.project.dialect or settings.dialect,
    )
    for config in configs:
        build_scd(project, config)

    logger.info(f"Loaded {len(configs)} SCD definition(s) from {path}")
    return project
