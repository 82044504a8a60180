"""scdkit configuration — reads from env vars, .env and the project file."""

import tomllib
from pathlib import Path
from typing import Any, Dict

from pydantic import Field
from pydantic_settings import BaseSettings


class ProjectFileError(Exception):
    """Raised when a project file cannot be read or does not validate."""


class SCDKitSettings(BaseSettings):
    """Defaults for rendering and running projects."""

    default_schema: str = "analytics"
    dialect: str = "bigquery"
    log_level: str = "info"

    # Local runner
    database: str = Field(default=":memory:", alias="SCDKIT_DATABASE")

    project_file: str = Field(default="scdkit.toml", alias="SCDKIT_PROJECT_FILE")

    model_config = {"env_prefix": "SCDKIT_", "env_file": ".env", "extra": "ignore"}


def get_settings() -> SCDKitSettings:
    return SCDKitSettings()


def load_toml(path: str | Path) -> Dict[str, Any]:
    """Read a project file into a dict.

    Raises:
        ProjectFileError: If the file is missing or is not valid TOML
    """
    path = Path(path)
    if not path.exists():
        raise ProjectFileError(f"Project file not found: {path}")
    try:
        with path.open("rb") as f:
            return tomllib.load(f)
    except tomllib.TOMLDecodeError as e:
        raise ProjectFileError(f"Invalid TOML in {path}: {e}") from e
