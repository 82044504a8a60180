"""scdkit — Type-2 slowly changing dimension query synthesis."""

__version__ = "0.1.0"

from scdkit.scd import (
    InvalidStrategy,
    MissingRequiredField,
    SCDConfig,
    build_scd,
    scd,
    scd_config,
)
from scdkit.project import Project, load_project

__all__ = [
    "InvalidStrategy",
    "MissingRequiredField",
    "SCDConfig",
    "build_scd",
    "scd",
    "scd_config",
    "Project",
    "load_project",
    "__version__",
]
