"""mcp-scaffold configuration.

Centralised, typed configuration for the add-component workflow. All settings
use Pydantic v2 models so they can be validated at construction time and
serialised to/from JSON or environment variables without boiler-plate.
"""

from __future__ import annotations

import os
from enum import Enum
from pathlib import Path
from typing import Any

from pydantic import BaseModel, Field


class RegistryStyle(str, Enum):
    """How a generated project's registries register their components.

    ``auto_discovery`` registries only need the ``set(...)`` call; ``legacy``
    registries also need a follow-up initialization call on the next line.
    """

    AUTO_DISCOVERY = "auto_discovery"
    LEGACY = "legacy"


class Config(BaseModel):
    """Global mcp-scaffold configuration.

    Instances are typically created once by the CLI entry point and then
    passed through the rest of the system.
    """

    source_dir: str = Field(default="src", description="Source root inside the project")
    manifest_name: str = Field(default="package.json")
    framework_dependency: str = Field(
        default="@modelcontextprotocol/sdk",
        description="Dependency a generated project must declare in its manifest",
    )
    backup_dir: str = Field(default=".mcp-backups")
    registry_style: RegistryStyle = Field(default=RegistryStyle.AUTO_DISCOVERY)
    verbose: bool = Field(default=False)
    default_author: str = Field(default="MCP Developer")
    max_name_length: int = Field(default=50, ge=1)

    # ------------------------------------------------------------------
    # Derived paths
    # ------------------------------------------------------------------

    def source_root(self, project_path: Path) -> Path:
        """Return ``<project>/<source_dir>``."""
        return Path(project_path) / self.source_dir

    def manifest_path(self, project_path: Path) -> Path:
        """Return the path of the project manifest (``package.json``)."""
        return Path(project_path) / self.manifest_name

    def backup_root(self, project_path: Path) -> Path:
        """Root directory that holds one timestamped folder per backup."""
        return Path(project_path) / self.backup_dir

    # ------------------------------------------------------------------
    # Serialisation helpers
    # ------------------------------------------------------------------

    def save(self, path: Path) -> Path:
        """Persist the configuration to a JSON file.

        Args:
            path: Destination file.  Parent directories are created.

        Returns:
            The path where the file was written.
        """
        target = Path(path)
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_text(self.model_dump_json(indent=2), encoding="utf-8")
        return target

    @classmethod
    def load(cls, path: Path) -> "Config":
        """Load a previously-saved configuration from JSON.

        Args:
            path: The JSON file to read.

        Returns:
            A validated ``Config`` instance.
        """
        raw = Path(path).read_text(encoding="utf-8")
        return cls.model_validate_json(raw)

    @classmethod
    def from_env(cls) -> "Config":
        """Build a ``Config`` from environment variables.

        Recognised variables (all optional):
            MCP_SCAFFOLD_SOURCE_DIR, MCP_SCAFFOLD_BACKUP_DIR,
            MCP_SCAFFOLD_REGISTRY_STYLE, MCP_SCAFFOLD_VERBOSE,
            MCP_SCAFFOLD_AUTHOR (falls back to USER / USERNAME).
        """
        kwargs: dict[str, Any] = {}
        if os.environ.get("MCP_SCAFFOLD_SOURCE_DIR"):
            kwargs["source_dir"] = os.environ["MCP_SCAFFOLD_SOURCE_DIR"]
        if os.environ.get("MCP_SCAFFOLD_BACKUP_DIR"):
            kwargs["backup_dir"] = os.environ["MCP_SCAFFOLD_BACKUP_DIR"]
        if os.environ.get("MCP_SCAFFOLD_REGISTRY_STYLE"):
            kwargs["registry_style"] = RegistryStyle(os.environ["MCP_SCAFFOLD_REGISTRY_STYLE"])

        verbose = os.environ.get("MCP_SCAFFOLD_VERBOSE", "").strip().lower()
        kwargs["verbose"] = verbose in ("1", "true", "yes", "on")

        author = (
            os.environ.get("MCP_SCAFFOLD_AUTHOR")
            or os.environ.get("USER")
            or os.environ.get("USERNAME")
        )
        if author:
            kwargs["default_author"] = author

        return cls(**kwargs)
