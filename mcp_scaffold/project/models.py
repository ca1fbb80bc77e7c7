"""Pydantic v2 models for mcp-scaffold.

Defines the project context produced by detection, the component-kind
catalogue, the template/registry payloads produced by the generator and the
backup snapshot that wraps every registry mutation.
"""

from __future__ import annotations

from enum import Enum
from pathlib import Path
from typing import Any, Optional

from pydantic import BaseModel, Field


# ---------------------------------------------------------------------------
# Enumerations
# ---------------------------------------------------------------------------

class ComponentKind(str, Enum):
    """Closed set of extensible unit categories in a generated project."""
    TOOL = "tool"
    RESOURCE = "resource"
    PROMPT = "prompt"
    SERVICE = "service"
    TRANSPORT = "transport"
    UTIL = "util"


class RegistryKind(str, Enum):
    """Component kinds that own a registry (and index) file."""
    TOOL = "tool"
    RESOURCE = "resource"
    PROMPT = "prompt"


# ---------------------------------------------------------------------------
# Kind catalogue
# ---------------------------------------------------------------------------

class KindSpec(BaseModel):
    """Fixed naming and layout conventions for one component kind."""
    directory: str = Field(..., description="Subdirectory under the source root")
    file_suffix: str = Field(default="", description="Appended to the kebab name, e.g. '-tool'")
    type_suffix: str = Field(default="", description="Appended to type/instance names, e.g. 'Tool'")
    suffix_word: str = Field(default="", description="Word a user-supplied name must not end in")
    has_index: bool = Field(default=False, description="Whether the kind has an index/registry file")


KIND_SPECS: dict[ComponentKind, KindSpec] = {
    ComponentKind.TOOL: KindSpec(
        directory="tools", file_suffix="-tool", type_suffix="Tool",
        suffix_word="tool", has_index=True,
    ),
    ComponentKind.RESOURCE: KindSpec(
        directory="resources", file_suffix="-resource", type_suffix="Resource",
        suffix_word="resource", has_index=True,
    ),
    ComponentKind.PROMPT: KindSpec(
        directory="prompts", file_suffix="-prompt", type_suffix="Prompt",
        suffix_word="prompt", has_index=True,
    ),
    ComponentKind.SERVICE: KindSpec(
        directory="services", type_suffix="Service", suffix_word="service",
    ),
    ComponentKind.TRANSPORT: KindSpec(
        directory="transports", file_suffix="-transport", type_suffix="Transport",
        suffix_word="transport",
    ),
    ComponentKind.UTIL: KindSpec(directory="utils"),
}

INDEX_FILE_NAME = "index.ts"
SOURCE_EXTENSION = ".ts"


def kind_spec(kind: ComponentKind | str) -> KindSpec:
    """Return the :class:`KindSpec` for *kind*.

    Raises:
        ValueError: If *kind* is not a known component kind.
    """
    return KIND_SPECS[ComponentKind(kind)]


def parse_kind(value: str) -> ComponentKind:
    """Parse a user-supplied kind name (case-insensitive).

    Raises:
        ValueError: If the value names no component kind.
    """
    try:
        return ComponentKind(value.strip().lower())
    except ValueError:
        valid = ", ".join(k.value for k in ComponentKind)
        raise ValueError(f"Unknown component type '{value}'. Valid types: {valid}") from None


# ---------------------------------------------------------------------------
# Detection
# ---------------------------------------------------------------------------

class ProjectContext(BaseModel):
    """Result of inspecting a directory for a generated project."""
    is_valid_project: bool = Field(default=False)
    project_path: Path = Field(..., description="Directory that was inspected")
    source_root_path: Path = Field(..., description="The project's source root")
    project_name: str = Field(default="")
    manifest: Optional[dict[str, Any]] = Field(
        default=None, description="Parsed package manifest, when it could be read"
    )


class NameValidation(BaseModel):
    """Outcome of validating a user-supplied component name."""
    valid: bool
    error: Optional[str] = None
    normalized: Optional[str] = Field(
        default=None, description="Kebab-case form of an accepted name"
    )


class ExistenceCheck(BaseModel):
    """Whether a component file already exists at its canonical path."""
    exists: bool
    existing_path: Optional[Path] = None


# ---------------------------------------------------------------------------
# Generation
# ---------------------------------------------------------------------------

class RegistryUpdate(BaseModel):
    """Text fragments that wire a new component into its registry file.

    Every line is a complete statement so presence can be tested by exact
    substring containment.
    """
    registry_kind: RegistryKind
    import_line: str
    registration_line: str
    initialization_line: str = ""


class ComponentTemplate(BaseModel):
    """Everything the workflow needs to create and register a component."""
    kind: ComponentKind
    file_content: str
    index_fragment: str = ""
    registry_update: Optional[RegistryUpdate] = None


class GenerationOptions(BaseModel):
    """Free-form metadata rendered into the component header."""
    description: str = ""
    author: str = ""
    project_name: str = ""


# ---------------------------------------------------------------------------
# Backup
# ---------------------------------------------------------------------------

class BackupEntry(BaseModel):
    """One registry file copied into a snapshot."""
    original_path: Path
    backup_path: Path


class BackupSnapshot(BaseModel):
    """Pristine copies of the registry files taken before a mutation."""
    timestamp: str
    project_path: Path
    backup_dir: Path
    entries: list[BackupEntry] = Field(default_factory=list)


# ---------------------------------------------------------------------------
# Patching
# ---------------------------------------------------------------------------

class PatchResult(BaseModel):
    """What a single registry patch changed."""
    registry_kind: RegistryKind
    path: Optional[Path] = None
    import_added: bool = False
    registration_added: bool = False
    warnings: list[str] = Field(default_factory=list)

    @property
    def changed(self) -> bool:
        return self.import_added or self.registration_added
