"""Generated-project detection and component naming conventions.

``ProjectDetector.detect`` is read-only and never raises: anything that keeps
a directory from looking like a generated MCP server project yields a context
with ``is_valid_project=False``.  The naming helpers are pure functions shared
by the detector, the template generator and the orchestrator.
"""

from __future__ import annotations

import asyncio
import re
from pathlib import Path
from typing import Any

from mcp_scaffold.config import Config
from mcp_scaffold.project.models import (
    INDEX_FILE_NAME,
    KIND_SPECS,
    SOURCE_EXTENSION,
    ComponentKind,
    ExistenceCheck,
    NameValidation,
    ProjectContext,
    kind_spec,
)
from mcp_scaffold.utils import Reporter, load_json, normalize_whitespace, split_words

# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

MAX_NAME_LENGTH = 50

RESERVED_NAMES: frozenset[str] = frozenset(
    {"index", "server", "config", "main", "default", "export", "import"}
)

_VALID_NAME_RE = re.compile(r"^[A-Za-z][A-Za-z0-9_-]*$")

# Files (relative to the source root) every generated project contains.
REQUIRED_FILES: tuple[str, ...] = (
    "server.ts",
    "core/mcp-server.ts",
    *(
        f"{spec.directory}/{INDEX_FILE_NAME}"
        for spec in KIND_SPECS.values()
        if spec.has_index
    ),
)


# ---------------------------------------------------------------------------
# Naming conventions
# ---------------------------------------------------------------------------

def to_kebab_case(name: str) -> str:
    """``"My Weather_api"`` -> ``"my-weather-api"``."""
    return "-".join(word.lower() for word in split_words(name))


def to_pascal_case(name: str) -> str:
    """``"my-weather api"`` -> ``"MyWeatherApi"``."""
    return "".join(word[:1].upper() + word[1:].lower() for word in split_words(name))


def to_camel_case(name: str) -> str:
    """``"my-weather api"`` -> ``"myWeatherApi"``."""
    words = split_words(name)
    if not words:
        return ""
    return words[0].lower() + "".join(w[:1].upper() + w[1:].lower() for w in words[1:])


def component_file_name(name: str, kind: ComponentKind | str) -> str:
    """File name of a component, e.g. ``weather-tool.ts`` or ``cache.ts``."""
    return f"{to_kebab_case(name)}{kind_spec(kind).file_suffix}{SOURCE_EXTENSION}"


def component_type_name(name: str, kind: ComponentKind | str) -> str:
    """Class name of a component, e.g. ``WeatherTool``."""
    return f"{to_pascal_case(name)}{kind_spec(kind).type_suffix}"


def component_instance_name(name: str, kind: ComponentKind | str) -> str:
    """Variable name of a component instance, e.g. ``weatherTool``."""
    return f"{to_camel_case(name)}{kind_spec(kind).type_suffix}"


def registry_key(name: str) -> str:
    """Key a component is registered under in its registry map."""
    return to_kebab_case(name)


def component_path(source_root: Path, kind: ComponentKind | str, name: str) -> Path:
    """Canonical on-disk path of component *name* of *kind*."""
    return Path(source_root) / kind_spec(kind).directory / component_file_name(name, kind)


def index_path(source_root: Path, kind: ComponentKind | str) -> Path:
    """Path of a kind's index/registry file (whether or not the kind has one)."""
    return Path(source_root) / kind_spec(kind).directory / INDEX_FILE_NAME


def validate_component_name(
    name: str,
    kind: ComponentKind | str,
    max_length: int = MAX_NAME_LENGTH,
) -> NameValidation:
    """Validate a user-supplied component name for *kind*.

    The checks run in order and the first failure is reported:

    * non-empty after trimming;
    * after internal whitespace becomes hyphens, starts with a letter and
      contains only letters, digits, hyphens and underscores;
    * at most *max_length* characters;
    * not a reserved word;
    * does not already end in the kind's suffix word, either as a separate
      word (``weather-tool``) or case-joined (``WeatherTool``), since the
      suffix is appended automatically.

    Returns:
        A :class:`NameValidation` whose ``normalized`` field holds the
        kebab-case name when the name is accepted.
    """
    if not name or not name.strip():
        return NameValidation(valid=False, error="Component name cannot be empty")

    clean = normalize_whitespace(name)
    if not _VALID_NAME_RE.match(clean):
        return NameValidation(
            valid=False,
            error=(
                "Component name must start with a letter and contain only letters, "
                "numbers, hyphens, and underscores"
            ),
        )

    if len(clean) > max_length:
        return NameValidation(
            valid=False,
            error=f"Component name must be {max_length} characters or less",
        )

    if clean.lower() in RESERVED_NAMES:
        return NameValidation(
            valid=False,
            error=f'"{clean}" is a reserved word and cannot be used as a component name',
        )

    word = kind_spec(kind).suffix_word
    if word:
        joined = word[:1].upper() + word[1:]
        lowered = clean.lower()
        if lowered.endswith(f"-{word}") or lowered.endswith(f"_{word}") or clean.endswith(joined):
            return NameValidation(
                valid=False,
                error=(
                    f'{joined} names should not end with "{word}" or "{joined}" '
                    "- it will be added automatically"
                ),
            )

    return NameValidation(valid=True, normalized=to_kebab_case(clean))


# ---------------------------------------------------------------------------
# Detector
# ---------------------------------------------------------------------------

class ProjectDetector:
    """Recognises generated MCP server projects.

    A directory is a valid project when its manifest declares the framework
    dependency, it has a source root, and every file in
    :data:`REQUIRED_FILES` exists under that root.
    """

    def __init__(self, config: Config | None = None, reporter: Reporter | None = None) -> None:
        self.config = config or Config()
        self.reporter = reporter or Reporter(verbose=self.config.verbose)

    async def detect(self, path: str | Path) -> ProjectContext:
        """Inspect *path* and describe the project found there.

        Never raises.  I/O and decode errors are reported as warnings and
        produce ``is_valid_project=False``.
        """
        project_path = Path(path)
        context = ProjectContext(
            project_path=project_path,
            source_root_path=self.config.source_root(project_path),
        )

        try:
            return await self._inspect(context)
        except (OSError, ValueError) as exc:
            self.reporter.warning(f"Error detecting MCP project: {exc}")
            context.is_valid_project = False
            return context

    async def _inspect(self, context: ProjectContext) -> ProjectContext:
        manifest_path = self.config.manifest_path(context.project_path)
        if not await asyncio.to_thread(manifest_path.is_file):
            self.reporter.debug(f"No {self.config.manifest_name} in {context.project_path}")
            return context

        manifest = await asyncio.to_thread(load_json, manifest_path)
        context.manifest = manifest
        name = manifest.get("name")
        context.project_name = (
            name if isinstance(name, str) and name else context.project_path.resolve().name
        )

        if not _declares_dependency(manifest, self.config.framework_dependency):
            self.reporter.debug(
                f"{self.config.manifest_name} does not depend on {self.config.framework_dependency}"
            )
            return context

        if not await asyncio.to_thread(context.source_root_path.is_dir):
            self.reporter.debug(f"Source root missing: {context.source_root_path}")
            return context

        for relative in REQUIRED_FILES:
            required = context.source_root_path / relative
            if not await asyncio.to_thread(required.exists):
                self.reporter.debug(f"Required file missing: {required}")
                return context

        context.is_valid_project = True
        return context

    def validate_component_name(self, name: str, kind: ComponentKind | str) -> NameValidation:
        """Validate *name* using the configured maximum length."""
        return validate_component_name(name, kind, max_length=self.config.max_name_length)

    async def check_component_exists(
        self,
        context: ProjectContext,
        kind: ComponentKind | str,
        name: str,
    ) -> ExistenceCheck:
        """Test whether the canonical file for (*kind*, *name*) exists."""
        path = component_path(context.source_root_path, kind, name)
        exists = await asyncio.to_thread(path.exists)
        return ExistenceCheck(exists=exists, existing_path=path if exists else None)


def _declares_dependency(manifest: dict[str, Any], dependency: str) -> bool:
    for section in ("dependencies", "devDependencies"):
        deps = manifest.get(section)
        if isinstance(deps, dict) and dependency in deps:
            return True
    return False
