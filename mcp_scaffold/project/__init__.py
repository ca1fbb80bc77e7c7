"""Project detection, naming conventions and the shared data model.

Quick usage::

    from mcp_scaffold.project import ComponentKind, ProjectDetector

    detector = ProjectDetector(config, reporter)
    context = await detector.detect("./my-server")
    if context.is_valid_project:
        result = detector.validate_component_name("weather", ComponentKind.TOOL)
"""

from mcp_scaffold.project.detector import (
    ProjectDetector,
    component_file_name,
    component_instance_name,
    component_type_name,
    registry_key,
    to_camel_case,
    to_kebab_case,
    to_pascal_case,
)
from mcp_scaffold.project.models import (
    BackupEntry,
    BackupSnapshot,
    ComponentKind,
    ComponentTemplate,
    ExistenceCheck,
    GenerationOptions,
    KindSpec,
    NameValidation,
    PatchResult,
    ProjectContext,
    RegistryKind,
    RegistryUpdate,
    kind_spec,
    parse_kind,
)

__all__ = [
    "BackupEntry",
    "BackupSnapshot",
    "ComponentKind",
    "ComponentTemplate",
    "ExistenceCheck",
    "GenerationOptions",
    "KindSpec",
    "NameValidation",
    "PatchResult",
    "ProjectContext",
    "ProjectDetector",
    "RegistryKind",
    "RegistryUpdate",
    "component_file_name",
    "component_instance_name",
    "component_type_name",
    "kind_spec",
    "parse_kind",
    "registry_key",
    "to_camel_case",
    "to_kebab_case",
    "to_pascal_case",
]
