"""Component template generation.

Turns a (kind, name) pair into a :class:`ComponentTemplate`: the full source
of the new component plus the exact fragments that wire it into the
project's index and registry files.
"""

from __future__ import annotations

from datetime import datetime, timezone

from mcp_scaffold.project.detector import (
    component_file_name,
    component_instance_name,
    component_type_name,
    registry_key,
    to_kebab_case,
)
from mcp_scaffold.project.models import (
    SOURCE_EXTENSION,
    ComponentKind,
    ComponentTemplate,
    GenerationOptions,
    RegistryKind,
    RegistryUpdate,
    kind_spec,
)
from mcp_scaffold.scaffolder.templates import TemplateRenderer


# ---------------------------------------------------------------------------
# Fragment templates
# ---------------------------------------------------------------------------

# Each fragment renders to exactly one complete TypeScript statement.
IMPORT_TEMPLATE = "import { {{ type_name }} } from './{{ module }}.js';"
EXPORT_TEMPLATE = "export { {{ type_name }} } from './{{ module }}.js';"
REGISTRATION_TEMPLATE = "this.{{ collection }}.set('{{ registry_key }}', new {{ type_name }}());"
INITIALIZATION_TEMPLATE = "this.{{ collection }}.get('{{ registry_key }}')?.initialize?.();"


class ComponentTemplateGenerator:
    """Renders new components and their registry wiring.

    Component bodies come from ``templates/<kind>.ts.j2``; the one-line
    fragments come from the module-level fragment templates above.
    """

    def __init__(self, renderer: TemplateRenderer | None = None) -> None:
        self.renderer = renderer or TemplateRenderer()

    def generate(
        self,
        kind: ComponentKind | str,
        name: str,
        options: GenerationOptions | None = None,
    ) -> ComponentTemplate:
        """Generate the source text and wiring fragments for a component.

        Args:
            kind: Component kind.
            name: Component name without the kind suffix (any casing).
            options: Description, author and project name for the header.

        Returns:
            A :class:`ComponentTemplate`.  Only tool/resource/prompt kinds
            carry an index fragment and a registry update.
        """
        kind = ComponentKind(kind)
        options = options or GenerationOptions()
        context = self._build_context(kind, name, options)

        file_content = self.renderer.render(f"{kind.value}.ts.j2", context)

        if not kind_spec(kind).has_index:
            return ComponentTemplate(kind=kind, file_content=file_content)

        return ComponentTemplate(
            kind=kind,
            file_content=file_content,
            index_fragment=self.renderer.render_string(EXPORT_TEMPLATE, context),
            registry_update=RegistryUpdate(
                registry_kind=RegistryKind(kind.value),
                import_line=self.renderer.render_string(IMPORT_TEMPLATE, context),
                registration_line=self.renderer.render_string(REGISTRATION_TEMPLATE, context),
                initialization_line=self.renderer.render_string(INITIALIZATION_TEMPLATE, context),
            ),
        )

    def _build_context(
        self, kind: ComponentKind, name: str, options: GenerationOptions
    ) -> dict[str, str]:
        """Build the Jinja2 template context for one component."""
        file_name = component_file_name(name, kind)
        project_slug = to_kebab_case(options.project_name.replace("/", " ").replace("@", ""))
        type_name = component_type_name(name, kind)
        key = registry_key(name)
        return {
            "kind": kind.value,
            "name": key,
            "type_name": type_name,
            "instance_name": component_instance_name(name, kind),
            "registry_key": key,
            "module": file_name[: -len(SOURCE_EXTENSION)],
            "collection": kind_spec(kind).directory,
            "description": options.description or f"Custom {kind.value} for {key} functionality",
            "author": options.author,
            "project_name": options.project_name,
            "project_slug": project_slug or "mcp",
            "created": datetime.now(timezone.utc).strftime("%Y-%m-%d"),
        }
