"""mcp-scaffold scaffolder -- renders new components for a generated project.

Quick usage::

    from mcp_scaffold.scaffolder import ComponentTemplateGenerator

    generator = ComponentTemplateGenerator()
    template = generator.generate("tool", "weather")
    template.file_content              # full TypeScript source
    template.registry_update.import_line
"""

from mcp_scaffold.scaffolder.generator import ComponentTemplateGenerator
from mcp_scaffold.scaffolder.templates import TemplateRenderer

__all__ = [
    "ComponentTemplateGenerator",
    "TemplateRenderer",
]
