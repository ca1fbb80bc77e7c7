"""mcp-scaffold add-component workflow and CLI.

Adds a component to an existing generated MCP server project:

Detect -> ValidateName -> CheckNotExists -> Generate -> Backup ->
WriteComponentFile -> UpdateIndex -> PatchRegistries -> Done

Anything that fails from Backup onward restores the registry snapshot before
the error propagates.  The new component file itself is kept so it can be
inspected.

Usage::

    mcp-scaffold add tool weather --description "Current weather lookup"
    mcp-scaffold list --path ./my-server
"""

from __future__ import annotations

import asyncio
import re
import sys
import traceback
from enum import Enum
from pathlib import Path
from typing import Optional

from jinja2 import TemplateError
from pydantic import BaseModel, Field
from rich.panel import Panel

from mcp_scaffold.config import Config, RegistryStyle
from mcp_scaffold.project.detector import ProjectDetector, component_path
from mcp_scaffold.project.models import (
    INDEX_FILE_NAME,
    SOURCE_EXTENSION,
    BackupSnapshot,
    ComponentKind,
    ComponentTemplate,
    GenerationOptions,
    PatchResult,
    ProjectContext,
    kind_spec,
    parse_kind,
)
from mcp_scaffold.registry.backup import BackupError, BackupManager
from mcp_scaffold.registry.patcher import RegistryPatcher
from mcp_scaffold.scaffolder.generator import ComponentTemplateGenerator
from mcp_scaffold.utils import (
    Reporter,
    console,
    print_error,
    print_success,
    print_summary_table,
    print_warning,
    split_words,
    write_text,
)

# Rejected even with --skip-validation: these would escape the kind's
# directory or break the generated string literals.
_UNSAFE_NAME_RE = re.compile(r"[/\\.'\"`]")

# ---------------------------------------------------------------------------
# Workflow steps & exceptions
# ---------------------------------------------------------------------------


class WorkflowStep(str, Enum):
    DETECT = "detect"
    VALIDATE_NAME = "validate-name"
    CHECK_NOT_EXISTS = "check-not-exists"
    GENERATE = "generate"
    BACKUP = "backup"
    WRITE_COMPONENT = "write-component"
    UPDATE_INDEX = "update-index"
    PATCH_REGISTRIES = "patch-registries"


class AddComponentError(Exception):
    """Raised when the add-component workflow stops.

    Attributes:
        step: The workflow step that failed.
        rolled_back: Whether registry files were restored from the snapshot.
    """

    def __init__(self, step: WorkflowStep, message: str, rolled_back: bool = False) -> None:
        self.step = step
        self.rolled_back = rolled_back
        super().__init__(f"{step.value}: {message}")


# ---------------------------------------------------------------------------
# Request / result models
# ---------------------------------------------------------------------------


class AddComponentRequest(BaseModel):
    """What the user asked to add."""

    kind: ComponentKind
    name: str
    description: str = ""
    author: str = ""
    skip_validation: bool = False


class AddComponentResult(BaseModel):
    """What a successful run created and changed."""

    kind: ComponentKind
    name: str
    project_name: str
    component_path: Path
    snapshot: BackupSnapshot
    index_updated: bool = False
    patch_results: list[PatchResult] = Field(default_factory=list)


class ComponentListing(BaseModel):
    """Existing components of a project, per kind."""

    project_name: str
    components: dict[ComponentKind, list[str]] = Field(default_factory=dict)


# ---------------------------------------------------------------------------
# Orchestrator
# ---------------------------------------------------------------------------


class AddComponentOrchestrator:
    """Sequences detection, generation, backup and registry patching.

    Every step is awaited before the next one starts; later steps depend on
    the side effects of earlier ones.
    """

    def __init__(
        self,
        config: Config | None = None,
        reporter: Reporter | None = None,
        generator: ComponentTemplateGenerator | None = None,
    ) -> None:
        self.config = config or Config()
        self.reporter = reporter or Reporter(verbose=self.config.verbose)
        self.detector = ProjectDetector(self.config, self.reporter)
        self.generator = generator or ComponentTemplateGenerator()
        self.backups = BackupManager(self.config, self.reporter)
        self.patcher = RegistryPatcher(self.config, self.reporter)

    async def run(self, project_path: str | Path, request: AddComponentRequest) -> AddComponentResult:
        """Add the requested component to the project at *project_path*.

        Raises:
            AddComponentError: On any failure.  Failures before the backup
                leave the project untouched; later failures restore the
                registry files first.
        """
        kind = request.kind

        # 1. Detect
        self.reporter.step("Detecting MCP server project...")
        context = await self.detector.detect(project_path)
        if not context.is_valid_project:
            raise AddComponentError(
                WorkflowStep.DETECT,
                f"Not a valid MCP server project: {Path(project_path).resolve()}",
            )
        self.reporter.success(f"Found MCP project: {context.project_name}")

        # 2. Validate name
        name = self._resolve_name(request)
        self.reporter.debug(f"Component name resolved to '{name}'")

        # 3. Check the component does not exist yet
        self.reporter.step(f"Checking if {kind.value} '{name}' already exists...")
        existing = await self.detector.check_component_exists(context, kind, name)
        if existing.exists:
            raise AddComponentError(
                WorkflowStep.CHECK_NOT_EXISTS,
                f"A {kind.value} named '{name}' already exists at {existing.existing_path}",
            )
        self.reporter.success(f"Component name '{name}' is available")

        # 4. Generate
        template = self._generate(context, request, name)

        # 5. Backup -- everything after this point is rolled back on failure
        self.reporter.step("Creating backup of registry files...")
        try:
            snapshot = await self.backups.backup(context)
        except BackupError as exc:
            raise AddComponentError(WorkflowStep.BACKUP, str(exc)) from exc
        self.reporter.success(
            f"Created backup ({len(snapshot.entries)} files) at {snapshot.backup_dir}"
        )

        target = component_path(context.source_root_path, kind, name)
        step = WorkflowStep.WRITE_COMPONENT
        index_updated = False
        patch_results: list[PatchResult] = []
        try:
            # 6. Write the component file
            self.reporter.step(f"Creating {kind.value} file...")
            await asyncio.to_thread(write_text, target, template.file_content)
            self.reporter.success(f"Created {target.name}")

            # 7. Update the index
            step = WorkflowStep.UPDATE_INDEX
            if kind_spec(kind).has_index:
                self.reporter.step("Updating component index...")
                index_updated = await self.patcher.update_index(
                    context, kind, template.index_fragment
                )

            # 8. Patch registries
            step = WorkflowStep.PATCH_REGISTRIES
            if template.registry_update is not None:
                self.reporter.step("Updating component registries...")
                patch_results = await self.patcher.apply_all(context, [template.registry_update])
        except Exception as exc:
            rolled_back = await self._rollback(context, snapshot)
            raise AddComponentError(step, str(exc), rolled_back=rolled_back) from exc

        return AddComponentResult(
            kind=kind,
            name=name,
            project_name=context.project_name,
            component_path=target,
            snapshot=snapshot,
            index_updated=index_updated,
            patch_results=patch_results,
        )

    def _resolve_name(self, request: AddComponentRequest) -> str:
        if request.skip_validation:
            if not split_words(request.name):
                raise AddComponentError(
                    WorkflowStep.VALIDATE_NAME, "Component name cannot be empty"
                )
            if _UNSAFE_NAME_RE.search(request.name):
                raise AddComponentError(
                    WorkflowStep.VALIDATE_NAME,
                    "Component name must not contain path separators, dots or quotes",
                )
            return request.name.strip()

        validation = self.detector.validate_component_name(request.name, request.kind)
        if not validation.valid or validation.normalized is None:
            raise AddComponentError(
                WorkflowStep.VALIDATE_NAME, validation.error or "Invalid component name"
            )
        return validation.normalized

    def _generate(
        self, context: ProjectContext, request: AddComponentRequest, name: str
    ) -> ComponentTemplate:
        self.reporter.step(f"Generating {request.kind.value} template...")
        options = GenerationOptions(
            description=request.description,
            author=request.author or self.config.default_author,
            project_name=context.project_name,
        )
        try:
            template = self.generator.generate(request.kind, name, options)
        except TemplateError as exc:
            raise AddComponentError(WorkflowStep.GENERATE, f"Template rendering failed: {exc}") from exc
        self.reporter.success(f"Generated {request.kind.value} template")
        return template

    async def _rollback(self, context: ProjectContext, snapshot: BackupSnapshot) -> bool:
        """Restore registry files; a restore failure is reported, never raised."""
        if not snapshot.entries:
            return False
        self.reporter.warning("Restoring registry files from backup...")
        try:
            await self.backups.restore(context, snapshot)
        except BackupError as exc:
            self.reporter.error(f"Failed to restore backup: {exc}")
            return False
        self.reporter.success("Registry files restored")
        return True

    async def list_components(self, project_path: str | Path) -> Optional[ComponentListing]:
        """Enumerate existing components per kind.

        Returns ``None`` when *project_path* is not a valid project.
        """
        context = await self.detector.detect(project_path)
        if not context.is_valid_project:
            return None

        listing = ComponentListing(project_name=context.project_name)
        for kind in ComponentKind:
            directory = context.source_root_path / kind_spec(kind).directory
            if not await asyncio.to_thread(directory.is_dir):
                continue
            listing.components[kind] = await asyncio.to_thread(_component_modules, directory)
        return listing


def _component_modules(directory: Path) -> list[str]:
    """Sorted module names of the ``.ts`` files in *directory*, minus the index."""
    return sorted(
        path.name[: -len(SOURCE_EXTENSION)]
        for path in directory.iterdir()
        if path.name.endswith(SOURCE_EXTENSION) and path.name != INDEX_FILE_NAME
    )


# ---------------------------------------------------------------------------
# Console output
# ---------------------------------------------------------------------------

_TEST_COMMANDS: dict[ComponentKind, list[str]] = {
    ComponentKind.TOOL: ["npm run test:tools", "npm run inspector:cli"],
    ComponentKind.RESOURCE: ["npm run test:resources", "npm run inspector:cli"],
    ComponentKind.PROMPT: ["npm run test:prompts", "npm run inspector:cli"],
}

_TIPS: dict[ComponentKind, list[str]] = {
    ComponentKind.TOOL: [
        "Define input schemas using Zod for validation",
        "Return meaningful error messages instead of throwing",
        "Test with MCP Inspector to verify tool behavior",
    ],
    ComponentKind.RESOURCE: [
        "Provide both human-readable and machine-readable formats",
        "Consider caching for expensive resource operations",
        "Use clear URI patterns for resource identification",
    ],
    ComponentKind.PROMPT: [
        "Make prompts flexible with optional parameters",
        "Provide good defaults for tone and format options",
        "Test with different argument combinations",
    ],
    ComponentKind.SERVICE: [
        "Implement proper error handling and retries",
        "Add logging for debugging and monitoring",
        "Consider making services configurable",
    ],
    ComponentKind.TRANSPORT: [
        "Handle reconnection scenarios gracefully",
        "Add proper cleanup in the close() method",
    ],
    ComponentKind.UTIL: [
        "Keep utilities generic and reusable",
        "Cache expensive operations",
    ],
}


def print_next_steps(result: AddComponentResult, project_path: Path) -> None:
    """Print the post-add summary and kind-specific next steps."""
    try:
        created = result.component_path.relative_to(project_path)
    except ValueError:
        created = result.component_path

    summary = {
        "Project": result.project_name,
        "Created": str(created),
        "Backup": str(result.snapshot.backup_dir),
        "Index updated": "yes" if result.index_updated else "no",
    }
    for patch in result.patch_results:
        summary[f"{patch.registry_kind.value} registry"] = "updated" if patch.changed else "unchanged"
    print_summary_table(summary, title="Component added")

    commands = _TEST_COMMANDS.get(result.kind, ["npm run build", "npm test"])
    lines = [
        "[cyan]1. Customize your component:[/cyan]",
        f"   Open {created} and look for TODO comments",
        "[cyan]2. Test your component:[/cyan]",
        *(f"   {command}" for command in commands),
        "[cyan]3. Start your MCP server:[/cyan]",
        "   npm run dev:stdio    # For CLI tools",
        "   npm run dev:http     # For web integration",
        "",
        "[cyan]Tips:[/cyan]",
        *(f"   - {tip}" for tip in _TIPS[result.kind]),
    ]
    console.print(Panel("\n".join(lines), title="[bold]Next steps[/bold]", border_style="yellow"))


def print_listing(listing: ComponentListing) -> None:
    """Print existing components grouped by kind."""
    console.print(f"\n[bold blue]Components in [cyan]{listing.project_name}[/cyan]:[/bold blue]")
    console.rule(style="dim")
    for kind, names in listing.components.items():
        console.print(f"\n[cyan]{kind_spec(kind).directory}:[/cyan]")
        if not names:
            console.print("   [dim]- No custom components found[/dim]")
        for name in names:
            console.print(f"   - {name}")
    console.print("\n[yellow]To add a new component:[/yellow]")
    console.print("   mcp-scaffold add <type> <name>")


# ---------------------------------------------------------------------------
# CLI entry point
# ---------------------------------------------------------------------------


def _build_config(args) -> Config:
    config = Config.load(Path(args.config)) if args.config else Config.from_env()
    if args.verbose:
        config.verbose = True
    if getattr(args, "registry_style", None):
        config.registry_style = RegistryStyle(args.registry_style)
    return config


def _cmd_add(args) -> int:
    try:
        config = _build_config(args)
    except (OSError, ValueError) as exc:
        print_error(f"Error: cannot load configuration: {exc}")
        return 1

    try:
        kind = parse_kind(args.kind)
    except ValueError as exc:
        print_error(f"Error: {exc}")
        return 1

    request = AddComponentRequest(
        kind=kind,
        name=args.name,
        description=args.description or "",
        author=args.author or "",
        skip_validation=args.skip_validation,
    )
    orchestrator = AddComponentOrchestrator(config, Reporter(verbose=config.verbose))
    project_path = Path(args.path)

    try:
        result = asyncio.run(orchestrator.run(project_path, request))
    except AddComponentError as exc:
        print_error(f"Failed to add component: {exc}")
        if exc.step is WorkflowStep.DETECT:
            console.print("[dim]Run this command inside a generated MCP server project.[/dim]")
        if exc.rolled_back:
            print_warning(
                "Registry files were restored; the new component file was kept for inspection."
            )
        if config.verbose:
            console.print(f"[dim]{traceback.format_exc()}[/dim]")
        return 1

    print_success(f"{kind.value.capitalize()} '{result.name}' added successfully!")
    print_next_steps(result, project_path)
    return 0


def _cmd_list(args) -> int:
    try:
        config = _build_config(args)
    except (OSError, ValueError) as exc:
        print_error(f"Error: cannot load configuration: {exc}")
        return 0

    orchestrator = AddComponentOrchestrator(config, Reporter(verbose=config.verbose))
    listing = asyncio.run(orchestrator.list_components(Path(args.path)))
    if listing is None:
        print_error("Not a valid MCP server project")
        return 0
    print_listing(listing)
    return 0


def build_parser():
    """Build the ``mcp-scaffold`` argument parser."""
    import argparse

    parser = argparse.ArgumentParser(
        prog="mcp-scaffold",
        description="Add components to a generated MCP server project",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=(
            "Examples:\n"
            "  mcp-scaffold add tool weather --description \"Weather lookup\"\n"
            "  mcp-scaffold add resource user-profile --path ./my-server\n"
            "  mcp-scaffold list\n"
            "\n"
            f"Component types: {', '.join(k.value for k in ComponentKind)}\n"
        ),
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    common = argparse.ArgumentParser(add_help=False)
    common.add_argument("--verbose", "-v", action="store_true", help="Show detailed output")
    common.add_argument(
        "--path", "-p",
        default=".",
        help="Project directory (default: current directory)",
    )
    common.add_argument("--config", default=None, help="JSON configuration file")

    add = subparsers.add_parser("add", parents=[common], help="Add a new component")
    add.add_argument("kind", help="Component type")
    add.add_argument("name", help="Component name (the type suffix is added automatically)")
    add.add_argument("--description", "-d", default=None, help="Component description")
    add.add_argument("--author", "-a", default=None, help="Component author")
    add.add_argument(
        "--skip-validation",
        action="store_true",
        help="Do not validate the component name",
    )
    add.add_argument(
        "--registry-style",
        choices=[style.value for style in RegistryStyle],
        default=None,
        help="How registries register components (default: auto_discovery)",
    )
    add.set_defaults(handler=_cmd_add)

    list_cmd = subparsers.add_parser("list", parents=[common], help="List existing components")
    list_cmd.set_defaults(handler=_cmd_list)

    return parser


def main(argv: list[str] | None = None) -> None:
    """CLI entry point for ``mcp-scaffold`` / ``python -m mcp_scaffold``."""
    parser = build_parser()
    args = parser.parse_args(argv)
    exit_code = args.handler(args)
    if exit_code:
        sys.exit(exit_code)


if __name__ == "__main__":
    main()
