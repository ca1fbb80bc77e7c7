"""Shared pytest fixtures for the mcp-scaffold test suite.

Provides reusable fixtures for:
- A generated MCP server project on disk (manifest, server files, registries)
- A project factory for variants (missing files, other registry content)
- Default configuration and a quiet reporter
"""

from __future__ import annotations

import io
import json
import textwrap
from pathlib import Path
from typing import Callable

import pytest
from rich.console import Console

from mcp_scaffold.config import Config
from mcp_scaffold.project.models import ProjectContext
from mcp_scaffold.utils import Reporter


# ---------------------------------------------------------------------------
# Registry file contents
# ---------------------------------------------------------------------------

TOOLS_INDEX = textwrap.dedent("""\
    import { EchoTool } from './echo-tool.js';
    import { logger } from '../utils/logger.js';

    export class ToolRegistry {
      private tools = new Map<string, any>();

      constructor() {
        this.initializeTools();
      }

      private initializeTools(): void {
        this.tools.set('echo', new EchoTool());
        logger.debug(`Registered ${this.tools.size} tools`);
      }

      getTools() {
        return Array.from(this.tools.values());
      }
    }

    export { EchoTool } from './echo-tool.js';
""")

RESOURCES_INDEX = textwrap.dedent("""\
    import { InfoResource } from './info-resource.js';

    export class ResourceRegistry {
      private resources = new Map<string, any>();

      constructor() {
        this.initializeResources();
      }

      private initializeResources(): void {
        this.resources.set('info', new InfoResource());
      }
    }

    export { InfoResource } from './info-resource.js';
""")

PROMPTS_INDEX = textwrap.dedent("""\
    import { logger } from '../utils/logger.js';

    export class PromptRegistry {
      private prompts = new Map<string, any>();

      private initializePrompts(): void {
        // Prompts are registered here
      }
    }
""")

SERVER_TS = "import { McpServer } from './core/mcp-server.js';\n\nnew McpServer().start();\n"
MCP_SERVER_TS = "export class McpServer {\n  start(): void {}\n}\n"


# ---------------------------------------------------------------------------
# Project fixtures
# ---------------------------------------------------------------------------


def _write(path: Path, content: str) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content, encoding="utf-8")


@pytest.fixture
def make_project(tmp_path: Path) -> Callable[..., Path]:
    """Factory building a generated MCP server project under ``tmp_path``.

    Keyword arguments override single files; pass ``None`` to leave a file
    out entirely.
    """

    def _make(
        name: str = "test-server",
        manifest: dict | None = None,
        tools_index: str | None = TOOLS_INDEX,
        resources_index: str | None = RESOURCES_INDEX,
        prompts_index: str | None = PROMPTS_INDEX,
        server: str | None = SERVER_TS,
    ) -> Path:
        root = tmp_path / name
        root.mkdir(parents=True, exist_ok=True)
        if manifest is None:
            manifest = {
                "name": name,
                "version": "1.0.0",
                "dependencies": {"@modelcontextprotocol/sdk": "^1.0.0", "zod": "^3.23.0"},
            }
        _write(root / "package.json", json.dumps(manifest, indent=2))

        src = root / "src"
        files = {
            "server.ts": server,
            "core/mcp-server.ts": MCP_SERVER_TS,
            "tools/index.ts": tools_index,
            "resources/index.ts": resources_index,
            "prompts/index.ts": prompts_index,
        }
        for relative, content in files.items():
            if content is not None:
                _write(src / relative, content)
        return root

    return _make


@pytest.fixture
def mcp_project(make_project) -> Path:
    """A valid generated project with the default registry files."""
    return make_project()


@pytest.fixture
def config() -> Config:
    """Default configuration (auto-discovery registries)."""
    return Config()


@pytest.fixture
def reporter() -> Reporter:
    """Verbose reporter writing to a throwaway console."""
    return Reporter(verbose=True, out=Console(file=io.StringIO()))


@pytest.fixture
def project_context(mcp_project: Path) -> ProjectContext:
    """A valid :class:`ProjectContext` for ``mcp_project``."""
    return ProjectContext(
        is_valid_project=True,
        project_path=mcp_project,
        source_root_path=mcp_project / "src",
        project_name="test-server",
    )
