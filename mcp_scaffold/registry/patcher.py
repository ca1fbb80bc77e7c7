"""Registry and index file patching.

Wires a freshly generated component into its kind's registry file
(``src/<plural>/index.ts``) by inserting an import statement after the
import block and a registration call into ``initialize<Plural>()``.  The
edits are plain text surgery driven by regular expressions and offsets;
each one checks for its own output first, so applying the same
:class:`RegistryUpdate` again leaves the file unchanged.
"""

from __future__ import annotations

import asyncio
import re
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Optional

from mcp_scaffold.config import Config, RegistryStyle
from mcp_scaffold.project.detector import index_path
from mcp_scaffold.project.models import (
    ComponentKind,
    PatchResult,
    ProjectContext,
    RegistryKind,
    RegistryUpdate,
    kind_spec,
)
from mcp_scaffold.registry.locator import BraceRegionLocator, Region, RegionLocator
from mcp_scaffold.utils import Reporter, read_text, write_text

INDENT_UNIT = "  "

# ``import { A } from './a.js';``, ``import './side-effect.js';`` and the
# closing ``} from './b.js';`` line of a multi-line import.
_IMPORT_LINE_RE = re.compile(
    r"^[ \t]*(?P<stmt>"
    r"import\b[^\n]*?\bfrom\s*['\"][^'\"\n]+['\"][ \t]*;?"
    r"|import\s+['\"][^'\"\n]+['\"][ \t]*;?"
    r"|\}[^\n]*?\bfrom\s*['\"][^'\"\n]+['\"][ \t]*;?"
    r")[ \t]*\r?$",
    re.MULTILINE,
)

_DECLARATION_RE = re.compile(
    r"^(?:export\b|class\b|interface\b|abstract\s+class\b)",
    re.MULTILINE,
)

_EXPORT_NAME_RE = re.compile(r"export\s*\{\s*([^}]+?)\s*\}")


# ---------------------------------------------------------------------------
# Exceptions
# ---------------------------------------------------------------------------


class RegistryError(Exception):
    """Base class for fatal registry/index file errors."""

    def __init__(self, message: str, path: Path | None = None) -> None:
        self.path = path
        super().__init__(message)


class RegistryNotFoundError(RegistryError):
    """Raised when a registry file the patch targets does not exist."""


class IndexNotFoundError(RegistryError):
    """Raised when a kind's index file does not exist."""


class RegistryWriteError(RegistryError):
    """Raised when a patched file cannot be read back or written."""


# ---------------------------------------------------------------------------
# Registry layout
# ---------------------------------------------------------------------------


class StatementTerminator(str, Enum):
    """Where a new registration goes relative to the last existing call."""

    LINE = "line"
    STATEMENT = "statement"


@dataclass(frozen=True)
class RegistryLayout:
    """Fixed literals that identify the editable parts of one registry."""

    kind: RegistryKind
    method_name: str
    setter_prefix: str


def registry_layout(kind: RegistryKind | str) -> RegistryLayout:
    """Return the :class:`RegistryLayout` for *kind*, e.g. ``initializeTools``."""
    kind = RegistryKind(kind)
    plural = kind_spec(kind.value).directory
    return RegistryLayout(
        kind=kind,
        method_name=f"initialize{plural[:1].upper()}{plural[1:]}",
        setter_prefix=f"this.{plural}.set(",
    )


def terminator_for(style: RegistryStyle) -> StatementTerminator:
    if style is RegistryStyle.LEGACY:
        return StatementTerminator.LINE
    return StatementTerminator.STATEMENT


# ---------------------------------------------------------------------------
# Text surgery helpers
# ---------------------------------------------------------------------------


def _newline(text: str) -> str:
    return "\r\n" if "\r\n" in text else "\n"


def _line_start(text: str, pos: int) -> int:
    return text.rfind("\n", 0, pos) + 1


def _line_indent(text: str, pos: int) -> str:
    start = _line_start(text, pos)
    line = text[start:pos]
    return line[: len(line) - len(line.lstrip(" \t"))]


def _end_of_line(text: str, pos: int, limit: int) -> int:
    end = text.find("\n", pos, limit)
    if end == -1:
        return limit
    if end > pos and text[end - 1] == "\r":
        end -= 1
    return end


def _end_of_statement(text: str, pos: int, limit: int) -> int:
    """Offset just past the call starting at *pos*, including a trailing ``;``.

    Parentheses are balanced from the call's first ``(``, skipping quoted
    string contents and ``//`` / ``/* */`` comments.  Returns ``-1`` when the
    call does not close before *limit*.
    """
    open_index = text.find("(", pos, limit)
    if open_index == -1:
        return -1

    depth = 0
    quote: Optional[str] = None
    index = open_index
    while index < limit:
        char = text[index]
        if quote:
            if char == "\\":
                index += 2
                continue
            if char == quote:
                quote = None
        elif text.startswith("//", index):
            newline = text.find("\n", index, limit)
            index = limit if newline == -1 else newline
            continue
        elif text.startswith("/*", index):
            close = text.find("*/", index + 2, limit)
            index = limit if close == -1 else close + 2
            continue
        elif char in ("'", '"', "`"):
            quote = char
        elif char == "(":
            depth += 1
        elif char == ")":
            depth -= 1
            if depth == 0:
                end = index + 1
                lookahead = end
                while lookahead < limit and text[lookahead] in " \t":
                    lookahead += 1
                if lookahead < limit and text[lookahead] == ";":
                    return lookahead + 1
                return end
        index += 1

    return -1


def insert_import(text: str, import_line: str) -> tuple[str, bool, Optional[str]]:
    """Insert *import_line* after the last import statement.

    Without any import statement the line goes before the first top-level
    declaration.  Returns ``(text, added, warning)``.
    """
    if import_line in text:
        return text, False, None

    newline = _newline(text)
    matches = list(_IMPORT_LINE_RE.finditer(text))
    if matches:
        position = matches[-1].end("stmt")
        return text[:position] + newline + import_line + text[position:], True, None

    declaration = _DECLARATION_RE.search(text)
    if declaration:
        position = declaration.start()
        return text[:position] + import_line + newline + text[position:], True, None

    return text, False, "no import block or top-level declaration found; import not inserted"


def insert_registration(
    text: str,
    lines: list[str],
    layout: RegistryLayout,
    terminator: StatementTerminator,
    locator: RegionLocator,
) -> tuple[str, bool, Optional[str]]:
    """Insert *lines* into the body of ``layout.method_name``.

    ``lines[0]`` is the registration call and decides idempotence.  Returns
    ``(text, added, warning)``; a missing method is a warning, not an error.
    """
    region = locator.locate(text, layout.method_name)
    if region is None:
        return (
            text,
            False,
            f"{layout.method_name}() not found; registration left for auto-discovery",
        )

    body = region.body(text)
    if lines[0] in body:
        return text, False, None

    newline = _newline(text)
    last_call = body.rfind(layout.setter_prefix)
    if last_call != -1:
        call_pos = region.body_start + last_call
        end = _end_of_statement(text, call_pos, region.body_end)
        if end == -1:
            return (
                text,
                False,
                f"last {layout.setter_prefix}...) call in {layout.method_name}() is not closed; "
                "registration not inserted",
            )
        if terminator is StatementTerminator.LINE:
            end = _end_of_line(text, end, region.body_end)
        indent = _call_indent(text, call_pos, region)
        insertion = "".join(newline + indent + line for line in lines)
        return text[:end] + insertion + text[end:], True, None

    return _append_to_body(text, region, lines, newline), True, None


def _call_indent(text: str, call_pos: int, region: Region) -> str:
    line_start = _line_start(text, call_pos)
    prefix = text[line_start:call_pos]
    if line_start >= region.body_start and not prefix.strip():
        return prefix
    return _line_indent(text, region.signature_start) + INDENT_UNIT


def _append_to_body(text: str, region: Region, lines: list[str], newline: str) -> str:
    """Append *lines* before the body's trailing whitespace.

    Existing content, such as a placeholder comment, stays in front of the
    new lines.
    """
    body = region.body(text)
    content = body.rstrip()
    trailing = body[len(content):]
    method_indent = _line_indent(text, region.signature_start)

    indent = method_indent + INDENT_UNIT
    for line in reversed(content.splitlines()):
        if line.strip():
            indent = line[: len(line) - len(line.lstrip(" \t"))] or indent
            break

    if "\n" not in trailing:
        trailing = newline + method_indent

    new_body = content + "".join(newline + indent + line for line in lines) + trailing
    return text[: region.body_start] + new_body + text[region.body_end:]


# ---------------------------------------------------------------------------
# RegistryPatcher
# ---------------------------------------------------------------------------


class RegistryPatcher:
    """Applies :class:`RegistryUpdate`\\ s to a project's registry files.

    The registry style decides the insertion point and the lines inserted:

    * ``auto_discovery``: registration line only, placed after the end of
      the last ``set(...)`` statement;
    * ``legacy``: registration and initialization lines, placed after the
      end of the line on which the last ``set(...)`` call closes.

    Parentheses are balanced skipping strings and comments.  A last call that
    never closes inside the method body is reported as a warning and nothing
    is inserted.
    """

    def __init__(
        self,
        config: Config | None = None,
        reporter: Reporter | None = None,
        locator: RegionLocator | None = None,
    ) -> None:
        self.config = config or Config()
        self.reporter = reporter or Reporter(verbose=self.config.verbose)
        self.locator = locator or BraceRegionLocator()

    # -- Pure core ----------------------------------------------------------

    def patch_text(
        self,
        content: str,
        update: RegistryUpdate,
        path: Path | None = None,
    ) -> tuple[str, PatchResult]:
        """Apply *update* to registry source *content*.

        Returns:
            The patched text and a :class:`PatchResult` describing the
            changes.  Applying the same update to the returned text yields
            the same text.
        """
        layout = registry_layout(update.registry_kind)
        result = PatchResult(registry_kind=update.registry_kind, path=path)

        content, result.import_added, warning = insert_import(content, update.import_line)
        if warning:
            result.warnings.append(warning)

        lines = [update.registration_line]
        if self.config.registry_style is RegistryStyle.LEGACY and update.initialization_line:
            lines.append(update.initialization_line)

        content, result.registration_added, warning = insert_registration(
            content,
            lines,
            layout,
            terminator_for(self.config.registry_style),
            self.locator,
        )
        if warning:
            result.warnings.append(warning)

        return content, result

    # -- File operations ----------------------------------------------------

    def registry_path(self, context: ProjectContext, kind: RegistryKind | str) -> Path:
        return index_path(context.source_root_path, RegistryKind(kind).value)

    async def apply(self, context: ProjectContext, update: RegistryUpdate) -> PatchResult:
        """Patch the registry file for ``update.registry_kind`` in place.

        Raises:
            RegistryNotFoundError: If the registry file does not exist.
            RegistryWriteError: If the file cannot be read or written.
        """
        path = self.registry_path(context, update.registry_kind)
        kind = update.registry_kind.value

        if not await asyncio.to_thread(path.is_file):
            raise RegistryNotFoundError(
                f"{kind.capitalize()} registry not found: {path}", path=path
            )

        try:
            original = await asyncio.to_thread(read_text, path)
        except (OSError, UnicodeDecodeError) as exc:
            raise RegistryWriteError(f"Cannot read {kind} registry {path}: {exc}", path=path) from exc

        patched, result = self.patch_text(original, update, path=path)

        if result.import_added:
            self.reporter.debug(f"Added import to {path.name}: {update.import_line}")
        else:
            self.reporter.debug(f"Import already present in {path.name}")
        if result.registration_added:
            self.reporter.debug(f"Added registration: {update.registration_line}")
        for warning in result.warnings:
            self.reporter.warning(f"{kind} registry: {warning}")

        if patched != original:
            try:
                await asyncio.to_thread(write_text, path, patched)
            except OSError as exc:
                raise RegistryWriteError(
                    f"Failed to write {kind} registry {path}: {exc}", path=path
                ) from exc
            self.reporter.success(f"Updated {kind} registry: {path}")
        else:
            self.reporter.info(f"{kind.capitalize()} registry already up to date: {path}")

        return result

    async def apply_all(
        self, context: ProjectContext, updates: list[RegistryUpdate]
    ) -> list[PatchResult]:
        """Apply *updates* one after another; the first failure propagates."""
        results: list[PatchResult] = []
        for update in updates:
            try:
                results.append(await self.apply(context, update))
            except RegistryError as exc:
                self.reporter.error(f"Failed to update {update.registry_kind.value} registry: {exc}")
                raise
        return results

    async def update_index(
        self,
        context: ProjectContext,
        kind: ComponentKind | str,
        fragment: str,
    ) -> bool:
        """Append *fragment* (an ``export { X } from ...`` line) to the kind's index.

        Returns:
            ``True`` if the index file was changed.  Kinds without an index
            and exports that already exist are skipped.

        Raises:
            IndexNotFoundError: If the kind has an index but the file is missing.
            RegistryWriteError: If the file cannot be read or written.
        """
        kind = ComponentKind(kind)
        if not kind_spec(kind).has_index or not fragment:
            self.reporter.debug(f"Skipping index update for {kind.value} (no index file needed)")
            return False

        path = index_path(context.source_root_path, kind)
        if not await asyncio.to_thread(path.is_file):
            raise IndexNotFoundError(f"Index file not found: {path}", path=path)

        try:
            current = await asyncio.to_thread(read_text, path)
        except (OSError, UnicodeDecodeError) as exc:
            raise RegistryWriteError(f"Cannot read index file {path}: {exc}", path=path) from exc

        match = _EXPORT_NAME_RE.search(fragment)
        export_name = match.group(1).strip() if match else ""
        if export_name and re.search(rf"(?<![\w$]){re.escape(export_name)}(?![\w$])", current):
            self.reporter.warning(f"Export for {export_name} already exists in {path}")
            return False

        newline = _newline(current)
        updated = current.rstrip() + newline + fragment + newline
        try:
            await asyncio.to_thread(write_text, path, updated)
        except OSError as exc:
            raise RegistryWriteError(f"Failed to write index file {path}: {exc}", path=path) from exc

        self.reporter.success(f"Updated index file: {path}")
        return True
