"""Shared utility functions for mcp-scaffold.

Provides JSON and text file I/O helpers, string/name helpers and Rich-based
console reporting.  File helpers are synchronous; async callers offload them
with ``asyncio.to_thread`` so the workflow never blocks the event loop.
"""

from __future__ import annotations

import json
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from rich.console import Console
from rich.markup import escape
from rich.table import Table

console = Console()

# ---------------------------------------------------------------------------
# String / name helpers
# ---------------------------------------------------------------------------

_WORD_SPLIT_RE = re.compile(r"[-_\s]+")


def split_words(name: str) -> list[str]:
    """Split a component name into words on hyphens, underscores and whitespace.

    Examples::

        split_words("weather-api") -> ["weather", "api"]
        split_words("  My  Thing ") -> ["My", "Thing"]
        split_words("---") -> []
    """
    return [word for word in _WORD_SPLIT_RE.split(name) if word]


def normalize_whitespace(name: str) -> str:
    """Trim *name* and replace each internal whitespace run with a hyphen."""
    return re.sub(r"\s+", "-", name.strip())


# ---------------------------------------------------------------------------
# JSON / text I/O
# ---------------------------------------------------------------------------


def load_json(path: str | Path) -> dict[str, Any]:
    """Load and parse a JSON file.

    Args:
        path: Path to the JSON file.

    Returns:
        Parsed dictionary.  A non-object top level is wrapped as
        ``{"_root": data}``.

    Raises:
        FileNotFoundError: If the file does not exist.
        json.JSONDecodeError: If the file is not valid JSON.
    """
    raw = Path(path).read_text(encoding="utf-8")
    data = json.loads(raw)
    if not isinstance(data, dict):
        return {"_root": data}
    return data


def read_text(path: str | Path) -> str:
    """Read a UTF-8 text file."""
    return Path(path).read_text(encoding="utf-8")


def write_text(path: str | Path, content: str) -> None:
    """Create parent directories and write *content* as UTF-8."""
    file_path = Path(path)
    file_path.parent.mkdir(parents=True, exist_ok=True)
    file_path.write_text(content, encoding="utf-8")


# ---------------------------------------------------------------------------
# Rich output helpers
# ---------------------------------------------------------------------------


def print_summary_table(data: dict[str, str], title: str = "Summary") -> None:
    """Print a two-column key/value summary table.

    Args:
        data: Mapping of label -> value.
        title: Table title.
    """
    table = Table(title=title, show_header=True, header_style="bold cyan")
    table.add_column("Item", style="dim", no_wrap=True)
    table.add_column("Value")

    for key, value in data.items():
        table.add_row(key, str(value))

    console.print(table)
    console.print()


def print_success(message: str) -> None:
    """Print a green success message."""
    console.print(f"[bold green]{message}[/bold green]")


def print_error(message: str) -> None:
    """Print a red error message."""
    console.print(f"[bold red]{message}[/bold red]")


def print_warning(message: str) -> None:
    """Print a yellow warning message."""
    console.print(f"[bold yellow]{message}[/bold yellow]")


@dataclass
class Reporter:
    """Console reporter handed to every component.

    Holds the verbosity switch explicitly instead of reading a process-wide
    flag.  Every message is also appended to :attr:`messages` as a
    ``(level, text)`` pair so callers and tests can inspect what was reported.
    """

    verbose: bool = False
    out: Console = field(default_factory=lambda: console)
    messages: list[tuple[str, str]] = field(default_factory=list)

    def step(self, message: str) -> None:
        self.messages.append(("step", message))
        self.out.print(f"[cyan]>[/cyan] {escape(message)}")

    def success(self, message: str) -> None:
        self.messages.append(("success", message))
        self.out.print(f"  [green]+[/green] {escape(message)}")

    def info(self, message: str) -> None:
        self.messages.append(("info", message))
        self.out.print(f"  {escape(message)}")

    def warning(self, message: str) -> None:
        self.messages.append(("warning", message))
        self.out.print(f"  [bold yellow]![/bold yellow] [yellow]{escape(message)}[/yellow]")

    def error(self, message: str) -> None:
        self.messages.append(("error", message))
        self.out.print(f"[bold red]{escape(message)}[/bold red]")

    def debug(self, message: str) -> None:
        """Report a detail line; printed only in verbose mode."""
        self.messages.append(("debug", message))
        if self.verbose:
            self.out.print(f"[dim]    {escape(message)}[/dim]")

    def warnings(self) -> list[str]:
        """Return every warning reported so far."""
        return [text for level, text in self.messages if level == "warning"]
