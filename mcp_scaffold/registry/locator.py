"""Locating editable code regions in registry source text.

The patcher never parses TypeScript.  It asks a :class:`RegionLocator` for the
character span of a method body and edits inside that span.  The shipped
:class:`BraceRegionLocator` finds the method signature with a regular
expression and then scans braces to the matching close.

Known limitation: braces inside string literals or comments within the body
are counted like code braces, so an unbalanced brace in such text shifts the
detected end of the body.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Optional, Protocol


@dataclass(frozen=True)
class Region:
    """Span of a method body inside a source text.

    ``body_start`` is the offset just after the opening brace and
    ``body_end`` the offset of the matching closing brace, so
    ``text[body_start:body_end]`` is the body without its braces.
    """

    signature_start: int
    body_start: int
    body_end: int

    def body(self, text: str) -> str:
        return text[self.body_start:self.body_end]


class RegionLocator(Protocol):
    """Finds the body of a named, parameterless method."""

    def locate(self, text: str, method_name: str) -> Optional[Region]:
        ...


def method_signature_pattern(method_name: str) -> re.Pattern[str]:
    """Regex matching ``[modifiers] <method_name>()[: ReturnType] {``.

    Accepts an optional access modifier, ``static``/``async`` keywords and a
    return-type annotation, e.g. ``private initializeTools(): void {`` or a
    bare ``initializeTools(){``.
    """
    return re.compile(
        r"(?:\b(?:private|protected|public)\s+)?"
        r"(?:\bstatic\s+)?"
        r"(?:\basync\s+)?"
        rf"\b{re.escape(method_name)}\s*\(\s*\)"
        r"(?:\s*:\s*[\w.<>\[\]|,\s]+?)?"
        r"\s*\{"
    )


def find_matching_brace(text: str, open_index: int) -> int:
    """Return the index of the brace closing the one at *open_index*.

    Returns ``-1`` when the braces never balance.
    """
    depth = 0
    for index in range(open_index, len(text)):
        char = text[index]
        if char == "{":
            depth += 1
        elif char == "}":
            depth -= 1
            if depth == 0:
                return index
    return -1


class BraceRegionLocator:
    """Literal-text locator: signature regex plus brace counting."""

    def locate(self, text: str, method_name: str) -> Optional[Region]:
        match = method_signature_pattern(method_name).search(text)
        if match is None:
            return None
        open_index = match.end() - 1
        close_index = find_matching_brace(text, open_index)
        if close_index == -1:
            return None
        return Region(
            signature_start=match.start(),
            body_start=open_index + 1,
            body_end=close_index,
        )
