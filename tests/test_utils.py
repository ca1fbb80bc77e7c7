"""Unit tests for utility functions (mcp_scaffold.utils).

Tests cover:
- split_words / normalize_whitespace
- load_json / read_text / write_text
- Reporter message capture, verbosity and markup escaping
- Rich output helpers
"""

from __future__ import annotations

import io
import json
from pathlib import Path
from unittest.mock import patch

import pytest
from rich.console import Console

from mcp_scaffold.utils import (
    Reporter,
    load_json,
    normalize_whitespace,
    print_error,
    print_success,
    print_summary_table,
    print_warning,
    read_text,
    split_words,
    write_text,
)


def _reporter(verbose: bool = False) -> tuple[Reporter, io.StringIO]:
    buffer = io.StringIO()
    return Reporter(verbose=verbose, out=Console(file=buffer, width=200)), buffer


# ---------------------------------------------------------------------------
# Name helpers
# ---------------------------------------------------------------------------


class TestSplitWords:
    @pytest.mark.unit
    @pytest.mark.parametrize(
        "name, expected",
        [
            ("weather-api", ["weather", "api"]),
            ("weather_api", ["weather", "api"]),
            ("  My  Thing ", ["My", "Thing"]),
            ("a-_-b", ["a", "b"]),
            ("---", []),
            ("", []),
        ],
    )
    def test_split(self, name, expected):
        assert split_words(name) == expected


class TestNormalizeWhitespace:
    @pytest.mark.unit
    def test_trims_and_hyphenates(self):
        assert normalize_whitespace("  my weather\tapi ") == "my-weather-api"

    @pytest.mark.unit
    def test_leaves_other_characters(self):
        assert normalize_whitespace("my_api") == "my_api"


# ---------------------------------------------------------------------------
# File helpers
# ---------------------------------------------------------------------------


class TestFileHelpers:
    @pytest.mark.unit
    def test_load_json_object(self, tmp_path: Path):
        path = tmp_path / "data.json"
        path.write_text(json.dumps({"name": "x"}), encoding="utf-8")
        assert load_json(path) == {"name": "x"}

    @pytest.mark.unit
    def test_load_json_wraps_non_object(self, tmp_path: Path):
        path = tmp_path / "list.json"
        path.write_text("[1, 2]", encoding="utf-8")
        assert load_json(path) == {"_root": [1, 2]}

    @pytest.mark.unit
    def test_load_json_missing_file(self, tmp_path: Path):
        with pytest.raises(FileNotFoundError):
            load_json(tmp_path / "missing.json")

    @pytest.mark.unit
    def test_load_json_invalid(self, tmp_path: Path):
        path = tmp_path / "bad.json"
        path.write_text("{", encoding="utf-8")
        with pytest.raises(json.JSONDecodeError):
            load_json(path)

    @pytest.mark.unit
    def test_write_text_creates_parents(self, tmp_path: Path):
        target = tmp_path / "a" / "b" / "file.ts"
        write_text(target, "export {};\n")
        assert read_text(target) == "export {};\n"


# ---------------------------------------------------------------------------
# Reporter
# ---------------------------------------------------------------------------


class TestReporter:
    @pytest.mark.unit
    def test_records_messages_by_level(self):
        reporter, _ = _reporter()
        reporter.step("one")
        reporter.success("two")
        reporter.warning("three")
        reporter.error("four")
        reporter.info("five")

        assert [level for level, _ in reporter.messages] == [
            "step", "success", "warning", "error", "info",
        ]
        assert reporter.warnings() == ["three"]

    @pytest.mark.unit
    def test_debug_hidden_unless_verbose(self):
        quiet, quiet_buffer = _reporter(verbose=False)
        quiet.debug("hidden detail")
        assert "hidden detail" not in quiet_buffer.getvalue()
        assert ("debug", "hidden detail") in quiet.messages

        loud, loud_buffer = _reporter(verbose=True)
        loud.debug("shown detail")
        assert "shown detail" in loud_buffer.getvalue()

    @pytest.mark.unit
    def test_markup_in_messages_is_escaped(self):
        reporter, buffer = _reporter()
        reporter.info("Array<[bold]>")
        assert "[bold]" in buffer.getvalue()


# ---------------------------------------------------------------------------
# Rich output helpers
# ---------------------------------------------------------------------------


class TestRichHelpers:
    @pytest.mark.unit
    def test_print_helpers(self):
        with patch("mcp_scaffold.utils.console") as mock_console:
            print_success("ok")
            print_error("bad")
            print_warning("careful")
            print_summary_table({"Created": "src/tools/weather-tool.ts"}, title="Done")

        assert mock_console.print.call_count >= 4
