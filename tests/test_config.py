"""Unit tests for configuration (mcp_scaffold.config).

Tests cover:
- Config defaults
- Derived paths (source root, manifest, backup root)
- save / load JSON round trip
- from_env overrides and author fallback
"""

from __future__ import annotations

from pathlib import Path

import pytest
from pydantic import ValidationError

from mcp_scaffold.config import Config, RegistryStyle


_ENV_VARS = (
    "MCP_SCAFFOLD_SOURCE_DIR",
    "MCP_SCAFFOLD_BACKUP_DIR",
    "MCP_SCAFFOLD_REGISTRY_STYLE",
    "MCP_SCAFFOLD_VERBOSE",
    "MCP_SCAFFOLD_AUTHOR",
    "USER",
    "USERNAME",
)


@pytest.fixture
def clean_env(monkeypatch):
    for name in _ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    return monkeypatch


class TestConfigDefaults:
    @pytest.mark.unit
    def test_defaults(self):
        config = Config()
        assert config.source_dir == "src"
        assert config.manifest_name == "package.json"
        assert config.framework_dependency == "@modelcontextprotocol/sdk"
        assert config.backup_dir == ".mcp-backups"
        assert config.registry_style is RegistryStyle.AUTO_DISCOVERY
        assert config.verbose is False
        assert config.max_name_length == 50

    @pytest.mark.unit
    def test_registry_style_accepts_string(self):
        config = Config(registry_style="legacy")
        assert config.registry_style is RegistryStyle.LEGACY

    @pytest.mark.unit
    def test_rejects_unknown_registry_style(self):
        with pytest.raises(ValidationError):
            Config(registry_style="magic")

    @pytest.mark.unit
    def test_rejects_non_positive_name_length(self):
        with pytest.raises(ValidationError):
            Config(max_name_length=0)


class TestDerivedPaths:
    @pytest.mark.unit
    def test_paths_are_relative_to_project(self, tmp_path: Path):
        config = Config(source_dir="lib", backup_dir="backups")
        assert config.source_root(tmp_path) == tmp_path / "lib"
        assert config.manifest_path(tmp_path) == tmp_path / "package.json"
        assert config.backup_root(tmp_path) == tmp_path / "backups"


class TestSaveLoad:
    @pytest.mark.unit
    def test_round_trip(self, tmp_path: Path):
        original = Config(registry_style=RegistryStyle.LEGACY, default_author="Ada")
        path = original.save(tmp_path / "nested" / "config.json")

        assert path.exists()
        loaded = Config.load(path)
        assert loaded == original

    @pytest.mark.unit
    def test_load_invalid_json_raises(self, tmp_path: Path):
        path = tmp_path / "config.json"
        path.write_text("{not json", encoding="utf-8")
        with pytest.raises(ValueError):
            Config.load(path)


class TestFromEnv:
    @pytest.mark.unit
    def test_no_env_gives_defaults(self, clean_env):
        config = Config.from_env()
        assert config.source_dir == "src"
        assert config.default_author == "MCP Developer"
        assert config.verbose is False

    @pytest.mark.unit
    def test_overrides(self, clean_env):
        clean_env.setenv("MCP_SCAFFOLD_SOURCE_DIR", "app")
        clean_env.setenv("MCP_SCAFFOLD_BACKUP_DIR", ".bk")
        clean_env.setenv("MCP_SCAFFOLD_REGISTRY_STYLE", "legacy")
        clean_env.setenv("MCP_SCAFFOLD_VERBOSE", "yes")
        clean_env.setenv("MCP_SCAFFOLD_AUTHOR", "Grace")

        config = Config.from_env()
        assert config.source_dir == "app"
        assert config.backup_dir == ".bk"
        assert config.registry_style is RegistryStyle.LEGACY
        assert config.verbose is True
        assert config.default_author == "Grace"

    @pytest.mark.unit
    def test_author_falls_back_to_user(self, clean_env):
        clean_env.setenv("USER", "linus")
        assert Config.from_env().default_author == "linus"

    @pytest.mark.unit
    def test_invalid_registry_style_raises(self, clean_env):
        clean_env.setenv("MCP_SCAFFOLD_REGISTRY_STYLE", "sideways")
        with pytest.raises(ValueError):
            Config.from_env()
