"""Tests for registry snapshots (mcp_scaffold.registry.backup)."""

from __future__ import annotations

import re
from pathlib import Path
from unittest.mock import patch

import pytest

from mcp_scaffold.config import Config
from mcp_scaffold.registry.backup import BackupError, BackupManager, _timestamp


def _registry_files(source_root: Path) -> dict[Path, str]:
    return {
        path: path.read_text(encoding="utf-8")
        for path in sorted(source_root.glob("*/index.ts"))
    }


class TestTimestamp:
    @pytest.mark.unit
    def test_is_filesystem_safe(self):
        stamp = _timestamp()
        assert re.fullmatch(r"\d{4}-\d{2}-\d{2}T\d{2}-\d{2}-\d{2}-\d{3}Z", stamp)


class TestBackup:
    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_copies_every_registry(self, project_context, reporter):
        snapshot = await BackupManager(Config(), reporter).backup(project_context)

        assert snapshot.backup_dir.parent == project_context.project_path / ".mcp-backups"
        assert snapshot.timestamp == snapshot.backup_dir.name
        assert len(snapshot.entries) == 3
        for entry in snapshot.entries:
            relative = entry.original_path.relative_to(project_context.source_root_path)
            assert entry.backup_path == snapshot.backup_dir / relative
            assert entry.backup_path.read_bytes() == entry.original_path.read_bytes()

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_skips_missing_registry(self, project_context, reporter):
        (project_context.source_root_path / "prompts" / "index.ts").unlink()

        snapshot = await BackupManager(Config(), reporter).backup(project_context)

        kinds = {entry.original_path.parent.name for entry in snapshot.entries}
        assert kinds == {"tools", "resources"}

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_distinct_directories_for_same_timestamp(self, project_context, reporter):
        manager = BackupManager(Config(), reporter)
        with patch("mcp_scaffold.registry.backup._timestamp", return_value="2026-01-15T10-30-00-123Z"):
            first = await manager.backup(project_context)
            second = await manager.backup(project_context)

        assert first.backup_dir != second.backup_dir
        assert second.backup_dir.name == "2026-01-15T10-30-00-123Z-1"

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_custom_backup_dir(self, project_context, reporter):
        snapshot = await BackupManager(Config(backup_dir="snapshots"), reporter).backup(project_context)
        assert snapshot.backup_dir.parent == project_context.project_path / "snapshots"

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_copy_failure_raises_backup_error(self, project_context, reporter):
        with patch("mcp_scaffold.registry.backup.shutil.copy2", side_effect=OSError("disk full")):
            with pytest.raises(BackupError, match="disk full"):
                await BackupManager(Config(), reporter).backup(project_context)


class TestRestore:
    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_round_trip_is_byte_identical(self, project_context, reporter):
        source_root = project_context.source_root_path
        before = _registry_files(source_root)
        manager = BackupManager(Config(), reporter)

        snapshot = await manager.backup(project_context)
        restored = await manager.restore(project_context, snapshot)

        assert sorted(restored) == sorted(before)
        assert _registry_files(source_root) == before

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_restore_overwrites_changes(self, project_context, reporter):
        tools = project_context.source_root_path / "tools" / "index.ts"
        original = tools.read_text(encoding="utf-8")
        manager = BackupManager(Config(), reporter)

        snapshot = await manager.backup(project_context)
        tools.write_text("// corrupted\n", encoding="utf-8")
        await manager.restore(project_context, snapshot)

        assert tools.read_text(encoding="utf-8") == original

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_restore_leaves_other_files(self, project_context, reporter):
        manager = BackupManager(Config(), reporter)
        snapshot = await manager.backup(project_context)
        component = project_context.source_root_path / "tools" / "weather-tool.ts"
        component.write_text("export class WeatherTool {}\n", encoding="utf-8")

        await manager.restore(project_context, snapshot)

        assert component.exists()

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_missing_backup_copy_raises(self, project_context, reporter):
        manager = BackupManager(Config(), reporter)
        snapshot = await manager.backup(project_context)
        snapshot.entries[0].backup_path.unlink()

        with pytest.raises(BackupError, match="Backup copy missing"):
            await manager.restore(project_context, snapshot)
