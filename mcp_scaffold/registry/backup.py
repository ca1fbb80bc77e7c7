"""Snapshot and restore of registry files around a patch.

Before any registry is touched the workflow copies every existing registry
file into ``<project>/.mcp-backups/<timestamp>/``, preserving its path relative
to the source root.  Snapshots are left on disk as an audit trail; this
module never deletes them.
"""

from __future__ import annotations

import asyncio
import shutil
from datetime import datetime, timezone
from pathlib import Path

from mcp_scaffold.config import Config
from mcp_scaffold.project.detector import index_path
from mcp_scaffold.project.models import (
    BackupEntry,
    BackupSnapshot,
    ProjectContext,
    RegistryKind,
)
from mcp_scaffold.utils import Reporter


class BackupError(Exception):
    """Raised when a snapshot cannot be written or restored."""

    def __init__(self, message: str, path: Path | None = None) -> None:
        self.path = path
        super().__init__(message)


def _timestamp() -> str:
    """UTC ISO timestamp that is safe as a directory name.

    ``2026-01-15T10:30:00.123Z`` becomes ``2026-01-15T10-30-00-123Z``.
    """
    now = datetime.now(timezone.utc)
    iso = now.strftime("%Y-%m-%dT%H:%M:%S") + f".{now.microsecond // 1000:03d}Z"
    return iso.replace(":", "-").replace(".", "-")


def _copy_file(source: Path, target: Path) -> None:
    target.parent.mkdir(parents=True, exist_ok=True)
    shutil.copy2(source, target)


def _make_unique_dir(root: Path, name: str) -> Path:
    """Create ``root/name`` (or ``root/name-N``) and return it."""
    root.mkdir(parents=True, exist_ok=True)
    candidate = root / name
    counter = 1
    while True:
        try:
            candidate.mkdir()
            return candidate
        except FileExistsError:
            candidate = root / f"{name}-{counter}"
            counter += 1


class BackupManager:
    """Creates and restores :class:`BackupSnapshot`\\ s of registry files."""

    def __init__(self, config: Config | None = None, reporter: Reporter | None = None) -> None:
        self.config = config or Config()
        self.reporter = reporter or Reporter(verbose=self.config.verbose)

    def tracked_files(self, context: ProjectContext) -> list[Path]:
        """Registry files that a snapshot covers, in a fixed order."""
        return [index_path(context.source_root_path, kind.value) for kind in RegistryKind]

    async def backup(self, context: ProjectContext) -> BackupSnapshot:
        """Copy every existing registry file into a fresh timestamped directory.

        Registry files that do not exist are skipped.

        Raises:
            BackupError: If the backup directory or a copy cannot be written.
        """
        timestamp = _timestamp()
        root = self.config.backup_root(context.project_path)

        try:
            backup_dir = await asyncio.to_thread(_make_unique_dir, root, timestamp)
        except OSError as exc:
            raise BackupError(f"Cannot create backup directory under {root}: {exc}", path=root) from exc

        snapshot = BackupSnapshot(
            timestamp=backup_dir.name,
            project_path=context.project_path,
            backup_dir=backup_dir,
        )

        for original in self.tracked_files(context):
            if not await asyncio.to_thread(original.is_file):
                self.reporter.debug(f"Not backed up (missing): {original}")
                continue

            relative = original.relative_to(context.source_root_path)
            target = backup_dir / relative
            try:
                await asyncio.to_thread(_copy_file, original, target)
            except OSError as exc:
                raise BackupError(f"Failed to back up {original}: {exc}", path=original) from exc

            snapshot.entries.append(BackupEntry(original_path=original, backup_path=target))
            self.reporter.debug(f"Backed up {relative} -> {target}")

        self.reporter.debug(f"Created backup at: {backup_dir}")
        return snapshot

    async def restore(self, context: ProjectContext, snapshot: BackupSnapshot) -> list[Path]:
        """Copy every backed-up file back over its original path.

        The current content of each original is overwritten unconditionally.
        Files not recorded in the snapshot (such as a newly written component)
        are left alone.

        Returns:
            The restored original paths.

        Raises:
            BackupError: If a backup copy is missing or cannot be copied back.
        """
        restored: list[Path] = []
        for entry in snapshot.entries:
            if not await asyncio.to_thread(entry.backup_path.is_file):
                raise BackupError(f"Backup copy missing: {entry.backup_path}", path=entry.backup_path)
            try:
                await asyncio.to_thread(_copy_file, entry.backup_path, entry.original_path)
            except OSError as exc:
                raise BackupError(
                    f"Failed to restore {entry.original_path}: {exc}", path=entry.original_path
                ) from exc
            restored.append(entry.original_path)
            self.reporter.info(f"Restored: {entry.original_path}")
        return restored
