"""Registry patching, method-body location and backup/restore.

Quick usage::

    from mcp_scaffold.registry import BackupManager, RegistryPatcher

    snapshot = await BackupManager(config, reporter).backup(context)
    results = await RegistryPatcher(config, reporter).apply_all(context, [update])
"""

from mcp_scaffold.registry.backup import BackupError, BackupManager
from mcp_scaffold.registry.locator import BraceRegionLocator, Region, RegionLocator
from mcp_scaffold.registry.patcher import (
    IndexNotFoundError,
    RegistryError,
    RegistryNotFoundError,
    RegistryPatcher,
    RegistryWriteError,
    StatementTerminator,
    registry_layout,
)

__all__ = [
    "BackupError",
    "BackupManager",
    "BraceRegionLocator",
    "IndexNotFoundError",
    "Region",
    "RegionLocator",
    "RegistryError",
    "RegistryNotFoundError",
    "RegistryPatcher",
    "RegistryWriteError",
    "StatementTerminator",
    "registry_layout",
]
