"""Removal of an installed module's files and registrations."""

import logging
from dataclasses import dataclass
from pathlib import Path

from monolith_kit.models.config import InstalledModule, ProjectConfig
from monolith_kit.models.registry import Registry
from monolith_kit.operations.inject import unregister_files
from monolith_kit.operations.materialize import file_sha256

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RemovalResult:
    """Outcome of removing a module."""

    module_name: str
    removed: list[str]
    kept_modified: list[str]
    already_missing: list[str]
    entry_files_changed: list[str]


def find_dependents(module_name: str, config: ProjectConfig, registry: Registry) -> list[str]:
    """Installed modules whose registry entry requires ``module_name``."""
    dependents: list[str] = []
    for installed in config.installed_modules:
        descriptor = registry.get(installed.name)
        if descriptor is not None and module_name in descriptor.requires:
            dependents.append(installed.name)
    return dependents


def _prune_empty_dirs(start: Path, stop: Path) -> None:
    current = start
    while current != stop and current.is_relative_to(stop):
        if any(current.iterdir()):
            return
        current.rmdir()
        logger.debug("Removed empty directory %s", current)
        current = current.parent


def remove_installed_module(installed: InstalledModule, project_root: Path) -> RemovalResult:
    """Delete unmodified files of ``installed`` and unwire its registrations.

    Files whose content no longer matches the recorded hash are kept.
    The caller is responsible for dropping the module from the config.
    """
    root = project_root.resolve()
    removed: list[str] = []
    kept: list[str] = []
    missing: list[str] = []

    for relative, recorded_hash in sorted(installed.files.items()):
        path = root / relative
        if not path.exists():
            missing.append(relative)
            continue
        if file_sha256(path) != recorded_hash:
            kept.append(relative)
            continue
        path.unlink()
        removed.append(relative)
        _prune_empty_dirs(path.parent, root)

    changed = unregister_files(installed.registrations, root)
    return RemovalResult(
        module_name=installed.name,
        removed=removed,
        kept_modified=kept,
        already_missing=missing,
        entry_files_changed=[path.relative_to(root).as_posix() for path in changed],
    )
