"""Update installed modules to the registry's version.

Local modifications are detected by comparing each file against the sha256
recorded at install time. Modified files are never overwritten.
"""

import logging
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Literal

from monolith_kit.errors import SourceReadError, WriteError
from monolith_kit.integrations.clock import Clock
from monolith_kit.models.config import InstalledModule, ProjectConfig, RecordedRegistration
from monolith_kit.models.install import InstallTarget
from monolith_kit.models.registry import FileSpec, ModuleDescriptor
from monolith_kit.operations.inject import PendingRegistration, register_files
from monolith_kit.operations.install import project_relative
from monolith_kit.operations.materialize import (
    TemplateVariables,
    content_sha256,
    file_sha256,
    read_project_name,
    render_template,
    resolve_target_path,
    write_new_file,
)
from monolith_kit.sources.base import TemplateSource

logger = logging.getLogger(__name__)

FileState = Literal["unmodified", "modified", "missing", "new", "untracked"]

# States whose files are (re)written by an update.
WRITABLE_STATES: tuple[FileState, ...] = ("unmodified", "missing", "new")


@dataclass(frozen=True)
class PlannedFile:
    """One file of the new module version and what an update does to it."""

    file_spec: FileSpec
    install_path: Path
    relative_path: str
    state: FileState

    @property
    def will_write(self) -> bool:
        return self.state in WRITABLE_STATES


@dataclass(frozen=True)
class UpdateCheck:
    """Comparison of an installed module against the registry."""

    module_name: str
    current_version: str
    latest_version: str
    files: list[PlannedFile]

    @property
    def has_update(self) -> bool:
        return self.current_version != self.latest_version

    @property
    def modified_files(self) -> list[PlannedFile]:
        return [f for f in self.files if not f.will_write]


@dataclass(frozen=True)
class UpdateResult:
    """Outcome of applying an update."""

    module_name: str
    old_version: str
    new_version: str
    written: list[str]
    kept: list[str]
    errors: list[str]


def recorded_targets(
    installed: InstalledModule,
    module: ModuleDescriptor,
    config: ProjectConfig,
) -> list[InstallTarget]:
    """Rebuild the install targets of a previous install from their labels.

    Labels of apps that no longer exist in the project are dropped.
    """
    apps = {app.name: app for app in config.apps}
    targets: list[InstallTarget] = []
    for label in installed.targets or (".",):
        if label == ".":
            targets.append(InstallTarget(app=None, kinds=module.targets))
            continue
        app = apps.get(label)
        if app is None:
            logger.debug("App %s of %s no longer exists", label, installed.name)
            continue
        targets.append(InstallTarget(app=app, kinds=(app.kind,)))
    return targets


def classify_file(relative_path: str, target: Path, recorded_hash: str | None) -> FileState:
    """Compare a file on disk with its recorded hash."""
    if recorded_hash is None:
        return "untracked" if target.exists() else "new"
    if not target.exists():
        return "missing"
    if file_sha256(target) == recorded_hash:
        return "unmodified"
    logger.debug("Local changes in %s", relative_path)
    return "modified"


def check_for_updates(
    installed: InstalledModule,
    module: ModuleDescriptor,
    config: ProjectConfig,
    project_root: Path,
) -> UpdateCheck:
    """Plan what updating ``installed`` to ``module`` would write."""
    planned: list[PlannedFile] = []
    for target in recorded_targets(installed, module, config):
        install_path = target.install_path(project_root)
        for file_spec in module.files_for(target.kinds):
            path = resolve_target_path(install_path, file_spec.target_path)
            relative = project_relative(path, project_root)
            state = classify_file(relative, path, installed.files.get(relative))
            planned.append(PlannedFile(file_spec, install_path, relative, state))

    return UpdateCheck(
        module_name=installed.name,
        current_version=installed.version,
        latest_version=module.version,
        files=planned,
    )


def apply_update(
    check: UpdateCheck,
    installed: InstalledModule,
    module: ModuleDescriptor,
    project_root: Path,
    templates: TemplateSource,
    clock: Clock,
) -> tuple[UpdateResult, InstalledModule]:
    """Rewrite unmodified, missing and new files with the new version.

    Returns:
        Tuple of (update result, installed record to save)
    """
    variables = TemplateVariables(
        module_name=module.name,
        module_version=module.version,
        project_name=read_project_name(project_root),
        year=clock.now().year,
    )

    files = dict(installed.files)
    written: list[str] = []
    kept: list[str] = []
    errors: list[str] = []
    pending: dict[Path, list[PendingRegistration]] = {}

    for planned in check.files:
        target = project_root / planned.relative_path
        if not planned.will_write:
            kept.append(planned.relative_path)
            continue
        try:
            content = templates.read(planned.file_spec.source_path)
            rendered = render_template(content, module, variables)
            write_new_file(target, rendered)
        except (SourceReadError, WriteError) as e:
            errors.append(f"{planned.relative_path}: {e}")
            continue

        files[planned.relative_path] = content_sha256(rendered)
        written.append(planned.relative_path)
        if planned.file_spec.auto_register is not None:
            pending.setdefault(planned.install_path, []).append(
                PendingRegistration(planned.file_spec.auto_register, target)
            )

    registrations = list(installed.registrations)
    for install_path, items in pending.items():
        kinds = {item.registration.import_alias: item.registration.kind for item in items}
        for injection in register_files(items, install_path):
            if injection.warning is not None or injection.import_path is None:
                continue
            entry = project_relative(injection.entry_file, project_root)
            if any(r.entry_file == entry and r.alias == injection.alias for r in registrations):
                continue
            registrations.append(
                RecordedRegistration(
                    entry_file=entry,
                    alias=injection.alias,
                    import_path=injection.import_path,
                    kind=kinds[injection.alias],
                    statement=injection.statement,
                )
            )

    updated = replace(
        installed,
        version=module.version,
        installed_at=clock.now().isoformat(),
        status="partial" if errors else installed.status,
        files=files,
        registrations=tuple(registrations),
    )
    result = UpdateResult(
        module_name=module.name,
        old_version=installed.version,
        new_version=module.version,
        written=written,
        kept=kept,
        errors=errors,
    )
    return result, updated
