"""Install orchestration for a single module.

Stages run in order: resolve requirements, select targets, then per target
materialize files, add packages, merge environment variables and register
files in entry files, then run hooks and record the install.
"""

import logging
from dataclasses import dataclass, field
from pathlib import Path

import click

from monolith_kit.errors import MonolithError, ResolutionError
from monolith_kit.integrations.clock import Clock
from monolith_kit.integrations.process import CommandRunner
from monolith_kit.integrations.prompt import AppChooser
from monolith_kit.io.env_file import configure_env_variables
from monolith_kit.io.registry import RegistryLoader
from monolith_kit.io.state import load_project_config, save_project_config
from monolith_kit.models.config import (
    InstalledModule,
    InstallStatus,
    ProjectConfig,
    RecordedRegistration,
)
from monolith_kit.models.install import InstallResult, InstallTarget
from monolith_kit.models.registry import ModuleDescriptor
from monolith_kit.operations.dependencies import detect_package_manager, install_dependencies
from monolith_kit.operations.hooks import run_hooks
from monolith_kit.operations.inject import PendingRegistration, register_files
from monolith_kit.operations.materialize import (
    TemplateVariables,
    materialize_file,
    read_project_name,
)
from monolith_kit.operations.resolve import resolve_dependencies
from monolith_kit.operations.targets import select_targets
from monolith_kit.output import error_line, success_line, user_output, warning_line
from monolith_kit.sources.base import TemplateSource

logger = logging.getLogger(__name__)


def project_relative(path: Path, project_root: Path) -> str:
    """Posix path of ``path`` relative to the project root.

    Paths outside the project root are returned as they are.
    """
    resolved = path.resolve()
    root = project_root.resolve()
    if resolved.is_relative_to(root):
        return resolved.relative_to(root).as_posix()
    return str(path)


@dataclass
class _InstallState:
    """Per-run accumulation beyond what InstallResult reports."""

    file_hashes: dict[str, str] = field(default_factory=dict)
    registrations: list[RecordedRegistration] = field(default_factory=list)
    target_labels: list[str] = field(default_factory=list)


class ModuleInstaller:
    """Installs registry modules into one project."""

    def __init__(
        self,
        *,
        registry: RegistryLoader,
        templates: TemplateSource,
        runner: CommandRunner,
        chooser: AppChooser,
        clock: Clock,
        project_root: Path,
        cwd: Path,
    ) -> None:
        self.registry = registry
        self.templates = templates
        self.runner = runner
        self.chooser = chooser
        self.clock = clock
        self.project_root = project_root
        self.cwd = cwd

    def install(self, module_name: str, *, skip_deps: bool = False) -> InstallResult:
        """Install a module.

        Never raises for install failures: a resolution failure stops before
        any file is written, other failures are collected into the result.
        """
        result = InstallResult(module=module_name, success=False)
        try:
            self._install(module_name, skip_deps, result)
        except MonolithError as e:
            result.errors.append(str(e))
        except Exception as e:
            logger.debug("Unexpected error installing %s", module_name, exc_info=True)
            result.errors.append(f"Unexpected error: {e}")

        result.success = not result.errors
        return result

    def _install(self, module_name: str, skip_deps: bool, result: InstallResult) -> None:
        module = self.registry.require_module(module_name)

        resolution = resolve_dependencies(module_name, self.registry.get_registry())
        if not resolution.ok:
            raise ResolutionError(module_name, resolution.missing, resolution.circular)
        logger.debug("Resolved %s: %s", module_name, resolution.satisfied)

        config = load_project_config(self.project_root)
        targets = select_targets(module, config, self.project_root, self.cwd, self.chooser)
        if not targets:
            result.errors.append(f'No install target for "{module_name}" in this project')
            return

        variables = TemplateVariables(
            module_name=module.name,
            module_version=module.version,
            project_name=read_project_name(self.project_root),
            year=self.clock.now().year,
        )
        fallback_manager = config.package_manager if config is not None else None

        state = _InstallState()
        for target in targets:
            self._install_target(
                module, target, variables, fallback_manager, skip_deps, result, state
            )

        result.warnings.extend(
            run_hooks(module.hooks.after_install, self.project_root, self.runner)
        )

        if config is not None:
            self._record(config, module, result, state)

    def _install_target(
        self,
        module: ModuleDescriptor,
        target: InstallTarget,
        variables: TemplateVariables,
        fallback_manager: str | None,
        skip_deps: bool,
        result: InstallResult,
        state: _InstallState,
    ) -> None:
        install_path = target.install_path(self.project_root)
        state.target_labels.append(target.label)
        user_output(
            f"Installing {click.style(module.name, fg='cyan')} into "
            f"{click.style(target.label, bold=True)} ({', '.join(target.kinds)})"
        )

        pending: list[PendingRegistration] = []
        for file_spec in module.files_for(target.kinds):
            operation = materialize_file(
                file_spec, install_path, module, self.templates, variables
            )
            relative = project_relative(operation.path, self.project_root)
            if operation.action == "created":
                user_output(success_line(f"Created {relative}"))
                result.installed_files.append(relative)
                if operation.sha256 is not None:
                    state.file_hashes[relative] = operation.sha256
            elif operation.action == "skipped":
                user_output(warning_line(f"Skipped {relative} (file exists)"))
            else:
                user_output(error_line(f"{relative}: {operation.error}"))
                result.errors.append(f"{relative}: {operation.error}")
                continue

            if file_spec.auto_register is not None:
                pending.append(PendingRegistration(file_spec.auto_register, operation.path))

        if not skip_deps:
            manager = detect_package_manager(install_path, self.project_root, fallback_manager)
            groups = ((module.dependencies, False), (module.dev_dependencies, True))
            for dependencies, dev in groups:
                if not dependencies:
                    continue
                installed, warnings = install_dependencies(
                    list(dependencies), install_path, self.runner, manager, dev=dev
                )
                for name in installed:
                    if name not in result.installed_deps:
                        result.installed_deps.append(name)
                result.warnings.extend(warnings)

        if module.env_variables:
            added = configure_env_variables(list(module.env_variables), install_path)
            for name in added:
                user_output(success_line(f"Added {name} to .env"))

        kinds = {item.registration.import_alias: item.registration.kind for item in pending}
        for injection in register_files(pending, install_path):
            if injection.warning is not None:
                user_output(warning_line(injection.warning))
                result.warnings.append(injection.warning)
                continue
            entry = project_relative(injection.entry_file, self.project_root)
            if injection.action == "registered":
                user_output(success_line(f"Registered {injection.alias} in {entry}"))
            state.registrations.append(
                RecordedRegistration(
                    entry_file=entry,
                    alias=injection.alias,
                    import_path=injection.import_path or "",
                    kind=kinds[injection.alias],
                    statement=injection.statement,
                )
            )

    def _record(
        self,
        config: ProjectConfig,
        module: ModuleDescriptor,
        result: InstallResult,
        state: _InstallState,
    ) -> None:
        previous = config.get_installed(module.name)
        if result.errors and not state.file_hashes and previous is None:
            return

        status: InstallStatus = "partial" if result.errors else "complete"
        files = dict(previous.files) if previous is not None else {}
        files.update(state.file_hashes)

        registrations = list(previous.registrations) if previous is not None else []
        for recorded in state.registrations:
            if not any(
                r.entry_file == recorded.entry_file and r.alias == recorded.alias
                for r in registrations
            ):
                registrations.append(recorded)

        targets = list(previous.targets) if previous is not None else []
        for label in state.target_labels:
            if label not in targets:
                targets.append(label)

        installed = InstalledModule(
            name=module.name,
            version=module.version,
            installed_at=self.clock.now().isoformat(),
            status=status,
            targets=tuple(targets),
            files=files,
            registrations=tuple(registrations),
        )
        save_project_config(self.project_root, config.upsert_module(installed))
        logger.debug("Recorded %s as %s", module.name, status)
