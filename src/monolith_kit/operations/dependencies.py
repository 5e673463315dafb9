"""Package manager detection and dependency installation."""

import logging
from pathlib import Path

from monolith_kit.errors import PackageInstallError
from monolith_kit.integrations.process import CommandRunner
from monolith_kit.models.registry import Dependency
from monolith_kit.output import success_line, user_output, warning_line

logger = logging.getLogger(__name__)

DEFAULT_PACKAGE_MANAGER = "bun"

# Checked in order; the first lock file found decides the manager.
LOCK_FILES: tuple[tuple[str, str], ...] = (
    ("bun.lockb", "bun"),
    ("bun.lock", "bun"),
    ("pnpm-lock.yaml", "pnpm"),
    ("yarn.lock", "yarn"),
    ("package-lock.json", "npm"),
)


def detect_package_manager(
    work_dir: Path,
    project_root: Path | None = None,
    fallback: str | None = None,
) -> str:
    """Detect the package manager from lock files.

    ``work_dir`` is checked before ``project_root`` because workspaces keep
    a single lock file at the root.

    Args:
        work_dir: Directory the dependencies are added in
        project_root: Workspace root, checked after ``work_dir``
        fallback: Manager to use when no lock file exists (e.g. from
            monolith.config.json); defaults to bun
    """
    search_dirs = [work_dir]
    if project_root is not None and project_root != work_dir:
        search_dirs.append(project_root)

    for directory in search_dirs:
        for lock_file, manager in LOCK_FILES:
            if (directory / lock_file).exists():
                logger.debug("Found %s in %s, using %s", lock_file, directory, manager)
                return manager

    if fallback:
        return fallback
    return DEFAULT_PACKAGE_MANAGER


def build_add_command(package_manager: str, dependency: Dependency, *, dev: bool) -> list[str]:
    cmd = [package_manager, "add"]
    if dev:
        cmd.append("-D")
    cmd.append(dependency.spec)
    return cmd


def install_dependencies(
    dependencies: list[Dependency],
    work_dir: Path,
    runner: CommandRunner,
    package_manager: str,
    *,
    dev: bool = False,
) -> tuple[list[str], list[str]]:
    """Add each dependency with the package manager, in declaration order.

    A failing dependency is reported and skipped; the rest are still added.

    Returns:
        Tuple of (installed package names, warning messages)
    """
    installed: list[str] = []
    warnings: list[str] = []

    for dependency in dependencies:
        cmd = build_add_command(package_manager, dependency, dev=dev)
        try:
            runner.run(cmd, work_dir, f"add {dependency.spec}")
        except RuntimeError as e:
            failure = PackageInstallError(f"Could not install {dependency.name}: {e}")
            logger.debug("Package install failed: %s", failure)
            summary = str(failure).splitlines()[0]
            user_output(warning_line(summary))
            warnings.append(summary)
            continue

        user_output(success_line(dependency.spec))
        installed.append(dependency.name)

    return installed, warnings
