"""Exception types raised by the installation engine.

Only ResolutionError (and errors loading the registry or project config) stop
a module install. The remaining kinds are collected into InstallResult as
per-file errors or warnings.
"""


class MonolithError(Exception):
    """Base class for all monolith-kit errors."""


class RegistryError(MonolithError):
    """Registry could not be loaded or parsed."""


class ModuleNotFoundInRegistryError(MonolithError):
    """Requested module is not in the registry."""

    def __init__(self, module_name: str) -> None:
        super().__init__(f'Module "{module_name}" not found in registry')
        self.module_name = module_name


class ResolutionError(MonolithError):
    """Missing or circular module requirements."""

    def __init__(self, module_name: str, missing: list[str], circular: list[str]) -> None:
        parts: list[str] = []
        if missing:
            parts.append(f"missing dependency: {', '.join(missing)}")
        if circular:
            parts.append(f"circular dependency: {' -> '.join(circular)}")
        super().__init__(f'Cannot install "{module_name}": ' + "; ".join(parts))
        self.module_name = module_name
        self.missing = missing
        self.circular = circular


class ProjectConfigError(MonolithError):
    """monolith.config.json is malformed."""


class SourceReadError(MonolithError):
    """Template source could not be read or fetched."""


class WriteError(MonolithError):
    """Target file or directory could not be written."""


class PackageInstallError(MonolithError):
    """Package manager failed to add a dependency."""


class InjectionMarkerNotFound(MonolithError):
    """Entry file has no anchor comment for a registration."""


class HookExecutionError(MonolithError):
    """Post-install hook command failed."""
