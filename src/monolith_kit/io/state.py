"""State file I/O for monolith.config.json."""

import json
import logging
from pathlib import Path
from typing import Any

from monolith_kit.errors import ProjectConfigError
from monolith_kit.models.config import (
    CONFIG_FILENAME,
    AppConfig,
    InstalledModule,
    ProjectConfig,
    ProjectType,
    RecordedRegistration,
    validate_app_kind,
    validate_project_type,
)

logger = logging.getLogger(__name__)

_KNOWN_KEYS = {
    "projectType",
    "packageManager",
    "apps",
    "installedModules",
    "modules",
    "createdAt",
}


def find_project_root(start: Path) -> Path:
    """Walk up from ``start`` to the directory holding monolith.config.json.

    Returns ``start`` itself when no config file is found.
    """
    current = start.resolve()
    for candidate in (current, *current.parents):
        if (candidate / CONFIG_FILENAME).exists():
            return candidate
    return current


def load_project_config(project_dir: Path) -> ProjectConfig | None:
    """Load monolith.config.json from project directory.

    Returns None if file doesn't exist.

    Raises:
        ProjectConfigError: If the file is not valid JSON or has invalid fields
    """
    config_path = project_dir / CONFIG_FILENAME
    if not config_path.exists():
        return None

    try:
        data = json.loads(config_path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as e:
        raise ProjectConfigError(f"Invalid JSON in {config_path}: {e}") from e
    if not isinstance(data, dict):
        raise ProjectConfigError(f"{config_path} must contain a JSON object")

    try:
        return _parse_project_config(data)
    except (KeyError, TypeError, ValueError) as e:
        raise ProjectConfigError(f"Invalid {config_path}: {e}") from e


def save_project_config(project_dir: Path, config: ProjectConfig) -> None:
    """Save monolith.config.json to project directory atomically."""
    config_path = project_dir / CONFIG_FILENAME

    data: dict[str, Any] = {
        "projectType": config.project_type,
        "packageManager": config.package_manager,
        "apps": [{"name": app.name, "type": app.kind, "path": app.path} for app in config.apps],
        "installedModules": [_serialize_module(m) for m in config.installed_modules],
    }
    if config.created_at is not None:
        data["createdAt"] = config.created_at
    for key, value in config.extra.items():
        data.setdefault(key, value)

    temp_path = config_path.with_suffix(".json.tmp")
    with temp_path.open("w", encoding="utf-8") as f:
        json.dump(data, f, indent=2)
        f.write("\n")
    temp_path.replace(config_path)
    logger.debug("Saved %s", config_path)


def create_default_config(
    project_type: ProjectType = "single-app",
    package_manager: str | None = None,
    apps: tuple[AppConfig, ...] = (),
    created_at: str | None = None,
) -> ProjectConfig:
    """Create a project configuration with no installed modules."""
    return ProjectConfig(
        project_type=project_type,
        package_manager=package_manager,
        apps=apps,
        installed_modules=(),
        created_at=created_at,
    )


def _parse_project_config(data: dict[str, Any]) -> ProjectConfig:
    apps = tuple(
        AppConfig(
            name=app_data["name"],
            kind=validate_app_kind(app_data.get("type") or app_data["kind"]),
            path=app_data.get("path") or app_data["name"],
        )
        for app_data in data.get("apps") or []
    )

    modules_data = data.get("installedModules")
    if modules_data is None:
        modules_data = data.get("modules") or []
    installed = tuple(_parse_module(m) for m in modules_data)

    return ProjectConfig(
        project_type=validate_project_type(data.get("projectType", "single-app")),
        package_manager=data.get("packageManager"),
        apps=apps,
        installed_modules=installed,
        created_at=data.get("createdAt"),
        extra={k: v for k, v in data.items() if k not in _KNOWN_KEYS},
    )


def _parse_module(module_data: dict[str, Any]) -> InstalledModule:
    status = module_data.get("status", "complete")
    if status not in ("complete", "partial"):
        raise ValueError(f"Invalid status for module {module_data.get('name')}: {status}")
    registrations = tuple(
        RecordedRegistration(
            entry_file=r["entryFile"],
            alias=r["alias"],
            import_path=r["importPath"],
            kind=r["kind"],
            statement=r.get("statement"),
        )
        for r in module_data.get("registrations") or []
    )
    return InstalledModule(
        name=module_data["name"],
        version=module_data.get("version", "unknown"),
        installed_at=module_data.get("installedAt", ""),
        status=status,
        targets=tuple(module_data.get("targets") or ()),
        files=dict(module_data.get("files") or {}),
        registrations=registrations,
    )


def _serialize_module(module: InstalledModule) -> dict[str, Any]:
    registrations = []
    for r in module.registrations:
        entry: dict[str, Any] = {
            "entryFile": r.entry_file,
            "alias": r.alias,
            "importPath": r.import_path,
            "kind": r.kind,
        }
        if r.statement is not None:
            entry["statement"] = r.statement
        registrations.append(entry)
    return {
        "name": module.name,
        "version": module.version,
        "installedAt": module.installed_at,
        "status": module.status,
        "targets": list(module.targets),
        "files": dict(sorted(module.files.items())),
        "registrations": registrations,
    }
