"""Init command for creating monolith.config.json."""

import click

from monolith_kit.context import MonolithContext
from monolith_kit.error_boundary import cli_error_boundary
from monolith_kit.io.state import create_default_config, save_project_config
from monolith_kit.models.config import (
    CONFIG_FILENAME,
    AppConfig,
    validate_app_kind,
    validate_project_type,
)
from monolith_kit.operations.dependencies import detect_package_manager
from monolith_kit.output import user_output

PACKAGE_MANAGERS = ("bun", "pnpm", "yarn", "npm")

DEFAULT_WORKSPACE_APPS = (
    AppConfig(name="api", kind="backend", path="apps/api"),
    AppConfig(name="web", kind="frontend", path="apps/web"),
)

APP_DIRECTORIES = {
    "backend": ("src/modules", "src/plugins"),
    "frontend": ("src/components",),
}

PNPM_WORKSPACE = "packages:\n  - 'packages/*'\n  - 'apps/*'\n"


def parse_app_option(value: str) -> AppConfig:
    """Parse ``name:kind[:path]``; the path defaults to ``apps/<name>``.

    Raises:
        ValueError: If the value is malformed or the kind is unknown
    """
    parts = value.split(":")
    if len(parts) not in (2, 3) or not parts[0]:
        raise ValueError(f"Invalid app '{value}', expected name:kind[:path]")
    name = parts[0]
    kind = validate_app_kind(parts[1])
    path = parts[2] if len(parts) == 3 and parts[2] else f"apps/{name}"
    return AppConfig(name=name, kind=kind, path=path)


@click.command()
@click.option(
    "--type",
    "project_type",
    type=click.Choice(["single-app", "workspace", "monorepo"]),
    default="single-app",
    show_default=True,
    help="Project layout",
)
@click.option(
    "--package-manager",
    type=click.Choice(PACKAGE_MANAGERS),
    default=None,
    help="Package manager (detected from lock files by default)",
)
@click.option(
    "--app",
    "app_values",
    multiple=True,
    help="Workspace app as name:backend|frontend[:path] (repeatable)",
)
@click.option(
    "--force",
    "-f",
    is_flag=True,
    help=f"Overwrite existing {CONFIG_FILENAME} if present",
)
@click.pass_obj
@cli_error_boundary
def init(
    ctx: MonolithContext,
    project_type: str,
    package_manager: str | None,
    app_values: tuple[str, ...],
    force: bool,
) -> None:
    """Initialize monolith.config.json in the current directory.

    A single-app project gets src/modules and src/plugins. A workspace gets
    one directory per app (api and web by default) and packages/contract.

    Examples:

        # Single Elysia app
        monolith init

        # Workspace with a custom app list
        monolith init --type workspace --app api:backend --app admin:frontend
    """
    project_dir = ctx.cwd
    config_path = project_dir / CONFIG_FILENAME

    if config_path.exists() and not force:
        user_output(f"Error: {CONFIG_FILENAME} already exists")
        user_output("Use --force to overwrite")
        raise SystemExit(1)

    resolved_type = validate_project_type(project_type)
    apps = tuple(parse_app_option(value) for value in app_values)
    if resolved_type == "single-app" and apps:
        raise ValueError("--app is only valid with --type workspace")
    if resolved_type == "workspace" and not apps:
        apps = DEFAULT_WORKSPACE_APPS

    names = [app.name for app in apps]
    duplicates = sorted({name for name in names if names.count(name) > 1})
    if duplicates:
        raise ValueError(f"Duplicate app name: {', '.join(duplicates)}")

    manager = package_manager or detect_package_manager(project_dir)

    config = create_default_config(
        project_type=resolved_type,
        package_manager=manager,
        apps=apps,
        created_at=ctx.clock.now().isoformat(),
    )
    save_project_config(project_dir, config)
    user_output(f"Created {config_path}")

    if resolved_type == "single-app":
        for directory in APP_DIRECTORIES["backend"]:
            (project_dir / directory).mkdir(parents=True, exist_ok=True)
    else:
        for app in apps:
            for directory in APP_DIRECTORIES[app.kind]:
                (project_dir / app.path / directory).mkdir(parents=True, exist_ok=True)
            user_output(f"  {app.name} ({app.kind}) -> {app.path}")
        (project_dir / "packages" / "contract" / "src").mkdir(parents=True, exist_ok=True)
        workspace_file = project_dir / "pnpm-workspace.yaml"
        if manager == "pnpm" and not workspace_file.exists():
            workspace_file.write_text(PNPM_WORKSPACE, encoding="utf-8")
            user_output(f"Created {workspace_file.name}")

    user_output("\nYou can now install modules using:")
    if apps:
        backend = next((app for app in apps if app.kind == "backend"), apps[0])
        user_output(f"  cd {backend.path} && monolith add auth")
    else:
        user_output("  monolith add auth")
