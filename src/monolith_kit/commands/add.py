"""Add command for installing modules into the project."""

import click
from rich.console import Console
from rich.panel import Panel
from rich.text import Text

from monolith_kit.context import MonolithContext
from monolith_kit.error_boundary import cli_error_boundary
from monolith_kit.io.state import load_project_config
from monolith_kit.models.install import InstallResult
from monolith_kit.operations.resolve import install_order
from monolith_kit.output import user_output


def format_install_summary(results: list[InstallResult]) -> Panel:
    """Format the final summary box of an add run."""
    overall_success = all(r.success for r in results)
    lines: list[Text] = []

    for result in results:
        if result.success:
            lines.append(Text(f"✓ {result.module}", style="green bold"))
        else:
            lines.append(Text(f"✗ {result.module}", style="red bold"))
        lines.append(Text(f"  Files created: {len(result.installed_files)}"))
        deps = ", ".join(result.installed_deps) if result.installed_deps else "none"
        lines.append(Text(f"  Packages added: {deps}"))
        for warning in result.warnings:
            lines.append(Text(f"  ! {warning}", style="yellow"))
        for error in result.errors:
            lines.append(Text(f"  {error}", style="red"))

    title = "Install Complete" if overall_success else "Install Failed"
    return Panel(
        Text("\n").join(lines),
        title=title,
        border_style="green" if overall_success else "red",
        padding=(1, 2),
    )


def _modules_to_install(ctx: MonolithContext, requested: tuple[str, ...]) -> list[str]:
    """Requested modules preceded by required modules not yet installed.

    Required modules are only added when the project has a config to tell
    what is installed; the user confirms unless ``--yes`` was given.
    """
    config = load_project_config(ctx.project_root)
    registry = ctx.registry.get_registry()

    ordered: list[str] = []
    for name in requested:
        if registry.get(name) is None:
            # Reported by the installer
            if name not in ordered:
                ordered.append(name)
            continue
        required = [m for m in install_order(name, registry) if m != name]
        missing = [
            m
            for m in required
            if config is not None and config.get_installed(m) is None and m not in ordered
        ]
        if missing:
            user_output(
                f"{click.style(name, fg='cyan')} requires modules that are not installed: "
                + ", ".join(click.style(m, fg="yellow") for m in missing)
            )
            if not ctx.assume_yes and not click.confirm(
                "Install them first?", default=True, err=True
            ):
                user_output("Install cancelled")
                raise SystemExit(1)
            ordered.extend(missing)
        if name not in ordered:
            ordered.append(name)
    return ordered


@click.command()
@click.argument("modules", nargs=-1, required=True)
@click.option("--skip-deps", is_flag=True, help="Do not add package dependencies")
@click.pass_obj
@cli_error_boundary
def add(ctx: MonolithContext, modules: tuple[str, ...], skip_deps: bool) -> None:
    """Install one or more modules into the current project.

    Examples:

        # Install the auth module
        monolith add auth

        # Install without running the package manager
        monolith add auth --skip-deps
    """
    names = _modules_to_install(ctx, modules)
    installer = ctx.installer()

    results: list[InstallResult] = []
    for name in names:
        results.append(installer.install(name, skip_deps=skip_deps))
        user_output()

    Console(stderr=True).print(format_install_summary(results))

    if not all(r.success for r in results):
        raise SystemExit(1)
