"""Info command for showing one module's details."""

import click
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from monolith_kit.context import MonolithContext
from monolith_kit.error_boundary import cli_error_boundary
from monolith_kit.io.state import load_project_config
from monolith_kit.models.registry import ModuleDescriptor


def build_info_table(module: ModuleDescriptor, installed_version: str | None) -> Table:
    table = Table(show_header=False, box=None, padding=(0, 2))
    table.add_column(style="bold")
    table.add_column()

    table.add_row("Name", module.name)
    table.add_row("Version", module.version)
    if installed_version is not None:
        table.add_row("Installed", installed_version)
    table.add_row("Category", module.category or "-")
    if module.author:
        table.add_row("Author", module.author)
    if module.tags:
        table.add_row("Tags", ", ".join(module.tags))
    table.add_row("Targets", ", ".join(module.targets) or "-")
    if module.requires:
        table.add_row("Requires", ", ".join(module.requires))
    if module.dependencies:
        table.add_row("Packages", "\n".join(d.spec for d in module.dependencies))
    if module.dev_dependencies:
        table.add_row("Dev packages", "\n".join(d.spec for d in module.dev_dependencies))
    if module.env_variables:
        env_lines = []
        for variable in module.env_variables:
            marker = " (required)" if variable.required else ""
            env_lines.append(f"{variable.name}{marker}")
        table.add_row("Environment", "\n".join(env_lines))

    for kind in module.files.kinds:
        targets = [f.target_path for f in module.files.by_kind[kind]]
        table.add_row(f"Files ({kind})", "\n".join(targets))
    return table


@click.command()
@click.argument("module_name", metavar="MODULE")
@click.pass_obj
@cli_error_boundary
def info(ctx: MonolithContext, module_name: str) -> None:
    """Show details of a registry module."""
    module = ctx.registry.require_module(module_name)

    config = load_project_config(ctx.project_root)
    installed = config.get_installed(module_name) if config is not None else None
    installed_version = installed.version if installed is not None else None

    panel = Panel(
        build_info_table(module, installed_version),
        title=module.label,
        subtitle=module.description or None,
        border_style="cyan",
        padding=(1, 2),
    )
    Console(width=100).print(panel)
