"""List command for showing registry modules."""

import click

from monolith_kit.context import MonolithContext
from monolith_kit.error_boundary import cli_error_boundary
from monolith_kit.models.registry import ModuleDescriptor
from monolith_kit.output import machine_output, user_output

CATEGORY_COLORS = {
    "core": "blue",
    "auth": "green",
    "database": "magenta",
    "api": "cyan",
    "ui": "yellow",
}


def group_by_category(modules: dict[str, ModuleDescriptor]) -> dict[str, list[ModuleDescriptor]]:
    """Group modules by category, modules without one under ``other``."""
    groups: dict[str, list[ModuleDescriptor]] = {}
    for module in modules.values():
        groups.setdefault(module.category or "other", []).append(module)
    return dict(sorted(groups.items()))


@click.command(name="list")
@click.option("--category", "-c", default=None, help="Only show modules of this category")
@click.option("--search", "-s", default=None, help="Search names, descriptions and tags")
@click.pass_obj
@cli_error_boundary
def list_modules(ctx: MonolithContext, category: str | None, search: str | None) -> None:
    """List modules available in the registry."""
    if search:
        modules = ctx.registry.search_modules(search)
    elif category:
        modules = ctx.registry.modules_by_category(category)
    else:
        modules = ctx.registry.list_modules()

    if not modules:
        user_output("No modules found")
        return

    for group, items in group_by_category(modules).items():
        color = CATEGORY_COLORS.get(group, "white")
        header = click.style(f"● {group.upper()}", fg=color, bold=True)
        machine_output(f"{header} ({len(items)} modules)")
        for module in items:
            tags = " ".join(f"#{tag}" for tag in module.tags)
            line = f"  {click.style(module.name.ljust(12), fg='cyan')} {module.description}"
            if tags:
                line += " " + click.style(tags, dim=True)
            machine_output(line)
        machine_output()

    user_output("Use 'monolith add <module>' to install a module")
    user_output("Use 'monolith info <module>' for details")
