"""Remove command for uninstalling modules."""

import click

from monolith_kit.context import MonolithContext
from monolith_kit.error_boundary import cli_error_boundary
from monolith_kit.io.state import load_project_config, save_project_config
from monolith_kit.operations.remove import find_dependents, remove_installed_module
from monolith_kit.output import success_line, user_output, warning_line


@click.command()
@click.argument("module_name", metavar="MODULE")
@click.pass_obj
@cli_error_boundary
def remove(ctx: MonolithContext, module_name: str) -> None:
    """Remove an installed module.

    Deletes the module's files that were not changed since install and
    removes its imports and registrations from entry files. Package
    dependencies are left installed.
    """
    config = load_project_config(ctx.project_root)
    if config is None:
        user_output("Error: No monolith.config.json found")
        raise SystemExit(1)

    installed = config.get_installed(module_name)
    if installed is None:
        user_output(f"Error: Module '{module_name}' is not installed")
        raise SystemExit(1)

    dependents = find_dependents(module_name, config, ctx.registry.get_registry())
    if dependents:
        user_output(warning_line(f"Required by installed modules: {', '.join(dependents)}"))

    if not ctx.assume_yes and not click.confirm(
        f"Remove module '{module_name}'?", default=False, err=True
    ):
        user_output("Remove cancelled")
        return

    result = remove_installed_module(installed, ctx.project_root)
    save_project_config(ctx.project_root, config.remove_module(module_name))

    for path in result.removed:
        user_output(success_line(f"Deleted {path}"))
    for path in result.kept_modified:
        user_output(warning_line(f"Kept {path} (modified since install)"))
    for path in result.entry_files_changed:
        user_output(success_line(f"Unregistered from {path}"))

    user_output(f"\nRemoved {module_name} v{installed.version}")
    user_output("Package dependencies were not removed")
