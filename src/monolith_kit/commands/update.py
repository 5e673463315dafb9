"""Update command for bringing installed modules to the registry version."""

import click

from monolith_kit.context import MonolithContext
from monolith_kit.error_boundary import cli_error_boundary
from monolith_kit.io.state import load_project_config, save_project_config
from monolith_kit.models.config import InstalledModule
from monolith_kit.operations.update import UpdateCheck, apply_update, check_for_updates
from monolith_kit.output import error_line, success_line, user_output, warning_line


def _describe(check: UpdateCheck) -> None:
    user_output(f"{click.style('●', fg='cyan')} {click.style(check.module_name, bold=True)}")
    user_output(f"  {check.current_version} -> {click.style(check.latest_version, fg='green')}")
    for planned in check.files:
        if planned.will_write:
            user_output(f"    {planned.relative_path} ({planned.state})")
        else:
            user_output(warning_line(f"  {planned.relative_path} has local changes, keeping it"))


@click.command()
@click.argument("module_name", metavar="[MODULE]", required=False)
@click.option("--dry-run", is_flag=True, help="Show what would change without writing")
@click.pass_obj
@cli_error_boundary
def update(ctx: MonolithContext, module_name: str | None, dry_run: bool) -> None:
    """Update installed modules whose registry version changed.

    Files changed since install are kept as they are.

    Examples:

        # Check and update every installed module
        monolith update

        # Preview the update of one module
        monolith update auth --dry-run
    """
    config = load_project_config(ctx.project_root)
    if config is None or not config.installed_modules:
        user_output("No installed modules found")
        user_output("Use 'monolith add <module>' to install one")
        return

    candidates: list[InstalledModule] = list(config.installed_modules)
    if module_name is not None:
        candidates = [m for m in candidates if m.name == module_name]
        if not candidates:
            user_output(f"Error: Module '{module_name}' is not installed")
            raise SystemExit(1)

    checks: list[UpdateCheck] = []
    for installed in candidates:
        module = ctx.registry.get_module(installed.name)
        if module is None:
            user_output(warning_line(f"{installed.name} is no longer in the registry"))
            continue
        check = check_for_updates(installed, module, config, ctx.project_root)
        if check.has_update:
            checks.append(check)

    if not checks:
        user_output("All modules are up to date")
        return

    user_output(f"Found {len(checks)} update(s):\n")
    for check in checks:
        _describe(check)

    if dry_run:
        user_output("\nDry run, no files were changed")
        return

    if not ctx.assume_yes and not click.confirm("Apply updates?", default=True, err=True):
        user_output("Update cancelled")
        return

    failed = False
    for check in checks:
        installed = config.get_installed(check.module_name)
        module = ctx.registry.get_module(check.module_name)
        if installed is None or module is None:
            continue
        result, updated = apply_update(
            check, installed, module, ctx.project_root, ctx.templates, ctx.clock
        )
        config = config.upsert_module(updated)
        for error in result.errors:
            user_output(error_line(error))
        failed = failed or bool(result.errors)
        user_output(
            success_line(
                f"Updated {result.module_name}: {result.old_version} -> {result.new_version} "
                f"({len(result.written)} written, {len(result.kept)} kept)"
            )
        )

    save_project_config(ctx.project_root, config)
    if failed:
        raise SystemExit(1)
