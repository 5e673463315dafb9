"""Post-install hook execution."""

import logging
from pathlib import Path

import click

from monolith_kit.errors import HookExecutionError
from monolith_kit.integrations.process import CommandRunner
from monolith_kit.models.registry import HookAction
from monolith_kit.output import user_output, warning_line

logger = logging.getLogger(__name__)


def run_hook(hook: HookAction, project_root: Path, runner: CommandRunner) -> None:
    """Run a single hook action.

    Raises:
        HookExecutionError: If a ``command`` hook fails
    """
    if hook.type == "log":
        if hook.message:
            user_output(click.style(hook.message, fg="cyan"))
        return

    if hook.type == "env":
        if hook.message:
            user_output(hook.message)
        if hook.variables:
            user_output("Configure these environment variables:")
            for name in hook.variables:
                user_output(f"  - {name}")
        return

    if hook.type == "command":
        command = hook.shell_command
        if not command:
            logger.debug("Skipping command hook without a command")
            return
        user_output(click.style(f"$ {command}", dim=True))
        try:
            runner.run_shell(command, project_root)
        except RuntimeError as e:
            raise HookExecutionError(f"Hook command failed: {e}") from e
        return

    logger.debug("Ignoring unsupported hook type: %s", hook.type)


def run_hooks(
    hooks: tuple[HookAction, ...], project_root: Path, runner: CommandRunner
) -> list[str]:
    """Run hooks in declaration order.

    A failing hook is reported and the remaining hooks still run.

    Returns:
        Warning messages of failed hooks
    """
    warnings: list[str] = []
    for hook in hooks:
        try:
            run_hook(hook, project_root, runner)
        except HookExecutionError as e:
            user_output(warning_line(str(e)))
            warnings.append(str(e))
    return warnings
