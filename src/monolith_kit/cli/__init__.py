import logging

import click

from monolith_kit.config import debug_requested, load_tool_settings
from monolith_kit.context import create_context
from monolith_kit.error_boundary import cli_error_boundary
from monolith_kit.output import user_output
from monolith_kit.version import __version__

CONTEXT_SETTINGS = dict(help_option_names=["-h", "--help"])

# Track whether commands are registered
_commands_registered = False


class LazyGroup(click.Group):
    """Click Group that lazily loads commands."""

    def list_commands(self, ctx):
        """List available commands, registering them if needed."""
        if not _commands_registered:
            _register_commands()
        return super().list_commands(ctx)

    def get_command(self, ctx, cmd_name):
        """Get a command by name, registering if needed."""
        if not _commands_registered:
            _register_commands()
        return super().get_command(ctx, cmd_name)


@click.command(cls=LazyGroup, invoke_without_command=True, context_settings=CONTEXT_SETTINGS)
@click.version_option(version=__version__)
@click.option("--debug", is_flag=True, help="Show debug logs and full stack traces for errors")
@click.option("--local", is_flag=True, help="Use the local registry and templates only")
@click.option("--registry-url", default=None, help="Registry URL to download modules from")
@click.option("-y", "--yes", "assume_yes", is_flag=True, help="Skip all confirmation prompts")
@click.pass_context
def cli(
    ctx: click.Context, debug: bool, local: bool, registry_url: str | None, assume_yes: bool
) -> None:
    """Install full-stack modules into Elysia projects."""
    debug = debug or debug_requested()
    if debug:
        logging.basicConfig(level=logging.DEBUG, format="[DEBUG %(name)s:%(lineno)d] %(message)s")

    # Only create context if not already provided (e.g., by tests)
    if ctx.obj is None:
        settings = load_tool_settings().with_overrides(registry_url=registry_url, local=local)
        ctx.obj = create_context(settings=settings, debug=debug, assume_yes=assume_yes)

    if ctx.invoked_subcommand is None:
        user_output(ctx.get_help())


def _register_commands() -> None:
    """Register all commands with the CLI group."""
    global _commands_registered

    if _commands_registered:
        return

    from monolith_kit.commands.add import add
    from monolith_kit.commands.info import info
    from monolith_kit.commands.init import init
    from monolith_kit.commands.list import list_modules
    from monolith_kit.commands.remove import remove
    from monolith_kit.commands.update import update

    cli.add_command(init)
    cli.add_command(add)
    cli.add_command(list_modules)
    cli.add_command(info)
    cli.add_command(update)
    cli.add_command(remove)

    _commands_registered = True


def main() -> None:
    """Entry point with error boundary."""
    cli_error_boundary(cli)()


if __name__ == "__main__":
    main()
