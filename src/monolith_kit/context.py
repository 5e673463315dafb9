"""Application context with dependency injection.

The MonolithContext dataclass holds all collaborators (registry loader,
template source, process runner, prompts, clock) and is created once at the
CLI entry point, then threaded through commands via Click's context object.
Tests build one from fakes instead (see tests/fakes/context.py).
"""

from dataclasses import dataclass
from pathlib import Path

from monolith_kit.config import ToolSettings
from monolith_kit.integrations.clock import Clock, RealClock
from monolith_kit.integrations.http import HttpxFetcher
from monolith_kit.integrations.process import CommandRunner, RealCommandRunner
from monolith_kit.integrations.prompt import AppChooser, ClickAppChooser
from monolith_kit.io.registry import RegistryLoader
from monolith_kit.io.state import find_project_root
from monolith_kit.operations.install import ModuleInstaller
from monolith_kit.sources import LocalTemplateSource, RemoteTemplateSource, TemplateSource


@dataclass(frozen=True)
class MonolithContext:
    """Immutable context holding all dependencies for monolith operations.

    Attributes:
        registry: Registry loader (remote or local, cached per run)
        templates: Template store files are materialized from
        runner: Process runner for package managers and hook commands
        chooser: Picks an app when several apps of a kind exist
        clock: Source of the install timestamp and the __YEAR__ placeholder
        settings: Tool settings after environment and CLI overrides
        project_root: Directory holding monolith.config.json (or cwd)
        cwd: Directory the command was invoked from
        debug: Show full stack traces for errors
        assume_yes: Skip confirmations and take default answers
    """

    registry: RegistryLoader
    templates: TemplateSource
    runner: CommandRunner
    chooser: AppChooser
    clock: Clock
    settings: ToolSettings
    project_root: Path
    cwd: Path
    debug: bool
    assume_yes: bool

    def installer(self) -> ModuleInstaller:
        """Module installer wired to this context's collaborators."""
        return ModuleInstaller(
            registry=self.registry,
            templates=self.templates,
            runner=self.runner,
            chooser=self.chooser,
            clock=self.clock,
            project_root=self.project_root,
            cwd=self.cwd,
        )


def create_context(*, settings: ToolSettings, debug: bool, assume_yes: bool) -> MonolithContext:
    """Create production context with real implementations.

    Called once at CLI entry point. The project root is the nearest
    directory (from cwd upwards) holding monolith.config.json, or cwd.
    """
    cwd = Path.cwd()
    project_root = find_project_root(cwd)
    fetcher = HttpxFetcher()

    registry = RegistryLoader(
        project_root,
        registry_url=settings.registry_url if settings.use_remote_registry else None,
        fetcher=fetcher,
    )

    templates: TemplateSource
    if settings.use_remote_templates and settings.template_base_url is not None:
        templates = RemoteTemplateSource(settings.template_base_url, fetcher)
    else:
        templates = LocalTemplateSource.for_project(project_root)

    return MonolithContext(
        registry=registry,
        templates=templates,
        runner=RealCommandRunner(),
        chooser=ClickAppChooser(assume_yes=assume_yes),
        clock=RealClock(),
        settings=settings,
        project_root=project_root,
        cwd=cwd,
        debug=debug,
        assume_yes=assume_yes,
    )
