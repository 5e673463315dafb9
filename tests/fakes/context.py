"""Factory functions for creating test contexts."""

from pathlib import Path

from monolith_kit.config import ToolSettings
from monolith_kit.context import MonolithContext
from monolith_kit.io.registry import RegistryLoader
from monolith_kit.sources import LocalTemplateSource, TemplateSource
from tests.fakes.fake_clock import FakeClock
from tests.fakes.fake_process import FakeCommandRunner
from tests.fakes.fake_prompt import FakeAppChooser


def create_test_context(
    project_root: Path,
    *,
    cwd: Path | None = None,
    registry: RegistryLoader | None = None,
    templates: TemplateSource | None = None,
    runner: FakeCommandRunner | None = None,
    chooser: FakeAppChooser | None = None,
    clock: FakeClock | None = None,
    assume_yes: bool = True,
    debug: bool = False,
) -> MonolithContext:
    """Create a context rooted at ``project_root`` with fake collaborators.

    Args:
        project_root: Project directory (usually tmp_path based)
        cwd: Invocation directory, defaults to ``project_root``
        registry: Registry loader; defaults to one reading
            ``project_root/registry.json`` with no remote URL
        templates: Template source; defaults to ``project_root/templates``
        runner: Defaults to a FakeCommandRunner where everything succeeds
        chooser: Defaults to a FakeAppChooser picking the first app
        clock: Defaults to a FakeClock at a fixed instant
        assume_yes: Skip confirmations (default True)
        debug: Debug flag
    """
    return MonolithContext(
        registry=registry if registry is not None else RegistryLoader(project_root),
        templates=(
            templates
            if templates is not None
            else LocalTemplateSource([project_root / "templates"])
        ),
        runner=runner if runner is not None else FakeCommandRunner(),
        chooser=chooser if chooser is not None else FakeAppChooser(),
        clock=clock if clock is not None else FakeClock(),
        settings=ToolSettings(registry_url=None, template_base_url=None, local=True),
        project_root=project_root,
        cwd=cwd if cwd is not None else project_root,
        debug=debug,
        assume_yes=assume_yes,
    )
