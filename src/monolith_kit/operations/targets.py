"""Selection of the project directories that receive a module's files."""

import logging
from pathlib import Path

from monolith_kit.integrations.prompt import AppChooser
from monolith_kit.models.config import AppConfig, ProjectConfig
from monolith_kit.models.install import InstallTarget
from monolith_kit.models.registry import ModuleDescriptor

logger = logging.getLogger(__name__)


def find_enclosing_app(
    config: ProjectConfig, project_root: Path, cwd: Path
) -> AppConfig | None:
    """Return the app whose directory contains ``cwd``, if any.

    When app directories are nested, the deepest one wins.
    """
    resolved_cwd = cwd.resolve()
    best: AppConfig | None = None
    best_depth = -1
    for app in config.apps:
        app_dir = app.resolve(project_root)
        if resolved_cwd == app_dir or app_dir in resolved_cwd.parents:
            depth = len(app_dir.parts)
            if depth > best_depth:
                best = app
                best_depth = depth
    return best


def select_targets(
    module: ModuleDescriptor,
    config: ProjectConfig | None,
    project_root: Path,
    cwd: Path,
    chooser: AppChooser,
) -> list[InstallTarget]:
    """Decide which directories receive which kinds of a module's files.

    - Without config or apps, the project root receives every kind.
    - Inside an app directory, only that app, restricted to its own kind.
    - At the workspace root, each declared kind goes to the single app of
      that kind, to the chooser's pick when several exist, or nowhere when
      none exist.

    Returns:
        Targets in kind declaration order (possibly empty)
    """
    if config is None or not config.apps:
        logger.debug("Single-app mode: installing %s into %s", module.name, project_root)
        return [InstallTarget(app=None, kinds=module.targets)]

    enclosing = find_enclosing_app(config, project_root, cwd)
    if enclosing is not None:
        kinds = tuple(kind for kind in module.targets if kind == enclosing.kind)
        logger.debug("Inside app %s: kinds=%s", enclosing.name, kinds)
        if not kinds:
            return []
        return [InstallTarget(app=enclosing, kinds=kinds)]

    targets: list[InstallTarget] = []
    for kind in module.targets:
        apps = config.apps_of_kind(kind)
        if not apps:
            logger.debug("No %s app in workspace, skipping %s files", kind, kind)
            continue
        if len(apps) == 1:
            selected = apps[0]
        else:
            selected = chooser.choose(module.name, kind, apps)
        logger.debug("Selected app %s for %s files", selected.name, kind)
        targets.append(InstallTarget(app=selected, kinds=(kind,)))
    return targets
