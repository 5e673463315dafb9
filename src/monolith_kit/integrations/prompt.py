"""Interactive choice between several apps of the same kind."""

from abc import ABC, abstractmethod

import click

from monolith_kit.models.config import AppConfig
from monolith_kit.models.registry import AppKind


class AppChooser(ABC):
    """Abstract app selection for dependency injection."""

    @abstractmethod
    def choose(self, module_name: str, kind: AppKind, apps: list[AppConfig]) -> AppConfig:
        """Pick one of ``apps`` (two or more, all of ``kind``)."""
        ...


class ClickAppChooser(AppChooser):
    """Prompt on the terminal. With ``assume_yes`` the first app is used."""

    def __init__(self, *, assume_yes: bool) -> None:
        self._assume_yes = assume_yes

    def choose(self, module_name: str, kind: AppKind, apps: list[AppConfig]) -> AppConfig:
        if self._assume_yes:
            return apps[0]
        names = [app.name for app in apps]
        selected = click.prompt(
            f"Install {kind} files of '{module_name}' into which app?",
            type=click.Choice(names),
            default=names[0],
            err=True,
        )
        return apps[names.index(selected)]
