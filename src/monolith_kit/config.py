"""Tool settings loaded from ~/.monolith/config.toml and the environment.

Provides immutable settings loaded once at CLI entry point and stored in
MonolithContext. Precedence: CLI options > environment > config file.
"""

import os
import tomllib
from dataclasses import dataclass, replace
from pathlib import Path

ENV_REGISTRY_URL = "MONOLITH_REGISTRY_URL"
ENV_TEMPLATE_URL = "MONOLITH_TEMPLATE_URL"
ENV_LOCAL = "MONOLITH_LOCAL"
ENV_DEBUG = "MONOLITH_DEBUG"

_TRUTHY = ("1", "true", "yes", "on")


@dataclass(frozen=True)
class ToolSettings:
    """Immutable tool settings.

    ``registry_url`` and ``template_base_url`` switch the registry and the
    template store to remote mode; ``local`` forces local mode regardless.
    """

    registry_url: str | None
    template_base_url: str | None
    local: bool

    @property
    def use_remote_registry(self) -> bool:
        return not self.local and self.registry_url is not None

    @property
    def use_remote_templates(self) -> bool:
        return not self.local and self.template_base_url is not None

    def with_overrides(self, *, registry_url: str | None, local: bool) -> "ToolSettings":
        """Apply CLI options on top of loaded settings."""
        result = self
        if registry_url is not None:
            result = replace(result, registry_url=registry_url)
        if local:
            result = replace(result, local=True)
        return result


def default_settings_path() -> Path:
    return Path.home() / ".monolith" / "config.toml"


def load_tool_settings(
    settings_path: Path | None = None,
    environ: dict[str, str] | None = None,
) -> ToolSettings:
    """Load settings from the config file and environment.

    A missing config file is not an error.

    Raises:
        ValueError: If the config file is not valid TOML
    """
    path = settings_path if settings_path is not None else default_settings_path()
    env = environ if environ is not None else dict(os.environ)

    data: dict[str, object] = {}
    if path.exists():
        try:
            data = tomllib.loads(path.read_text(encoding="utf-8"))
        except tomllib.TOMLDecodeError as e:
            raise ValueError(f"Invalid settings file {path}: {e}") from e

    registry_url = env.get(ENV_REGISTRY_URL) or _optional_str(data.get("registry_url"))
    template_base_url = env.get(ENV_TEMPLATE_URL) or _optional_str(data.get("template_base_url"))
    if ENV_LOCAL in env:
        local = env[ENV_LOCAL].lower() in _TRUTHY
    else:
        local = bool(data.get("local", False))

    return ToolSettings(
        registry_url=registry_url,
        template_base_url=template_base_url,
        local=local,
    )


def debug_requested(environ: dict[str, str] | None = None) -> bool:
    """Check the MONOLITH_DEBUG environment variable."""
    env = environ if environ is not None else dict(os.environ)
    return env.get(ENV_DEBUG, "").lower() in _TRUTHY


def _optional_str(value: object) -> str | None:
    if value is None:
        return None
    text = str(value).strip()
    if not text:
        return None
    return text
