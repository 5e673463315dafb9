"""Additive merge of module environment variables into dotenv files."""

import logging
from pathlib import Path

from monolith_kit.models.registry import EnvVariable

logger = logging.getLogger(__name__)

ENV_FILENAME = ".env"
ENV_EXAMPLE_FILENAME = ".env.example"


def has_variable(content: str, name: str) -> bool:
    """Check whether a line of ``content`` begins with ``NAME=``."""
    prefix = f"{name}="
    return any(line.startswith(prefix) for line in content.splitlines())


def merge_env_content(content: str, variables: list[EnvVariable]) -> tuple[str, list[str]]:
    """Append ``NAME=default`` lines for variables not yet present.

    Existing lines are never rewritten or removed.

    Returns:
        Tuple of (new content, names that were appended)
    """
    added: list[str] = []
    result = content
    for variable in variables:
        if has_variable(result, variable.name):
            continue
        if result and not result.endswith("\n"):
            result += "\n"
        result += f"{variable.name}={variable.default}\n"
        added.append(variable.name)
    return result, added


def merge_env_file(env_path: Path, variables: list[EnvVariable]) -> list[str]:
    """Merge variables into one dotenv file, writing only when something was added.

    Returns:
        Names appended to the file
    """
    content = ""
    if env_path.exists():
        content = env_path.read_text(encoding="utf-8")

    new_content, added = merge_env_content(content, variables)
    if added:
        env_path.parent.mkdir(parents=True, exist_ok=True)
        env_path.write_text(new_content, encoding="utf-8")
        logger.debug("Added %s to %s", ", ".join(added), env_path)
    return added


def configure_env_variables(variables: list[EnvVariable], work_dir: Path) -> list[str]:
    """Merge variables into .env and .env.example in ``work_dir``.

    Returns:
        Names appended to .env
    """
    if not variables:
        return []
    added = merge_env_file(work_dir / ENV_FILENAME, variables)
    merge_env_file(work_dir / ENV_EXAMPLE_FILENAME, variables)
    return added
