"""Copy module templates into the project with variable substitution.

Existing files are never overwritten: a target that already exists is
reported as skipped so user edits always win over regeneration.
"""

import hashlib
import json
import logging
from dataclasses import dataclass
from pathlib import Path

from monolith_kit.errors import SourceReadError, WriteError
from monolith_kit.models.install import FileOperationResult
from monolith_kit.models.registry import FileSpec, ModuleDescriptor
from monolith_kit.sources.base import TemplateSource

logger = logging.getLogger(__name__)

DEFAULT_PROJECT_NAME = "my-project"

# Templates starting with one of these already carry their own header.
COMMENT_PREFIXES = ("//", "/*", "<!", "#")


@dataclass(frozen=True)
class TemplateVariables:
    """Values substituted into templates."""

    module_name: str
    module_version: str
    project_name: str
    year: int

    def replacements(self) -> dict[str, str]:
        return {
            "__MODULE_NAME__": self.module_name,
            "__MODULE_VERSION__": self.module_version,
            "__PROJECT_NAME__": self.project_name,
            "__YEAR__": str(self.year),
        }


def read_project_name(project_dir: Path) -> str:
    """Return ``name`` from package.json, or a default when unavailable."""
    package_json = project_dir / "package.json"
    if not package_json.exists():
        return DEFAULT_PROJECT_NAME
    try:
        data = json.loads(package_json.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as e:
        logger.debug("Cannot read %s: %s", package_json, e)
        return DEFAULT_PROJECT_NAME
    if isinstance(data, dict) and isinstance(data.get("name"), str) and data["name"]:
        return data["name"]
    return DEFAULT_PROJECT_NAME


def provenance_header(module: ModuleDescriptor) -> str:
    return (
        f"// This file is generated from @monolith/{module.name} v{module.version}\n"
        "// Do not edit this file directly unless you know what you are doing."
    )


def render_template(content: str, module: ModuleDescriptor, variables: TemplateVariables) -> str:
    """Substitute placeholders and prepend the provenance header.

    Unknown placeholders are left as they are.
    """
    result = content
    for token, value in variables.replacements().items():
        result = result.replace(token, value)

    if content.startswith(COMMENT_PREFIXES):
        return result
    return f"{provenance_header(module)}\n\n{result}"


def content_sha256(content: str) -> str:
    return hashlib.sha256(content.encode("utf-8")).hexdigest()


def file_sha256(path: Path) -> str:
    return hashlib.sha256(path.read_bytes()).hexdigest()


def resolve_target_path(install_path: Path, target_path: str) -> Path:
    """Join and check that the target stays inside the install directory.

    Raises:
        WriteError: If the target path escapes ``install_path``
    """
    target = (install_path / target_path).resolve()
    if not target.is_relative_to(install_path.resolve()):
        raise WriteError(f"Target path escapes install directory: {target_path}")
    return target


def write_new_file(target: Path, content: str) -> None:
    """Create parent directories and write ``content``.

    Raises:
        WriteError: If the directory or file cannot be written
    """
    try:
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_text(content, encoding="utf-8")
    except OSError as e:
        raise WriteError(f"Cannot write {target}: {e}") from e


def materialize_file(
    file_spec: FileSpec,
    install_path: Path,
    module: ModuleDescriptor,
    templates: TemplateSource,
    variables: TemplateVariables,
) -> FileOperationResult:
    """Write one template file into the project unless it already exists.

    Read and write failures are returned as ``error`` results rather than
    raised so sibling files still get installed.
    """
    try:
        target = resolve_target_path(install_path, file_spec.target_path)
    except WriteError as e:
        return FileOperationResult(
            path=install_path / file_spec.target_path, action="error", error=str(e)
        )

    if target.exists():
        logger.debug("Skipping existing file %s", target)
        return FileOperationResult(path=target, action="skipped")

    try:
        content = templates.read(file_spec.source_path)
        rendered = render_template(content, module, variables)
        write_new_file(target, rendered)
    except SourceReadError as e:
        return FileOperationResult(
            path=target, action="error", error=f"Cannot read source file: {e}"
        )
    except WriteError as e:
        return FileOperationResult(path=target, action="error", error=str(e))

    logger.debug("Created %s from %s", target, file_spec.source_path)
    return FileOperationResult(path=target, action="created", sha256=content_sha256(rendered))
