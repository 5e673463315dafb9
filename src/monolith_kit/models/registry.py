"""Registry models.

The registry JSON uses camelCase keys (``envVariables``, ``autoRegister``,
``injectIn``). Models accept both the wire names and the Python field names.
"""

from enum import Enum
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

AppKind = Literal["backend", "frontend"]
APP_KINDS: tuple[AppKind, ...] = ("backend", "frontend")

RegistrationKind = Literal["plugin", "routes"]
HookType = Literal["log", "env", "command", "confirm"]

_MODEL_CONFIG = ConfigDict(frozen=True, populate_by_name=True, extra="ignore")


class Dependency(BaseModel):
    """Third-party package declared by a module."""

    model_config = _MODEL_CONFIG

    name: str
    version: str = "latest"

    @property
    def spec(self) -> str:
        """Package spec passed to the package manager (``name@range``)."""
        return f"{self.name}@{self.version}"


class EnvVariable(BaseModel):
    """Environment variable a module needs."""

    model_config = _MODEL_CONFIG

    name: str
    description: str = ""
    default: str = ""
    required: bool = False

    @field_validator("default", mode="before")
    @classmethod
    def validate_default(cls, v: Any) -> str:
        """Treat a null default as an empty value."""
        if v is None:
            return ""
        return str(v)

    @field_validator("name")
    @classmethod
    def validate_name(cls, v: str) -> str:
        """Validate name is usable as a KEY in a dotenv file."""
        if not v.strip() or "=" in v or any(c.isspace() for c in v):
            msg = f"Invalid environment variable name: {v!r}"
            raise ValueError(msg)
        return v


class HookAction(BaseModel):
    """Post-install action declared by a module."""

    model_config = _MODEL_CONFIG

    type: HookType
    message: str | None = None
    variables: tuple[str, ...] = ()
    command: str | None = None

    @property
    def shell_command(self) -> str | None:
        """Command to run for ``command`` hooks.

        Older registries put the command text in ``message``.
        """
        if self.command:
            return self.command
        return self.message


class ModuleHooks(BaseModel):
    """Lifecycle hooks of a module."""

    model_config = _MODEL_CONFIG

    after_install: tuple[HookAction, ...] = Field(default=(), alias="afterInstall")


class Registration(BaseModel):
    """Where and how an installed file gets wired into an entry file.

    ``inject_in`` is relative to the install target directory. ``anchor`` is
    the token searched for in line comments of the entry file. ``statement``
    optionally overrides the default registration statement; it may use the
    ``{alias}`` and ``{prefix}`` placeholders.
    """

    model_config = _MODEL_CONFIG

    kind: RegistrationKind = Field(alias="type")
    inject_in: str = Field(alias="injectIn")
    import_alias: str = Field(alias="importAs")
    anchor: str = Field(alias="marker")
    statement: str | None = None

    @field_validator("import_alias")
    @classmethod
    def validate_import_alias(cls, v: str) -> str:
        """Validate alias is a JavaScript identifier."""
        if not v or not (v[0].isalpha() or v[0] in "_$"):
            msg = f"Invalid import alias: {v!r}"
            raise ValueError(msg)
        if not all(c.isalnum() or c in "_$" for c in v):
            msg = f"Invalid import alias: {v!r}"
            raise ValueError(msg)
        return v

    @field_validator("anchor")
    @classmethod
    def validate_anchor(cls, v: str) -> str:
        """Validate anchor token is non-empty."""
        if not v.strip():
            msg = "Registration marker cannot be empty"
            raise ValueError(msg)
        return v

    @property
    def route_prefix(self) -> str:
        """Path prefix derived from the alias (``authRoutes`` -> ``auth``)."""
        return self.import_alias.replace("Routes", "", 1)


class FileSpec(BaseModel):
    """One template file of a module."""

    model_config = _MODEL_CONFIG

    source_path: str = Field(alias="path")
    target_path: str = Field(alias="target")
    file_kind: str = Field(default="config", alias="type")
    auto_register: Registration | None = Field(default=None, alias="autoRegister")


class FileLayout(Enum):
    """Shape the ``files`` field had in the registry JSON."""

    FLAT = "flat"
    BY_KIND = "by_kind"


class FileSet(BaseModel):
    """Files of a module keyed by app kind.

    Both registry shapes (a flat list, or a ``{backend, frontend}`` mapping)
    are normalized into this form when the descriptor is loaded.
    """

    model_config = ConfigDict(frozen=True)

    layout: FileLayout
    by_kind: dict[AppKind, tuple[FileSpec, ...]]

    @property
    def kinds(self) -> tuple[AppKind, ...]:
        """Kinds that carry at least one file, in canonical order."""
        return tuple(kind for kind in APP_KINDS if self.by_kind.get(kind))

    def for_kinds(self, kinds: tuple[AppKind, ...]) -> list[FileSpec]:
        """Files for the given kinds, in kind order then declaration order."""
        result: list[FileSpec] = []
        for kind in kinds:
            result.extend(self.by_kind.get(kind, ()))
        return result

    def all_files(self) -> list[FileSpec]:
        """Every file of the module."""
        return self.for_kinds(APP_KINDS)

    @staticmethod
    def from_raw(raw: Any, targets: tuple[AppKind, ...]) -> "FileSet":
        """Build a FileSet from the registry's ``files`` value.

        A flat list belongs to the first declared target kind (``backend``
        when the module declares no targets).
        """
        if raw is None:
            return FileSet(layout=FileLayout.FLAT, by_kind={})
        if isinstance(raw, FileSet):
            return raw
        if isinstance(raw, list | tuple):
            kind: AppKind = targets[0] if targets else "backend"
            files = tuple(FileSpec.model_validate(item) for item in raw)
            return FileSet(layout=FileLayout.FLAT, by_kind={kind: files})
        if isinstance(raw, dict):
            if "layout" in raw and "by_kind" in raw:
                return FileSet.model_validate(raw)
            by_kind: dict[AppKind, tuple[FileSpec, ...]] = {}
            for key, items in raw.items():
                if key not in APP_KINDS:
                    msg = f"Unknown file group {key!r}, expected one of {', '.join(APP_KINDS)}"
                    raise ValueError(msg)
                by_kind[key] = tuple(FileSpec.model_validate(item) for item in items or [])
            return FileSet(layout=FileLayout.BY_KIND, by_kind=by_kind)
        msg = f"files must be a list or a mapping, got {type(raw).__name__}"
        raise ValueError(msg)


class ModuleDescriptor(BaseModel):
    """Immutable description of an installable module."""

    model_config = _MODEL_CONFIG

    name: str
    display_name: str | None = Field(default=None, alias="displayName")
    description: str = ""
    version: str
    author: str | None = None
    category: str | None = None
    tags: tuple[str, ...] = ()
    requires: tuple[str, ...] = ()
    dependencies: tuple[Dependency, ...] = ()
    dev_dependencies: tuple[Dependency, ...] = Field(default=(), alias="devDependencies")
    env_variables: tuple[EnvVariable, ...] = Field(default=(), alias="envVariables")
    files: FileSet
    targets: tuple[AppKind, ...] = ()
    hooks: ModuleHooks = Field(default_factory=ModuleHooks)

    @model_validator(mode="before")
    @classmethod
    def normalize_files(cls, data: Any) -> Any:
        """Resolve the ``files`` shape and default ``targets`` once."""
        if not isinstance(data, dict):
            return data
        result = dict(data)
        targets = tuple(result.get("targets") or ())
        for kind in targets:
            if kind not in APP_KINDS:
                msg = f"Unknown target {kind!r}, expected one of {', '.join(APP_KINDS)}"
                raise ValueError(msg)
        file_set = FileSet.from_raw(result.get("files"), targets)
        result["files"] = file_set
        if not targets:
            result["targets"] = file_set.kinds
        return result

    @property
    def label(self) -> str:
        """Human-readable name."""
        if self.display_name:
            return self.display_name
        return self.name

    def files_for(self, kinds: tuple[AppKind, ...]) -> list[FileSpec]:
        """Files to materialize for an install target covering ``kinds``."""
        return self.files.for_kinds(kinds)


class Registry(BaseModel):
    """Catalog of module descriptors keyed by module name."""

    model_config = _MODEL_CONFIG

    format_version: str = Field(default="1", alias="version")
    registry_url: str | None = Field(default=None, alias="registryUrl")
    modules: dict[str, ModuleDescriptor] = Field(default_factory=dict)

    @model_validator(mode="before")
    @classmethod
    def inject_module_names(cls, data: Any) -> Any:
        """Use the registry key as each module's name.

        A ``name`` in the entry that differs from its key is kept as the
        display name when no ``displayName`` is given.
        """
        if not isinstance(data, dict):
            return data
        raw_modules = data.get("modules") or {}
        if not isinstance(raw_modules, dict):
            msg = "Registry 'modules' must be a mapping of module name to descriptor"
            raise ValueError(msg)
        modules: dict[str, Any] = {}
        for key, raw in raw_modules.items():
            if isinstance(raw, dict):
                entry = dict(raw)
                declared = entry.get("name")
                has_display = "displayName" in entry or "display_name" in entry
                if declared and declared != key and not has_display:
                    entry["displayName"] = declared
                entry["name"] = key
                modules[key] = entry
            else:
                modules[key] = raw
        return {**data, "modules": modules}

    def get(self, module_name: str) -> ModuleDescriptor | None:
        """Return a module descriptor, or None if unknown."""
        return self.modules.get(module_name)

    def search(self, query: str) -> dict[str, ModuleDescriptor]:
        """Modules whose name, description or tags contain ``query``."""
        needle = query.lower()
        results: dict[str, ModuleDescriptor] = {}
        for name, module in self.modules.items():
            if needle in name.lower() or needle in module.description.lower():
                results[name] = module
            elif any(needle in tag.lower() for tag in module.tags):
                results[name] = module
        return results

    def by_category(self, category: str) -> dict[str, ModuleDescriptor]:
        """Modules in ``category``."""
        return {
            name: module for name, module in self.modules.items() if module.category == category
        }
