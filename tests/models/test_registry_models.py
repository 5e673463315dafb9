"""Tests for registry models."""

import pytest
from pydantic import ValidationError

from monolith_kit.models.registry import (
    FileLayout,
    FileSet,
    ModuleDescriptor,
    Registration,
    Registry,
)


def _descriptor(**data: object) -> ModuleDescriptor:
    base: dict[str, object] = {"name": "auth", "version": "1.0.0"}
    base.update(data)
    return ModuleDescriptor.model_validate(base)


def test_flat_files_belong_to_backend_by_default() -> None:
    """Test a flat file list resolves to the backend kind."""
    module = _descriptor(files=[{"path": "a.ts", "target": "src/a.ts"}])

    assert module.files.layout == FileLayout.FLAT
    assert module.targets == ("backend",)
    assert [f.target_path for f in module.files_for(("backend",))] == ["src/a.ts"]
    assert module.files_for(("frontend",)) == []


def test_flat_files_follow_first_declared_target() -> None:
    """Test a flat list is assigned to the first declared target kind."""
    module = _descriptor(
        targets=["frontend"], files=[{"path": "a.tsx", "target": "src/a.tsx"}]
    )

    assert module.files.kinds == ("frontend",)
    assert module.targets == ("frontend",)


def test_files_by_kind_default_targets() -> None:
    """Test a kind-keyed mapping defines targets when none are declared."""
    module = _descriptor(
        files={
            "frontend": [{"path": "ui.tsx", "target": "src/ui.tsx"}],
            "backend": [{"path": "api.ts", "target": "src/api.ts"}],
        }
    )

    assert module.files.layout == FileLayout.BY_KIND
    assert module.targets == ("backend", "frontend")
    assert [f.source_path for f in module.files.all_files()] == ["api.ts", "ui.tsx"]


def test_unknown_file_group_is_rejected() -> None:
    """Test an unknown key in the files mapping fails validation."""
    with pytest.raises(ValidationError, match="Unknown file group"):
        _descriptor(files={"mobile": [{"path": "a.ts", "target": "a.ts"}]})


def test_unknown_target_is_rejected() -> None:
    """Test an unknown target kind fails validation."""
    with pytest.raises(ValidationError, match="Unknown target"):
        _descriptor(targets=["desktop"], files=[])


def test_wire_aliases_are_accepted() -> None:
    """Test camelCase registry keys map onto model fields."""
    module = _descriptor(
        displayName="Authentication",
        devDependencies=[{"name": "@types/bcrypt", "version": "^5.0.0"}],
        envVariables=[{"name": "JWT_SECRET", "default": None, "required": True}],
        hooks={"afterInstall": [{"type": "log", "message": "done"}]},
        files=[
            {
                "path": "auth.ts",
                "target": "src/auth.ts",
                "type": "plugin",
                "autoRegister": {
                    "type": "plugin",
                    "injectIn": "src/index.ts",
                    "importAs": "authPlugin",
                    "marker": "@monolith:plugins",
                },
            }
        ],
    )

    assert module.label == "Authentication"
    assert module.dev_dependencies[0].spec == "@types/bcrypt@^5.0.0"
    assert module.env_variables[0].default == ""
    assert module.hooks.after_install[0].message == "done"
    registration = module.files.all_files()[0].auto_register
    assert registration is not None
    assert registration.kind == "plugin"
    assert registration.anchor == "@monolith:plugins"


def test_dependency_defaults_to_latest() -> None:
    """Test a dependency without version uses the latest tag."""
    module = _descriptor(dependencies=[{"name": "zod"}], files=[])

    assert module.dependencies[0].spec == "zod@latest"


def test_registration_rejects_invalid_alias() -> None:
    """Test the import alias must be a JavaScript identifier."""
    with pytest.raises(ValidationError, match="Invalid import alias"):
        Registration.model_validate(
            {"type": "plugin", "injectIn": "src/index.ts", "importAs": "auth-plugin", "marker": "x"}
        )


def test_route_prefix_strips_routes_suffix() -> None:
    """Test the route prefix derived from the alias."""
    registration = Registration.model_validate(
        {"type": "routes", "injectIn": "src/index.ts", "importAs": "usersRoutes", "marker": "m"}
    )

    assert registration.route_prefix == "users"


def test_hook_command_falls_back_to_message() -> None:
    """Test older registries carrying the command in message."""
    module = _descriptor(
        files=[], hooks={"afterInstall": [{"type": "command", "message": "bun run db:push"}]}
    )

    assert module.hooks.after_install[0].shell_command == "bun run db:push"


def test_registry_uses_keys_as_module_names() -> None:
    """Test module names come from registry keys."""
    registry = Registry.model_validate(
        {
            "version": "2",
            "modules": {
                "auth": {"name": "Auth Module", "version": "1.0.0", "files": []},
                "users": {"version": "1.0.0", "files": []},
            },
        }
    )

    assert registry.format_version == "2"
    assert registry.modules["auth"].name == "auth"
    assert registry.modules["auth"].label == "Auth Module"
    assert registry.modules["users"].label == "users"


def test_registry_search_and_category() -> None:
    """Test search over names, descriptions and tags, and category filtering."""
    registry = Registry.model_validate(
        {
            "modules": {
                "auth": {
                    "version": "1.0.0",
                    "description": "Login and JWT",
                    "category": "auth",
                    "tags": ["security"],
                    "files": [],
                },
                "mailer": {"version": "1.0.0", "description": "SMTP", "files": []},
            }
        }
    )

    assert list(registry.search("jwt")) == ["auth"]
    assert list(registry.search("SECURITY")) == ["auth"]
    assert list(registry.search("smtp")) == ["mailer"]
    assert list(registry.by_category("auth")) == ["auth"]
    assert registry.get("missing") is None


def test_file_set_from_empty_value() -> None:
    """Test a module without files has no kinds."""
    file_set = FileSet.from_raw(None, ())

    assert file_set.kinds == ()
    assert file_set.all_files() == []
