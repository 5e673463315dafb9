"""Tests for package manager detection and dependency installs."""

from pathlib import Path

import pytest

from monolith_kit.models.registry import Dependency
from monolith_kit.operations.dependencies import (
    build_add_command,
    detect_package_manager,
    install_dependencies,
)
from tests.fakes.fake_process import FakeCommandRunner


@pytest.mark.parametrize(
    ("lock_file", "expected"),
    [
        ("bun.lockb", "bun"),
        ("bun.lock", "bun"),
        ("pnpm-lock.yaml", "pnpm"),
        ("yarn.lock", "yarn"),
        ("package-lock.json", "npm"),
    ],
)
def test_detects_manager_from_lock_file(tmp_path: Path, lock_file: str, expected: str) -> None:
    """Test each lock file maps to its package manager."""
    (tmp_path / lock_file).touch()

    assert detect_package_manager(tmp_path) == expected


def test_bun_lock_wins_over_others(tmp_path: Path) -> None:
    """Test lock files are checked in priority order."""
    (tmp_path / "package-lock.json").touch()
    (tmp_path / "bun.lockb").touch()

    assert detect_package_manager(tmp_path) == "bun"


def test_workspace_root_lock_file_is_used(tmp_path: Path) -> None:
    """Test an app without a lock file uses the workspace root's."""
    app_dir = tmp_path / "apps" / "api"
    app_dir.mkdir(parents=True)
    (tmp_path / "pnpm-lock.yaml").touch()

    assert detect_package_manager(app_dir, tmp_path) == "pnpm"


def test_fallback_and_default(tmp_path: Path) -> None:
    """Test the configured fallback, then bun."""
    assert detect_package_manager(tmp_path, fallback="yarn") == "yarn"
    assert detect_package_manager(tmp_path) == "bun"


def test_build_add_command() -> None:
    """Test runtime and dev dependency command lines."""
    dependency = Dependency(name="zod", version="^3.22.0")

    assert build_add_command("bun", dependency, dev=False) == ["bun", "add", "zod@^3.22.0"]
    assert build_add_command("npm", dependency, dev=True) == ["npm", "add", "-D", "zod@^3.22.0"]


def test_install_runs_in_declaration_order(tmp_path: Path) -> None:
    """Test one add command per dependency in the work directory."""
    runner = FakeCommandRunner()
    dependencies = [Dependency(name="@elysiajs/jwt", version="^1.0.0"), Dependency(name="zod")]

    installed, warnings = install_dependencies(dependencies, tmp_path, runner, "bun")

    assert installed == ["@elysiajs/jwt", "zod"]
    assert warnings == []
    assert runner.commands == [
        (["bun", "add", "@elysiajs/jwt@^1.0.0"], tmp_path),
        (["bun", "add", "zod@latest"], tmp_path),
    ]


def test_failed_package_is_a_warning(tmp_path: Path) -> None:
    """Test a failing dependency is reported and the rest still installed."""
    runner = FakeCommandRunner(failing_packages={"bcrypt"})
    dependencies = [Dependency(name="bcrypt", version="^5.1.1"), Dependency(name="zod")]

    installed, warnings = install_dependencies(dependencies, tmp_path, runner, "pnpm", dev=True)

    assert installed == ["zod"]
    assert warnings == ["Could not install bcrypt: Failed to add bcrypt@^5.1.1"]
    assert runner.commands[1] == (["pnpm", "add", "-D", "zod@latest"], tmp_path)
