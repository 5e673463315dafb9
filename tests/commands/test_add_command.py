"""Tests for the add command."""

from pathlib import Path

from click.testing import CliRunner

from monolith_kit.cli import cli
from monolith_kit.io.state import load_project_config
from tests.fakes.context import create_test_context
from tests.fakes.fake_process import FakeCommandRunner
from tests.test_utils.project_setup import (
    auth_module,
    users_module,
    write_entry_file,
    write_module_templates,
    write_project_config,
    write_registry,
)


def _project(project: Path) -> None:
    write_registry(project, {"auth": auth_module(), "users": users_module()})
    write_module_templates(project)
    write_project_config(project)
    write_entry_file(project)


def test_add_installs_module(cli_runner: CliRunner, tmp_project: Path) -> None:
    """Test a successful install and its summary."""
    _project(tmp_project)
    runner = FakeCommandRunner()

    result = cli_runner.invoke(
        cli, ["add", "auth"], obj=create_test_context(tmp_project, runner=runner)
    )

    assert result.exit_code == 0, result.output
    assert "Created src/modules/auth/auth.ts" in result.output
    assert "Install Complete" in result.output
    assert "Files created: 2" in result.output
    assert (tmp_project / "src/modules/auth/auth.ts").exists()
    assert len(runner.commands) == 2


def test_add_skip_deps(cli_runner: CliRunner, tmp_project: Path) -> None:
    """Test --skip-deps runs no package manager."""
    _project(tmp_project)
    runner = FakeCommandRunner()

    result = cli_runner.invoke(
        cli, ["add", "auth", "--skip-deps"], obj=create_test_context(tmp_project, runner=runner)
    )

    assert result.exit_code == 0, result.output
    assert runner.commands == []
    assert "Packages added: none" in result.output


def test_add_installs_missing_requirements_first(
    cli_runner: CliRunner, tmp_project: Path
) -> None:
    """Test required modules are installed before the requested one."""
    _project(tmp_project)

    result = cli_runner.invoke(
        cli, ["add", "users", "--skip-deps"], obj=create_test_context(tmp_project)
    )

    assert result.exit_code == 0, result.output
    assert "requires modules that are not installed: auth" in result.output
    config = load_project_config(tmp_project)
    assert config is not None
    assert [m.name for m in config.installed_modules] == ["auth", "users"]
    entry = (tmp_project / "src/index.ts").read_text(encoding="utf-8")
    assert "app.group(usersRoutes, { prefix: '/users' });" in entry


def test_add_requirements_declined(cli_runner: CliRunner, tmp_project: Path) -> None:
    """Test declining to install requirements cancels the run."""
    _project(tmp_project)

    result = cli_runner.invoke(
        cli,
        ["add", "users"],
        obj=create_test_context(tmp_project, assume_yes=False),
        input="n\n",
    )

    assert result.exit_code == 1
    assert "Install cancelled" in result.output
    assert not (tmp_project / "src/modules").exists()


def test_add_unknown_module_fails(cli_runner: CliRunner, tmp_project: Path) -> None:
    """Test a failed install exits non-zero with a failure summary."""
    _project(tmp_project)

    result = cli_runner.invoke(cli, ["add", "payments"], obj=create_test_context(tmp_project))

    assert result.exit_code == 1
    assert "Install Failed" in result.output
    assert 'Module "payments" not found in registry' in result.output


def test_add_requires_a_module(cli_runner: CliRunner, tmp_project: Path) -> None:
    """Test the module argument is mandatory."""
    result = cli_runner.invoke(cli, ["add"], obj=create_test_context(tmp_project))

    assert result.exit_code == 2
