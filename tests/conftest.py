"""Shared fixtures for monolith-kit tests."""

import json
from pathlib import Path

import pytest
from click.testing import CliRunner


@pytest.fixture
def tmp_project(tmp_path: Path) -> Path:
    """Empty consuming project with a package.json."""
    project = tmp_path / "project"
    project.mkdir()
    (project / "package.json").write_text(
        json.dumps({"name": "demo-app", "version": "0.1.0"}), encoding="utf-8"
    )
    return project


@pytest.fixture
def cli_runner() -> CliRunner:
    """Click CliRunner for command tests."""
    return CliRunner()
