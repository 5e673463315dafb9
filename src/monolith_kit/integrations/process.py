"""Subprocess execution for package managers and hook commands."""

import logging
import subprocess
from abc import ABC, abstractmethod
from collections.abc import Sequence
from pathlib import Path

logger = logging.getLogger(__name__)


def run_subprocess_with_context(
    cmd: Sequence[str],
    operation_context: str,
    cwd: Path | None = None,
    capture_output: bool = True,
) -> subprocess.CompletedProcess[str]:
    """Execute subprocess with enriched error reporting.

    Wraps subprocess.run() to catch CalledProcessError and re-raise as
    RuntimeError with operation context, stderr output, and command details.

    Args:
        cmd: Command and arguments to execute
        operation_context: Human-readable description of operation
        cwd: Working directory for command execution
        capture_output: Whether to capture stdout/stderr (default: True)

    Returns:
        CompletedProcess instance from subprocess.run()

    Raises:
        RuntimeError: If command fails or its binary is not found
    """
    cmd_str = " ".join(str(arg) for arg in cmd)
    logger.debug("Running %s (cwd=%s)", cmd_str, cwd)
    try:
        return subprocess.run(
            list(cmd),
            cwd=cwd,
            capture_output=capture_output,
            text=True,
            encoding="utf-8",
            check=True,
        )
    except subprocess.CalledProcessError as e:
        error_msg = f"Failed to {operation_context}"
        error_msg += f"\nCommand: {cmd_str}"
        error_msg += f"\nExit code: {e.returncode}"

        if e.stderr:
            stderr_stripped = e.stderr.strip()
            if stderr_stripped:
                error_msg += f"\nstderr: {stderr_stripped}"

        raise RuntimeError(error_msg) from e
    except FileNotFoundError as e:
        error_msg = f"Command not found while trying to {operation_context}: {cmd[0]}"
        error_msg += f"\nFull command: {cmd_str}"
        raise RuntimeError(error_msg) from e


class CommandRunner(ABC):
    """Abstract process execution for dependency injection."""

    @abstractmethod
    def run(self, cmd: Sequence[str], cwd: Path, operation_context: str) -> None:
        """Run a command with captured output.

        Raises:
            RuntimeError: If the command exits non-zero or cannot be started
        """
        ...

    @abstractmethod
    def run_shell(self, command: str, cwd: Path) -> None:
        """Run a shell command line with output attached to the terminal.

        Raises:
            RuntimeError: If the command exits non-zero
        """
        ...


class RealCommandRunner(CommandRunner):
    """Production implementation using subprocess."""

    def run(self, cmd: Sequence[str], cwd: Path, operation_context: str) -> None:
        run_subprocess_with_context(cmd, operation_context, cwd=cwd)

    def run_shell(self, command: str, cwd: Path) -> None:
        logger.debug("Running shell command %r (cwd=%s)", command, cwd)
        result = subprocess.run(command, shell=True, cwd=cwd, check=False)
        if result.returncode != 0:
            raise RuntimeError(f"Command exited with code {result.returncode}: {command}")
