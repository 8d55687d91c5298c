"""
External process execution for package manager adapters.

Adapters never call ``subprocess`` directly; they go through a
``CommandRunner`` so tests can substitute a fake without spawning processes.
"""

import logging
import subprocess
from abc import ABC, abstractmethod
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional, Sequence, Union

from .exceptions import format_command

logger = logging.getLogger(__name__)

# Shell conventions for "command not found" and "timed out".
EXIT_NOT_FOUND = 127
EXIT_TIMEOUT = 124


@dataclass(frozen=True)
class CommandResult:
    """Captured output of a finished command."""
    stdout: str
    stderr: str
    exit_status: int

    @property
    def success(self) -> bool:
        return self.exit_status == 0


class CommandRunner(ABC):
    """Runs a command in a working directory and captures its output."""

    @abstractmethod
    def run(
        self,
        command: Sequence[str],
        working_directory: Optional[Union[str, Path]] = None,
        timeout: Optional[float] = None,
    ) -> CommandResult:
        """
        Run ``command`` with ``working_directory`` as its cwd.

        Returns:
            CommandResult with stdout, stderr and exit status
        """
        pass


class SubprocessCommandRunner(CommandRunner):
    """``subprocess.run`` backed runner.

    The child gets ``cwd=working_directory``; the parent's working directory
    is never changed, so concurrent adapters do not race on ``os.chdir``.
    Launch failures and timeouts are reported as non-zero results rather
    than raised.
    """

    def run(
        self,
        command: Sequence[str],
        working_directory: Optional[Union[str, Path]] = None,
        timeout: Optional[float] = None,
    ) -> CommandResult:
        argv: List[str] = [str(part) for part in command]
        logger.debug(f"Running '{format_command(argv)}' in {working_directory or '.'}")

        try:
            result = subprocess.run(
                argv,
                cwd=str(working_directory) if working_directory else None,
                capture_output=True,
                text=True,
                timeout=timeout,
            )
        except subprocess.TimeoutExpired as e:
            return CommandResult(
                stdout="",
                stderr=f"Command timed out after {e.timeout}s",
                exit_status=EXIT_TIMEOUT,
            )
        except (FileNotFoundError, OSError) as e:
            return CommandResult(stdout="", stderr=str(e), exit_status=EXIT_NOT_FOUND)

        return CommandResult(
            stdout=result.stdout or "",
            stderr=result.stderr or "",
            exit_status=result.returncode,
        )
