"""Narrow process-invocation interface used by the multiplexer backends.

Every external multiplexer call goes through CommandRunner.run(), so the
reconciliation logic can be exercised with a fake runner that records the
argument vectors and returns canned results.

Key classes: CommandResult (dataclass), CommandRunner (ABC),
  SubprocessRunner (the real implementation).
"""

from __future__ import annotations

import logging
import subprocess
from abc import ABC, abstractmethod
from collections.abc import Sequence
from dataclasses import dataclass
from pathlib import Path

from .errors import MultiplexerError

logger = logging.getLogger(__name__)


def _describe_start_error(program: str, cwd: Path | str | None, e: OSError) -> str:
    """Say whether the working directory or the program itself was the problem.

    subprocess reports a failed chdir with the working directory as
    ``e.filename``; a failed exec carries the program name instead.
    """
    if cwd is not None and e.filename is not None and str(e.filename) == str(cwd):
        return f"Cannot start {program} in {cwd}: {e.strerror or e}"
    if isinstance(e, PermissionError):
        return f"{program} is not executable: {e}"
    return f"Could not run {program}: {e}"


@dataclass
class CommandResult:
    """Exit status and captured output of one external command."""

    args: list[str]
    returncode: int
    stdout: str = ""
    stderr: str = ""

    @property
    def ok(self) -> bool:
        return self.returncode == 0


class CommandRunner(ABC):
    """Run a program with arguments and report its outcome."""

    @abstractmethod
    def run(
        self,
        args: Sequence[str],
        *,
        cwd: Path | str | None = None,
        interactive: bool = False,
    ) -> CommandResult:
        """Run ``args`` and wait for it to exit.

        Args:
            args: Program name followed by its arguments.
            cwd: Working directory for the child process.
            interactive: If True the child inherits the terminal (needed for
                         attach/switch); stdout/stderr are then not captured.

        Raises:
            MultiplexerError: the program or the working directory could
                              not be used, or the output could not be
                              decoded.
        """


class SubprocessRunner(CommandRunner):
    """CommandRunner backed by subprocess.run (blocking, no timeout)."""

    def run(
        self,
        args: Sequence[str],
        *,
        cwd: Path | str | None = None,
        interactive: bool = False,
    ) -> CommandResult:
        argv = [str(a) for a in args]
        logger.debug("Running %s (cwd=%s, interactive=%s)", argv, cwd, interactive)
        try:
            if interactive:
                proc = subprocess.run(argv, cwd=cwd)
                return CommandResult(args=argv, returncode=proc.returncode)
            proc = subprocess.run(argv, cwd=cwd, capture_output=True, text=True)
        except UnicodeDecodeError as e:
            raise MultiplexerError(f"Could not decode output of {argv[0]}: {e}") from e
        except OSError as e:
            raise MultiplexerError(_describe_start_error(argv[0], cwd, e)) from e

        result = CommandResult(
            args=argv,
            returncode=proc.returncode,
            stdout=proc.stdout or "",
            stderr=proc.stderr or "",
        )
        if result.ok:
            if result.stdout.strip():
                logger.info("%s", result.stdout.strip())
        else:
            logger.warning("%s (rc=%d): %s", argv, result.returncode, result.stderr.strip())
        return result
