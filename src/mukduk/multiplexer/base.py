"""Abstract base class for terminal multiplexer backends.

Defines the MultiplexerBackend ABC and KillOutcome dataclass that all
backends (tmux, Zellij) must implement. The ABC provides a unified interface
for:
  - Session reconciliation: open (create, attach or switch as needed)
  - Session discovery: list_sessions
  - Batch termination: kill_sessions
  - Scratch sessions: unique_session (lowest free digit 0-9)

All external calls go through the injected CommandRunner. Whether we are
already inside the backend's environment is passed in explicitly; when it
is omitted the backend probes its environment marker.

Key class: MultiplexerBackend (ABC), KillOutcome (dataclass).
"""

from __future__ import annotations

import logging
import os
from abc import ABC, abstractmethod
from collections.abc import Iterable
from dataclasses import dataclass
from pathlib import Path

from ..errors import MultiplexerCommandError, MultiplexerError
from ..project import Project
from ..runner import CommandResult, CommandRunner, SubprocessRunner

logger = logging.getLogger(__name__)

# Candidate names for unique sessions, in allocation order
UNIQUE_SESSION_NAMES = tuple(str(i) for i in range(10))

KILLED = "killed"
NOT_FOUND = "not_found"
ERROR = "error"


@dataclass
class KillOutcome:
    """Result of killing one session."""

    session: str
    status: str         # KILLED, NOT_FOUND or ERROR
    detail: str = ""    # stderr of the failed command, if any

    @property
    def ok(self) -> bool:
        return self.status == KILLED


class MultiplexerBackend(ABC):
    """Abstract base for terminal multiplexer backends."""

    # Program invoked for every command
    binary: str = ""
    # Environment variable the multiplexer sets in all of its child processes
    env_marker: str = ""
    # stderr fragments meaning "that session does not exist"
    not_found_markers: tuple[str, ...] = ()

    def __init__(self, runner: CommandRunner | None = None, home: Path | str | None = None) -> None:
        self.runner = runner or SubprocessRunner()
        self.home = Path(home) if home is not None else Path.home()

    def in_session(self) -> bool:
        """Check if we're currently running inside this multiplexer."""
        return bool(os.environ.get(self.env_marker))

    def _resolve_in_session(self, in_session: bool | None) -> bool:
        return self.in_session() if in_session is None else in_session

    def _run(self, *args: str, cwd: Path | None = None, interactive: bool = False) -> CommandResult:
        return self.runner.run([self.binary, *args], cwd=cwd, interactive=interactive)

    def _check(self, result: CommandResult, step: str, session: str = "") -> CommandResult:
        """Raise MultiplexerCommandError if result is a failure."""
        if not result.ok:
            raise MultiplexerCommandError(step, session, result.returncode, result.stderr)
        return result

    @abstractmethod
    def open(self, project: Project, in_session: bool | None = None) -> None:
        """Make a session for project exist and be the active one.

        Args:
            project: Session name and starting directory.
            in_session: Whether we are inside this multiplexer already;
                        None probes the environment.

        Raises:
            MultiplexerError: a command could not run or failed; nothing is
                              retried.
        """

    @abstractmethod
    def has_session(self, name: str) -> bool:
        """Check if a session with exactly this name exists."""

    @abstractmethod
    def list_sessions(self) -> list[str]:
        """List the names of all sessions ([] when there are none)."""

    @abstractmethod
    def kill_session(self, name: str) -> CommandResult:
        """Run the kill command for one session."""

    def kill_sessions(self, names: Iterable[str]) -> list[KillOutcome]:
        """Kill each named session, one after another.

        A failure never stops the loop; every name gets its own outcome.
        """
        outcomes: list[KillOutcome] = []
        for name in names:
            if not name:
                logger.warning("No session picked")
                outcomes.append(KillOutcome(session=name, status=NOT_FOUND))
                continue
            outcomes.append(self._kill_one(name))
        return outcomes

    def _kill_one(self, name: str) -> KillOutcome:
        try:
            result = self.kill_session(name)
        except MultiplexerError as e:
            logger.error("Error while killing %s: %s", name, e)
            return KillOutcome(session=name, status=ERROR, detail=str(e))

        if result.ok:
            logger.info("Killed %s.", name)
            return KillOutcome(session=name, status=KILLED)

        detail = result.stderr.strip()
        if any(marker in detail for marker in self.not_found_markers):
            logger.warning("Session %s not found.", name)
            return KillOutcome(session=name, status=NOT_FOUND, detail=detail)
        logger.error("Error while killing %s: %s", name, detail)
        return KillOutcome(session=name, status=ERROR, detail=detail)

    @abstractmethod
    def unique_session(self, in_session: bool | None = None) -> str | None:
        """Open a session named after the lowest unused digit, in the home dir.

        Returns:
            The session name, or None if all ten digits are in use.
        """
