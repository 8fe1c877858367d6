"""Zellij backend for the multiplexer abstraction.

Implements MultiplexerBackend using the Zellij CLI through the CommandRunner.

Limitations vs tmux:
  - No existence query (has_session matches the list-sessions output)
  - No way to move an attached client to another session from the CLI:
    inside Zellij the target session is created in the background and
    SwitchUnsupportedError tells the user to switch manually
  - No start-directory flag; the working directory of the zellij process
    is the session's starting directory

Key class: ZellijBackend(MultiplexerBackend).
"""

from __future__ import annotations

import logging

from ..errors import MultiplexerCommandError, SwitchUnsupportedError
from ..project import Project
from ..runner import CommandResult
from .base import UNIQUE_SESSION_NAMES, MultiplexerBackend

logger = logging.getLogger(__name__)

_NO_SESSIONS_MARKER = "No active zellij sessions found"


class ZellijBackend(MultiplexerBackend):
    """Opens, lists and kills Zellij sessions."""

    binary = "zellij"
    env_marker = "ZELLIJ"
    not_found_markers = ("No session named", "not found", _NO_SESSIONS_MARKER)

    def open(self, project: Project, in_session: bool | None = None) -> None:
        """Attach to the session for project, creating it if missing.

        Raises SwitchUnsupportedError when called from inside Zellij, after
        making sure the session exists.
        """
        logger.info("Attempting to open Zellij session with project: %s (%s)", project.name, project.path)
        if not self._resolve_in_session(in_session):
            self.create_or_attach(project)
            return

        if self.has_session(project.name):
            logger.info("Session '%s' already exists.", project.name)
        else:
            logger.info("Session '%s' does not already exist, creating it in the background.", project.name)
            self.create_detached(project)
        raise SwitchUnsupportedError("Zellij", project.name)

    def create_or_attach(self, project: Project) -> None:
        """Attach to the session, creating it first if needed."""
        result = self._run("attach", "--create", project.name, cwd=project.path, interactive=True)
        self._check(result, "attach --create", project.name)

    def create_detached(self, project: Project) -> None:
        """Create the session in the background without attaching."""
        result = self._run("attach", "--create-background", project.name, cwd=project.path)
        self._check(result, "attach --create-background", project.name)

    def has_session(self, name: str) -> bool:
        """Check if a session with exactly this name is listed."""
        return name in self.list_sessions()

    def list_sessions(self) -> list[str]:
        """List all Zellij session names ([] when there are none)."""
        result = self._run("list-sessions", "--short", "--no-formatting")
        if not result.ok:
            if _NO_SESSIONS_MARKER in result.stderr or _NO_SESSIONS_MARKER in result.stdout:
                return []
            raise MultiplexerCommandError("list-sessions", "", result.returncode, result.stderr)
        return [
            s.strip() for s in result.stdout.splitlines()
            if s.strip() and _NO_SESSIONS_MARKER not in s
        ]

    def kill_session(self, name: str) -> CommandResult:
        return self._run("kill-session", name)

    def unique_session(self, in_session: bool | None = None) -> str | None:
        """Open the lowest-numbered free session 0-9 in the home directory."""
        inside = self._resolve_in_session(in_session)
        existing = set(self.list_sessions())
        for name in UNIQUE_SESSION_NAMES:
            if name in existing:
                continue
            project = Project(path=self.home, name=name)
            if inside:
                self.create_detached(project)
                raise SwitchUnsupportedError("Zellij", name)
            self.create_or_attach(project)
            return name

        logger.warning("No unique session available, sessions 0-9 are all in use.")
        return None
