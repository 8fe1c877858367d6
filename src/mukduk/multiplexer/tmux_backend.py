"""Tmux backend for the multiplexer abstraction.

Drives the tmux CLI through the CommandRunner:
  - open: reconcile environment/session state into "attached to NAME".
  - has_session / list_sessions: existence query and session discovery.
  - kill_session: terminate one session.
  - unique_session: first free single-digit session in $HOME.

Session targets are written as ``=NAME`` so tmux matches the name exactly
instead of by prefix.

Key class: TmuxBackend(MultiplexerBackend).
"""

from __future__ import annotations

import logging

from ..errors import MultiplexerCommandError
from ..project import Project
from ..runner import CommandResult
from .base import UNIQUE_SESSION_NAMES, MultiplexerBackend

logger = logging.getLogger(__name__)

# stderr when no tmux server is running, i.e. there are no sessions at all
_NO_SERVER_MARKERS = ("no server running", "error connecting to")


class TmuxBackend(MultiplexerBackend):
    """Opens, lists and kills tmux sessions."""

    binary = "tmux"
    env_marker = "TMUX"
    not_found_markers = ("can't find session", *_NO_SERVER_MARKERS)

    def open(self, project: Project, in_session: bool | None = None) -> None:
        """Attach to (or switch to) the session for project, creating it if missing.

        Outside tmux, ``new-session -A`` creates or attaches in one call.
        Inside tmux that would nest sessions, so the session is looked up
        first and then switched to, being created detached when missing.
        """
        logger.info("Attempting to open tmux session with project: %s (%s)", project.name, project.path)
        if not self._resolve_in_session(in_session):
            self.create_or_attach(project)
        elif self.has_session(project.name):
            logger.info("Session '%s' already exists, opening.", project.name)
            self.switch(project.name)
        else:
            logger.info("Session '%s' does not already exist, creating and opening.", project.name)
            self.create_and_switch(project)

    def create_or_attach(self, project: Project) -> None:
        """Create the session attached, or attach if it already exists."""
        result = self._run(
            "new-session", "-A", "-s", project.name, "-c", str(project.path),
            interactive=True,
        )
        self._check(result, "new-session -A", project.name)

    def create_detached(self, project: Project) -> None:
        """Create the session without attaching to it."""
        result = self._run("new-session", "-d", "-s", project.name, "-c", str(project.path))
        self._check(result, "new-session -d", project.name)

    def create_and_switch(self, project: Project) -> None:
        """Create the session detached, then switch to it if creation worked."""
        self.create_detached(project)
        self.switch(project.name)

    def switch(self, name: str) -> None:
        """Switch the current client to another session."""
        result = self._run("switch-client", "-t", f"={name}")
        self._check(result, "switch-client", name)

    def has_session(self, name: str) -> bool:
        """Check if a tmux session with the given name exists."""
        return self._run("has-session", "-t", f"={name}").ok

    def list_sessions(self) -> list[str]:
        """List all tmux session names ([] when no server is running)."""
        result = self._run("list-sessions", "-F", "#{session_name}")
        if not result.ok:
            if any(marker in result.stderr for marker in _NO_SERVER_MARKERS):
                return []
            raise MultiplexerCommandError("list-sessions", "", result.returncode, result.stderr)
        return [line.strip() for line in result.stdout.splitlines() if line.strip()]

    def kill_session(self, name: str) -> CommandResult:
        return self._run("kill-session", "-t", f"={name}")

    def unique_session(self, in_session: bool | None = None) -> str | None:
        """Open the lowest-numbered free session 0-9 in the home directory."""
        inside = self._resolve_in_session(in_session)
        for name in UNIQUE_SESSION_NAMES:
            if self.has_session(name):
                continue
            project = Project(path=self.home, name=name)
            if inside:
                self.create_and_switch(project)
            else:
                self.create_or_attach(project)
            return name

        logger.warning("No unique session available, sessions 0-9 are all in use.")
        return None
