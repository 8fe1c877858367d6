"""Exception hierarchy shared by every mukduk module.

Library code raises these; only main.py catches MukdukError, reports the
message on stderr and turns it into a non-zero exit status.

Key classes: MukdukError, ProjectResolutionError, NoProjectSelected,
  MultiplexerError, MultiplexerCommandError, SwitchUnsupportedError,
  PickerError, ConfigError.
"""

from __future__ import annotations


class MukdukError(Exception):
    """Base class for all errors reported to the user."""


class ConfigError(MukdukError):
    """The configuration file or environment could not be used."""


class ProjectResolutionError(MukdukError):
    """No project could be derived from the given input."""


class NoProjectSelected(ProjectResolutionError):
    """The picker returned nothing that matches a known project."""

    def __init__(self, choice: str = "") -> None:
        self.choice = choice
        if choice:
            super().__init__(f"No project selected (no project named {choice!r}).")
        else:
            super().__init__("No project selected.")


class PickerError(MukdukError):
    """The fuzzy picker could not be run."""


class MultiplexerError(MukdukError):
    """The multiplexer binary is missing or produced unusable output."""


class MultiplexerCommandError(MultiplexerError):
    """A multiplexer command exited with a non-zero status."""

    def __init__(self, step: str, session: str, returncode: int, stderr: str = "") -> None:
        self.step = step
        self.session = session
        self.returncode = returncode
        self.stderr = stderr.strip()
        message = f"{step} failed (exit status {returncode})"
        if session:
            message = f"{step} failed for session '{session}' (exit status {returncode})"
        if self.stderr:
            message = f"{message}: {self.stderr}"
        super().__init__(message)


class SwitchUnsupportedError(MultiplexerError):
    """The backend cannot move the current client to another session."""

    def __init__(self, backend: str, session: str) -> None:
        self.backend = backend
        self.session = session
        super().__init__(
            f"{backend} cannot switch sessions from inside an active session. "
            f"Session '{session}' is ready: detach and run the command again, "
            f"or switch to it from the session manager."
        )
