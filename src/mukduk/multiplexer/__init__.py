"""Multiplexer abstraction package — backend-agnostic session API.

Re-exports the core types and provides a factory:
  - MultiplexerBackend: ABC for all backends.
  - KillOutcome: per-session result of kill_sessions().
  - MULTIPLEXERS: the closed set of backend names.
  - get_mux(): Returns a backend instance (tmux or Zellij) for a name.
"""

from __future__ import annotations

from pathlib import Path

from ..runner import CommandRunner
from .base import ERROR, KILLED, NOT_FOUND, KillOutcome, MultiplexerBackend

__all__ = [
    "ERROR",
    "KILLED",
    "MULTIPLEXERS",
    "NOT_FOUND",
    "KillOutcome",
    "MultiplexerBackend",
    "get_mux",
]

MULTIPLEXERS = ("tmux", "zellij")


def get_mux(
    name: str,
    runner: CommandRunner | None = None,
    home: Path | str | None = None,
) -> MultiplexerBackend:
    """Return the backend for name ("tmux" or "zellij").

    runner and home are passed to the backend; None selects the real
    subprocess runner and the user's home directory.
    """
    backend = name.lower()
    if backend == "zellij":
        from .zellij_backend import ZellijBackend

        return ZellijBackend(runner, home)
    if backend == "tmux":
        from .tmux_backend import TmuxBackend

        return TmuxBackend(runner, home)
    raise ValueError(
        f"Unknown multiplexer backend: {name!r}. "
        f"Set MULTIPLEXER to 'tmux' or 'zellij'."
    )
