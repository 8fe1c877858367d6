"""Shared test fixtures and helpers for the mukduk test suite.

Isolates the environment variables mukduk reads, and provides a recording
FakeRunner (stands in for the multiplexer binaries) and a FakePicker
(stands in for fzf).
"""

from collections.abc import Callable, Iterable, Sequence
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import pytest

from mukduk.runner import CommandResult, CommandRunner

_ISOLATED_ENV = (
    "TMUX",
    "ZELLIJ",
    "PROJECTS_DIR",
    "PROJ_DIR",
    "MULTIPLEXER",
    "XDG_CONFIG_HOME",
)


@pytest.fixture(autouse=True)
def isolated_env(monkeypatch: pytest.MonkeyPatch, tmp_path_factory: pytest.TempPathFactory) -> Path:
    """Run every test with a fresh HOME and no multiplexer markers."""
    for key in _ISOLATED_ENV:
        monkeypatch.delenv(key, raising=False)
    home = tmp_path_factory.mktemp("home")
    monkeypatch.setenv("HOME", str(home))
    return home


# ── Fake command runner ──────────────────────────────────────────────────


@dataclass
class Call:
    """One recorded runner invocation."""

    args: list[str]
    cwd: Any = None
    interactive: bool = False

    @property
    def subcommand(self) -> str:
        return self.args[1] if len(self.args) > 1 else ""


# A response is (returncode, stdout, stderr), a callable taking the argv and
# returning such a tuple, or an Exception instance to raise.
Response = tuple[int, str, str] | Callable[[list[str]], tuple[int, str, str]] | Exception


class FakeRunner(CommandRunner):
    """CommandRunner that records calls and answers from a table.

    responses maps a subcommand (argv[1], e.g. "has-session") to a Response
    or a list of Responses consumed in order. Unlisted subcommands succeed
    with empty output.
    """

    def __init__(self, responses: dict[str, Response | list[Response]] | None = None) -> None:
        self.responses = dict(responses or {})
        self.calls: list[Call] = []

    def run(
        self,
        args: Sequence[str],
        *,
        cwd: Path | str | None = None,
        interactive: bool = False,
    ) -> CommandResult:
        argv = [str(a) for a in args]
        self.calls.append(Call(argv, cwd, interactive))

        response = self.responses.get(argv[1] if len(argv) > 1 else "", (0, "", ""))
        if isinstance(response, list):
            response = response.pop(0) if response else (0, "", "")
        if isinstance(response, Exception):
            raise response
        if callable(response):
            response = response(argv)
        rc, stdout, stderr = response
        return CommandResult(args=argv, returncode=rc, stdout=stdout, stderr=stderr)

    @property
    def subcommands(self) -> list[str]:
        return [c.subcommand for c in self.calls]


def ok(stdout: str = "") -> tuple[int, str, str]:
    return 0, stdout, ""


def fail(stderr: str = "", rc: int = 1) -> tuple[int, str, str]:
    return rc, "", stderr


@pytest.fixture
def fake_runner() -> FakeRunner:
    return FakeRunner()


# ── Fake picker ──────────────────────────────────────────────────────────


class FakePicker:
    """Picker returning canned selections and recording the candidates."""

    def __init__(self, *answers: list[str]) -> None:
        self.answers = list(answers)
        self.seen: list[list[str]] = []
        self.multi: list[bool] = []

    def pick(self, candidates: Iterable[str], multi: bool = False) -> list[str]:
        self.seen.append(list(candidates))
        self.multi.append(multi)
        return self.answers.pop(0) if self.answers else []

    def pick_one(self, candidates: Iterable[str]) -> str:
        selected = self.pick(candidates)
        return selected[0] if selected else ""
