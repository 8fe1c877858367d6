"""Tests for ZellijBackend — recorded Zellij CLI calls."""

from pathlib import Path

import pytest

from conftest import FakeRunner, fail, ok
from mukduk.errors import MultiplexerCommandError, SwitchUnsupportedError
from mukduk.multiplexer.base import ERROR, KILLED, NOT_FOUND
from mukduk.multiplexer.zellij_backend import ZellijBackend
from mukduk.project import Project

HOME = Path("/home/user")
PROJECT = Project.from_path("/work/api")


def _backend(runner: FakeRunner) -> ZellijBackend:
    return ZellijBackend(runner, home=HOME)


# ── open ─────────────────────────────────────────────────────────────────


class TestOpen:
    def test_outside_attaches_with_create(self, fake_runner: FakeRunner):
        _backend(fake_runner).open(PROJECT, in_session=False)

        assert len(fake_runner.calls) == 1
        call = fake_runner.calls[0]
        assert call.args == ["zellij", "attach", "--create", "api"]
        assert call.cwd == Path("/work/api")
        assert call.interactive is True

    def test_outside_failure_raises(self):
        runner = FakeRunner({"attach": fail("Session api is already attached")})
        with pytest.raises(MultiplexerCommandError, match="api"):
            _backend(runner).open(PROJECT, in_session=False)

    def test_inside_existing_session_cannot_switch(self):
        runner = FakeRunner({"list-sessions": ok("main\napi\n")})
        with pytest.raises(SwitchUnsupportedError, match="api"):
            _backend(runner).open(PROJECT, in_session=True)
        assert runner.subcommands == ["list-sessions"]

    def test_inside_missing_session_created_in_background(self):
        runner = FakeRunner({"list-sessions": ok("main\n")})
        with pytest.raises(SwitchUnsupportedError):
            _backend(runner).open(PROJECT, in_session=True)

        assert runner.subcommands == ["list-sessions", "attach"]
        assert runner.calls[1].args == ["zellij", "attach", "--create-background", "api"]
        assert runner.calls[1].cwd == Path("/work/api")
        assert runner.calls[1].interactive is False

    def test_inside_background_create_failure(self):
        runner = FakeRunner({
            "list-sessions": ok("main\n"),
            "attach": fail("could not create session"),
        })
        with pytest.raises(MultiplexerCommandError, match="attach --create-background"):
            _backend(runner).open(PROJECT, in_session=True)

    def test_probes_zellij_env_var(self, monkeypatch):
        monkeypatch.setenv("ZELLIJ", "0")
        runner = FakeRunner({"list-sessions": ok("api\n")})
        with pytest.raises(SwitchUnsupportedError):
            _backend(runner).open(PROJECT)


# ── list_sessions / has_session ──────────────────────────────────────────


class TestListSessions:
    def test_parses_short_output(self):
        runner = FakeRunner({"list-sessions": ok("api\nweb\n")})
        assert _backend(runner).list_sessions() == ["api", "web"]
        assert runner.calls[0].args == ["zellij", "list-sessions", "--short", "--no-formatting"]

    def test_no_sessions_on_stderr(self):
        runner = FakeRunner({"list-sessions": fail("No active zellij sessions found.")})
        assert _backend(runner).list_sessions() == []

    def test_no_sessions_on_stdout(self):
        runner = FakeRunner({"list-sessions": ok("No active zellij sessions found.\n")})
        assert _backend(runner).list_sessions() == []

    def test_other_failure_raises(self):
        runner = FakeRunner({"list-sessions": fail("error: unexpected argument", rc=2)})
        with pytest.raises(MultiplexerCommandError):
            _backend(runner).list_sessions()

    def test_has_session_exact_match(self):
        runner = FakeRunner({"list-sessions": ok("api-v2\n")})
        assert _backend(runner).has_session("api") is False


# ── kill_sessions ────────────────────────────────────────────────────────


class TestKillSessions:
    def test_outcomes_per_session(self):
        runner = FakeRunner({
            "kill-session": [fail('No session named "a" found.'), ok(), fail("boom")],
        })
        outcomes = _backend(runner).kill_sessions(["a", "b", "c"])

        assert [o.status for o in outcomes] == [NOT_FOUND, KILLED, ERROR]
        assert runner.calls[1].args == ["zellij", "kill-session", "b"]


# ── unique_session ───────────────────────────────────────────────────────


class TestUniqueSession:
    def test_outside_attaches_to_first_free_digit(self):
        runner = FakeRunner({"list-sessions": ok("0\n1\nwork\n")})
        assert _backend(runner).unique_session(in_session=False) == "2"
        assert runner.calls[-1].args == ["zellij", "attach", "--create", "2"]
        assert runner.calls[-1].cwd == HOME

    def test_single_list_query(self):
        runner = FakeRunner({"list-sessions": ok("0\n")})
        _backend(runner).unique_session(in_session=False)
        assert runner.subcommands.count("list-sessions") == 1

    def test_all_in_use(self):
        runner = FakeRunner({"list-sessions": ok("\n".join("0123456789"))})
        assert _backend(runner).unique_session(in_session=False) is None
        assert runner.subcommands == ["list-sessions"]

    def test_inside_creates_then_reports(self):
        runner = FakeRunner({"list-sessions": ok("0\n")})
        with pytest.raises(SwitchUnsupportedError, match="'1'"):
            _backend(runner).unique_session(in_session=True)
        assert runner.calls[-1].args == ["zellij", "attach", "--create-background", "1"]
