"""Application entry point — CLI parsing, logging setup and dispatch.

Commands (all under `mukduk project`):
  open     resolve a project (explicit or picked with fzf) and open it
  scratch  open a "scratch" session in $HOME (or the given dir/name)
  kill     pick sessions with fzf and kill them one by one
  home     open the first free single-digit session in $HOME
  list     print the projects found in the projects dir

Every MukdukError raised below is reported on stderr and becomes exit
status 1, except SwitchUnsupportedError: the session is ready and only the
switch is left to the user, so that notice exits 0. Nothing else in the
package prints errors or exits.
"""

from __future__ import annotations

import argparse
import json
import logging
import pprint
import sys
from pathlib import Path

import yaml

from .config import Config
from .errors import MukdukError, ProjectResolutionError, SwitchUnsupportedError
from .multiplexer import KILLED, MULTIPLEXERS, NOT_FOUND, KillOutcome, get_mux
from .picker import FzfPicker
from .project import Project, get_projects, resolve_project

logger = logging.getLogger(__name__)

OUTPUT_FORMATS = ("debug", "json", "json-r", "yaml")
SCRATCH_SESSION_NAME = "scratch"


def _add_session_args(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "-m", "--multiplexer",
        choices=MULTIPLEXERS,
        default=None,
        help="Which multiplexer to use (default: MULTIPLEXER or the config file, else tmux)",
    )


def _add_project_args(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("-n", "--name", default=None, help="Name of session, defaults to project_dir name")
    parser.add_argument("-d", "--project-dir", type=Path, default=None, help="Project directory to open")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="mukduk", description="Manage your terminal environment.")
    parser.add_argument("--projects-dir", type=Path, default=None, help="Directory holding your projects")
    parser.add_argument(
        "-c", "--config-path",
        type=Path,
        default=None,
        help="Override '$XDG_CONFIG_HOME/mukduk/config.toml' or '$HOME/.mukdukrc.toml'",
    )
    parser.add_argument(
        "-p", "--pick-projects-dir",
        action="store_true",
        help="Pick the projects dir among the options listed in the config file",
    )
    parser.add_argument("-v", "--verbose", action="count", default=0, help="More output (repeatable)")
    parser.add_argument("-q", "--quiet", action="store_true", help="Only report errors")

    commands = parser.add_subparsers(dest="command")
    project = commands.add_parser("project", help="Commands for managing projects.")
    sub = project.add_subparsers(dest="project_command")

    open_cmd = sub.add_parser("open", help="Open a session.")
    _add_project_args(open_cmd)
    _add_session_args(open_cmd)

    scratch = sub.add_parser("scratch", help="Open a scratch session. defaults: (name = scratch, path = $HOME)")
    _add_project_args(scratch)
    _add_session_args(scratch)

    kill = sub.add_parser("kill", help="Kill sessions.")
    _add_session_args(kill)

    home = sub.add_parser("home", help="Open new unique session in $HOME (available: 0-9).")
    _add_session_args(home)

    list_cmd = sub.add_parser("list", help="List all projects in your projects dir.")
    list_cmd.add_argument("-o", "--output", choices=OUTPUT_FORMATS, default="debug", help="Output format")

    return parser


def setup_logging(verbose: int = 0, quiet: bool = False) -> None:
    logging.basicConfig(
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        level=logging.WARNING,
        stream=sys.stderr,
    )
    if quiet:
        level = logging.ERROR
    elif verbose >= 2:
        level = logging.DEBUG
    elif verbose == 1:
        level = logging.INFO
    else:
        level = logging.WARNING
    logging.getLogger("mukduk").setLevel(level)


def pick_projects_dir(config: Config, default: Path, picker: FzfPicker) -> Path:
    """Let the user pick one of the configured projects dirs."""
    if not config.projects_dir_options:
        logger.warning("No projects_dir.options in %s, using %s", config.config_path, default)
        return default

    selected = picker.pick_one([str(d) for d in config.projects_dir_options])
    if not selected:
        return default
    try:
        chosen = Path(selected).expanduser().resolve(strict=True)
    except OSError as e:
        logger.info("Failed expanding projects dir selection, using default of %s: %s", default, e)
        return default
    logger.info("User picked %s as projects dir.", chosen)
    return chosen


def format_projects(projects: list[Project], output: str) -> str:
    data = [p.to_dict() for p in projects]
    if output == "json":
        return json.dumps(data, indent=2)
    if output == "json-r":
        return json.dumps(data)
    if output == "yaml":
        return yaml.safe_dump(data, sort_keys=False).rstrip("\n")
    return pprint.pformat(projects)


def _print_kill_outcomes(outcomes: list[KillOutcome]) -> None:
    for outcome in outcomes:
        if outcome.status == KILLED:
            print(f"Killed {outcome.session}.")
        elif outcome.status == NOT_FOUND:
            print(f"Session '{outcome.session}' not found.", file=sys.stderr)
        else:
            print(f"Error while killing {outcome.session}: {outcome.detail}", file=sys.stderr)


def handle_project_command(args: argparse.Namespace, config: Config, picker: FzfPicker) -> int:
    command = args.project_command
    mux_name = getattr(args, "multiplexer", None) or config.multiplexer_backend

    if command == "scratch":
        project = Project.from_path(
            args.project_dir or config.home,
            args.name or SCRATCH_SESSION_NAME,
        )
        get_mux(mux_name, home=config.home).open(project)
        return 0

    if command == "home":
        name = get_mux(mux_name, home=config.home).unique_session()
        if name is None:
            print("No unique session slot available (0-9 are all in use).", file=sys.stderr)
        else:
            print(name)
        return 0

    if command == "kill":
        mux = get_mux(mux_name, home=config.home)
        sessions = mux.list_sessions()
        logger.debug("sessions: %s", sessions)
        if not sessions:
            print("No sessions to kill.", file=sys.stderr)
            return 0
        picked = picker.pick(sessions, multi=True)
        if not picked:
            logger.warning("No session picked")
            return 0
        _print_kill_outcomes(mux.kill_sessions(picked))
        return 0

    projects_dir = None
    if command == "list" or args.project_dir is None:
        projects_dir = config.projects_dir(args.projects_dir)
        if args.pick_projects_dir:
            projects_dir = pick_projects_dir(config, projects_dir, picker)

    if command == "list":
        try:
            projects = get_projects(projects_dir)
        except OSError as e:
            raise ProjectResolutionError(f"Cannot list projects dir {projects_dir}: {e}") from e
        print(format_projects(projects, args.output))
        return 0

    # open
    project = resolve_project(projects_dir, args.project_dir, args.name, picker)
    get_mux(mux_name, home=config.home).open(project)
    return 0


def run(argv: list[str] | None = None, picker: FzfPicker | None = None) -> int:
    """Parse argv, run the command and return the exit status."""
    parser = build_parser()
    args = parser.parse_args(argv)
    setup_logging(args.verbose, args.quiet)

    if args.command is None or args.project_command is None:
        print("\nNo command was provided! To see commands use `--help`.\n", file=sys.stderr)
        return 1

    try:
        config = Config(args.config_path)
        return handle_project_command(args, config, picker or FzfPicker())
    except SwitchUnsupportedError as e:
        # The session exists; only the client switch is left to the user.
        logger.debug("Switch left to the user: %s", e)
        print(f"\n{e}\n", file=sys.stderr)
        return 0
    except MukdukError as e:
        logger.debug("Command failed", exc_info=True)
        print(f"{e}", file=sys.stderr)
        return 1


def main() -> None:
    """Main entry point."""
    sys.exit(run())


if __name__ == "__main__":
    main()
