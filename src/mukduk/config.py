"""Application configuration — config file plus environment variables.

Loads the TOML config file (projects dirs, default multiplexer) and the
environment (with .env support). Environment variables win over the file;
command-line options win over both and are applied by main.py.

Config file lookup:
  1. --config-path (must exist)
  2. $XDG_CONFIG_HOME/mukduk/config.toml (created empty if missing)
  3. ~/.mukdukrc.toml (created empty if missing)

File format:
    multiplexer = "tmux"

    [projects_dir]
    default = "~/projects"
    options = ["~/projects", "~/work"]

Key class: Config.
"""

from __future__ import annotations

import logging
import os
import tomllib
from pathlib import Path
from typing import Any

from dotenv import load_dotenv

from .errors import ConfigError
from .multiplexer import MULTIPLEXERS

logger = logging.getLogger(__name__)

CONFIG_DIR_NAME = "mukduk"
CONFIG_FILE_NAME = "config.toml"
HOME_CONFIG_FILE_NAME = ".mukdukrc.toml"


def _expand(path: str | Path) -> Path:
    return Path(os.path.expandvars(str(path))).expanduser()


class Config:
    """Application configuration loaded from the config file and environment."""

    def __init__(self, config_path: Path | str | None = None) -> None:
        load_dotenv()

        self.home = Path(os.getenv("HOME") or Path.home())
        self.config_path = self._find_config_path(config_path)
        data = self._read(self.config_path)

        projects = data.get("projects_dir", {})
        if not isinstance(projects, dict):
            raise ConfigError(f"{self.config_path}: 'projects_dir' must be a table")

        default = projects.get("default")
        if default is not None and not isinstance(default, str):
            raise ConfigError(f"{self.config_path}: 'projects_dir.default' must be a string")
        self.default_projects_dir: Path | None = _expand(default) if default else None

        options = projects.get("options", [])
        if not isinstance(options, list) or not all(isinstance(o, str) for o in options):
            raise ConfigError(f"{self.config_path}: 'projects_dir.options' must be a list of strings")
        self.projects_dir_options: list[Path] = [_expand(o) for o in options]

        self.multiplexer_backend: str = (
            os.getenv("MULTIPLEXER") or str(data.get("multiplexer", "tmux"))
        ).lower()
        if self.multiplexer_backend not in MULTIPLEXERS:
            raise ConfigError(
                f"Unknown multiplexer backend: {self.multiplexer_backend!r}. "
                f"Use one of: {', '.join(MULTIPLEXERS)}."
            )

        logger.debug(
            "Config initialized: path=%s, default_projects_dir=%s, options=%d, multiplexer=%s",
            self.config_path,
            self.default_projects_dir,
            len(self.projects_dir_options),
            self.multiplexer_backend,
        )

    def _find_config_path(self, config_path: Path | str | None) -> Path:
        """Return the config file to use, creating the default one if needed."""
        if config_path is not None:
            path = _expand(config_path).resolve()
            logger.debug("checking %s", path)
            if not path.is_file():
                raise ConfigError(f"Provided config path does not exist: {path}")
            return path

        xdg = os.getenv("XDG_CONFIG_HOME")
        if xdg and Path(xdg).is_dir():
            path = Path(xdg) / CONFIG_DIR_NAME / CONFIG_FILE_NAME
        else:
            path = self.home / HOME_CONFIG_FILE_NAME

        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            path.touch(exist_ok=True)
        except OSError as e:
            raise ConfigError(f"Cannot create config file {path}: {e}") from e
        return path

    @staticmethod
    def _read(path: Path) -> dict[str, Any]:
        try:
            with path.open("rb") as f:
                return tomllib.load(f)
        except tomllib.TOMLDecodeError as e:
            raise ConfigError(f"Invalid TOML in {path}: {e}") from e
        except OSError as e:
            raise ConfigError(f"Cannot read config file {path}: {e}") from e

    def projects_dir(self, override: Path | str | None = None) -> Path:
        """Return the projects root.

        Priority: override (--projects-dir), PROJECTS_DIR, the config file's
        projects_dir.default, PROJ_DIR.
        """
        for candidate in (
            override,
            os.getenv("PROJECTS_DIR"),
            self.default_projects_dir,
            os.getenv("PROJ_DIR"),
        ):
            if candidate:
                return _expand(candidate)
        raise ConfigError(
            "No projects dir configured. Pass --projects-dir, set PROJECTS_DIR, "
            f"or set projects_dir.default in {self.config_path}."
        )
