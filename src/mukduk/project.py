"""Projects and project resolution.

A project is a directory on disk plus the session name derived from it.
Resolution turns CLI input into a Project:
  - explicit path (and optional name): trusted as given, no disk access.
  - nothing explicit: list the projects root, let the user pick one name
    through the fuzzy picker and map it back to its Project.

Key class: Project (frozen dataclass).
Key functions: list_directories(), get_projects(), resolve_project(),
  pick_project().
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING, Any

from .errors import NoProjectSelected, ProjectResolutionError

if TYPE_CHECKING:
    from .picker import FzfPicker

logger = logging.getLogger(__name__)


def session_safe_name(name: str) -> str:
    """Replace every '.' with '_' (multiplexers reject dots in session names)."""
    return name.replace(".", "_")


def _final_component(path: Path) -> str:
    """Return the last path component, or raise if it has none."""
    name = path.name
    if name in ("", ".", ".."):
        raise ProjectResolutionError(
            f"Cannot derive a project name from path '{path}'. Pass a name explicitly."
        )
    return name


@dataclass(frozen=True)
class Project:
    """A directory and the session name used for it.

    The name is made session-safe on construction. The substitution is
    idempotent, so copying a Project never alters its name again.
    """

    path: Path
    name: str

    def __post_init__(self) -> None:
        object.__setattr__(self, "path", Path(self.path))
        if not self.name:
            raise ProjectResolutionError(f"Project name for '{self.path}' cannot be empty.")
        object.__setattr__(self, "name", session_safe_name(self.name))

    @classmethod
    def from_path(cls, path: Path | str, name: str | None = None) -> Project:
        """Build a Project, deriving the name from the path when not given."""
        path = Path(path)
        return cls(path=path, name=name if name is not None else _final_component(path))

    def to_dict(self) -> dict[str, Any]:
        return {"path": str(self.path), "name": self.name}

    def __str__(self) -> str:
        return self.name


def list_directories(root: Path | str) -> list[Path]:
    """Return the immediate subdirectories of root, in filesystem order.

    Entries whose type cannot be determined are skipped with a warning.
    Raises OSError (FileNotFoundError, NotADirectoryError, PermissionError)
    if root itself cannot be listed.
    """
    dirs: list[Path] = []
    with os.scandir(root) as it:
        for entry in it:
            try:
                if entry.is_dir():
                    dirs.append(Path(entry.path))
            except OSError as e:
                logger.warning("An error occurred, skipping entry %s: %s", entry.path, e)
    return dirs


def get_projects(projects_dir: Path | str) -> list[Project]:
    """Return one Project per directory under projects_dir."""
    projects: list[Project] = []
    for d in list_directories(projects_dir):
        try:
            projects.append(Project.from_path(d))
        except ProjectResolutionError as e:
            logger.warning("Skipping %s: %s", d, e)
    return projects


def find_project(projects: list[Project], name: str) -> Project | None:
    """Return the first project called name.

    Names are not unique: distinct directories such as ``a.b`` and ``a_b``
    collapse to the same session name. The first one in listing order wins
    and the collision is logged.
    """
    matches = [p for p in projects if p.name == name]
    if not matches:
        return None
    if len(matches) > 1:
        logger.warning(
            "Project name '%s' is shared by %s; using %s",
            name,
            ", ".join(str(p.path) for p in matches),
            matches[0].path,
        )
    return matches[0]


def pick_project(projects_dir: Path | str, picker: FzfPicker | None = None) -> Project:
    """Let the user pick a project under projects_dir.

    Raises NoProjectSelected when the picker returns nothing usable.
    """
    if picker is None:
        from .picker import FzfPicker

        picker = FzfPicker()

    logger.info("Using projects dir: %s", projects_dir)
    try:
        projects = get_projects(projects_dir)
    except OSError as e:
        raise ProjectResolutionError(f"Cannot list projects dir {projects_dir}: {e}") from e
    choice = picker.pick_one([p.name for p in projects])
    project = find_project(projects, choice) if choice else None
    if project is None:
        raise NoProjectSelected(choice)

    logger.info("Selected: %s", project)
    return project


def resolve_project(
    projects_dir: Path | str | None,
    project_dir: Path | str | None = None,
    name: str | None = None,
    picker: FzfPicker | None = None,
) -> Project:
    """Build the Project to open from explicit arguments or an interactive pick."""
    if project_dir is not None:
        return Project.from_path(project_dir, name)
    if projects_dir is None:
        raise ProjectResolutionError("No project dir given and no projects dir configured.")
    return pick_project(projects_dir, picker)
