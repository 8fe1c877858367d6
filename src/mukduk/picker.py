"""Adapter for the external fzf fuzzy picker.

Candidates are sent newline-joined on fzf's stdin; the chosen line(s) come
back on stdout. An empty answer (Esc, Ctrl-C, no match) means the user
declined and is returned as an empty selection, not an error.

Key class: FzfPicker.
"""

from __future__ import annotations

import logging
import subprocess
from collections.abc import Iterable

from .errors import PickerError

logger = logging.getLogger(__name__)

# fzf exit codes: 0 selection made, 1 no match, 130 interrupted
_DECLINED_CODES = (1, 130)


class FzfPicker:
    """Run fzf over a list of strings."""

    def __init__(self, binary: str = "fzf") -> None:
        self.binary = binary

    def pick(self, candidates: Iterable[str], multi: bool = False) -> list[str]:
        """Return the selected candidates (empty if the user declined)."""
        cmd = [self.binary]
        if multi:
            cmd.append("--multi")
        text = "\n".join(str(c) for c in candidates)

        # subprocess.run writes and closes stdin before collecting stdout.
        # stderr is left alone: fzf draws its UI there.
        try:
            result = subprocess.run(cmd, input=text, stdout=subprocess.PIPE, text=True)
        except FileNotFoundError as e:
            raise PickerError(f"{self.binary} not found. Install fzf or pass the value explicitly.") from e

        if result.returncode != 0:
            if result.returncode not in _DECLINED_CODES:
                logger.warning("%s exited with status %d", self.binary, result.returncode)
            return []

        selected = [line.strip() for line in result.stdout.splitlines() if line.strip()]
        logger.debug("Picked: %s", selected)
        return selected

    def pick_one(self, candidates: Iterable[str]) -> str:
        """Return the single selected candidate, or "" if none."""
        selected = self.pick(candidates)
        return selected[0] if selected else ""
