"""Helpers shared by the test modules."""

import os
from pathlib import Path

from notedeck.session import NoteSession

# Fixed base time so mtime ordering never depends on the clock
BASE_MTIME = 1_700_000_000.0


def write_note(path: Path, content: str, mtime: float | None = None) -> Path:
    """Write a note and optionally pin its modification time."""
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content, encoding="utf-8")
    if mtime is not None:
        os.utime(path, (mtime, mtime))
    return path


class RecordingView:
    """View that records how often it was rendered."""

    def __init__(self) -> None:
        self.renders: list[list[str]] = []

    def render(self, session: NoteSession) -> None:
        self.renders.append(list(session.current_files))
