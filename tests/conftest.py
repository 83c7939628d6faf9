"""Shared test fixtures."""

import os
from pathlib import Path

import pytest
from helpers import BASE_MTIME, RecordingView, write_note

from notedeck.session import NoteSession


@pytest.fixture
def notes_dir(tmp_path: Path) -> Path:
    """Create a note root with two notes: b.org is newer than a.org."""
    root = tmp_path / "notes"
    root.mkdir()
    root = Path(os.path.realpath(root))

    write_note(root / "a.org", "Hello\n\nWorld", BASE_MTIME)
    write_note(root / "b.org", "#+TITLE: Second\nBody text", BASE_MTIME + 1)

    return root


@pytest.fixture
def session(notes_dir: Path) -> NoteSession:
    """A loaded session over notes_dir."""
    session = NoteSession([str(notes_dir)], ["org", "txt", "md"])
    session.load()
    return session


@pytest.fixture
def view() -> RecordingView:
    return RecordingView()
