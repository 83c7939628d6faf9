"""Tests for note file enumeration."""

import os
from pathlib import Path

from helpers import write_note

from notedeck.indexer.enumerator import has_note_extension, is_note_file, list_note_files

EXTENSIONS = ["org", "txt", "md"]


def make_tree(root: Path) -> None:
    write_note(root / "top.org", "top")
    write_note(root / "readme.md", "readme")
    write_note(root / "image.png", "not a note")
    write_note(root / "sub" / "deep" / "nested.txt", "nested")
    write_note(root / ".git" / "config.org", "hidden")
    write_note(root / "_archive" / "old.org", "archived")
    write_note(root / "#private" / "secret.org", "private")
    write_note(root / ".#top.org", "lock file")
    write_note(root / "#top.org#", "autosave")


class TestHasNoteExtension:
    """Tests for has_note_extension."""

    def test_matches_configured_extensions(self):
        assert has_note_extension("a.org", {"org"}) is True
        assert has_note_extension("a.ORG", {"org"}) is True
        assert has_note_extension("a.org.bak", {"org"}) is False
        assert has_note_extension("org", {"org"}) is False


class TestListNoteFiles:
    """Tests for list_note_files."""

    def test_lists_relative_paths(self, tmp_path: Path):
        make_tree(tmp_path)

        result = list_note_files(str(tmp_path), EXTENSIONS)

        assert result == {"top.org", "readme.md", os.path.join("sub", "deep", "nested.txt")}

    def test_lists_absolute_paths(self, tmp_path: Path):
        make_tree(tmp_path)

        result = list_note_files(str(tmp_path), EXTENSIONS, absolute=True)

        assert str(tmp_path / "top.org") in result
        assert all(os.path.isabs(p) for p in result)

    def test_skips_hidden_underscore_and_hash_entries(self, tmp_path: Path):
        make_tree(tmp_path)

        result = list_note_files(str(tmp_path), EXTENSIONS)

        assert not any(p.startswith((".", "_", "#")) for p in result)

    def test_primary_extension_only(self, tmp_path: Path):
        make_tree(tmp_path)

        assert list_note_files(str(tmp_path), ["org"]) == {"top.org"}

    def test_missing_root_is_empty(self, tmp_path: Path):
        assert list_note_files(str(tmp_path / "missing"), EXTENSIONS) == set()

    def test_root_that_is_a_file_is_empty(self, tmp_path: Path):
        file_path = write_note(tmp_path / "note.org", "x")

        assert list_note_files(str(file_path), EXTENSIONS) == set()


class TestIsNoteFile:
    """Tests for is_note_file."""

    def test_note_under_root(self, tmp_path: Path):
        make_tree(tmp_path)

        assert is_note_file(str(tmp_path / "sub" / "deep" / "nested.txt"), [str(tmp_path)], EXTENSIONS)

    def test_rejects_hidden_subtree(self, tmp_path: Path):
        make_tree(tmp_path)

        assert not is_note_file(str(tmp_path / "_archive" / "old.org"), [str(tmp_path)], EXTENSIONS)

    def test_rejects_wrong_extension(self, tmp_path: Path):
        make_tree(tmp_path)

        assert not is_note_file(str(tmp_path / "image.png"), [str(tmp_path)], EXTENSIONS)

    def test_rejects_outside_roots(self, tmp_path: Path):
        outside = write_note(tmp_path / "outside" / "x.org", "x")
        root = tmp_path / "notes"
        root.mkdir()

        assert not is_note_file(str(outside), [str(root)], EXTENSIONS)

    def test_rejects_missing_file(self, tmp_path: Path):
        assert not is_note_file(str(tmp_path / "gone.org"), [str(tmp_path)], EXTENSIONS)
