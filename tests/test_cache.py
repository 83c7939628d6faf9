"""Tests for the metadata cache."""

import json
import os
from pathlib import Path
from unittest.mock import patch

import pytest
from helpers import BASE_MTIME, write_note

from notedeck.errors import ReadFailure
from notedeck.storage.cache import CacheEntry, MetadataCache


class TestCacheEntry:
    """Tests for CacheEntry dataclass."""

    def test_display_summary_collapses_whitespace(self):
        entry = CacheEntry(
            mtime=1.0, title="T", summary="one\n\n  two", keywords=None, searchable_text=""
        )
        assert entry.display_summary == "one two"

    def test_to_dict_and_from_dict(self):
        entry = CacheEntry(
            mtime=1234567890.5,
            title="Title",
            summary="Summary",
            keywords="a b",
            searchable_text="/x.org\nTitle\na b\nSummary",
        )

        restored = CacheEntry.from_dict(entry.to_dict())

        assert restored == entry


class TestMetadataCache:
    """Tests for MetadataCache."""

    def test_refresh_parses_new_file(self, tmp_path: Path):
        path = write_note(tmp_path / "a.org", "Hello\n\nWorld", BASE_MTIME)
        cache = MetadataCache()

        entry = cache.refresh(str(path))

        assert entry is not None
        assert entry.mtime == BASE_MTIME
        assert entry.title == "Hello"
        assert entry.summary == "World"
        assert cache.lookup(str(path)) is entry

    def test_searchable_text_includes_path_title_keywords_summary(self, tmp_path: Path):
        path = write_note(tmp_path / "n.org", "#+KEYWORDS: kw\nTitle\nBody")
        cache = MetadataCache()

        entry = cache.refresh(str(path))

        assert entry.searchable_text == f"{path}\nTitle\nkw\nBody"

    def test_refresh_twice_is_a_no_op(self, tmp_path: Path):
        path = write_note(tmp_path / "a.org", "Hello", BASE_MTIME)
        cache = MetadataCache()

        first = cache.refresh(str(path))
        with patch("builtins.open") as mock_open:
            second = cache.refresh(str(path))

        assert second is first
        mock_open.assert_not_called()

    def test_refresh_rereads_when_mtime_is_newer(self, tmp_path: Path):
        path = write_note(tmp_path / "a.org", "Old title", BASE_MTIME)
        cache = MetadataCache()
        cache.refresh(str(path))

        write_note(path, "New title", BASE_MTIME + 10)
        entry = cache.refresh(str(path))

        assert entry.title == "New title"
        assert entry.mtime == BASE_MTIME + 10

    def test_refresh_ignores_content_change_with_same_mtime(self, tmp_path: Path):
        path = write_note(tmp_path / "a.org", "Old title", BASE_MTIME)
        cache = MetadataCache()
        cache.refresh(str(path))

        write_note(path, "New title", BASE_MTIME)

        assert cache.refresh(str(path)).title == "Old title"

    def test_refresh_missing_file_keeps_stale_entry(self, tmp_path: Path):
        path = write_note(tmp_path / "a.org", "Hello", BASE_MTIME)
        cache = MetadataCache()
        entry = cache.refresh(str(path))

        path.unlink()

        assert cache.refresh(str(path)) is None
        assert cache.lookup(str(path)) is entry

    def test_read_failure_keeps_previous_entry(self, tmp_path: Path):
        path = write_note(tmp_path / "a.org", "Hello", BASE_MTIME)
        cache = MetadataCache()
        entry = cache.refresh(str(path))
        os.utime(path, (BASE_MTIME + 5, BASE_MTIME + 5))

        with patch("builtins.open", side_effect=PermissionError("denied")):
            with pytest.raises(ReadFailure) as exc_info:
                cache.refresh(str(path))

        assert exc_info.value.path == str(path)
        assert cache.lookup(str(path)) is entry

    def test_undecodable_bytes_are_replaced(self, tmp_path: Path):
        path = tmp_path / "bin.org"
        path.write_bytes(b"Caf\xe9 title\nbody")
        cache = MetadataCache()

        entry = cache.refresh(str(path))

        assert entry.title.startswith("Caf")
        assert entry.summary == "body"

    def test_invalidate_missing(self, tmp_path: Path):
        keep = write_note(tmp_path / "keep.org", "Keep")
        gone = write_note(tmp_path / "gone.org", "Gone")
        cache = MetadataCache()
        cache.refresh(str(keep))
        cache.refresh(str(gone))

        gone.unlink()
        removed = cache.invalidate_missing()

        assert removed == [str(gone)]
        assert cache.lookup(str(gone)) is None
        assert cache.lookup(str(keep)) is not None
        assert cache.invalidate_missing() == []

    def test_clear(self, tmp_path: Path):
        path = write_note(tmp_path / "a.org", "Hello")
        cache = MetadataCache()
        cache.refresh(str(path))

        cache.clear()

        assert len(cache) == 0
        assert cache.lookup(str(path)) is None


class TestCachePersistence:
    """Tests for saving and loading the cache."""

    def test_save_and_load(self, tmp_path: Path):
        path = write_note(tmp_path / "a.org", "Hello\n\nWorld", BASE_MTIME)
        cache_file = tmp_path / "state" / "cache.json"
        cache = MetadataCache()
        entry = cache.refresh(str(path))

        cache.save(cache_file)
        restored = MetadataCache()
        count = restored.load(cache_file)

        assert count == 1
        assert restored.lookup(str(path)) == entry

    def test_loaded_entry_skips_reparse_of_unchanged_file(self, tmp_path: Path):
        path = write_note(tmp_path / "a.org", "Hello", BASE_MTIME)
        cache_file = tmp_path / "cache.json"
        cache = MetadataCache()
        cache.refresh(str(path))
        cache.save(cache_file)

        restored = MetadataCache()
        restored.load(cache_file)
        with patch("builtins.open") as mock_open:
            entry = restored.refresh(str(path))

        mock_open.assert_not_called()
        assert entry.title == "Hello"

    def test_load_missing_file(self, tmp_path: Path):
        assert MetadataCache().load(tmp_path / "missing.json") == 0

    def test_load_corrupt_file(self, tmp_path: Path):
        cache_file = tmp_path / "cache.json"
        cache_file.write_text("{not json")

        cache = MetadataCache()

        assert cache.load(cache_file) == 0
        assert len(cache) == 0

    def test_load_unknown_version(self, tmp_path: Path):
        cache_file = tmp_path / "cache.json"
        cache_file.write_text(json.dumps({"version": 99, "entries": {}}))

        assert MetadataCache().load(cache_file) == 0
