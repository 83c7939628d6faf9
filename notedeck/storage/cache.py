"""Metadata cache for note files, invalidated by modification time."""

import json
import logging
import os
from dataclasses import dataclass
from pathlib import Path

from notedeck.errors import ReadFailure
from notedeck.indexer.parser import collapse_whitespace, parse_note_text

logger = logging.getLogger(__name__)

CACHE_FORMAT_VERSION = 1


@dataclass(frozen=True)
class CacheEntry:
    """Cached metadata for a single note.

    Entries are immutable; a refresh swaps in a new entry, so ``mtime``
    always matches the content the other fields were derived from.
    """

    mtime: float
    title: str | None
    summary: str | None
    keywords: str | None
    searchable_text: str

    @property
    def display_summary(self) -> str | None:
        """Summary with whitespace collapsed for single-line display."""
        return collapse_whitespace(self.summary)

    def to_dict(self) -> dict:
        return {
            "mtime": self.mtime,
            "title": self.title,
            "summary": self.summary,
            "keywords": self.keywords,
            "searchable_text": self.searchable_text,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "CacheEntry":
        return cls(
            mtime=float(data["mtime"]),
            title=data.get("title"),
            summary=data.get("summary"),
            keywords=data.get("keywords"),
            searchable_text=data.get("searchable_text", ""),
        )


class MetadataCache:
    """Maps absolute note paths to their cached metadata."""

    def __init__(self) -> None:
        self._entries: dict[str, CacheEntry] = {}

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, path: object) -> bool:
        return path in self._entries

    def paths(self) -> list[str]:
        """All cached paths, stale ones included."""
        return list(self._entries)

    def lookup(self, path: str) -> CacheEntry | None:
        """Return the cached entry without touching the filesystem."""
        return self._entries.get(path)

    def refresh(self, path: str) -> CacheEntry | None:
        """Bring the entry for path up to date with the file on disk.

        The file is re-read only when its mtime is newer than the cached one.

        Returns:
            The current entry, or None if the file does not exist (a stale
            entry is kept until :meth:`invalidate_missing`).

        Raises:
            ReadFailure: if the file exists but cannot be read. The previous
                entry, if any, is left untouched.
        """
        try:
            mtime = os.stat(path).st_mtime
        except FileNotFoundError:
            return None
        except OSError as e:
            raise ReadFailure(path, e) from e

        existing = self._entries.get(path)
        if existing is not None and mtime <= existing.mtime:
            return existing

        try:
            with open(path, encoding="utf-8", errors="replace") as f:
                content = f.read()
        except FileNotFoundError:
            return None
        except OSError as e:
            raise ReadFailure(path, e) from e

        parsed = parse_note_text(content)
        entry = CacheEntry(
            mtime=mtime,
            title=parsed.title,
            summary=parsed.summary,
            keywords=parsed.keywords,
            searchable_text=_searchable_text(path, parsed.title, parsed.keywords, parsed.summary),
        )
        self._entries[path] = entry
        logger.debug(f"Cached {path}")
        return entry

    def invalidate_missing(self) -> list[str]:
        """Drop entries whose files no longer exist and return their paths."""
        removed = [path for path in self._entries if not os.path.exists(path)]
        for path in removed:
            del self._entries[path]
        if removed:
            logger.info(f"Dropped {len(removed)} stale cache entries")
        return removed

    def clear(self) -> None:
        """Drop all entries."""
        self._entries.clear()

    def save(self, cache_file: Path) -> None:
        """Save entries to a JSON file."""
        data = {
            "version": CACHE_FORMAT_VERSION,
            "entries": {path: entry.to_dict() for path, entry in self._entries.items()},
        }
        try:
            cache_file.parent.mkdir(parents=True, exist_ok=True)
            cache_file.write_text(json.dumps(data, ensure_ascii=False), encoding="utf-8")
            logger.debug(f"Saved {len(self._entries)} cache entries to {cache_file}")
        except OSError as e:
            logger.error(f"Failed to save cache: {e}")

    def load(self, cache_file: Path) -> int:
        """Merge entries from a JSON file saved by :meth:`save`.

        Returns:
            Number of entries loaded. A missing, corrupt or incompatible file
            loads nothing.
        """
        if not cache_file.exists():
            return 0

        try:
            data = json.loads(cache_file.read_text(encoding="utf-8"))
            if data.get("version") != CACHE_FORMAT_VERSION:
                logger.warning(f"Ignoring cache with unknown version: {cache_file}")
                return 0
            entries = {path: CacheEntry.from_dict(e) for path, e in data["entries"].items()}
        except (OSError, json.JSONDecodeError, KeyError, TypeError, ValueError, AttributeError) as e:
            logger.warning(f"Failed to load cache, starting empty: {e}")
            return 0

        self._entries.update(entries)
        logger.info(f"Loaded {len(entries)} cache entries")
        return len(entries)


def _searchable_text(path: str, *fields: str | None) -> str:
    return "\n".join([path, *(f for f in fields if f)])
