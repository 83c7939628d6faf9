"""Candidate sources: where the list of notes to show comes from."""

import logging
from collections.abc import Iterable, Sequence
from typing import Protocol, runtime_checkable

from .enumerator import list_note_files

logger = logging.getLogger(__name__)


@runtime_checkable
class SearchIndex(Protocol):
    """External full-text index over note directories.

    Implementations raise :class:`notedeck.errors.IndexUnavailable` when they
    cannot answer.
    """

    def index_directories(self, dirs: Sequence[str]) -> None:
        """(Re)index the given roots. Must be idempotent."""
        ...

    def search(self, dirs: Sequence[str], query: str | None) -> list[str]:
        """Return absolute paths of matching notes.

        Most relevant first for a non-empty query, newest first otherwise.
        """
        ...


class CandidateSource(Protocol):
    """Produces the candidate note list for a set of roots."""

    #: True when the returned order is authoritative and must not be re-sorted.
    ranked: bool

    def source_files(self, dirs: Sequence[str], query: str | None) -> list[str]: ...


class FilesystemSource:
    """Lists every note under the roots. The query is ignored."""

    ranked = False

    def __init__(self, extensions: Iterable[str]) -> None:
        self.extensions = [e.lower() for e in extensions]

    def source_files(self, dirs: Sequence[str], query: str | None = None) -> list[str]:
        files: list[str] = []
        for root in dirs:
            # Sorted for a deterministic discovery order; callers sort by mtime
            files.extend(sorted(list_note_files(root, self.extensions, absolute=True)))
        logger.debug(f"Enumerated {len(files)} notes in {len(dirs)} directories")
        return files


class IndexedSource:
    """Delegates to a search index and keeps its order."""

    ranked = True

    def __init__(self, index: SearchIndex, max_results: int = 0) -> None:
        self.index = index
        self.max_results = max_results

    def reindex(self, dirs: Sequence[str]) -> None:
        logger.debug(f"Reindexing {len(dirs)} directories")
        self.index.index_directories(dirs)

    def source_files(self, dirs: Sequence[str], query: str | None = None) -> list[str]:
        results = list(self.index.search(dirs, query or None))
        if self.max_results:
            results = results[: self.max_results]
        return results
