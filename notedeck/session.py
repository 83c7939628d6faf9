"""Note session: keeps the note list coherent with the filesystem.

A :class:`NoteSession` owns the metadata cache, the candidate source and the
two ordered lists a browsing view shows:

- ``all_files``: every candidate note, newest first, or in search-index
  order when an index is configured.
- ``current_files``: the subsequence of ``all_files`` matching the live
  filter (the same list object when no filter is active).

Events (files saved, directories changed, filter or query edited, resize,
visibility) update the lists and request view work, which is deferred until
the view is visible.
"""

import logging
import os
import re
from collections.abc import Iterable, Sequence
from enum import Enum
from pathlib import Path
from typing import Protocol

from notedeck.config import Settings
from notedeck.errors import IndexUnavailable, NoDirectoriesError, ReadFailure
from notedeck.indexer.enumerator import is_note_file
from notedeck.indexer.fts import SqliteSearchIndex
from notedeck.indexer.paths import PathSpec, filter_existing, resolve_directories
from notedeck.indexer.sources import CandidateSource, FilesystemSource, IndexedSource, SearchIndex
from notedeck.pending import PendingUpdate, PendingUpdates
from notedeck.storage.cache import CacheEntry, MetadataCache

logger = logging.getLogger(__name__)


class Scope(str, Enum):
    """How much of the filesystem a change notification may affect."""

    DIRS = "dirs"
    FILES = "files"
    ANYTHING = "anything"


class ViewStatus(Enum):
    """What the view should display."""

    NO_DIRECTORIES = "no_directories"
    NO_FILES = "no_files"
    NO_MATCHES = "no_matches"
    FILES = "files"


class View(Protocol):
    """Renders a session. Called only while the view is visible."""

    def render(self, session: "NoteSession") -> None: ...


class NoteSession:
    """Refresh and filter pipeline for one browsing view."""

    def __init__(
        self,
        directory_specs: Sequence[PathSpec],
        extensions: Iterable[str],
        source: CandidateSource | None = None,
        *,
        filter_regexp: bool = True,
        filter_ignore_case: bool = False,
        cache_file: Path | None = None,
        view: View | None = None,
    ) -> None:
        self.directory_specs = list(directory_specs)
        self.extensions = [e.lower() for e in extensions]
        self.source = source or FilesystemSource(self.extensions)
        self.filter_regexp = filter_regexp
        self.filter_ignore_case = filter_ignore_case
        self.cache_file = cache_file
        self.view = view

        self.cache = MetadataCache()
        self.pending = PendingUpdates()
        self.directories: list[str] = []
        self.all_files: list[str] = []
        self.current_files: list[str] = self.all_files
        self.filter: str | None = None
        self.query: str | None = None
        self.visible = True
        self._pattern: re.Pattern[str] | None = None

        if cache_file is not None:
            self.cache.load(cache_file)

    @classmethod
    def from_settings(
        cls,
        settings: Settings,
        search_index: SearchIndex | None = None,
        view: View | None = None,
    ) -> "NoteSession":
        """Build a session, choosing the candidate source once from settings."""
        source: CandidateSource
        if settings.use_search_index:
            index = search_index or SqliteSearchIndex(
                settings.search_index_path, settings.extensions
            )
            source = IndexedSource(index, settings.max_results)
        else:
            source = FilesystemSource(settings.extensions)

        return cls(
            settings.directory_specs,
            settings.extensions,
            source,
            filter_regexp=settings.filter_regexp,
            filter_ignore_case=settings.filter_ignore_case,
            cache_file=settings.cache_file,
            view=view,
        )

    # ------------------------------------------------------------------
    # Directories
    # ------------------------------------------------------------------

    def load(self) -> None:
        """Resolve the configured directories and build the note list.

        Raises:
            ConfigurationError: if a directory expression is malformed. The
                session is left unchanged.
        """
        self.directories = filter_existing(resolve_directories(self.directory_specs))
        logger.info(f"Note directories: {', '.join(self.directories) or '(none)'}")
        self.filesystem_changed(Scope.ANYTHING)

    def reset_directories(self, directory_specs: Sequence[PathSpec] | None = None) -> None:
        """Re-resolve directories from scratch, dropping the whole cache."""
        specs = self.directory_specs if directory_specs is None else list(directory_specs)
        directories = filter_existing(resolve_directories(specs))
        self.directory_specs = specs
        self.directories = directories
        self.cache.clear()
        self.filesystem_changed(Scope.ANYTHING)

    def target_directory(self) -> str:
        """Directory new notes are created in.

        Raises:
            NoDirectoriesError: if no configured directory exists.
        """
        if not self.directories:
            raise NoDirectoriesError()
        return self.directories[0]

    def root_of(self, path: str) -> str | None:
        """Return the note directory containing path, if any."""
        for root in self.directories:
            if path.startswith(os.path.join(root, "")):
                return root
        return None

    # ------------------------------------------------------------------
    # Triggers
    # ------------------------------------------------------------------

    def filesystem_changed(self, scope: Scope | str, targets: Iterable[str] | None = None) -> None:
        """Bring the note list up to date after a filesystem change.

        Args:
            scope: FILES with explicit targets takes the incremental path;
                DIRS and ANYTHING re-source the whole list.
            targets: Changed files (FILES) or directories (DIRS).
        """
        scope = Scope(scope)
        targets = [os.path.abspath(t) for t in targets] if targets is not None else None

        if scope is Scope.FILES and targets is not None:
            self._reindex(self._roots_containing(targets))
            if self.source.ranked and self.query:
                # Only the index knows whether a changed note matches the query
                self._resource()
            else:
                self._update_files(targets)
        elif scope is Scope.DIRS and targets:
            self._reindex(self._roots_containing(targets))
            self._resource()
        else:
            self._reindex(self.directories)
            self._resource()

        self.pending.escalate(PendingUpdate.RECOMPUTE)
        self.flush()

    def set_query(self, query: str | None) -> None:
        """Narrow the candidate set through the search index.

        Without a ranked source the query is only stored.
        """
        self.query = query or None
        if not self.source.ranked:
            return
        self._resource()
        self.pending.escalate(PendingUpdate.RECOMPUTE)
        self.flush()

    def set_filter(self, text: str | None) -> None:
        """Change the live filter. Never touches the filesystem or the index."""
        self.filter = text or None
        self._pattern = self._compile_filter(self.filter)
        self.pending.escalate(PendingUpdate.RECOMPUTE)
        self.flush()

    def resize(self) -> None:
        self.pending.escalate(PendingUpdate.REDRAW)
        self.flush()

    def set_visible(self, visible: bool) -> None:
        self.visible = visible
        self.flush()

    def note_opened(self, path: str) -> None:
        self.filesystem_changed(Scope.FILES, [path])

    def note_saved(self, path: str) -> None:
        self.filesystem_changed(Scope.FILES, [path])

    def flush(self) -> PendingUpdate:
        """Run deferred view work if the view is visible."""
        return self.pending.flush_if_observable(self.visible, self.recompute, self.render)

    # ------------------------------------------------------------------
    # Pipeline
    # ------------------------------------------------------------------

    def recompute(self) -> None:
        """Recompute current_files from all_files and the filter."""
        if self._pattern is None:
            self.current_files = self.all_files
            return
        self.current_files = [p for p in self.all_files if self._matches(p)]

    def render(self) -> None:
        if self.view is not None:
            self.view.render(self)

    def _matches(self, path: str) -> bool:
        entry = self.cache.lookup(path)
        return entry is not None and self._pattern.search(entry.searchable_text) is not None

    def _compile_filter(self, text: str | None) -> re.Pattern[str] | None:
        if text is None:
            return None
        flags = re.IGNORECASE if self.filter_ignore_case else 0
        if self.filter_regexp:
            try:
                return re.compile(text, flags)
            except re.error as e:
                # Half-typed patterns such as "foo(" match literally
                logger.debug(f"Invalid filter regexp {text!r}: {e}")
        return re.compile(re.escape(text), flags)

    def _resource(self) -> None:
        """Rebuild all_files from the candidate source."""
        if not self.directories:
            self.all_files = []
            return

        try:
            candidates = self.source.source_files(self.directories, self.query)
        except IndexUnavailable as e:
            logger.warning(f"Search index unavailable, keeping note list: {e}")
            return

        files = [path for path in candidates if self._refresh_entry(path) is not None]
        if not self.source.ranked:
            self._sort_by_mtime(files)
        self.all_files = files
        logger.debug(f"Note list rebuilt: {len(files)} notes")

    def _update_files(self, targets: list[str]) -> None:
        """Apply changes to a few known files without re-enumerating."""
        present = set(self.all_files)
        gone: set[str] = set()
        added: list[str] = []

        for path in targets:
            entry = self._refresh_entry(path)
            if entry is None:
                gone.add(path)
            elif (
                path not in present
                and path not in added
                and is_note_file(path, self.directories, self.extensions)
            ):
                added.append(path)

        files = [p for p in self.all_files if p not in gone]
        if self.source.ranked:
            # Index order stays as returned; new notes go where their mtime puts them
            for path in added:
                self._insert_by_mtime(files, path)
        else:
            files.extend(added)
            self._sort_by_mtime(files)
        self.all_files = files

    def _refresh_entry(self, path: str) -> CacheEntry | None:
        try:
            return self.cache.refresh(path)
        except ReadFailure as e:
            logger.warning(f"{e}")
            return None

    def _reindex(self, dirs: list[str]) -> None:
        if not dirs or not isinstance(self.source, IndexedSource):
            return
        try:
            self.source.reindex(dirs)
        except IndexUnavailable as e:
            logger.warning(f"Search index unavailable, not reindexed: {e}")

    def _roots_containing(self, paths: Iterable[str]) -> list[str]:
        roots: list[str] = []
        for path in paths:
            root = self.root_of(path) or (path if path in self.directories else None)
            if root is not None and root not in roots:
                roots.append(root)
        return roots

    def _mtime(self, path: str) -> float:
        entry = self.cache.lookup(path)
        return entry.mtime if entry is not None else 0.0

    def _sort_by_mtime(self, files: list[str]) -> None:
        files.sort(key=self._mtime, reverse=True)

    def _insert_by_mtime(self, files: list[str], path: str) -> None:
        mtime = self._mtime(path)
        for i, other in enumerate(files):
            if self._mtime(other) < mtime:
                files.insert(i, path)
                return
        files.append(path)

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def entry(self, path: str) -> CacheEntry | None:
        """Cached metadata for display; None once the file is gone."""
        if not os.path.exists(path):
            return None
        return self.cache.lookup(path)

    def title(self, path: str) -> str | None:
        entry = self.entry(path)
        return entry.title if entry else None

    def summary(self, path: str) -> str | None:
        entry = self.entry(path)
        return entry.display_summary if entry else None

    def status(self) -> ViewStatus:
        if not self.directories:
            return ViewStatus.NO_DIRECTORIES
        if not self.all_files:
            return ViewStatus.NO_FILES
        if not self.current_files:
            return ViewStatus.NO_MATCHES
        return ViewStatus.FILES

    # ------------------------------------------------------------------
    # Maintenance
    # ------------------------------------------------------------------

    def collect_garbage(self) -> list[str]:
        """Drop cache entries for deleted files."""
        return self.cache.invalidate_missing()

    def save_cache(self) -> None:
        if self.cache_file is not None:
            self.cache.save(self.cache_file)
