"""Creating, renaming, deleting and archiving notes."""

import logging
import os
import re
from datetime import datetime
from typing import Protocol

from .session import NoteSession, Scope

logger = logging.getLogger(__name__)


class NoteNamer(Protocol):
    """Derives a file name (without extension) from a note title."""

    def title_to_notename(self, title: str) -> str | None: ...


class SlugNamer:
    """Lower-cased title with runs of non-word characters turned into dashes."""

    def title_to_notename(self, title: str) -> str | None:
        slug = re.sub(r"[^\w]+", "-", title.strip().lower()).strip("-")
        return slug or None


class NoteActions:
    """File operations on notes that keep a session informed."""

    def __init__(
        self,
        session: NoteSession,
        namer: NoteNamer | None = None,
        extension: str | None = None,
        new_file_format: str = "%Y-%m-%dT%H%M",
        archive_directory: str = "_archive",
    ) -> None:
        self.session = session
        self.namer = namer or SlugNamer()
        self.extension = extension or session.extensions[0]
        self.new_file_format = new_file_format
        self.archive_directory = archive_directory

    def _ensure_extension(self, name: str) -> str:
        """Add the primary extension unless name already has a note extension."""
        _, dot, ext = name.rpartition(".")
        if dot and ext.lower() in self.session.extensions:
            return name
        return f"{name}.{self.extension}"

    def new_note(self, title: str | None = None, body: str = "") -> str:
        """Create a note in the first note directory.

        The name comes from the namer when a title is given, else from the
        current time.

        Raises:
            NoDirectoriesError: if no note directory exists.
            FileExistsError: if a note with that name already exists.
        """
        directory = self.session.target_directory()

        name = self.namer.title_to_notename(title) if title else None
        if not name:
            name = datetime.now().strftime(self.new_file_format)

        path = os.path.join(directory, self._ensure_extension(name))
        if os.path.exists(path):
            raise FileExistsError(f"Note already exists: {path}")

        content = body
        if title:
            content = f"{title}\n\n{body}" if body else f"{title}\n"

        with open(path, "x", encoding="utf-8") as f:
            f.write(content)

        logger.info(f"Created note: {path}")
        self.session.filesystem_changed(Scope.FILES, [path])
        return path

    def rename_note(self, path: str, new_name: str) -> str:
        """Rename a note within its directory.

        Raises:
            FileNotFoundError: if the note does not exist.
            FileExistsError: if the new name is taken.
        """
        if not os.path.isfile(path):
            raise FileNotFoundError(f"Note not found: {path}")
        if os.sep in new_name:
            raise ValueError(f"Note name must not contain a path separator: {new_name}")

        new_path = os.path.join(os.path.dirname(path), self._ensure_extension(new_name))
        if os.path.exists(new_path):
            raise FileExistsError(f"Note already exists: {new_path}")

        os.rename(path, new_path)
        logger.info(f"Renamed note: {path} -> {new_path}")
        self.session.filesystem_changed(Scope.FILES, [path, new_path])
        return new_path

    def delete_note(self, path: str) -> None:
        """Permanently delete a note."""
        if not os.path.isfile(path):
            raise FileNotFoundError(f"Note not found: {path}")

        os.remove(path)
        logger.info(f"Deleted note: {path}")
        self.session.filesystem_changed(Scope.FILES, [path])

    def archive_note(self, path: str) -> str:
        """Move a note into the archive directory of its note root.

        The archive directory is hidden from enumeration, so the note drops
        out of the list.
        """
        if not os.path.isfile(path):
            raise FileNotFoundError(f"Note not found: {path}")

        root = self.session.root_of(os.path.realpath(path)) or os.path.dirname(path)
        archive_dir = os.path.join(root, self.archive_directory)
        os.makedirs(archive_dir, exist_ok=True)

        new_path = os.path.join(archive_dir, os.path.basename(path))
        if os.path.exists(new_path):
            raise FileExistsError(f"Archived note already exists: {new_path}")

        os.rename(path, new_path)
        logger.info(f"Archived note: {path} -> {new_path}")
        self.session.filesystem_changed(Scope.FILES, [path, new_path])
        return new_path
