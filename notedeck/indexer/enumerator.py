"""Note file enumeration under a root directory."""

import logging
import os
from collections.abc import Iterable

logger = logging.getLogger(__name__)

# Directories and files starting with these are never listed (hidden, archive
# and private subtrees, editor lock and autosave files).
HIDDEN_PREFIXES = (".", "_", "#")


def has_note_extension(name: str, extensions: Iterable[str]) -> bool:
    """Check whether a file name carries one of the note extensions."""
    _, dot, ext = name.rpartition(".")
    return bool(dot) and ext.lower() in extensions


def list_note_files(root: str, extensions: Iterable[str], absolute: bool = False) -> set[str]:
    """List note files under root, recursively.

    Args:
        root: Directory to scan.
        extensions: Accepted extensions, without the leading dot.
        absolute: Return absolute paths instead of paths relative to root.

    Returns:
        Set of paths. Missing or unreadable roots give an empty set.
    """
    extensions = {e.lower() for e in extensions}
    found: set[str] = set()

    for dirpath, dirnames, filenames in os.walk(root, onerror=_log_walk_error):
        # Prune hidden subtrees in place so os.walk never descends into them
        dirnames[:] = [d for d in dirnames if not d.startswith(HIDDEN_PREFIXES)]

        for name in filenames:
            if name.startswith(HIDDEN_PREFIXES) or not has_note_extension(name, extensions):
                continue
            full_path = os.path.join(dirpath, name)
            if not os.path.isfile(full_path):
                continue
            found.add(full_path if absolute else os.path.relpath(full_path, root))

    return found


def is_note_file(path: str, roots: Iterable[str], extensions: Iterable[str]) -> bool:
    """Check whether an absolute path is a note that enumeration would list."""
    extensions = {e.lower() for e in extensions}
    name = os.path.basename(path)
    if name.startswith(HIDDEN_PREFIXES) or not has_note_extension(name, extensions):
        return False

    for root in roots:
        try:
            rel = os.path.relpath(path, root)
        except ValueError:
            continue
        parts = rel.split(os.sep)
        if parts[0] == os.pardir:
            continue
        if any(part.startswith(HIDDEN_PREFIXES) for part in parts[:-1]):
            continue
        return os.path.isfile(path)

    return False


def _log_walk_error(error: OSError) -> None:
    logger.debug(f"Cannot list {error.filename}: {error.strerror}")
