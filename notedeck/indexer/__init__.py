"""Note discovery - directory resolution, enumeration, parsing and search sources."""

from .enumerator import is_note_file, list_note_files
from .fts import SqliteSearchIndex
from .parser import ParsedNote, collapse_whitespace, parse_note_text
from .paths import PathSpec, filter_existing, resolve_directories
from .sources import CandidateSource, FilesystemSource, IndexedSource, SearchIndex

__all__ = [
    "CandidateSource",
    "FilesystemSource",
    "IndexedSource",
    "ParsedNote",
    "PathSpec",
    "SearchIndex",
    "SqliteSearchIndex",
    "collapse_whitespace",
    "filter_existing",
    "is_note_file",
    "list_note_files",
    "parse_note_text",
    "resolve_directories",
]
