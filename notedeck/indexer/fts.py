"""SQLite FTS5 search index for note directories.

Schema:
    CREATE TABLE notes (path TEXT PRIMARY KEY, mtime REAL NOT NULL);
    CREATE VIRTUAL TABLE notes_fts USING fts5(
        path UNINDEXED, title, content, tokenize='porter unicode61'
    );

Indexing is incremental: only files whose mtime changed since they were last
indexed are re-read, and rows for deleted files under the indexed roots are
pruned.
"""

import logging
import os
import sqlite3
from collections.abc import Iterable, Sequence
from pathlib import Path

from notedeck.errors import IndexUnavailable

from .enumerator import list_note_files
from .parser import parse_note_text

logger = logging.getLogger(__name__)

_SCHEMA = """
    CREATE TABLE IF NOT EXISTS notes (
        path TEXT PRIMARY KEY,
        mtime REAL NOT NULL
    );
    CREATE VIRTUAL TABLE IF NOT EXISTS notes_fts USING fts5(
        path UNINDEXED,
        title,
        content,
        tokenize='porter unicode61'
    );
"""


def build_match_query(query: str) -> str:
    """Quote each whitespace-separated term so user input is never FTS syntax.

    All terms are required (implicit AND).
    """
    terms = query.split()
    return " ".join('"' + term.replace('"', '""') + '"' for term in terms)


class SqliteSearchIndex:
    """Full-text index over note roots, stored in a single SQLite file."""

    def __init__(self, db_path: Path, extensions: Iterable[str]) -> None:
        self.db_path = Path(db_path)
        self.extensions = [e.lower() for e in extensions]
        self._conn: sqlite3.Connection | None = None

    def _connect(self) -> sqlite3.Connection:
        if self._conn is None:
            try:
                self.db_path.parent.mkdir(parents=True, exist_ok=True)
                conn = sqlite3.connect(self.db_path)
                conn.executescript(_SCHEMA)
            except (OSError, sqlite3.Error) as e:
                raise IndexUnavailable(f"Cannot open search index {self.db_path}: {e}") from e
            self._conn = conn
        return self._conn

    def close(self) -> None:
        if self._conn is not None:
            self._conn.close()
            self._conn = None

    def index_directories(self, dirs: Sequence[str]) -> None:
        conn = self._connect()
        updated = 0
        removed = 0
        try:
            known = dict(conn.execute("SELECT path, mtime FROM notes").fetchall())
            with conn:
                for root in dirs:
                    present = list_note_files(root, self.extensions, absolute=True)
                    for path in present:
                        try:
                            mtime = os.stat(path).st_mtime
                            if known.get(path) == mtime:
                                continue
                            with open(path, encoding="utf-8", errors="replace") as f:
                                content = f.read()
                        except OSError as e:
                            logger.warning(f"Failed to index {path}: {e}")
                            continue
                        self._store(conn, path, mtime, content)
                        updated += 1

                    for path in known:
                        if _is_under(path, [root]) and path not in present:
                            conn.execute("DELETE FROM notes WHERE path = ?", (path,))
                            conn.execute("DELETE FROM notes_fts WHERE path = ?", (path,))
                            removed += 1
        except sqlite3.Error as e:
            raise IndexUnavailable(f"Indexing failed: {e}") from e

        logger.info(f"Indexed {updated} notes, pruned {removed}")

    def _store(self, conn: sqlite3.Connection, path: str, mtime: float, content: str) -> None:
        title = parse_note_text(content).title or ""
        conn.execute(
            "INSERT INTO notes (path, mtime) VALUES (?, ?) "
            "ON CONFLICT(path) DO UPDATE SET mtime = excluded.mtime",
            (path, mtime),
        )
        conn.execute("DELETE FROM notes_fts WHERE path = ?", (path,))
        conn.execute(
            "INSERT INTO notes_fts (path, title, content) VALUES (?, ?, ?)",
            (path, title, content),
        )

    def search(self, dirs: Sequence[str], query: str | None) -> list[str]:
        conn = self._connect()
        match = build_match_query(query) if query else ""
        try:
            if match:
                # bm25() is lower for better matches; title hits weigh double
                rows = conn.execute(
                    "SELECT path FROM notes_fts WHERE notes_fts MATCH ? "
                    "ORDER BY bm25(notes_fts, 0.0, 2.0, 1.0)",
                    (match,),
                ).fetchall()
            else:
                rows = conn.execute("SELECT path FROM notes ORDER BY mtime DESC").fetchall()
        except sqlite3.Error as e:
            raise IndexUnavailable(f"Search failed: {e}") from e

        return [path for (path,) in rows if _is_under(path, dirs)]


def _is_under(path: str, dirs: Sequence[str]) -> bool:
    return any(path.startswith(os.path.join(d, "")) for d in dirs)
