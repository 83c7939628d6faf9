"""Text rendering of a session's note list."""

import os
from datetime import datetime

from .session import NoteSession, ViewStatus


# ANSI color codes
class Colors:
    RESET = "\033[0m"
    BOLD = "\033[1m"
    DIM = "\033[2m"
    CYAN = "\033[36m"
    GREEN = "\033[32m"
    YELLOW = "\033[33m"
    RED = "\033[31m"
    BLUE = "\033[34m"
    MAGENTA = "\033[35m"


# Text shown instead of a list, per view status
STATUS_MESSAGES = {
    ViewStatus.NO_DIRECTORIES: "No note directories. Configure NOTEDECK_DIRECTORIES.",
    ViewStatus.NO_FILES: "No notes yet. Use /new to create one.",
    ViewStatus.NO_MATCHES: "No notes match the filter.",
}


def format_age(mtime: float, now: float | None = None) -> str:
    """Format a modification time relative to now (e.g. '5m', '3h', '2d')."""
    if now is None:
        now = datetime.now().timestamp()
    seconds = max(0, int(now - mtime))

    if seconds < 60:
        return "now"
    if seconds < 3600:
        return f"{seconds // 60}m"
    if seconds < 86400:
        return f"{seconds // 3600}h"
    if seconds < 86400 * 30:
        return f"{seconds // 86400}d"
    return datetime.fromtimestamp(mtime).strftime("%Y-%m-%d")


def format_note_list(
    session: NoteSession,
    width: int = 80,
    max_notes: int = 50,
    color: bool = True,
    now: float | None = None,
) -> str:
    """Format the current note list, one numbered line per note.

    Rows show the title (file name when the note has none), the summary with
    whitespace collapsed, and the age, truncated to width.
    """
    c = Colors if color else _NoColors
    lines = [_header(session, c)]

    status = session.status()
    if status is not ViewStatus.FILES:
        lines.append(f"{c.DIM}{STATUS_MESSAGES[status]}{c.RESET}")
        return "\n".join(lines)

    for number, path in enumerate(session.current_files[:max_notes], start=1):
        entry = session.entry(path)
        if entry is None:
            continue

        title = entry.title or os.path.splitext(os.path.basename(path))[0]
        summary = entry.display_summary or ""
        age = format_age(entry.mtime, now)

        prefix = f"{number:3}. "
        room = width - len(prefix) - len(age) - 1
        title_text = _truncate(title, room)
        summary_room = room - len(title_text) - 1
        summary_text = _truncate(summary, summary_room) if summary and summary_room > 5 else ""

        row = f"{prefix}{c.BOLD}{title_text}{c.RESET}"
        used = len(title_text)
        if summary_text:
            row += f" {c.DIM}{summary_text}{c.RESET}"
            used += len(summary_text) + 1
        row += " " * max(1, room - used + 1) + f"{c.DIM}{age}{c.RESET}"
        lines.append(row)

    hidden = len(session.current_files) - max_notes
    if hidden > 0:
        lines.append(f"{c.DIM}... and {hidden} more notes{c.RESET}")

    return "\n".join(lines)


def _header(session: NoteSession, c: type) -> str:
    parts = [f"{len(session.current_files)}/{len(session.all_files)} notes"]
    if session.query:
        parts.append(f"query: {session.query}")
    if session.filter:
        parts.append(f"filter: {session.filter}")
    return f"{c.CYAN}{' | '.join(parts)}{c.RESET}"


def _truncate(text: str, width: int) -> str:
    if width <= 0:
        return ""
    if len(text) <= width:
        return text
    if width == 1:
        return text[:1]
    return text[: width - 1] + "…"


class _NoColors:
    RESET = BOLD = DIM = CYAN = GREEN = YELLOW = RED = BLUE = MAGENTA = ""
