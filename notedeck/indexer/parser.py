"""Title, summary and keyword extraction from note text."""

import re
from dataclasses import dataclass
from typing import Any

import yaml

# "#+TITLE: Foo" (org) or plain "TITLE: Foo"
_TITLE_RE = re.compile(r"^\s*(?:#\+)?title:(.*)$", re.IGNORECASE)
# "#+KEYWORDS: a b" / "#+FILETAGS: :a:b:"
_KEYWORDS_RE = re.compile(r"^\s*(?:#\+)?(?:keywords|filetags):(.*)$", re.IGNORECASE)
# YAML front-matter block
_FRONTMATTER_RE = re.compile(r"^---[ \t]*\r?\n(.*?)\r?\n---[ \t]*(?:\r?\n|$)", re.DOTALL)
_WHITESPACE_RE = re.compile(r"\s+")


@dataclass(frozen=True)
class ParsedNote:
    """Metadata extracted from a note."""

    title: str | None = None
    summary: str | None = None
    keywords: str | None = None


def parse_note_text(content: str) -> ParsedNote:
    """Extract title, summary and keywords in a single pass over the lines.

    Marker lines (``TITLE:``, ``KEYWORDS:``, ``FILETAGS:``, optionally
    ``#+``-prefixed) set their field, first occurrence wins, and never appear
    in the summary. Other lines starting with ``#`` are comments and are
    dropped wherever they occur. The first visible line becomes the title
    when none was set, and the remaining lines are the summary; otherwise the
    summary starts at that line. The summary is kept verbatim apart from
    trimming; see :func:`collapse_whitespace`.
    """
    frontmatter, body = _split_frontmatter(content)
    title = _clean(_as_text(frontmatter.get("title")))
    keywords = _clean(_as_text(frontmatter.get("keywords") or frontmatter.get("tags")))
    summary_lines: list[str] | None = None

    for line in body.splitlines(keepends=True):
        match = _TITLE_RE.match(line)
        if match:
            if title is None:
                title = _clean(match.group(1))
            continue

        match = _KEYWORDS_RE.match(line)
        if match:
            if keywords is None:
                keywords = _clean(match.group(1))
            continue

        stripped = line.strip()
        if stripped.startswith("#"):
            continue
        if summary_lines is not None:
            summary_lines.append(line)
            continue
        if not stripped:
            continue

        if title is None:
            title = stripped
            summary_lines = []
        else:
            summary_lines = [line]

    summary = _clean("".join(summary_lines)) if summary_lines is not None else None
    return ParsedNote(title=title, summary=summary, keywords=keywords)


def collapse_whitespace(text: str | None) -> str | None:
    """Collapse runs of whitespace, newlines included, to single spaces."""
    if text is None:
        return None
    return _WHITESPACE_RE.sub(" ", text).strip() or None


def _split_frontmatter(content: str) -> tuple[dict[str, Any], str]:
    """Split YAML front-matter from body text.

    Returns ``(metadata_dict, body)``; invalid or non-mapping front-matter is
    left in the body and ``metadata_dict`` is empty.
    """
    match = _FRONTMATTER_RE.match(content)
    if not match:
        return {}, content
    try:
        meta = yaml.safe_load(match.group(1))
    except yaml.YAMLError:
        return {}, content
    if not isinstance(meta, dict):
        return {}, content
    return meta, content[match.end() :]


def _as_text(value: Any) -> str | None:
    if value is None:
        return None
    if isinstance(value, (list, tuple)):
        return " ".join(str(v) for v in value)
    return str(value)


def _clean(text: str | None) -> str | None:
    if text is None:
        return None
    return text.strip() or None
