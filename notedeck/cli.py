"""CLI interface for notedeck - browse and filter your notes from the terminal."""

import argparse
import logging
import shutil
import sys

from notedeck.actions import NoteActions
from notedeck.config import Settings, get_settings
from notedeck.errors import NotedeckError
from notedeck.indexer.sources import IndexedSource
from notedeck.render import Colors, format_note_list
from notedeck.session import NoteSession, Scope

HELP_TEXT = f"""
{Colors.BOLD}notedeck commands:{Colors.RESET}
  <text>            - Filter notes (empty input keeps the filter)
  /filter [text]    - Set or clear the filter
  /query [text]     - Set or clear the search index query
  /clear            - Clear filter and query
  /refresh          - Rescan all note directories
  /new [title]      - Create a note
  /rename N name    - Rename note number N
  /delete N         - Delete note number N
  /archive N        - Archive note number N
  /gc               - Drop cached metadata of deleted notes
  /help             - Show this help message
  exit              - Exit
"""


def setup_logging(level: str = "INFO") -> None:
    """Configure logging for CLI."""
    logging.basicConfig(
        format="%(message)s",
        level=getattr(logging, level.upper(), logging.INFO),
    )


class TerminalView:
    """Prints the note list to stdout."""

    def __init__(self, color: bool = True) -> None:
        self.color = color

    def render(self, session: NoteSession) -> None:
        width = shutil.get_terminal_size().columns
        print(format_note_list(session, width=width, color=self.color))


def _note_at(session: NoteSession, number: str) -> str:
    """Resolve a 1-based list number to a note path."""
    try:
        index = int(number) - 1
    except ValueError as e:
        raise ValueError(f"Not a note number: {number}") from e
    if not 0 <= index < len(session.current_files):
        raise ValueError(f"No note number {number}")
    return session.current_files[index]


def handle_command(session: NoteSession, actions: NoteActions, line: str) -> bool:
    """Apply one line of REPL input. Returns False when the user wants to exit."""
    command, _, arg = line.partition(" ")
    command = command.lower()
    arg = arg.strip()

    if command in ("exit", "quit", "/exit", "/quit"):
        return False

    if command == "/help":
        print(HELP_TEXT)
    elif command == "/filter":
        session.set_filter(arg or None)
    elif command == "/query":
        if not session.source.ranked:
            print(f"{Colors.YELLOW}No search index configured; query ignored.{Colors.RESET}")
        session.set_query(arg or None)
    elif command == "/clear":
        session.set_query(None)
        session.set_filter(None)
    elif command == "/refresh":
        session.filesystem_changed(Scope.ANYTHING)
    elif command == "/new":
        path = actions.new_note(arg or None)
        print(f"{Colors.GREEN}Created {path}{Colors.RESET}")
    elif command == "/rename":
        number, _, name = arg.partition(" ")
        if not name.strip():
            raise ValueError("Usage: /rename N name")
        path = actions.rename_note(_note_at(session, number), name.strip())
        print(f"{Colors.GREEN}Renamed to {path}{Colors.RESET}")
    elif command == "/delete":
        path = _note_at(session, arg)
        actions.delete_note(path)
        print(f"{Colors.GREEN}Deleted {path}{Colors.RESET}")
    elif command == "/archive":
        path = actions.archive_note(_note_at(session, arg))
        print(f"{Colors.GREEN}Archived to {path}{Colors.RESET}")
    elif command == "/gc":
        removed = session.collect_garbage()
        print(f"{Colors.GREEN}Dropped {len(removed)} stale cache entries.{Colors.RESET}")
    elif command.startswith("/"):
        print(f"{Colors.RED}Unknown command: {command}{Colors.RESET}")
    else:
        session.set_filter(line)

    return True


def interactive_mode(session: NoteSession, actions: NoteActions) -> None:
    """Run interactive REPL mode."""
    print(f"{Colors.GREEN}{Colors.BOLD}notedeck{Colors.RESET}")
    print(f"{Colors.DIM}Type to filter. Use /help for commands, 'exit' or Ctrl+C to quit.{Colors.RESET}")
    print()
    session.set_visible(True)

    while True:
        try:
            user_input = input(f"{Colors.BOLD}{Colors.BLUE}>{Colors.RESET} ").strip()
            if not user_input:
                session.resize()
                continue
            if not handle_command(session, actions, user_input):
                print(f"{Colors.DIM}Goodbye!{Colors.RESET}")
                break
        except (KeyboardInterrupt, EOFError):
            print(f"\n{Colors.DIM}Goodbye!{Colors.RESET}")
            break
        except (NotedeckError, OSError, ValueError) as e:
            print(f"{Colors.RED}Error: {e}{Colors.RESET}")


def build_session(settings: Settings, view: TerminalView | None) -> tuple[NoteSession, NoteActions]:
    session = NoteSession.from_settings(settings, view=view)
    actions = NoteActions(
        session,
        extension=settings.extension,
        new_file_format=settings.new_file_format,
        archive_directory=settings.archive_directory,
    )
    return session, actions


def cli() -> None:
    """Main CLI entry point."""
    parser = argparse.ArgumentParser(
        prog="notedeck",
        description="Browse, filter and search plain-text notes.",
    )
    parser.add_argument("-f", "--filter", type=str, help="Initial filter pattern")
    parser.add_argument("-q", "--query", type=str, help="Initial search index query")
    parser.add_argument(
        "--list",
        action="store_true",
        help="Print the note list and exit (non-interactive mode)",
    )
    parser.add_argument(
        "--gc",
        action="store_true",
        help="Drop cached metadata of deleted notes and exit",
    )
    parser.add_argument(
        "--reindex",
        action="store_true",
        help="Rebuild the search index and exit",
    )
    parser.add_argument("--no-color", action="store_true", help="Disable ANSI colors")

    args = parser.parse_args()

    try:
        settings = get_settings()
    except ValueError as e:
        setup_logging()
        logging.getLogger(__name__).error(f"{Colors.RED}Failed to load settings: {e}{Colors.RESET}")
        sys.exit(1)

    setup_logging(settings.log_level)
    logger = logging.getLogger(__name__)

    view = TerminalView(color=not args.no_color)
    session, actions = build_session(settings, view)

    if args.reindex and not isinstance(session.source, IndexedSource):
        logger.error(f"{Colors.RED}No search index configured (NOTEDECK_USE_SEARCH_INDEX).{Colors.RESET}")
        sys.exit(1)

    # Stay invisible until the initial filter and query are applied
    session.set_visible(False)
    try:
        session.load()
    except NotedeckError as e:
        logger.error(f"{Colors.RED}{e}{Colors.RESET}")
        sys.exit(1)

    if args.query:
        session.set_query(args.query)
    if args.filter:
        session.set_filter(args.filter)

    if args.reindex:
        # load() has already reindexed every note directory
        print(f"{Colors.GREEN}Search index rebuilt.{Colors.RESET}")
        return

    if args.gc:
        removed = session.collect_garbage()
        session.save_cache()
        print(f"{Colors.GREEN}Dropped {len(removed)} stale cache entries.{Colors.RESET}")
        return

    if args.list:
        session.set_visible(True)
        session.save_cache()
        return

    interactive_mode(session, actions)
    session.save_cache()


if __name__ == "__main__":
    cli()
