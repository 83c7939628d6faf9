"""Error types raised by the note engine."""


class NotedeckError(Exception):
    """Base class for notedeck errors."""


class ConfigurationError(NotedeckError, ValueError):
    """A configured directory expression produced an unusable value."""


class NoDirectoriesError(NotedeckError):
    """No existing note directory is available."""

    def __init__(self, message: str = "No note directories exist") -> None:
        super().__init__(message)


class ReadFailure(NotedeckError):
    """A note vanished or became unreadable while being refreshed."""

    def __init__(self, path: str, cause: Exception) -> None:
        super().__init__(f"Failed to read {path}: {cause}")
        self.path = path
        self.cause = cause


class IndexUnavailable(NotedeckError):
    """The configured search index could not answer."""
