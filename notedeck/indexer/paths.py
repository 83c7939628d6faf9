"""Resolve configured note roots into existing absolute directories."""

import logging
import os
from collections.abc import Callable, Iterable, Sequence

from notedeck.errors import ConfigurationError

logger = logging.getLogger(__name__)

# A literal path, or a zero-argument callable evaluated at resolution time
# that returns a path or a list of paths.
PathSpec = str | os.PathLike | Callable[[], object]


def resolve_directories(specs: Sequence[PathSpec]) -> list[str]:
    """Evaluate path specs into absolute paths.

    Literal strings are expanded (``~`` and ``$VAR``) at call time, so an
    environment change is picked up on the next resolution. List-valued
    results are spliced in place. Nothing is deduplicated or checked for
    existence here; see :func:`filter_existing`.

    Raises:
        ConfigurationError: if a callable spec returns anything other than a
            path or a list/tuple of paths.
    """
    resolved: list[str] = []
    for spec in specs:
        if callable(spec):
            value = spec()
            if isinstance(value, (str, os.PathLike)):
                resolved.append(_absolute(value))
            elif isinstance(value, (list, tuple)):
                for item in value:
                    if not isinstance(item, (str, os.PathLike)):
                        raise ConfigurationError(
                            f"Directory expression returned a list containing {type(item).__name__}"
                        )
                    resolved.append(_absolute(item))
            else:
                raise ConfigurationError(
                    f"Directory expression must return a path or list of paths, "
                    f"got {type(value).__name__}"
                )
        elif isinstance(spec, (str, os.PathLike)):
            resolved.append(_absolute(spec))
        else:
            raise ConfigurationError(f"Unsupported directory spec: {spec!r}")
    return resolved


def filter_existing(paths: Iterable[str]) -> list[str]:
    """Keep existing directories only, normalised and de-duplicated in order."""
    result: list[str] = []
    seen: set[str] = set()
    for path in paths:
        if not os.path.isdir(path):
            logger.debug(f"Skipping missing note directory: {path}")
            continue
        real = os.path.realpath(path)
        if real in seen:
            continue
        seen.add(real)
        result.append(real)
    return result


def _absolute(path: str | os.PathLike) -> str:
    expanded = os.path.expandvars(os.path.expanduser(os.fspath(path)))
    return os.path.abspath(expanded)
