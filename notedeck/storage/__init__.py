"""Metadata cache for note files."""

from .cache import CacheEntry, MetadataCache

__all__ = [
    "CacheEntry",
    "MetadataCache",
]
