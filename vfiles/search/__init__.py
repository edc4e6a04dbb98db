"""
Search

Modules:
    fuzzy: FuzzyIndex (ephemeral rapidfuzz scoring) and FileSearch
           (writes ranked hits to the registry's filtered projection)
"""

from vfiles.search.fuzzy import (
    DEFAULT_KEYS,
    DEFAULT_THRESHOLD,
    FileSearch,
    FuzzyIndex,
    SearchHit,
)

__all__ = ["FileSearch", "FuzzyIndex", "SearchHit", "DEFAULT_KEYS", "DEFAULT_THRESHOLD"]
