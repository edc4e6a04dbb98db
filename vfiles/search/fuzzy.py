"""
Fuzzy File Search

Ranks registry nodes against a free-text query over their `name` and
`contents` fields.

Scoring:
    Each field is compared with rapidfuzz's partial_ratio (best window of the
    field matching the whole query, case-folded), or with plain ratio when the
    field is shorter than the query, and converted to a distance in [0, 1]:

        distance = 1 - ratio / 100

    A node's score is its smallest field distance; 0 is an exact substring
    hit. Nodes scoring above the threshold are dropped, the rest are sorted
    by ascending score (registry order breaks ties).

The index is rebuilt from a registry snapshot on every call and discarded
afterwards; results land in the registry's filtered projection only.
"""

import logging
from collections.abc import Iterable, Sequence

from pydantic import BaseModel
from rapidfuzz import fuzz
from rapidfuzz.utils import default_process

from vfiles.registry import FileRegistry
from vfiles.types import FileNode

logger = logging.getLogger(__name__)

DEFAULT_THRESHOLD = 0.2
DEFAULT_KEYS = ("name", "contents")


class SearchHit(BaseModel):
    """A ranked search result before unwrapping."""

    item: FileNode
    score: float
    key: str


class FuzzyIndex:
    """Ephemeral index over a fixed list of nodes."""

    def __init__(
        self,
        nodes: Iterable[FileNode],
        keys: Sequence[str] = DEFAULT_KEYS,
        threshold: float = DEFAULT_THRESHOLD,
    ):
        self.keys = tuple(keys)
        self.threshold = threshold
        self._entries = [
            (node, [(key, default_process(str(getattr(node, key, "") or ""))) for key in self.keys])
            for node in nodes
        ]

    def search(self, query: str) -> list[SearchHit]:
        processed = default_process(query or "")
        if not processed:
            return []

        cutoff = (1.0 - self.threshold) * 100
        ranked: list[tuple[float, int, SearchHit]] = []
        for position, (node, fields) in enumerate(self._entries):
            best: tuple[float, str] | None = None
            for key, text in fields:
                if not text:
                    continue
                # The query is always the needle; shorter fields are scored whole
                scorer = fuzz.partial_ratio if len(text) >= len(processed) else fuzz.ratio
                ratio = scorer(processed, text, score_cutoff=cutoff)
                if not ratio:
                    continue
                distance = 1.0 - ratio / 100
                if best is None or distance < best[0]:
                    best = (distance, key)
            if best is not None and best[0] <= self.threshold:
                ranked.append((best[0], position, SearchHit(item=node, score=best[0], key=best[1])))

        ranked.sort(key=lambda entry: (entry[0], entry[1]))
        return [hit for _, _, hit in ranked]


class FileSearch:
    """
    Populates the registry's filtered projection from a query.

    Usage:
        search = FileSearch(registry, threshold=0.2)
        results = search.search("todo")
        registry.filtered == results
    """

    def __init__(
        self,
        registry: FileRegistry,
        keys: Sequence[str] = DEFAULT_KEYS,
        threshold: float = DEFAULT_THRESHOLD,
    ):
        self.registry = registry
        self.keys = tuple(keys)
        self.threshold = threshold

    def search(self, query: str) -> list[FileNode]:
        index = FuzzyIndex(self.registry.values(), keys=self.keys, threshold=self.threshold)
        results = [hit.item for hit in index.search(query)]
        self.registry.set_filtered(results)
        logger.debug(f"Search {query!r}: {len(results)} matches")
        return results
