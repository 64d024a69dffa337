"""In-process cache backend with tag invalidation and expiry."""

import copy
from typing import Dict, List, Optional, Tuple

from reftree_engine.interfaces import CacheBackend, Clock
from reftree_engine.models import CacheEntry, TreeNode


class MemoryCacheBackend(CacheBackend):
    """Dict-backed CacheBackend.

    Entries are deep-copied on the way in and out so callers cannot
    modify a cached tree. Expired entries are dropped lazily on read.
    """

    def __init__(self, clock: Clock):
        self.clock = clock
        self._entries: Dict[str, CacheEntry] = {}

    def get(self, key: str) -> Optional[CacheEntry]:
        entry = self._entries.get(key)
        if entry is None:
            return None
        if entry.expire <= self.clock.now():
            del self._entries[key]
            return None
        return entry.model_copy(deep=True)

    def set(self, key: str, data: List[TreeNode], expire: float, tags: List[str]) -> None:
        self._entries[key] = CacheEntry(data=copy.deepcopy(list(data)), expire=expire, tags=list(tags))

    def delete(self, key: str) -> None:
        self._entries.pop(key, None)

    def invalidate_tags(self, tags: List[str]) -> None:
        tags = set(tags)
        stale = [key for key, entry in self._entries.items() if tags.intersection(entry.tags)]
        for key in stale:
            del self._entries[key]

    def clear(self) -> None:
        self._entries.clear()

    def entries(self) -> List[Tuple[str, CacheEntry]]:
        return list(self._entries.items())

    def __contains__(self, key: str) -> bool:
        return self.get(key) is not None

    def __len__(self) -> int:
        """Return number of cached entries."""
        return len(self._entries)
