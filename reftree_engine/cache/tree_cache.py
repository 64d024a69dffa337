"""Read-through cache for assembled trees.

Trees are cached per bundle and language. Each entry carries the cache
tags of the bundle and of every entity in it, so the backend can drop it
as soon as any of them changes, and expires after a fixed lifetime.
"""

from typing import Any, Callable, Dict, Iterable, List, Optional, Tuple

from loguru import logger

from reftree_engine.interfaces import CacheBackend, Clock
from reftree_engine.models import TreeNode
from reftree_engine.settings import DEFAULT_CACHE_TTL


def build_cache_key(prefix: str, bundle_id: str, langcode: Optional[str] = None) -> str:
    """Cache key for a bundle's tree in one language.

    Example: build_cache_key("entity_reference_tree:", "country", "en")
    -> "entity_reference_tree:country_en"
    """
    key = f"{prefix}{bundle_id}"
    if langcode:
        key += f"_{langcode}"
    return key


def merge_tags(*tag_lists: Iterable[str]) -> List[str]:
    """Ordered union of tag lists."""
    merged: Dict[str, None] = {}
    for tags in tag_lists:
        for tag in tags:
            merged.setdefault(tag, None)
    return list(merged)


class TreeCache:
    """Cache for assembled node lists.

    Usage:
        cache = TreeCache(backend, clock)
        nodes = cache.get_or_build(
            key,
            lambda: (assemble_nodes(), tags)
        )
    """

    def __init__(self, backend: CacheBackend, clock: Clock, ttl: int = DEFAULT_CACHE_TTL):
        self.backend = backend
        self.clock = clock
        self.ttl = ttl
        self._hits = 0
        self._misses = 0

    def get_or_build(self, key: str, builder: Callable[[], Tuple[List[TreeNode], List[str]]]) -> List[TreeNode]:
        """Get a cached tree or build and cache it.

        Args:
            key: Cache key from build_cache_key()
            builder: Callable returning (nodes, cache tags)

        Returns:
            Node list (from cache or freshly built)
        """
        entry = self.backend.get(key)
        if entry is not None:
            self._hits += 1
            logger.debug(f"Tree cache hit: {key}")
            return entry.data

        self._misses += 1
        logger.info(f"Tree cache miss: {key}, rebuilding")
        nodes, tags = builder()
        expire = self.clock.now() + self.ttl
        self.backend.set(key, nodes, expire, tags)
        return nodes

    def invalidate(self, tags: Iterable[str]) -> None:
        """Invalidate every cached tree carrying one of the tags."""
        tags = list(tags)
        logger.debug(f"Invalidating trees tagged {tags}")
        self.backend.invalidate_tags(tags)

    def get_stats(self) -> Dict[str, Any]:
        """Get cache statistics.

        Returns:
            Dict with cache performance metrics
        """
        total = self._hits + self._misses
        hit_rate = (self._hits / total * 100) if total > 0 else 0

        return {
            "hits": self._hits,
            "misses": self._misses,
            "total_lookups": total,
            "hit_rate_percent": hit_rate,
        }
