from .tree_cache import TreeCache, build_cache_key, merge_tags
from .memory_backend import MemoryCacheBackend

__all__ = [
    "TreeCache",
    "build_cache_key",
    "merge_tags",
    "MemoryCacheBackend",
]
