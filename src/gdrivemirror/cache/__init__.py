from .change_cache import DEFAULT_CACHE_FILENAME, CacheEntry, ChangeCache, NullChangeCache

__all__ = ["CacheEntry", "ChangeCache", "NullChangeCache", "DEFAULT_CACHE_FILENAME"]
