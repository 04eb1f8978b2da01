from .result_cache import ResultCache, CacheEntry, CacheStats, normalize_query

__all__ = ["ResultCache", "CacheEntry", "CacheStats", "normalize_query"]
