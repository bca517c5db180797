"""
Analysis result cache.
"""

from optihub.infrastructure.cache.ttl_cache import CacheEntry, TTLCache

__all__ = ["TTLCache", "CacheEntry"]
