"""
Cross-user result cache and same-user duplicate detection.
"""
from .cache_key import get_cache_key
from .result_cache import CacheHit, ResultCache

__all__ = [
    "get_cache_key",
    "CacheHit",
    "ResultCache",
]
