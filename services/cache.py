# services/cache.py - In-memory TTL cache for external holiday lookups
import time
from typing import Any, Optional


class SimpleCache:
    """Simple in-memory cache with TTL (time-to-live)"""

    def __init__(self):
        self._cache = {}

    def get(self, key: str) -> Optional[Any]:
        """Get value from cache if not expired"""
        if key in self._cache:
            value, expires_at = self._cache[key]
            if time.time() < expires_at:
                return value
            else:
                del self._cache[key]
        return None

    def set(self, key: str, value: Any, ttl_seconds: int = 300):
        """Set value in cache with TTL (default 5 minutes)"""
        expires_at = time.time() + ttl_seconds
        self._cache[key] = (value, expires_at)

    def delete(self, key: str) -> bool:
        """Drop a single key, returns whether it was present"""
        return self._cache.pop(key, None) is not None

    def clear(self, prefix: Optional[str] = None):
        """Clear cached values, optionally only keys starting with prefix"""
        if prefix is None:
            self._cache = {}
            return
        for key in [k for k in self._cache if k.startswith(prefix)]:
            del self._cache[key]


# Global cache instance
cache = SimpleCache()
