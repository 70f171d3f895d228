"""
storefront/services/cache_service.py

Purpose: In-memory response cache for public catalog reads

- Caches GET responses keyed by path + query string
- Per-resource TTLs (products, categories, offers, testimonials)
- Authenticated requests bypass the cache
- Writes invalidate by key prefix
- Expired entries swept on write, size capped (oldest evicted first)
"""

import time
from typing import Any, Dict, Optional, Tuple

from fastapi import Request, Response

from storefront.core.config import settings
from storefront.core.logging import get_logger

logger = get_logger(__name__)


class ResponseCache:
    """Process-local TTL cache for JSON-serializable response bodies."""

    def __init__(self, max_entries: int = 1000):
        self.max_entries = max_entries
        self._entries: Dict[str, Tuple[float, Any]] = {}

    @staticmethod
    def make_key(request: Request) -> str:
        query = request.url.query
        return f"{request.url.path}?{query}" if query else request.url.path

    @staticmethod
    def is_authenticated(request: Request) -> bool:
        auth_header = request.headers.get("authorization", "")
        return auth_header.startswith("Bearer ") or bool(request.cookies.get("token"))

    def get(self, key: str) -> Optional[Any]:
        entry = self._entries.get(key)
        if entry is None:
            return None

        expires_at, data = entry
        if time.monotonic() >= expires_at:
            self._entries.pop(key, None)
            return None
        return data

    def set(self, key: str, data: Any, ttl: int):
        now = time.monotonic()
        self._evict_expired(now)

        # Re-insert so the key moves to the newest position
        self._entries.pop(key, None)
        while self._entries and len(self._entries) >= self.max_entries:
            del self._entries[next(iter(self._entries))]

        self._entries[key] = (now + ttl, data)

    def _evict_expired(self, now: float) -> int:
        expired = [key for key, (expires_at, _) in self._entries.items() if now >= expires_at]
        for key in expired:
            del self._entries[key]
        return len(expired)

    def lookup(self, request: Request, response: Response) -> Optional[Any]:
        """
        Returns the cached body for this request, or None on a miss.
        Sets the X-Cache header either way.
        """
        if self.is_authenticated(request):
            return None

        data = self.get(self.make_key(request))
        response.headers["X-Cache"] = "HIT" if data is not None else "MISS"
        return data

    def store(self, request: Request, response: Response, data: Any, ttl: int):
        if self.is_authenticated(request):
            return

        self.set(self.make_key(request), data, ttl)
        response.headers["Cache-Control"] = f"public, max-age={ttl}"

    def clear(self, prefix: Optional[str] = None) -> int:
        """
        Drops cached entries whose key starts with prefix (all entries when
        prefix is None). Returns the number of entries removed.
        """
        if prefix is None:
            removed = len(self._entries)
            self._entries.clear()
        else:
            keys = [key for key in self._entries if key.startswith(prefix)]
            for key in keys:
                del self._entries[key]
            removed = len(keys)

        if removed:
            logger.debug(f"Cache cleared: {removed} entries", extra={"path": prefix or "*"})
        return removed

    def stats(self) -> Dict[str, int]:
        now = time.monotonic()
        expired = sum(1 for expires_at, _ in self._entries.values() if now >= expires_at)
        return {
            "totalEntries": len(self._entries),
            "validEntries": len(self._entries) - expired,
            "expiredEntries": expired,
        }


# Global cache instance
api_cache = ResponseCache(settings.CACHE_MAX_ENTRIES)
