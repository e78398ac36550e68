"""Caching backends for valuation results.

Both backends expose the same small async interface::

    await cache.get(key) -> Optional[str]
    await cache.set(key, value, ttl_seconds)

A backend may also offer ``await cache.flush()`` to persist buffered writes.

Failures are raised as CacheError; callers decide whether to swallow them.
"""

import json
from datetime import datetime, timedelta
from pathlib import Path
from typing import Callable, Dict, Optional, Any, Protocol

import redis.asyncio as redis
from redis import RedisError

from ..errors import CacheError


SEVEN_DAYS = 7 * 24 * 60 * 60


class CacheBackend(Protocol):
    async def get(self, key: str) -> Optional[str]:
        ...

    async def set(self, key: str, value: str, ttl_seconds: int) -> None:
        ...


class JsonFileCache:
    """File-based cache for a single host, with per-entry expiry.

    Writes stay in memory until ``flush()``, so a bulk run rewrites the file
    once instead of once per domain.
    """

    def __init__(
        self,
        cache_file: str = "data/cache/valuations.json",
        clock: Callable[[], datetime] = datetime.now
    ):
        self.cache_file = Path(cache_file)
        self.clock = clock
        self._cache: Dict[str, Any] = {}
        self._dirty = False
        self._load()

    def _load(self):
        """Load cache from file."""
        if self.cache_file.exists():
            try:
                with open(self.cache_file, 'r') as f:
                    self._cache = json.load(f)
            except (json.JSONDecodeError, IOError):
                self._cache = {}

    def _save(self):
        """Save cache to file."""
        try:
            self.cache_file.parent.mkdir(parents=True, exist_ok=True)
            with open(self.cache_file, 'w') as f:
                json.dump(self._cache, f, indent=2)
            self._dirty = False
        except OSError as e:
            raise CacheError(f"cannot write {self.cache_file}: {e}") from e

    def _expired(self, entry: Dict[str, Any], now: datetime) -> bool:
        return now >= datetime.fromisoformat(entry['expires_at'])

    async def get(self, key: str) -> Optional[str]:
        """Get cached value if not expired."""
        entry = self._cache.get(key)
        if entry is None:
            return None

        try:
            expired = self._expired(entry, self.clock())
        except (KeyError, TypeError, ValueError):
            expired = True
        if expired:
            del self._cache[key]
            return None

        return entry['value']

    async def set(self, key: str, value: str, ttl_seconds: int = SEVEN_DAYS) -> None:
        now = self.clock()
        self._cache[key] = {
            'value': value,
            'stored_at': now.isoformat(),
            'expires_at': (now + timedelta(seconds=ttl_seconds)).isoformat()
        }
        self._dirty = True

    async def flush(self) -> None:
        """Write buffered entries to disk."""
        if self._dirty:
            self._save()

    def clear_expired(self) -> int:
        """Remove expired entries."""
        now = self.clock()
        expired = []

        for key, entry in self._cache.items():
            try:
                if self._expired(entry, now):
                    expired.append(key)
            except (KeyError, TypeError, ValueError):
                expired.append(key)

        for key in expired:
            del self._cache[key]

        if expired:
            self._save()

        return len(expired)

    def stats(self) -> Dict:
        """Get cache statistics."""
        now = self.clock()
        live = 0
        for entry in self._cache.values():
            try:
                if not self._expired(entry, now):
                    live += 1
            except (KeyError, TypeError, ValueError):
                pass
        return {
            'total_entries': len(self._cache),
            'live_entries': live,
            'expired_entries': len(self._cache) - live
        }


class RedisCache:
    """Shared cache on Redis; expiry is delegated to the server."""

    def __init__(self, url: str, client=None):
        if client is None:
            client = redis.from_url(
                url,
                decode_responses=True,
                socket_timeout=2.0,
                socket_connect_timeout=2.0,
            )
        self._client = client

    async def get(self, key: str) -> Optional[str]:
        try:
            return await self._client.get(key)
        except RedisError as e:
            raise CacheError(f"redis get failed: {e}") from e

    async def set(self, key: str, value: str, ttl_seconds: int = SEVEN_DAYS) -> None:
        try:
            await self._client.set(key, value, ex=ttl_seconds)
        except RedisError as e:
            raise CacheError(f"redis set failed: {e}") from e

    async def aclose(self) -> None:
        await self._client.aclose()
