import logging
import time
from typing import Any, Awaitable, Callable, Optional

logger = logging.getLogger("xhsfeed")


class MemoryCache:
    """Process-wide TTL cache keyed by string.

    Safe to share between tasks on one event loop. Concurrent misses on the
    same key are not merged: each caller computes and the last write wins.
    """

    def __init__(self, ttl: float = 3600.0, max_entries: int = 1024):
        self.ttl = ttl
        self.max_entries = max_entries
        self._data: dict[str, tuple[float, Any]] = {}

    def __len__(self) -> int:
        return len(self._data)

    def get(self, key: str) -> Optional[Any]:
        entry = self._data.get(key)
        if entry is None:
            return None
        expires, value = entry
        if time.time() >= expires:
            del self._data[key]
            return None
        return value

    def set(self, key: str, value: Any, ttl: Optional[float] = None) -> None:
        self._data.pop(key, None)
        self._data[key] = (time.time() + (self.ttl if ttl is None else ttl), value)
        while len(self._data) > self.max_entries:
            # dicts keep insertion order, so the first key is the oldest write
            del self._data[next(iter(self._data))]

    async def try_get(self, key: str, compute: Callable[[], Awaitable[Any]],
                      ttl: Optional[float] = None) -> Any:
        value = self.get(key)
        if value is not None:
            logger.debug(f"cache hit {key}")
            return value
        logger.debug(f"cache miss {key}")
        value = await compute()
        self.set(key, value, ttl)
        return value

    def clear(self) -> None:
        self._data.clear()


_default_cache: Optional[MemoryCache] = None


def default_cache(ttl: float = 3600.0) -> MemoryCache:
    global _default_cache
    if _default_cache is None:
        _default_cache = MemoryCache(ttl=ttl)
    return _default_cache
