"""
Bounded in-process cache for Square lookups.

Eviction is delegated to a policy object so the fixed-size behaviour can be
swapped without touching callers:

    InsertionOrderPolicy  evicts the oldest inserted key (reads don't count)
    LRUPolicy             evicts the least recently used key

Writes to Square clear the whole cache; see `clear()`.
"""
import logging
import threading
import time
from collections import OrderedDict
from typing import Any, Callable, Hashable, Optional

from core.config import settings

logger = logging.getLogger(__name__)

_MISSING = object()


class EvictionPolicy:
    """Tracks key order and picks the next victim."""

    def __init__(self):
        self._order: "OrderedDict[Hashable, None]" = OrderedDict()

    def on_insert(self, key: Hashable) -> None:
        self._order[key] = None

    def on_update(self, key: Hashable) -> None:
        pass

    def on_access(self, key: Hashable) -> None:
        pass

    def on_remove(self, key: Hashable) -> None:
        self._order.pop(key, None)

    def victim(self) -> Optional[Hashable]:
        for key in self._order:
            return key
        return None

    def clear(self) -> None:
        self._order.clear()


class InsertionOrderPolicy(EvictionPolicy):
    pass


class LRUPolicy(EvictionPolicy):
    def on_update(self, key: Hashable) -> None:
        self._order.move_to_end(key)

    def on_access(self, key: Hashable) -> None:
        self._order.move_to_end(key)


class BoundedCache:
    def __init__(
        self,
        max_size: int = 1000,
        policy: Optional[EvictionPolicy] = None,
        ttl: Optional[float] = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        if max_size <= 0:
            raise ValueError("max_size must be > 0")
        self.max_size = max_size
        self.policy = policy or InsertionOrderPolicy()
        self.ttl = ttl if ttl and ttl > 0 else None
        self._clock = clock
        self._data: dict = {}
        self._lock = threading.Lock()

    @staticmethod
    def _valid_key(key: Any) -> bool:
        return isinstance(key, str) and len(key) > 0

    def __len__(self) -> int:
        with self._lock:
            return len(self._data)

    def __contains__(self, key: Any) -> bool:
        return self.get(key, _MISSING) is not _MISSING

    def get(self, key: Any, default: Any = None) -> Any:
        if not self._valid_key(key):
            return default
        with self._lock:
            entry = self._data.get(key)
            if entry is None:
                return default
            value, expires_at = entry
            if expires_at is not None and self._clock() >= expires_at:
                del self._data[key]
                self.policy.on_remove(key)
                return default
            self.policy.on_access(key)
            return value

    def set(self, key: Any, value: Any) -> None:
        if not self._valid_key(key):
            return
        expires_at = self._clock() + self.ttl if self.ttl else None
        with self._lock:
            if key in self._data:
                self._data[key] = (value, expires_at)
                self.policy.on_update(key)
                return
            if len(self._data) >= self.max_size:
                victim = self.policy.victim()
                if victim is not None:
                    self._data.pop(victim, None)
                    self.policy.on_remove(victim)
            self._data[key] = (value, expires_at)
            self.policy.on_insert(key)

    def delete(self, key: Any) -> None:
        with self._lock:
            if self._data.pop(key, None) is not None:
                self.policy.on_remove(key)

    def clear(self) -> None:
        with self._lock:
            size = len(self._data)
            self._data.clear()
            self.policy.clear()
        logger.info("Cache cleared (%d entries)", size)


square_cache = BoundedCache(settings.cache_max_size, ttl=settings.cache_ttl)


def get_cache() -> BoundedCache:
    return square_cache
