"""In-memory TTL cache shared by the rate fetch pipeline.

Design:
    - One entry per key, holding the value and its absolute expiry instant.
    - `get` treats an entry as missing once `now >= expires_at`; this is the
      only eviction (no background sweep, no capacity bound, no LRU). The key
      space is tiny: the daily snapshot URL plus one date-ranged history URL
      that changes about once a day.
    - Readers share the store, a writer excludes everyone else.

Known limitation:
    Concurrent misses on the same key are not deduplicated. Every caller that
    races on a cold key performs its own upstream fetch and the last `set`
    wins.
"""
from __future__ import annotations

import threading
import time
from contextlib import contextmanager
from dataclasses import dataclass
from datetime import timedelta
from typing import Callable, Dict, Generic, Iterator, Optional, Tuple, TypeVar, Union

T = TypeVar("T")

Clock = Callable[[], float]


@dataclass(frozen=True)
class CacheEntry(Generic[T]):
    value: T
    expires_at: float


class _ReadWriteLock:
    """Many readers or a single writer."""

    def __init__(self) -> None:
        self._cond = threading.Condition(threading.Lock())
        self._readers = 0
        self._writer = False

    @contextmanager
    def read(self) -> Iterator[None]:
        with self._cond:
            while self._writer:
                self._cond.wait()
            self._readers += 1
        try:
            yield
        finally:
            with self._cond:
                self._readers -= 1
                if self._readers == 0:
                    self._cond.notify_all()

    @contextmanager
    def write(self) -> Iterator[None]:
        with self._cond:
            while self._writer or self._readers:
                self._cond.wait()
            self._writer = True
        try:
            yield
        finally:
            with self._cond:
                self._writer = False
                self._cond.notify_all()


class TTLCache(Generic[T]):
    """Thread-safe key/value store with per-key expiry."""

    def __init__(self, clock: Optional[Clock] = None):
        self._clock: Clock = clock or time.monotonic
        self._lock = _ReadWriteLock()
        self._entries: Dict[str, CacheEntry[T]] = {}

    def get(self, key: str) -> Tuple[Optional[T], bool]:
        with self._lock.read():
            entry = self._entries.get(key)
            if entry is None or self._clock() >= entry.expires_at:
                return None, False
            return entry.value, True

    def set(self, key: str, value: T, ttl: Union[float, timedelta]) -> None:
        seconds = ttl.total_seconds() if isinstance(ttl, timedelta) else float(ttl)
        with self._lock.write():
            self._entries[key] = CacheEntry(
                value=value, expires_at=self._clock() + seconds
            )

    def __len__(self) -> int:
        with self._lock.read():
            return len(self._entries)
