import hashlib
import threading
import time
from dataclasses import dataclass
from typing import Callable, Dict, Generic, Optional, TypeVar


V = TypeVar("V")


@dataclass(frozen=True)
class CacheEntry(Generic[V]):
    value: V
    timestamp: float


class TTLCache(Generic[V]):
    """In-process cache whose entries expire ``ttl_seconds`` after writing.

    Staleness is only checked on read; there is no background sweeper. The
    clock is injectable so tests can move time forward deterministically.
    """

    def __init__(self, ttl_seconds: float, clock: Callable[[], float] = time.monotonic) -> None:
        self._ttl = ttl_seconds
        self._clock = clock
        self._entries: Dict[str, CacheEntry[V]] = {}
        self._lock = threading.Lock()

    def get(self, key: str) -> Optional[V]:
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                return None
            if self._clock() - entry.timestamp > self._ttl:
                self._entries.pop(key, None)
                return None
            return entry.value

    def set(self, key: str, value: V) -> None:
        with self._lock:
            self._entries[key] = CacheEntry(value=value, timestamp=self._clock())

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def __len__(self) -> int:
        return len(self._entries)


def fingerprint(*parts: object) -> str:
    """Stable SHA-256 key over the string form of ``parts``."""

    digest = hashlib.sha256()
    for part in parts:
        digest.update(str(part).encode("utf-8"))
        digest.update(b"\x1f")
    return digest.hexdigest()
