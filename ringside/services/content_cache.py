"""TTL cache for site-content responses, keyed by request URL."""
import threading
import time
from collections import OrderedDict
from typing import Any, Callable, Dict, Optional
from urllib.parse import urlsplit

from config import CONTENT_TTLS, DEFAULT_TTL


_MISSING = object()


def resource_name(key: str) -> str:
    """Last path segment of ``key`` ("/api/hero?lang=th" -> "hero")."""
    return urlsplit(key).path.split("/")[-1] or "default"


class ContentCache:
    """Expiring key/value store.

    Entries live until ``clock() >= expires_at``. With ``max_entries`` set,
    the oldest insertions are evicted first once the cap is reached.
    """

    def __init__(
        self,
        ttls: Optional[Dict[str, float]] = None,
        default_ttl: float = DEFAULT_TTL,
        clock: Callable[[], float] = time.monotonic,
        max_entries: Optional[int] = None,
    ):
        self.ttls = dict(CONTENT_TTLS if ttls is None else ttls)
        self.default_ttl = default_ttl
        self.clock = clock
        self.max_entries = max_entries
        self._entries: "OrderedDict[str, tuple]" = OrderedDict()
        self._lock = threading.Lock()

    def __len__(self):
        with self._lock:
            return len(self._entries)

    def __contains__(self, key):
        return self.get(key, _MISSING) is not _MISSING

    def ttl_for(self, key: str) -> float:
        return self.ttls.get(resource_name(key), self.default_ttl)

    def get(self, key: str, default: Any = None) -> Any:
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                return default
            value, expires_at = entry
            if self.clock() >= expires_at:
                del self._entries[key]
                return default
            return value

    def set(self, key: str, value: Any, ttl: Optional[float] = None) -> None:
        ttl = self.ttl_for(key) if ttl is None else ttl
        with self._lock:
            self._entries.pop(key, None)
            self._entries[key] = (value, self.clock() + ttl)
            if self.max_entries is not None:
                while len(self._entries) > self.max_entries:
                    self._entries.popitem(last=False)

    def clear(self, pattern: Optional[str] = None) -> int:
        """Drop keys containing ``pattern`` (all keys without one); returns the count."""
        with self._lock:
            if pattern is None:
                count = len(self._entries)
                self._entries.clear()
                return count
            doomed = [key for key in self._entries if pattern in key]
            for key in doomed:
                del self._entries[key]
            return len(doomed)

    def purge_expired(self) -> int:
        now = self.clock()
        with self._lock:
            doomed = [key for key, (_, expires_at) in self._entries.items() if now >= expires_at]
            for key in doomed:
                del self._entries[key]
            return len(doomed)

    def keys(self):
        with self._lock:
            return list(self._entries)
