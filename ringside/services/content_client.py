"""Read client for the site-content API, with response caching."""
import logging
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from typing import Any, Iterable, List, Optional

import requests

from services.content_cache import ContentCache


logger = logging.getLogger(__name__)


@dataclass
class CachedResponse:
    data: Any
    from_cache: bool = False
    status_code: Optional[int] = None


@dataclass
class PreloadResult:
    url: str
    ok: bool
    error: Optional[str] = None


def _body(response):
    if not response.content:
        return None
    return response.json()


def cached_request(cache: ContentCache, session, url: str, method: str = "GET", **kwargs) -> CachedResponse:
    """Perform ``session.request`` through ``cache``.

    Only GET responses are cached. Transport and HTTP errors propagate and
    leave the cache untouched.
    """
    if method.upper() != "GET":
        response = session.request(method, url, **kwargs)
        response.raise_for_status()
        return CachedResponse(_body(response), from_cache=False, status_code=response.status_code)

    cached = cache.get(url)
    if cached is not None:
        return CachedResponse(cached, from_cache=True)

    response = session.request("GET", url, **kwargs)
    response.raise_for_status()
    data = _body(response)
    if data is not None:
        cache.set(url, data)
    return CachedResponse(data, from_cache=False, status_code=response.status_code)


def preload_images(session, urls: Iterable[str], timeout: float = 10, max_workers: int = 4) -> List[PreloadResult]:
    """Fetch ``urls`` concurrently so they land in HTTP caches ahead of use.

    Never raises; each failure is logged and reported in its result.
    """
    urls = [url for url in urls if url]
    if not urls:
        return []

    def load(url):
        try:
            response = session.get(url, timeout=timeout)
            response.raise_for_status()
        except Exception as exc:
            logger.warning("Failed to preload image %s: %s", url, exc)
            return PreloadResult(url, ok=False, error=str(exc))
        return PreloadResult(url, ok=True)

    with ThreadPoolExecutor(max_workers=min(max_workers, len(urls))) as pool:
        return list(pool.map(load, urls))


class ContentClient:
    """Typed wrappers over the public read endpoints."""

    def __init__(self, base_url: str, session=None, cache: Optional[ContentCache] = None, timeout: float = 10):
        self.base_url = base_url.rstrip("/")
        self.session = session or requests.Session()
        self.cache = cache or ContentCache()
        self.timeout = timeout

    def url(self, path: str) -> str:
        return f"{self.base_url}/{path.lstrip('/')}"

    def get(self, path: str, **kwargs) -> CachedResponse:
        kwargs.setdefault("timeout", self.timeout)
        return cached_request(self.cache, self.session, self.url(path), **kwargs)

    def hero(self):
        return self.get("/api/hero").data

    def highlights(self):
        return self.get("/api/highlights").data

    def stadiums(self):
        return self.get("/api/stadiums").data

    def stadium_schedules(self):
        return self.get("/api/stadiumSchedules").data

    def special_matches(self):
        return self.get("/api/specialMatches").data

    def upcoming_fights_background(self):
        return self.get("/api/upcomingFightsBackground").data

    def invalidate(self, pattern: Optional[str] = None) -> int:
        return self.cache.clear(pattern)

    def preload_highlight_images(self) -> List[PreloadResult]:
        highlights = self.highlights() or {}
        urls = [item.get("image") for item in highlights.get("highlights", [])]
        return preload_images(self.session, urls, timeout=self.timeout)
