"""
Rendered Page Cache

Path-keyed cache of rendered page payloads (listing and product detail).
Entries regenerate after the page TTL or when a path is revalidated.

This cache is separate from the data cache: storefront writes do not touch
it. It is revalidated only by the CMS webhook through /api/revalidate, and
otherwise by TTL lapse.
"""

import logging
import time
from typing import Any, Awaitable, Callable, Dict, List, Optional

from catalog.cache.store import CacheStore


logger = logging.getLogger(__name__)

ROOT_PATH = "/"


def normalize_path(path: str) -> str:
    """Single form for a page path: leading slash, no trailing slash."""
    path = "/" + path.strip().lstrip("/")
    if len(path) > 1:
        path = path.rstrip("/")
    return path


class PageCache:
    """
    Read-through cache for rendered pages.

    Usage:
        pages = PageCache(ttl=1800)
        payload = await pages.render("/products/5", render_product_page)
        pages.revalidate_path("/products/5")
    """

    def __init__(
        self,
        ttl: float = 1800.0,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.ttl = ttl
        self._store = CacheStore(default_ttl=ttl, clock=clock)

    def get(self, path: str) -> Optional[Any]:
        return self._store.get(normalize_path(path), self.ttl)

    def set(self, path: str, payload: Any) -> None:
        self._store.set(normalize_path(path), payload)

    async def render(
        self,
        path: str,
        renderer: Callable[[], Awaitable[Any]],
    ) -> Any:
        """Serve the cached page for path, rendering it on a miss."""
        return await self._store.fetch_with_cache(normalize_path(path), self.ttl, renderer)

    def revalidate_path(self, path: str) -> bool:
        """
        Discard the rendered page for path so the next request regenerates it.

        Returns True if a page was cached. Calling it again is harmless.
        """
        path = normalize_path(path)
        removed = self._store.delete(path)
        logger.info(f"Revalidated page {path} (cached={removed})")
        return removed

    def clear(self) -> int:
        return self._store.clear()

    def paths(self) -> List[str]:
        return self._store.keys()

    def get_stats(self) -> Dict:
        stats = self._store.get_stats()
        stats["ttl_seconds"] = self.ttl
        return stats
