"""
HTTP Cache Headers

Cache-Control and ETag handling for rendered storefront pages.

Rendered pages are shared-cacheable: a CDN may keep them for the page
regeneration window (s-maxage) and serve them stale while a fresh copy is
produced. Browsers always revalidate (max-age=0) so a webhook revalidation
shows up on the next navigation.
"""

import hashlib
import json
import logging
from typing import Any, Optional

from fastapi import Request, Response


logger = logging.getLogger(__name__)


def generate_etag(
    *components: Any,
    weak: bool = False,
) -> str:
    """
    Generate ETag from components.

    Args:
        components: Values to hash for ETag
        weak: If True, generates a weak ETag (W/"...")

    Returns:
        ETag string with quotes
    """
    hash_input = ":".join(str(c) for c in components)
    hash_value = hashlib.md5(hash_input.encode()).hexdigest()[:16]

    if weak:
        return f'W/"{hash_value}"'
    return f'"{hash_value}"'


def etag_for_payload(payload: Any) -> str:
    """Weak ETag over the JSON form of a rendered page payload."""
    return generate_etag(json.dumps(payload, sort_keys=True, default=str), weak=True)


def parse_etag(etag: str) -> str:
    """Parse ETag value, removing quotes and weak prefix."""
    if not etag:
        return ""

    # Remove weak prefix
    if etag.startswith("W/"):
        etag = etag[2:]

    # Remove quotes
    return etag.strip('"')


def etags_match(
    request_etag: Optional[str],
    current_etag: str,
) -> bool:
    """
    Check if request ETag matches current ETag.

    Handles:
    - Weak comparison (ignores W/ prefix)
    - Multiple ETags in If-None-Match
    - Wildcard
    """
    if not request_etag:
        return False

    current = parse_etag(current_etag)

    for etag in request_etag.split(","):
        etag = etag.strip()

        if etag == "*":
            return True

        if parse_etag(etag) == current:
            return True

    return False


class CacheHeadersBuilder:
    """
    Fluent builder for HTTP cache headers.

    Usage:
        headers = (CacheHeadersBuilder()
            .max_age(0)
            .s_maxage(1800)
            .stale_while_revalidate(3600)
            .etag_value(etag)
            .build())
    """

    def __init__(self):
        self._max_age: Optional[int] = None
        self._s_maxage: int = 0
        self._swr: int = 0
        self._no_store: bool = False
        self._etag: Optional[str] = None

    def max_age(self, seconds: int) -> "CacheHeadersBuilder":
        """Set max-age directive (0 is emitted)."""
        self._max_age = seconds
        return self

    def s_maxage(self, seconds: int) -> "CacheHeadersBuilder":
        """Set shared-cache lifetime."""
        self._s_maxage = seconds
        return self

    def stale_while_revalidate(self, seconds: int) -> "CacheHeadersBuilder":
        """Set stale-while-revalidate directive."""
        self._swr = seconds
        return self

    def no_store(self) -> "CacheHeadersBuilder":
        """Disable all caching."""
        self._no_store = True
        return self

    def etag_value(self, value: str) -> "CacheHeadersBuilder":
        """Set pre-computed ETag value."""
        self._etag = value
        return self

    def build(self) -> dict:
        """Build headers dictionary."""
        headers = {}
        directives = []

        if self._no_store:
            directives.append("no-store")
        else:
            directives.append("public")

            if self._max_age is not None:
                directives.append(f"max-age={self._max_age}")

            if self._s_maxage > 0:
                directives.append(f"s-maxage={self._s_maxage}")

            if self._swr > 0:
                directives.append(f"stale-while-revalidate={self._swr}")

        headers["Cache-Control"] = ", ".join(directives)

        if self._etag:
            headers["ETag"] = self._etag

        return headers

    def apply(self, response: Response) -> Response:
        """Apply headers to FastAPI Response."""
        for key, value in self.build().items():
            response.headers[key] = value
        return response


def add_page_cache_headers(
    response: Response,
    ttl: float,
    stale_while_revalidate: float,
    etag: Optional[str] = None,
) -> Response:
    """
    Add shared-cache headers for a rendered page.

    Args:
        response: FastAPI Response object
        ttl: Page regeneration window in seconds
        stale_while_revalidate: How long a stale copy may still be served
        etag: ETag value for conditional requests
    """
    builder = (
        CacheHeadersBuilder()
        .max_age(0)
        .s_maxage(int(ttl))
        .stale_while_revalidate(int(stale_while_revalidate))
    )

    if etag:
        builder.etag_value(etag)

    return builder.apply(response)


def check_not_modified(request: Request, etag: str) -> Optional[Response]:
    """
    Check if client has current version (304 Not Modified).

    Returns a 304 Response if client cache is valid, None otherwise.
    """
    if_none_match = request.headers.get("If-None-Match")
    if if_none_match and etags_match(if_none_match, etag):
        response = Response(status_code=304)
        response.headers["ETag"] = etag
        return response

    return None
