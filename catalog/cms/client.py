"""
CMS REST API Client

Async HTTP client for the WordPress-compatible product API with:
- Connection pooling
- Bounded request timeout (10s default)
- Typed errors with machine-readable codes
- Request/response logging

Failures are not retried here. They surface as CatalogAPIError so the
caller decides whether to try again.
"""

import logging
from dataclasses import dataclass
from typing import Any, Dict, Optional

import httpx

logger = logging.getLogger(__name__)


class ErrorCode:
    """Machine-readable error codes carried by CatalogAPIError."""
    FETCH_ERROR = "WP_FETCH_ERROR"
    INVALID_RESPONSE = "WP_INVALID_RESPONSE"
    NOT_INSTALLED = "WP_NOT_INSTALLED"
    HTTP_ERROR = "WP_HTTP_ERROR"
    PRODUCT_NOT_FOUND = "PRODUCT_NOT_FOUND"


class CatalogAPIError(Exception):
    """Custom exception for CMS API errors."""
    def __init__(
        self,
        message: str,
        status_code: int = None,
        code: str = ErrorCode.FETCH_ERROR,
        response: Any = None,
    ):
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.code = code
        self.response = response


def _header_int(headers: httpx.Headers, name: str) -> int:
    try:
        return int(headers.get(name, "0"))
    except ValueError:
        return 0


@dataclass
class CMSResponse:
    """Decoded JSON body plus the pagination headers."""
    data: Any
    status_code: int
    total: int = 0
    total_pages: int = 0


class WordPressClient:
    """
    Async client for the CMS REST API.

    Usage:
        client = WordPressClient(base_url="http://localhost:8080/wp-json")

        result = await client.get("/wp/v2/products", params={"page": "1"})
        print(result.data, result.total)

        await client.close()
    """

    def __init__(
        self,
        base_url: str,
        token: Optional[str] = None,
        timeout: float = 10.0,
        max_connections: int = 20,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """
        Initialize CMS client.

        Args:
            base_url: REST root, e.g. "http://localhost:8080/wp-json"
            token: Bearer token sent with every request (optional)
            timeout: Request timeout in seconds
            max_connections: Maximum concurrent connections
            transport: Custom httpx transport (tests use httpx.MockTransport)
        """
        headers = {
            "Content-Type": "application/json",
            "Accept": "application/json",
        }
        if token:
            headers["Authorization"] = f"Bearer {token}"

        self._client = httpx.AsyncClient(
            base_url=base_url.rstrip("/"),
            headers=headers,
            limits=httpx.Limits(
                max_connections=max_connections,
                max_keepalive_connections=max_connections // 2,
            ),
            timeout=httpx.Timeout(timeout),
            follow_redirects=True,
            transport=transport,
        )

        self._closed = False

    async def get(self, path: str, params: Optional[Dict[str, Any]] = None) -> CMSResponse:
        return await self.request("GET", path, params=params)

    async def post(self, path: str, data: Dict[str, Any]) -> CMSResponse:
        return await self.request("POST", path, json=data)

    async def delete(self, path: str, params: Optional[Dict[str, Any]] = None) -> CMSResponse:
        return await self.request("DELETE", path, params=params)

    async def request(
        self,
        method: str,
        path: str,
        params: Optional[Dict[str, Any]] = None,
        json: Optional[Dict[str, Any]] = None,
    ) -> CMSResponse:
        """
        Make a request against the CMS REST API.

        Raises:
            CatalogAPIError: On transport failure, non-JSON body or error status
        """
        if self._closed:
            raise CatalogAPIError("Client is closed")

        logger.debug(f"{method} {path} params={params}")

        try:
            response = await self._client.request(method, path, params=params, json=json)
        except httpx.TimeoutException as e:
            raise CatalogAPIError(f"Request timed out: {e}", code=ErrorCode.FETCH_ERROR) from e
        except httpx.HTTPError as e:
            raise CatalogAPIError(
                f"Failed to fetch from WordPress: {e}",
                code=ErrorCode.FETCH_ERROR,
            ) from e

        return self._decode(response)

    def _decode(self, response: httpx.Response) -> CMSResponse:
        """Turn an HTTP response into CMSResponse or a typed error."""
        content_type = response.headers.get("content-type", "")

        if "application/json" not in content_type:
            # A fresh install redirects every REST call to the installer
            if response.status_code == 302 or "install.php" in str(response.url):
                raise CatalogAPIError(
                    "WordPress is not installed yet. Please complete the installation.",
                    status_code=503,
                    code=ErrorCode.NOT_INSTALLED,
                )

            logger.error(f"WordPress returned non-JSON: {response.text[:200]}")
            raise CatalogAPIError(
                "WordPress returned an unexpected response. Please ensure WordPress "
                "is installed and the REST API is enabled.",
                status_code=502,
                code=ErrorCode.INVALID_RESPONSE,
            )

        try:
            data = response.json()
        except ValueError as e:
            raise CatalogAPIError(
                f"Invalid JSON from WordPress: {e}",
                status_code=502,
                code=ErrorCode.INVALID_RESPONSE,
            ) from e

        if response.status_code >= 400:
            body = data if isinstance(data, dict) else {}
            message = body.get("message") or f"API request failed: {response.status_code}"
            logger.warning(f"CMS error {response.status_code} for {response.request.url}: {message}")
            raise CatalogAPIError(
                message,
                status_code=response.status_code,
                code=body.get("code") or ErrorCode.HTTP_ERROR,
                response=data,
            )

        return CMSResponse(
            data=data,
            status_code=response.status_code,
            total=_header_int(response.headers, "x-wp-total"),
            total_pages=_header_int(response.headers, "x-wp-totalpages"),
        )

    async def close(self):
        """Close the HTTP client."""
        if not self._closed:
            await self._client.aclose()
            self._closed = True

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close()
