"""
CMS Access Package

HTTP client for the WordPress-compatible product REST API.
"""

from .client import WordPressClient, CatalogAPIError, CMSResponse, ErrorCode

__all__ = [
    "WordPressClient",
    "CatalogAPIError",
    "CMSResponse",
    "ErrorCode",
]
