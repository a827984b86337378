"""
Shared FastAPI dependencies for the storefront.

Everything the routers need lives on app.state (built by create_app) and
is handed out through these getters, so tests can swap any of them with
app.dependency_overrides.
"""

import secrets
from typing import Any, Optional

from fastapi import Depends, Header, HTTPException, Request

from catalog.cache import CacheConfig, CacheInvalidator, CacheStore, PageCache
from catalog.services import ProductService
from catalog.utils.config import Settings


def get_app_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_cache_config_dep(request: Request) -> CacheConfig:
    return request.app.state.cache_config


def get_cache(request: Request) -> CacheStore:
    return request.app.state.cache


def get_page_cache(request: Request) -> PageCache:
    return request.app.state.page_cache


def get_invalidator(request: Request) -> CacheInvalidator:
    return request.app.state.invalidator


def get_product_service(request: Request) -> ProductService:
    return request.app.state.product_service


def secret_matches(provided: Any, expected: Optional[str]) -> bool:
    """
    Constant-time comparison of a shared secret.

    An empty configured secret never matches, so an unconfigured
    deployment rejects every request. Non-string secrets never match.
    """
    if not expected or not isinstance(provided, str):
        return False
    return secrets.compare_digest(provided.encode("utf-8"), expected.encode("utf-8"))


def require_revalidate_secret(
    x_revalidate_secret: Optional[str] = Header(default=None),
    settings: Settings = Depends(get_app_settings),
) -> None:
    """Guard for manual cache operations."""
    if not secret_matches(x_revalidate_secret, settings.REVALIDATE_SECRET):
        raise HTTPException(status_code=401, detail="Invalid secret")
