"""
On-demand Revalidation Endpoint

Receives the CMS webhook after a product save or delete and discards the
affected rendered pages:
1. Checks the shared secret (401 on mismatch, nothing invalidated)
2. Revalidates the given path, if any
3. Always revalidates the listing page "/"

Only the page cache is touched here. The data cache keeps its entries
until their TTL lapses or a storefront write invalidates them.
"""

import logging
import time
from typing import Any, Optional

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from catalog.cache import PageCache
from catalog.cache.pages import ROOT_PATH
from catalog.utils.config import Settings

from api.dependencies import get_app_settings, get_page_cache, secret_matches


logger = logging.getLogger(__name__)
router = APIRouter(tags=["Revalidation"])


class RevalidateRequest(BaseModel):
    """Webhook body. Only the secret is checked, type is informational."""
    secret: Any = None
    path: Optional[str] = None
    type: Optional[str] = None


@router.post("/api/revalidate")
async def revalidate(
    body: RevalidateRequest,
    settings: Settings = Depends(get_app_settings),
    pages: PageCache = Depends(get_page_cache),
):
    """Invalidate the rendered page for body.path and the listing page."""
    if not secret_matches(body.secret, settings.REVALIDATE_SECRET):
        logger.warning(f"Rejected revalidation for path={body.path}: invalid secret")
        return JSONResponse(status_code=401, content={"error": "Invalid secret"})

    try:
        if body.path:
            pages.revalidate_path(body.path)

        pages.revalidate_path(ROOT_PATH)
    except Exception as e:
        logger.error(f"Revalidation failed for path={body.path}: {e}")
        return JSONResponse(status_code=500, content={"error": "Error revalidating"})

    logger.info(f"Revalidated {body.path or ROOT_PATH} ({body.type or 'unknown'})")
    return {"revalidated": True, "now": int(time.time() * 1000)}
