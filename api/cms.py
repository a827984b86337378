"""
CMS Backend Application

WordPress-compatible product REST API backed by SQLAlchemy:
- GET    /wp-json/wp/v2/products            (X-WP-Total / X-WP-TotalPages)
- GET    /wp-json/wp/v2/products/{id}
- POST   /wp-json/wp/v2/products            (201)
- POST|PUT|PATCH /wp-json/wp/v2/products/{id}
- POST   /wp-json/wp/v2/products/{id}/autosaves
- DELETE /wp-json/wp/v2/products/{id}?force=true

Every committed write notifies the storefront through the revalidation
webhook (see ProductRepository). Writes need a bearer token when
CMS_API_TOKEN is set.

Run with:
    uvicorn api.cms:app --port 8080
"""

import logging
import math
import sys
from typing import Any, Dict, Generator, Literal, Optional

from fastapi import APIRouter, Depends, FastAPI, Header, Query, Request, Response
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session

from catalog import __version__
from catalog.database import (
    Product,
    ProductRepository,
    ProductStatus,
    check_db_connection,
    create_session_factory,
    get_engine,
    init_db,
)
from catalog.models import ProductCreate, ProductUpdate
from catalog.utils.config import Settings, get_settings
from catalog.webhooks import WebhookNotifier

from api.dependencies import secret_matches

# Configure logging to stdout
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    stream=sys.stdout,
    force=True,  # Override any existing config
)
logger = logging.getLogger(__name__)

# Quiet down chatty loggers
logging.getLogger("httpx").setLevel(logging.WARNING)
logging.getLogger("httpcore").setLevel(logging.WARNING)

router = APIRouter(prefix="/wp-json/wp/v2/products", tags=["Products"])


# =============================================================================
# ERRORS
# =============================================================================

class WPError(Exception):
    """Error rendered in the WordPress REST shape."""
    def __init__(self, code: str, message: str, status: int):
        super().__init__(message)
        self.code = code
        self.message = message
        self.status = status


def wp_error_response(code: str, message: str, status: int) -> JSONResponse:
    return JSONResponse(
        status_code=status,
        content={"code": code, "message": message, "data": {"status": status}},
    )


def _not_found() -> WPError:
    return WPError("rest_post_invalid_id", "Invalid post ID.", 404)


# =============================================================================
# SERIALIZATION
# =============================================================================

def product_to_rest(product: Product) -> Dict[str, Any]:
    """Product row in the WordPress post shape, plus price/sku/stock."""
    return {
        "id": product.id,
        "date": product.created_at.isoformat() if product.created_at else None,
        "modified": product.updated_at.isoformat() if product.updated_at else None,
        "slug": product.slug,
        "status": product.status.value if product.status else None,
        "type": "product",
        "title": {"rendered": product.title},
        "content": {"rendered": product.content or "", "protected": False},
        "excerpt": {"rendered": product.excerpt or "", "protected": False},
        "price": float(product.price) if product.price is not None else None,
        "sku": product.sku or "",
        "stock": int(product.stock) if product.stock is not None else None,
    }


# =============================================================================
# DEPENDENCIES
# =============================================================================

def get_cms_db(request: Request) -> Generator[Session, None, None]:
    db = request.app.state.session_factory()
    try:
        yield db
    finally:
        db.close()


def get_repository(request: Request, db: Session = Depends(get_cms_db)) -> ProductRepository:
    return ProductRepository(db, notifier=request.app.state.notifier)


def require_cms_token(
    request: Request,
    authorization: Optional[str] = Header(default=None),
) -> None:
    """Bearer token check for writes. Open when CMS_API_TOKEN is unset."""
    expected = request.app.state.settings.CMS_API_TOKEN
    if not expected:
        return

    token = None
    if authorization and authorization.lower().startswith("bearer "):
        token = authorization[7:].strip()

    if not secret_matches(token, expected):
        raise WPError("rest_forbidden", "Sorry, you are not allowed to do that.", 401)


# =============================================================================
# ENDPOINTS
# =============================================================================

@router.get("")
async def list_products(
    response: Response,
    page: int = Query(1, ge=1),
    per_page: int = Query(10, ge=1, le=100),
    search: Optional[str] = None,
    slug: Optional[str] = None,
    status: Literal["publish", "draft", "trash", "any"] = "publish",
    orderby: Literal["date", "modified", "id", "title", "slug"] = "date",
    order: Literal["asc", "desc"] = "desc",
    repo: ProductRepository = Depends(get_repository),
):
    items, total = repo.list_products(
        page=page,
        per_page=per_page,
        search=search,
        slug=slug,
        status=None if status == "any" else status,
        orderby=orderby,
        order=order,
    )
    response.headers["X-WP-Total"] = str(total)
    response.headers["X-WP-TotalPages"] = str(math.ceil(total / per_page) if total else 0)
    return [product_to_rest(item) for item in items]


@router.get("/{product_id}")
async def get_product(product_id: int, repo: ProductRepository = Depends(get_repository)):
    product = repo.get_product(product_id)
    if product is None:
        raise _not_found()
    return product_to_rest(product)


@router.post("", status_code=201, dependencies=[Depends(require_cms_token)])
async def create_product(data: ProductCreate, repo: ProductRepository = Depends(get_repository)):
    return product_to_rest(repo.create_product(data))


@router.api_route(
    "/{product_id}",
    methods=["POST", "PUT", "PATCH"],
    dependencies=[Depends(require_cms_token)],
)
async def update_product(
    product_id: int,
    data: ProductUpdate,
    repo: ProductRepository = Depends(get_repository),
):
    product = repo.update_product(product_id, data)
    if product is None:
        raise _not_found()
    return product_to_rest(product)


@router.post("/{product_id}/autosaves", dependencies=[Depends(require_cms_token)])
async def autosave_product(
    product_id: int,
    data: ProductUpdate,
    repo: ProductRepository = Depends(get_repository),
):
    """Editor autosave. Stored, but the storefront is not notified."""
    product = repo.update_product(product_id, data, autosave=True)
    if product is None:
        raise _not_found()
    return product_to_rest(product)


@router.delete("/{product_id}", dependencies=[Depends(require_cms_token)])
async def delete_product(
    product_id: int,
    force: bool = False,
    repo: ProductRepository = Depends(get_repository),
):
    """Move to trash, or remove permanently with force=true."""
    product = repo.get_product(product_id)
    if product is None:
        raise _not_found()

    if force:
        previous = product_to_rest(product)
        repo.delete_product(product_id)
        return {"deleted": True, "previous": previous}

    if product.status == ProductStatus.TRASH:
        raise WPError("rest_already_trashed", "The post has already been deleted.", 410)

    return product_to_rest(repo.trash_product(product_id))


# =============================================================================
# APP
# =============================================================================

def create_app(
    settings: Optional[Settings] = None,
    engine: Optional[Engine] = None,
    notifier: Optional[WebhookNotifier] = None,
) -> FastAPI:
    """
    Build the CMS app.

    Args:
        settings: Application settings (defaults to get_settings())
        engine: SQLAlchemy engine (defaults to the CMS_DATABASE_URL engine)
        notifier: Revalidation webhook notifier (defaults to one built from settings)
    """
    settings = settings or get_settings()
    engine = engine or get_engine()
    notifier = notifier or WebhookNotifier(
        endpoint=settings.REVALIDATE_WEBHOOK_URL,
        secret=settings.REVALIDATE_SECRET,
    )

    app = FastAPI(
        title="Product Catalog CMS",
        description="WordPress-compatible product REST API with revalidation webhooks",
        version=__version__,
    )

    app.state.settings = settings
    app.state.engine = engine
    app.state.notifier = notifier
    app.state.session_factory = create_session_factory(engine)

    @app.on_event("startup")
    async def startup_event():
        """Initialize database on startup."""
        logger.info("Initializing database...")
        init_db(engine)
        if check_db_connection(engine):
            logger.info("Database connection verified")
        else:
            logger.warning("Database connection check failed - continuing anyway")

        if not notifier.is_enabled:
            logger.warning("REVALIDATE_WEBHOOK_URL is not set - storefront will not be notified")

    @app.on_event("shutdown")
    async def shutdown_event():
        await notifier.aclose()

    @app.exception_handler(WPError)
    async def wp_error_handler(request: Request, exc: WPError):
        return wp_error_response(exc.code, exc.message, exc.status)

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(request: Request, exc: RequestValidationError):
        return wp_error_response("rest_invalid_param", f"Invalid parameter(s): {exc.errors()}", 400)

    app.include_router(router)
    return app


app = create_app()


# ============================================================================
# RUN SERVER
# ============================================================================

if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "api.cms:app",
        host="0.0.0.0",
        port=8080,
        reload=True,
    )
