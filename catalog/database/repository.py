"""
Repository Layer - Product Store Operations

Provides simple methods to store and retrieve products.
Handles all SQLAlchemy complexity internally.

Includes webhook integration: after every committed write the repository
fires the revalidation notifier (create/update/trash as a save, permanent
removal as a delete). Autosaves are stored but never notify.
"""

import logging
import re
import unicodedata
from typing import List, Optional, Tuple

from sqlalchemy import asc, desc, or_
from sqlalchemy.orm import Session

from catalog.models import ProductCreate, ProductUpdate
from catalog.webhooks.notifier import WebhookNotifier
from .models import Product, ProductStatus

logger = logging.getLogger(__name__)


ORDERBY_COLUMNS = {
    "date": Product.created_at,
    "modified": Product.updated_at,
    "id": Product.id,
    "title": Product.title,
    "slug": Product.slug,
}

# Columns that cannot be cleared by an update
REQUIRED_FIELDS = {"title", "status"}


def slugify(title: str) -> str:
    """URL slug from a title: ASCII, lowercase, hyphen-separated."""
    normalized = unicodedata.normalize("NFKD", title).encode("ascii", "ignore").decode()
    slug = re.sub(r"[^a-z0-9]+", "-", normalized.lower()).strip("-")
    return slug or "product"


class ProductRepository:
    """
    Product persistence plus save/delete hooks.

    Usage:
        repo = ProductRepository(db, notifier=notifier)
        product = repo.create_product(ProductCreate(title="Mug", price=9.5, sku="MUG-1", stock=4))
        repo.update_product(product.id, ProductUpdate(stock=3))
    """

    def __init__(self, db: Session, notifier: Optional[WebhookNotifier] = None):
        self.db = db
        self.notifier = notifier

    # =========================================================================
    # Reads
    # =========================================================================

    def list_products(
        self,
        page: int = 1,
        per_page: int = 10,
        search: Optional[str] = None,
        slug: Optional[str] = None,
        status: Optional[str] = "publish",
        orderby: str = "date",
        order: str = "desc",
    ) -> Tuple[List[Product], int]:
        """
        One page of products and the total match count.

        Args:
            search: Case-insensitive match on title or content
            slug: Exact slug match
            status: Status filter, None for every status
            orderby: One of ORDERBY_COLUMNS
            order: "asc" or "desc"
        """
        query = self.db.query(Product)

        if status:
            query = query.filter(Product.status == ProductStatus(status))
        if slug:
            query = query.filter(Product.slug == slug)
        if search:
            pattern = f"%{search}%"
            query = query.filter(or_(Product.title.ilike(pattern), Product.content.ilike(pattern)))

        total = query.count()

        column = ORDERBY_COLUMNS.get(orderby, Product.created_at)
        direction = asc if order == "asc" else desc
        items = (
            query.order_by(direction(column), direction(Product.id))
            .offset((page - 1) * per_page)
            .limit(per_page)
            .all()
        )
        return items, total

    def get_product(self, product_id: int) -> Optional[Product]:
        return self.db.query(Product).filter(Product.id == product_id).first()

    def get_by_slug(self, slug: str) -> Optional[Product]:
        return self.db.query(Product).filter(Product.slug == slug).first()

    def _unique_slug(self, title: str) -> str:
        base = slugify(title)
        slug = base
        suffix = 2
        while self.get_by_slug(slug) is not None:
            slug = f"{base}-{suffix}"
            suffix += 1
        return slug

    # =========================================================================
    # Writes
    # =========================================================================

    def create_product(self, data: ProductCreate) -> Product:
        """Insert a product and notify the storefront."""
        product = Product(
            title=data.title,
            slug=self._unique_slug(data.title),
            content=data.content,
            excerpt=data.excerpt,
            status=ProductStatus(data.status),
            price=data.price,
            sku=data.sku,
            stock=data.stock,
        )
        self.db.add(product)
        self.db.commit()
        logger.info(f"Created product {product.id} ({product.slug})")

        if self.notifier:
            self.notifier.trigger_save(product.id, update=False)
        return product

    def update_product(
        self,
        product_id: int,
        data: ProductUpdate,
        autosave: bool = False,
    ) -> Optional[Product]:
        """
        Apply the fields set on data. Returns None if the product is missing.

        Autosaves are persisted like any update but do not notify.
        """
        product = self.get_product(product_id)
        if product is None:
            return None

        for field_name, value in data.to_payload().items():
            if value is None and field_name in REQUIRED_FIELDS:
                continue
            if field_name == "status":
                value = ProductStatus(value)
            setattr(product, field_name, value)

        self.db.commit()
        logger.info(
            f"Updated product {product_id} "
            f"({'autosave' if autosave else 'save'}): {sorted(data.model_fields_set)}"
        )

        if self.notifier:
            self.notifier.trigger_save(product_id, update=True, autosave=autosave)
        return product

    def trash_product(self, product_id: int) -> Optional[Product]:
        """Soft delete. Counts as an update for webhook purposes."""
        product = self.get_product(product_id)
        if product is None:
            return None

        product.status = ProductStatus.TRASH
        self.db.commit()
        logger.info(f"Trashed product {product_id}")

        if self.notifier:
            self.notifier.trigger_save(product_id, update=True)
        return product

    def delete_product(self, product_id: int) -> Optional[Product]:
        """Permanently delete. Returns the removed product, or None if missing."""
        product = self.get_product(product_id)
        if product is None:
            return None

        self.db.delete(product)
        self.db.commit()
        logger.info(f"Deleted product {product_id}")

        if self.notifier:
            self.notifier.trigger_delete(product_id)
        return product
