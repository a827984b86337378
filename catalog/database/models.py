"""
SQLAlchemy Models for the CMS Product Store

One table: products. The REST layer exposes it in the WordPress post shape,
with price, sku and stock as extra top-level fields.
"""

import enum
from datetime import datetime

from sqlalchemy import (
    Column, String, Integer, Float, DateTime, Text, Enum, Index,
)
from sqlalchemy.orm import declarative_base

Base = declarative_base()


# =============================================================================
# ENUMS
# =============================================================================

class ProductStatus(enum.Enum):
    """Publication status of a product"""
    PUBLISH = "publish"
    DRAFT = "draft"
    TRASH = "trash"  # Soft-deleted, restorable


# =============================================================================
# TABLES
# =============================================================================

class Product(Base):
    """Catalog products"""
    __tablename__ = "products"

    id = Column(Integer, primary_key=True, autoincrement=True)
    title = Column(String(255), nullable=False)
    slug = Column(String(255), nullable=False, unique=True)
    content = Column(Text, default="")
    excerpt = Column(Text, default="")
    status = Column(Enum(ProductStatus), default=ProductStatus.PUBLISH, nullable=False)

    # Product fields (null means "not set", like empty post meta)
    price = Column(Float, nullable=True)
    sku = Column(String(100), default="")
    stock = Column(Integer, nullable=True)

    # Timestamps
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    __table_args__ = (
        Index("idx_products_status_created", "status", "created_at"),
    )

    def __repr__(self):
        return f"<Product {self.id} {self.slug!r} {self.status.value if self.status else None}>"
