"""
Product Schemas

Pydantic models for products as seen by the storefront, plus the write
records accepted by both the storefront API and the CMS.

Write records are strict: every logical field has exactly one name and
unknown fields are rejected instead of being silently ignored.
"""

from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, Field


ProductStatus = Literal["publish", "draft"]


class Product(BaseModel):
    """Product as returned to storefront callers."""
    id: int
    title: str = ""
    slug: Optional[str] = None
    status: Optional[str] = None
    price: float = 0
    sku: str = ""
    stock: int = 0
    content: str = ""
    excerpt: str = ""


class PaginatedResponse(BaseModel):
    """One page of a product list query."""
    data: List[Product]
    total: int = 0
    total_pages: int = 0


class ProductCreate(BaseModel):
    """Fields required to create a product."""
    title: str = Field(..., min_length=1, max_length=255)
    price: float = Field(..., ge=0)
    sku: str = Field(..., max_length=100)
    stock: int = Field(..., ge=0)
    status: ProductStatus = "publish"
    content: str = ""
    excerpt: str = ""

    class Config:
        extra = "forbid"

    def to_payload(self) -> Dict[str, Any]:
        return self.model_dump()


class ProductUpdate(BaseModel):
    """Partial update. Only fields that were explicitly set are sent."""
    title: Optional[str] = Field(default=None, min_length=1, max_length=255)
    price: Optional[float] = Field(default=None, ge=0)
    sku: Optional[str] = Field(default=None, max_length=100)
    stock: Optional[int] = Field(default=None, ge=0)
    status: Optional[ProductStatus] = None
    content: Optional[str] = None
    excerpt: Optional[str] = None

    class Config:
        extra = "forbid"

    def to_payload(self) -> Dict[str, Any]:
        return self.model_dump(exclude_unset=True)

    @property
    def is_empty(self) -> bool:
        return not self.model_fields_set


class ProductFilters(BaseModel):
    """Optional filters for product list queries."""
    search: Optional[str] = None
    category: Optional[int] = None
    tag: Optional[int] = None
    orderby: Optional[str] = None
    order: Optional[Literal["asc", "desc"]] = None

    class Config:
        extra = "forbid"

    def to_params(self) -> Dict[str, str]:
        """Query string parameters, skipping empty filters."""
        params = {}
        for name, value in self.model_dump(exclude_none=True).items():
            if value == "":
                continue
            params[name] = str(value)
        return params
