"""
CMS Database Layer

Usage:
    from catalog.database import init_db, create_session_factory, ProductRepository

    init_db()

    db = create_session_factory()()
    repo = ProductRepository(db, notifier=notifier)
    repo.create_product(data)
"""

from .models import Base, Product, ProductStatus
from .session import (
    get_database_url,
    create_db_engine,
    get_engine,
    create_session_factory,
    init_db,
    check_db_connection,
)
from .repository import ProductRepository, slugify

__all__ = [
    # Models
    "Base",
    "Product",
    "ProductStatus",
    # Session
    "get_database_url",
    "create_db_engine",
    "get_engine",
    "create_session_factory",
    "init_db",
    "check_db_connection",
    # Repository
    "ProductRepository",
    "slugify",
]
