"""
Database package for the product catalog.

Exports engine/session setup, table creation, and the ORM model.
"""
from .init_db import (
    create_engine,
    create_session_factory,
    describe_url,
    initialize_database,
    get_db,
    get_async_session
)
from .models import Base, ProductModel

__all__ = [
    "create_engine",
    "create_session_factory",
    "describe_url",
    "initialize_database",
    "get_db",
    "get_async_session",
    "Base",
    "ProductModel",
]
