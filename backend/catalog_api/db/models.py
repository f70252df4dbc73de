"""
SQLAlchemy ORM Models for the Product Catalog

Defines the products table. Field constraints mirror the request
validation so every stored row stays valid even if a write bypasses it.
"""
import uuid
from datetime import datetime, timezone

from sqlalchemy import Boolean, CheckConstraint, Column, DateTime, Float, String
from sqlalchemy.orm import declarative_base

Base = declarative_base()


def utcnow() -> datetime:
    """Naive UTC timestamp, as stored by SQLite."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def new_product_id() -> str:
    return uuid.uuid4().hex


class ProductModel(Base):
    """
    ORM model for products table.

    id is generated on insert and never changes; updated_at is refreshed
    on every update.
    """
    __tablename__ = "products"

    id = Column(String(32), primary_key=True, default=new_product_id)
    name = Column(String(100), nullable=False, index=True)
    description = Column(String(500), nullable=False)
    price = Column(Float, nullable=False)
    category = Column(String, nullable=False, index=True)
    in_stock = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime, nullable=False, default=utcnow, index=True)
    updated_at = Column(DateTime, nullable=False, default=utcnow, onupdate=utcnow)

    __table_args__ = (
        CheckConstraint("price >= 0", name="price_non_negative_check"),
        CheckConstraint("length(trim(name)) > 0", name="name_not_blank_check"),
        CheckConstraint("length(trim(category)) > 0", name="category_not_blank_check"),
    )

    def __repr__(self) -> str:
        return f"<ProductModel id={self.id} name={self.name!r}>"
