"""
Pydantic Product Models

Request and response schemas for the product catalog API.
Wire format uses camelCase keys (inStock, createdAt, updatedAt).
"""
from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

NAME_MAX_LENGTH = 100
DESCRIPTION_MAX_LENGTH = 500


class CamelModel(BaseModel):
    """Base model serialized with camelCase aliases."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


# ==================== Write Models ====================

class ProductWrite(CamelModel):
    """
    Client-writable product fields for create and update.

    id, createdAt and updatedAt are never taken from the client; unknown
    keys are ignored. in_stock stays None when omitted so an update keeps
    the stored value.
    """
    name: str
    description: str
    price: float = Field(ge=0)
    category: str
    in_stock: Optional[bool] = None

    @field_validator("name")
    @classmethod
    def name_trimmed_and_bounded(cls, v: str) -> str:
        v = v.strip()
        if len(v) > NAME_MAX_LENGTH:
            raise ValueError(f"Product name cannot exceed {NAME_MAX_LENGTH} characters")
        return v

    @field_validator("description")
    @classmethod
    def description_bounded(cls, v: str) -> str:
        if len(v) > DESCRIPTION_MAX_LENGTH:
            raise ValueError(f"Description cannot exceed {DESCRIPTION_MAX_LENGTH} characters")
        return v

    @field_validator("category")
    @classmethod
    def category_trimmed(cls, v: str) -> str:
        return v.strip()


# ==================== Response Models ====================

class Product(CamelModel):
    """Stored product as returned to clients."""
    id: str
    name: str
    description: str
    price: float
    category: str
    in_stock: bool
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "id": "0f8e5b8e2c1a4a4f9b1f3c2d5e6a7b8c",
                "name": "Widget",
                "description": "A small widget",
                "price": 9.99,
                "category": "Gadgets",
                "inStock": True,
                "createdAt": "2026-01-05T10:00:00",
                "updatedAt": "2026-01-05T10:00:00"
            }
        }
    )


class Pagination(CamelModel):
    """Page position and counts for a listing."""
    current_page: int
    total_pages: int
    total_products: int
    has_next: bool
    has_prev: bool


class ProductPage(CamelModel):
    """One page of a product listing."""
    products: List[Product]
    pagination: Pagination


class DeletedProduct(CamelModel):
    """Confirmation returned after a delete."""
    message: str
    deleted_product: Product


class CategoryStats(CamelModel):
    """Aggregates for one category."""
    category: str
    count: int
    avg_price: float
    min_price: float
    max_price: float
    in_stock_count: int
    out_of_stock_count: int


class OverallStats(CamelModel):
    """Aggregates across the whole catalog."""
    total_products: int = 0
    total_in_stock: int = 0
    avg_price_all: float = 0


class CatalogStats(CamelModel):
    """Statistics endpoint payload."""
    summary: OverallStats
    by_category: List[CategoryStats]
