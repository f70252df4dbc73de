"""
Product Service

Store operations for the product catalog: find and count by filter,
find/update/delete by ID, insert, and grouped aggregates. Listing and
statistics queries come from query_translator.
"""
import uuid
from typing import List
from sqlalchemy import and_, func, select, true
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
import logging

from ..db.models import ProductModel, utcnow
from ..exceptions import InvalidProductIdError, ProductNotFoundError
from ..models.products import CatalogStats, Product, ProductPage, ProductWrite
from .query_translator import (
    NAME_SEARCH_LIMIT,
    ProductQuery,
    build_filters,
    build_pagination,
    category_stats_statement,
    name_search_filter,
    overall_stats_statement,
    to_category_stats,
    to_overall_stats,
)

logger = logging.getLogger(__name__)


def parse_product_id(raw: str) -> str:
    """
    Normalize a product ID taken from a URL.

    Accepts the 32-hex form we issue (and the dashed UUID form).

    Raises:
        InvalidProductIdError: If raw cannot be a product ID
    """
    try:
        return uuid.UUID(raw).hex
    except ValueError:
        raise InvalidProductIdError(raw)


def to_product(model: ProductModel) -> Product:
    return Product.model_validate(model)


async def _commit(db: AsyncSession) -> None:
    try:
        await db.commit()
    except IntegrityError:
        await db.rollback()
        raise


async def _get_model(db: AsyncSession, product_id: str) -> ProductModel:
    model = await db.get(ProductModel, parse_product_id(product_id))
    if model is None:
        raise ProductNotFoundError(product_id)
    return model


# ============================================================================
# Reads
# ============================================================================

async def list_products(db: AsyncSession, query: ProductQuery) -> ProductPage:
    """
    Fetch one page of products matching a listing query.

    Args:
        db: Database session
        query: Parsed listing parameters

    Returns:
        ProductPage with newest products first and pagination metadata.
        The total is a separate count over the same filter. Pages past
        the end are empty without a fetch, so any page number is accepted
        even when its offset would not fit a database integer.
    """
    condition = and_(true(), *build_filters(query))

    total = await db.scalar(
        select(func.count()).select_from(ProductModel).where(condition)
    ) or 0

    products: List[Product] = []
    if query.offset < total:
        result = await db.execute(
            select(ProductModel)
            .where(condition)
            .order_by(ProductModel.created_at.desc())
            .offset(query.offset)
            .limit(query.limit)
        )
        products = [to_product(m) for m in result.scalars().all()]

    logger.debug(
        f"Listed {len(products)} of {total} products "
        f"(page={query.page}, limit={query.limit})"
    )

    return ProductPage(
        products=products,
        pagination=build_pagination(query.page, query.limit, total)
    )


async def get_product(db: AsyncSession, product_id: str) -> Product:
    """
    Get a product by ID.

    Raises:
        InvalidProductIdError: Malformed ID
        ProductNotFoundError: No product with this ID
    """
    logger.debug(f"Get product: {product_id}")
    return to_product(await _get_model(db, product_id))


async def search_by_name(db: AsyncSession, term: str) -> List[Product]:
    """Products whose name contains `term` (case-insensitive), at most 20."""
    result = await db.execute(
        select(ProductModel)
        .where(name_search_filter(term))
        .limit(NAME_SEARCH_LIMIT)
    )
    products = [to_product(m) for m in result.scalars().all()]
    logger.debug(f"Name search '{term}' matched {len(products)} products")
    return products


async def get_stats(db: AsyncSession) -> CatalogStats:
    """Per-category and catalog-wide aggregates, computed by the store."""
    by_category = await db.execute(category_stats_statement())
    overall = await db.execute(overall_stats_statement())

    return CatalogStats(
        summary=to_overall_stats(overall.mappings().first()),
        by_category=[to_category_stats(row) for row in by_category.mappings().all()]
    )


# ============================================================================
# Writes
# ============================================================================

async def create_product(db: AsyncSession, fields: ProductWrite) -> Product:
    """
    Insert a new product.

    Args:
        db: Database session
        fields: Validated client fields; inStock defaults to true

    Returns:
        Stored product with generated id and timestamps
    """
    model = ProductModel(
        name=fields.name,
        description=fields.description,
        price=fields.price,
        category=fields.category,
        in_stock=True if fields.in_stock is None else fields.in_stock
    )

    db.add(model)
    await _commit(db)
    await db.refresh(model)

    logger.info(f"Created product: {model.id}, name='{model.name}', category={model.category}")

    return to_product(model)


async def update_product(db: AsyncSession, product_id: str, fields: ProductWrite) -> Product:
    """
    Replace a product's writable fields.

    inStock is left unchanged when the client omits it. updatedAt is
    always refreshed, even if no value changed.

    Raises:
        InvalidProductIdError: Malformed ID
        ProductNotFoundError: No product with this ID
    """
    model = await _get_model(db, product_id)

    model.name = fields.name
    model.description = fields.description
    model.price = fields.price
    model.category = fields.category
    if fields.in_stock is not None:
        model.in_stock = fields.in_stock
    model.updated_at = utcnow()

    await _commit(db)
    await db.refresh(model)

    logger.info(f"Updated product: {model.id}")

    return to_product(model)


async def delete_product(db: AsyncSession, product_id: str) -> Product:
    """
    Delete a product and return it as it was before deletion.

    Raises:
        InvalidProductIdError: Malformed ID
        ProductNotFoundError: No product with this ID
    """
    model = await _get_model(db, product_id)
    deleted = to_product(model)

    await db.delete(model)
    await _commit(db)

    logger.info(f"Deleted product: {deleted.id}")

    return deleted
