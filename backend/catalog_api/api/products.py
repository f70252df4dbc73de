"""
Products API Endpoints

CRUD, filtered listing, name search and statistics for the product
catalog. Write endpoints sit behind the API key gate.
"""
from fastapi import APIRouter, Body, Depends, Query
from typing import Any, List, Optional
from sqlalchemy.ext.asyncio import AsyncSession
import logging

from ..db.init_db import get_db
from ..exceptions import MissingSearchQueryError
from ..models.products import CatalogStats, DeletedProduct, Product, ProductPage
from ..security import require_api_key
from ..services import product_service
from ..services.query_translator import parse_listing_params
from ..services.validation import validate_product_payload

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("", response_model=ProductPage)
async def list_products_endpoint(
    category: Optional[str] = Query(None, description="Category substring (case-insensitive)"),
    in_stock: Optional[str] = Query(None, alias="inStock", description="'true' or 'false'"),
    search: Optional[str] = Query(None, description="Matches name or description"),
    page: Optional[str] = Query(None, description="Page number, default 1"),
    limit: Optional[str] = Query(None, description="Page size, default 10, max 50"),
    min_price: Optional[str] = Query(None, alias="minPrice", description="Inclusive lower price bound"),
    max_price: Optional[str] = Query(None, alias="maxPrice", description="Inclusive upper price bound"),
    db: AsyncSession = Depends(get_db)
) -> ProductPage:
    """
    List products with filtering, search and pagination.

    Query parameters are read leniently: page/limit are clamped, and
    non-numeric price bounds are ignored.

    Examples:
        GET /api/products?category=kitchen&inStock=true
        GET /api/products?search=coffee&minPrice=10&maxPrice=100&page=2&limit=20
    """
    query = parse_listing_params(
        category=category,
        in_stock=in_stock,
        search=search,
        page=page,
        limit=limit,
        min_price=min_price,
        max_price=max_price
    )
    logger.info(f"Product listing: {query}")

    return await product_service.list_products(db, query)


@router.get("/search/name", response_model=List[Product])
async def search_by_name_endpoint(
    q: Optional[str] = Query(None, description="Name substring (case-insensitive)"),
    db: AsyncSession = Depends(get_db)
) -> List[Product]:
    """
    Search products by name, at most 20 results.

    Example:
        GET /api/products/search/name?q=widget
    """
    if not q:
        raise MissingSearchQueryError()

    return await product_service.search_by_name(db, q)


@router.get("/stats/summary", response_model=CatalogStats)
async def stats_endpoint(db: AsyncSession = Depends(get_db)) -> CatalogStats:
    """
    Catalog statistics.

    Returns:
        {
            "summary": {"totalProducts", "totalInStock", "avgPriceAll"},
            "byCategory": [{"category", "count", "avgPrice", "minPrice",
                            "maxPrice", "inStockCount", "outOfStockCount"}]
        }
    """
    return await product_service.get_stats(db)


@router.get("/{product_id}", response_model=Product)
async def get_product_endpoint(
    product_id: str,
    db: AsyncSession = Depends(get_db)
) -> Product:
    """
    Get specific product by ID.

    Returns:
        Product, 404 if not found, 400 if the ID is malformed
    """
    return await product_service.get_product(db, product_id)


@router.post(
    "",
    response_model=Product,
    status_code=201,
    dependencies=[Depends(require_api_key)]
)
async def create_product_endpoint(
    payload: Any = Body(None),
    db: AsyncSession = Depends(get_db)
) -> Product:
    """
    Create a product (requires x-api-key when a key is configured).

    Request Body:
        {
            "name": str,          # required, <= 100 chars
            "description": str,   # required, <= 500 chars
            "price": number,      # required, >= 0
            "category": str,      # required
            "inStock": bool       # optional, default true
        }
    """
    fields = validate_product_payload(payload)
    return await product_service.create_product(db, fields)


@router.put(
    "/{product_id}",
    response_model=Product,
    dependencies=[Depends(require_api_key)]
)
async def update_product_endpoint(
    product_id: str,
    payload: Any = Body(None),
    db: AsyncSession = Depends(get_db)
) -> Product:
    """
    Update a product (requires x-api-key when a key is configured).

    Same body rules as create; an omitted inStock keeps its stored value.
    """
    fields = validate_product_payload(payload)
    return await product_service.update_product(db, product_id, fields)


@router.delete(
    "/{product_id}",
    response_model=DeletedProduct,
    dependencies=[Depends(require_api_key)]
)
async def delete_product_endpoint(
    product_id: str,
    db: AsyncSession = Depends(get_db)
) -> DeletedProduct:
    """Delete a product (requires x-api-key when a key is configured)."""
    deleted = await product_service.delete_product(db, product_id)
    return DeletedProduct(
        message="Product deleted successfully",
        deleted_product=deleted
    )
