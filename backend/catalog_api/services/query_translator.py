"""
Query Translator

Turns listing, name-search and statistics requests into store filters,
pagination bounds and grouping statements. Pure functions only; the
statements are executed by product_service.

Listing policy:
- Query parameters arrive as raw strings and never cause a request error
- category and search are case-insensitive substring matches
- minPrice/maxPrice that are not numbers are treated as absent
- page and limit are clamped into range, never rejected
"""
import math
import re
from dataclasses import dataclass
from typing import Any, List, Mapping, Optional

from sqlalchemy import ColumnElement, Select, case, func, or_, select, true

from ..db.models import ProductModel
from ..models.products import CategoryStats, OverallStats, Pagination

DEFAULT_PAGE = 1
DEFAULT_LIMIT = 10
MAX_LIMIT = 50
NAME_SEARCH_LIMIT = 20

LIKE_ESCAPE = "\\"

_INT_PREFIX = re.compile(r"^\s*([+-]?\d+)")


# ============================================================================
# Query Descriptor
# ============================================================================

@dataclass(frozen=True)
class ProductQuery:
    """Parsed form of a listing request."""
    category: Optional[str] = None
    in_stock: Optional[bool] = None
    min_price: Optional[float] = None
    max_price: Optional[float] = None
    search: Optional[str] = None
    page: int = DEFAULT_PAGE
    limit: int = DEFAULT_LIMIT

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.limit


def parse_int_prefix(raw: Optional[str], default: int) -> int:
    """
    Read the leading integer of a query value.

    "2.7" -> 2, "3abc" -> 3; a value with no leading integer (or no value)
    gives `default`.
    """
    if raw is None:
        return default
    match = _INT_PREFIX.match(raw)
    if not match:
        return default
    return int(match.group(1))


def parse_price(raw: Optional[str]) -> Optional[float]:
    """Numeric price bound, or None when absent, empty or not a number."""
    if not raw:
        return None
    try:
        value = float(raw)
    except ValueError:
        return None
    if math.isnan(value):
        return None
    return value


def clamp_page(page: int) -> int:
    return max(1, page)


def clamp_limit(limit: int) -> int:
    return min(MAX_LIMIT, max(1, limit))


def parse_listing_params(
    category: Optional[str] = None,
    in_stock: Optional[str] = None,
    search: Optional[str] = None,
    page: Optional[str] = None,
    limit: Optional[str] = None,
    min_price: Optional[str] = None,
    max_price: Optional[str] = None
) -> ProductQuery:
    """
    Build a ProductQuery from raw listing query parameters.

    Args:
        category: Category substring (empty means no filter)
        in_stock: "true" selects in-stock products, any other present value
            selects out-of-stock ones; None means no filter
        search: Term matched against name or description
        page: Page number, default 1, floored to 1
        limit: Page size, default 10, clamped to 1..50
        min_price: Inclusive lower price bound
        max_price: Inclusive upper price bound

    Returns:
        ProductQuery with clamped pagination
    """
    return ProductQuery(
        category=category or None,
        in_stock=None if in_stock is None else in_stock == "true",
        min_price=parse_price(min_price),
        max_price=parse_price(max_price),
        search=search or None,
        page=clamp_page(parse_int_prefix(page, DEFAULT_PAGE)),
        limit=clamp_limit(parse_int_prefix(limit, DEFAULT_LIMIT)),
    )


# ============================================================================
# Filters
# ============================================================================

def _escape_like(term: str) -> str:
    return (
        term.replace(LIKE_ESCAPE, LIKE_ESCAPE * 2)
        .replace("%", LIKE_ESCAPE + "%")
        .replace("_", LIKE_ESCAPE + "_")
    )


def contains_ci(column, term: str) -> ColumnElement:
    """Case-insensitive substring match, with the term taken literally."""
    return column.ilike(f"%{_escape_like(term)}%", escape=LIKE_ESCAPE)


def build_filters(query: ProductQuery) -> List[ColumnElement]:
    """
    Filter clauses for a listing; callers AND them together.

    The search clause is itself an OR over name and description.
    """
    clauses: List[ColumnElement] = []

    if query.category:
        clauses.append(contains_ci(ProductModel.category, query.category))

    if query.in_stock is not None:
        clauses.append(ProductModel.in_stock == query.in_stock)

    if query.min_price is not None:
        clauses.append(ProductModel.price >= query.min_price)
    if query.max_price is not None:
        clauses.append(ProductModel.price <= query.max_price)

    if query.search:
        clauses.append(or_(
            contains_ci(ProductModel.name, query.search),
            contains_ci(ProductModel.description, query.search)
        ))

    return clauses


def name_search_filter(term: str) -> ColumnElement:
    return contains_ci(ProductModel.name, term)


def build_pagination(page: int, limit: int, total: int) -> Pagination:
    """Pagination metadata for a page of `limit` items out of `total` matches."""
    total_pages = math.ceil(total / limit)
    return Pagination(
        current_page=page,
        total_pages=total_pages,
        total_products=total,
        has_next=page < total_pages,
        has_prev=page > 1
    )


# ============================================================================
# Statistics
# ============================================================================

def _in_stock_sum():
    return func.sum(case((ProductModel.in_stock == true(), 1), else_=0))


def category_stats_statement() -> Select:
    """Per-category aggregates, largest categories first."""
    product_count = func.count(ProductModel.id)
    return (
        select(
            ProductModel.category.label("category"),
            product_count.label("count"),
            func.avg(ProductModel.price).label("avg_price"),
            func.min(ProductModel.price).label("min_price"),
            func.max(ProductModel.price).label("max_price"),
            _in_stock_sum().label("in_stock_count"),
        )
        .group_by(ProductModel.category)
        .order_by(product_count.desc(), ProductModel.category)
    )


def overall_stats_statement() -> Select:
    """Catalog-wide aggregates (always exactly one row)."""
    return select(
        func.count(ProductModel.id).label("total_products"),
        _in_stock_sum().label("total_in_stock"),
        func.avg(ProductModel.price).label("avg_price_all"),
    )


def to_category_stats(row: Mapping[str, Any]) -> CategoryStats:
    count = int(row["count"])
    in_stock_count = int(row["in_stock_count"] or 0)
    return CategoryStats(
        category=row["category"],
        count=count,
        avg_price=round(float(row["avg_price"]), 2),
        min_price=row["min_price"],
        max_price=row["max_price"],
        in_stock_count=in_stock_count,
        out_of_stock_count=count - in_stock_count
    )


def to_overall_stats(row: Optional[Mapping[str, Any]]) -> OverallStats:
    """Overall summary; an empty catalog yields all zeros."""
    if row is None or not row["total_products"]:
        return OverallStats(total_products=0, total_in_stock=0, avg_price_all=0)
    return OverallStats(
        total_products=int(row["total_products"]),
        total_in_stock=int(row["total_in_stock"] or 0),
        avg_price_all=float(row["avg_price_all"])
    )
