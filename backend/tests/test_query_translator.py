"""Tests for listing-parameter parsing, filters, pagination and stats shaping.

These tests verify:
- Lenient parsing of page/limit/price parameters
- Clamping of page and limit
- Filter clause construction
- Pagination arithmetic
- Statistics row conversion and the empty-catalog summary
"""

import pytest

from catalog_api.services.query_translator import (
    DEFAULT_LIMIT,
    MAX_LIMIT,
    ProductQuery,
    _escape_like,
    build_filters,
    build_pagination,
    clamp_limit,
    clamp_page,
    parse_int_prefix,
    parse_listing_params,
    parse_price,
    to_category_stats,
    to_overall_stats,
)


class TestParsing:
    """Raw query strings to numbers."""

    @pytest.mark.parametrize("raw,expected", [
        ("3", 3),
        ("2.7", 2),
        ("3abc", 3),
        (" 4", 4),
        ("-2", -2),
        ("abc", 7),
        ("", 7),
        (None, 7),
    ])
    def test_parse_int_prefix(self, raw, expected):
        assert parse_int_prefix(raw, default=7) == expected

    @pytest.mark.parametrize("raw,expected", [
        ("15", 15.0),
        ("0", 0.0),
        ("12.5", 12.5),
        ("abc", None),
        ("nan", None),
        ("", None),
        (None, None),
    ])
    def test_parse_price(self, raw, expected):
        assert parse_price(raw) == expected

    def test_clamping(self):
        assert clamp_page(0) == 1
        assert clamp_page(-4) == 1
        assert clamp_page(6) == 6
        assert clamp_limit(1000) == MAX_LIMIT
        assert clamp_limit(0) == 1
        assert clamp_limit(-10) == 1
        assert clamp_limit(25) == 25


class TestParseListingParams:
    """ProductQuery construction from request parameters."""

    def test_defaults(self):
        query = parse_listing_params()

        assert query == ProductQuery()
        assert query.page == 1
        assert query.limit == DEFAULT_LIMIT
        assert query.offset == 0

    def test_in_stock_is_true_only_for_literal_true(self):
        assert parse_listing_params(in_stock="true").in_stock is True
        assert parse_listing_params(in_stock="false").in_stock is False
        assert parse_listing_params(in_stock="yes").in_stock is False
        assert parse_listing_params(in_stock="").in_stock is False
        assert parse_listing_params(in_stock=None).in_stock is None

    def test_empty_text_filters_are_absent(self):
        query = parse_listing_params(category="", search="")

        assert query.category is None
        assert query.search is None

    def test_malformed_prices_are_ignored(self):
        query = parse_listing_params(min_price="cheap", max_price="20")

        assert query.min_price is None
        assert query.max_price == 20.0

    def test_offset_uses_clamped_values(self):
        query = parse_listing_params(page="3", limit="1000")

        assert query.limit == MAX_LIMIT
        assert query.offset == 2 * MAX_LIMIT


class TestBuildFilters:
    """Clause construction."""

    def test_no_parameters_no_clauses(self):
        assert build_filters(ProductQuery()) == []

    def test_one_clause_per_present_parameter(self):
        query = ProductQuery(
            category="kitchen",
            in_stock=True,
            min_price=5.0,
            max_price=50.0,
            search="mixer",
        )

        assert len(build_filters(query)) == 5

    def test_search_is_single_or_clause(self):
        clauses = build_filters(ProductQuery(search="mixer"))

        assert len(clauses) == 1
        compiled = str(clauses[0])
        assert "name" in compiled and "description" in compiled
        assert " OR " in compiled

    def test_like_wildcards_are_escaped(self):
        assert _escape_like("50%_off\\") == "50\\%\\_off\\\\"


class TestPagination:
    """Pagination metadata arithmetic."""

    def test_middle_page(self):
        pagination = build_pagination(page=2, limit=2, total=5)

        assert pagination.total_pages == 3
        assert pagination.total_products == 5
        assert pagination.has_next is True
        assert pagination.has_prev is True

    def test_last_page(self):
        pagination = build_pagination(page=3, limit=2, total=5)

        assert pagination.has_next is False
        assert pagination.has_prev is True

    def test_no_matches(self):
        pagination = build_pagination(page=1, limit=10, total=0)

        assert pagination.total_pages == 0
        assert pagination.has_next is False
        assert pagination.has_prev is False

    def test_serialized_keys_are_camel_case(self):
        data = build_pagination(page=1, limit=10, total=11).model_dump(by_alias=True)

        assert data == {
            "currentPage": 1,
            "totalPages": 2,
            "totalProducts": 11,
            "hasNext": True,
            "hasPrev": False,
        }


class TestStatsShaping:
    """Aggregate rows to response models."""

    def test_category_row(self):
        row = {
            "category": "Kitchen",
            "count": 3,
            "avg_price": 10.0 / 3,
            "min_price": 1.0,
            "max_price": 5.0,
            "in_stock_count": 2,
        }

        stats = to_category_stats(row)

        assert stats.avg_price == 3.33
        assert stats.out_of_stock_count == 1

    def test_empty_catalog_summary(self):
        row = {"total_products": 0, "total_in_stock": None, "avg_price_all": None}

        summary = to_overall_stats(row).model_dump(by_alias=True)

        assert summary == {"totalProducts": 0, "totalInStock": 0, "avgPriceAll": 0}

    def test_overall_average_is_not_rounded(self):
        row = {"total_products": 3, "total_in_stock": 2, "avg_price_all": 35.0 / 3}

        assert to_overall_stats(row).avg_price_all == pytest.approx(11.6666667)
