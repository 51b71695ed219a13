from datetime import date

import pytest

from order_sheet.ordering import (
    ALWAYS_MARKER,
    ProductOrderingPolicy,
    demand_order,
    demand_positions,
    display_order,
    korean_sort_key,
    layout_products,
    parse_quantity,
    parse_sale_date,
    sale_date_label,
)
from order_sheet.schema import ProductRef


def product(name, sale_date=None, price=1000, active=True):
    return ProductRef(name=name, price=price, sale_date=sale_date, is_active=active)


def names(products):
    return [p.name for p in products]


class TestDisplayOrder:
    def test_newest_first_then_always_available(self):
        products = [
            product("나", "2025-01-10"),
            product("라"),
            product("가", "2025-01-10"),
            product("바", "언젠가"),
            product("다", "2025-02-01"),
            product("마", "  "),
            product("사", "2025-03-01", active=False),
        ]
        assert names(display_order(products)) == ["다", "가", "나", "라", "마", "바"]

    def test_all_dated(self):
        products = [product("배", "2025-01-01"), product("감", "2025-01-01"), product("귤", "2024-12-31")]
        assert names(display_order(products)) == ["감", "배", "귤"]

    def test_all_always_available(self):
        products = [product("사과"), product("배"), product("감")]
        assert names(display_order(products)) == ["감", "배", "사과"]

    def test_layout_drops_unpriced_and_inactive(self, mixed_catalog):
        assert names(display_order(mixed_catalog)) == ["귤", "감", "사과", "배", "샘플"]
        assert names(layout_products(mixed_catalog)) == ["귤", "감", "사과", "배"]

    def test_policy_wraps_the_functions(self, mixed_catalog):
        policy = ProductOrderingPolicy()
        assert policy.display(mixed_catalog) == display_order(mixed_catalog)
        assert policy.for_layout(mixed_catalog) == layout_products(mixed_catalog)


class TestSaleDates:
    @pytest.mark.parametrize(
        "value, expected",
        [
            ("2025-01-10", date(2025, 1, 10)),
            ("2025.01.10", date(2025, 1, 10)),
            ("2025/01/10", date(2025, 1, 10)),
            ("2025-01-10T09:00:00Z", date(2025, 1, 10)),
            ("", None),
            (None, None),
            (ALWAYS_MARKER, None),
            ("다음주", None),
        ],
    )
    def test_parse_sale_date(self, value, expected):
        assert parse_sale_date(value) == expected

    def test_label_shows_always_marker_only_when_blank(self):
        assert sale_date_label(product("감")) == ALWAYS_MARKER
        assert sale_date_label(product("감", "2025-01-10")) == "2025-01-10"


class TestDemandOrder:
    def test_highest_quantity_first(self):
        totals = {"사과": 2, "배": 1}
        assert demand_order(["배", "사과"], totals) == ["사과", "배"]

    def test_ties_broken_by_name(self):
        totals = {"배": 5, "귤": 5, "사과": 1}
        assert demand_order(["사과", "배", "귤"], totals) == ["귤", "배", "사과"]

    def test_unordered_products_go_last_by_name(self):
        totals = {"하": 0, "가": 0, "사과": 3}
        assert demand_order(["하", "사과", "가"], totals) == ["사과", "가", "하"]

    def test_positions(self):
        assert demand_positions(["a", "b", "c"], [0, 3, 1]) == [1, 2, 0]

    def test_policy_by_demand(self):
        assert ProductOrderingPolicy().by_demand(["배", "사과"], {"사과": 1}) == ["사과", "배"]


class TestParseQuantity:
    @pytest.mark.parametrize(
        "value, expected",
        [("3", 3.0), ("1.5", 1.5), (4, 4.0), ("", None), ("0", None), ("abc", None), ("1,000", None), (None, None)],
    )
    def test_values(self, value, expected):
        assert parse_quantity(value) == expected

    def test_formula_cells_do_not_count(self):
        assert parse_quantity("=SUM(D5:D6)") is None


class TestKoreanSortKey:
    def test_hangul_before_latin(self):
        assert sorted(["apple", "사과", "Banana", "감"], key=korean_sort_key) == ["감", "사과", "apple", "Banana"]
