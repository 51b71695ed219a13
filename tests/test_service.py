import pytest

from order_sheet.schema import NoOrdersFound, OrderItem, ProductRef
from order_sheet.service import (
    build_sheet,
    decode_transcript,
    match_orders,
    parse_transcript,
    read_transcript,
    run_pipeline,
)


def test_two_customers_end_to_end(scenario_transcript, fruit_catalog):
    grid = run_pipeline(scenario_transcript, fruit_catalog)
    assert grid.rows[0] == ["주문자", "원본주문", "비고", "사과", "배"]
    assert grid.rows[1] == ["", "", "", "상시", "상시"]
    assert grid.rows[2] == ["판매가", "", "", "1000", "2000"]
    assert grid.data_rows() == [
        ["Alice", "[10:00] 사과 2개", "", "2", ""],
        ["Bob", "[10:05] 배 1개", "", "", "1"],
    ]
    assert grid.rows[grid.revenue_index] == ["총 판매액", "=SUM(D8:E8)", "", "=D3*D4", "=E3*E4"]


def test_excel_variant_without_reorder(scenario_transcript, fruit_catalog):
    grid = run_pipeline(scenario_transcript, fruit_catalog, variant="excel", reorder=False)
    assert grid.rows[0] == ["주문자", "주문금액", "원본주문", "비고", "배", "사과"]
    assert grid.data_rows()[0][1] == "=SUMPRODUCT($E$3:$F$3,E6:F6)"


def test_shop_only_transcript(fruit_catalog):
    transcript = "[과실당] [10:00] 오늘 사과 들어왔어요\n[과실당 사장님] [10:05] 배도 있어요"
    with pytest.raises(NoOrdersFound):
        parse_transcript(transcript)
    with pytest.raises(NoOrdersFound):
        run_pipeline(transcript, fruit_catalog)


def test_inactive_products_never_get_a_column(fruit_catalog):
    catalog = fruit_catalog + [ProductRef(name="딸기", price=9000, sale_date=None, is_active=False)]
    grid = run_pipeline("[Alice] [10:00] 딸기 2개 사과 1개", catalog)
    assert "딸기" not in grid.rows[0]
    assert grid.data_rows()[0][3:] == ["1", ""]


def test_failing_matcher_keeps_the_order(scenario_transcript, fruit_catalog):
    def matcher(order):
        if order.nickname == "Bob":
            raise RuntimeError("matcher unavailable")
        return [OrderItem(name="사과", quantity=4, price=1000)]

    orders = match_orders(parse_transcript(scenario_transcript), fruit_catalog, matcher=matcher)
    assert [order.nickname for order in orders] == ["Alice", "Bob"]
    assert orders[0].items == (OrderItem(name="사과", quantity=4, price=1000),)
    assert orders[1].items == ()

    grid = build_sheet(orders, fruit_catalog)
    assert [row[0] for row in grid.data_rows()] == ["Alice", "Bob"]


class TestDecoding:
    def test_utf8_with_bom(self):
        assert decode_transcript("\ufeff[Alice] [10:00] 사과 1개".encode("utf-8")) == "[Alice] [10:00] 사과 1개"

    def test_cp949_fallback(self):
        assert decode_transcript("[Alice] [10:00] 사과 1개".encode("cp949")) == "[Alice] [10:00] 사과 1개"

    def test_explicit_encoding(self):
        with pytest.raises(UnicodeDecodeError):
            decode_transcript("사과".encode("cp949"), encoding="utf-8")

    def test_read_from_disk(self, tmp_path, scenario_transcript):
        path = tmp_path / "chat.txt"
        path.write_bytes(scenario_transcript.encode("cp949"))
        assert read_transcript(path) == scenario_transcript
