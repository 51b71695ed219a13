import pytest

from order_sheet.schema import ProductRef


@pytest.fixture
def fruit_catalog():
    return [
        ProductRef(name="사과", price=1000, sale_date=None, is_active=True),
        ProductRef(name="배", price=2000, sale_date=None, is_active=True),
    ]


@pytest.fixture
def scenario_transcript():
    return "[Alice] [10:00] 사과 2개\n[Bob] [10:05] 배 1개"


@pytest.fixture
def mixed_catalog():
    return [
        ProductRef(name="감", price=500, sale_date="2025-01-10", is_active=True),
        ProductRef(name="귤", price=300, sale_date="2025-01-12", is_active=True),
        ProductRef(name="배", price=2000, sale_date=None, is_active=True),
        ProductRef(name="사과", price=1000, sale_date="2025-01-10", is_active=True),
        ProductRef(name="딸기", price=9000, sale_date="2025-01-15", is_active=False),
        ProductRef(name="샘플", price=0, sale_date=None, is_active=True),
    ]

