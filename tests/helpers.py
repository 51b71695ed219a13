import re

from order_sheet.schema import CombinedOrder, OrderItem

CELL_REF = re.compile(r"\$?([A-Z]+)\$?\d+")


def referenced_columns(formula):
    """Column letters referenced by an A1-style formula, in order."""
    return CELL_REF.findall(formula)


def order(nickname, *items, text=None):
    return CombinedOrder(
        nickname=nickname,
        order_text=text or " ".join(f"{name} {qty}개" for name, qty, _ in items),
        first_time="10:00",
        latest_time="10:00",
        items=tuple(OrderItem(name=name, quantity=qty, price=price) for name, qty, price in items),
    )
