"""Parse an exported KakaoTalk chat and print the orders grouped per customer."""

from __future__ import annotations

import argparse
import json
from pathlib import Path
from typing import Iterable, List, Optional

from order_sheet import CombinedOrder, NoOrdersFound
from order_sheet.chatlog import count_messages
from order_sheet.config import configure_logging, get_settings
from order_sheet.service import parse_transcript, read_transcript


def orders_to_json(orders: List[CombinedOrder]) -> str:
    payload = [
        {
            "nickname": order.nickname,
            "orderText": order.order_text,
            "firstTime": order.first_time,
            "latestTime": order.latest_time,
            "messageCount": count_messages(order),
        }
        for order in orders
    ]
    return json.dumps(payload, ensure_ascii=False, indent=2)


def print_report(orders: List[CombinedOrder]) -> None:
    total = 0
    for order in orders:
        count = count_messages(order)
        total += count
        print("=" * 60)
        print(f"{order.nickname} ({count}건) | {order.first_time} ~ {order.latest_time}")
        print(order.order_text)
    print("=" * 60)
    print(f"Customers: {len(orders)}. Messages: {total}.")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Group chat-log orders by customer nickname.")
    parser.add_argument("transcript", type=Path, help="Exported chat transcript (.txt).")
    parser.add_argument(
        "--shop-marker",
        help="Nicknames containing this text are the shop's own messages (default: env SHOP_NAME_MARKER).",
    )
    parser.add_argument(
        "--encoding",
        help="Transcript encoding (default: try utf-8, cp949 and euc-kr in turn).",
    )
    parser.add_argument("--json", action="store_true", help="Print the grouped orders as JSON.")
    parser.add_argument("--verbose", action="store_true", help="Log skipped lines and other details.")
    return parser


def main(argv: Optional[Iterable[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    configure_logging(args.verbose)
    settings = get_settings()

    transcript = read_transcript(args.transcript, args.encoding)
    try:
        orders = parse_transcript(transcript, args.shop_marker or settings.shop_marker)
    except NoOrdersFound as exc:
        print(exc)
        return 0

    if args.json:
        print(orders_to_json(orders))
    else:
        print_report(orders)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
