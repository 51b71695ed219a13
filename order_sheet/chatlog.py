"""Parse exported KakaoTalk chat logs into per-customer orders."""

from __future__ import annotations

import logging
import re
from typing import Dict, Iterable, List, Optional

from .config import DEFAULT_SHOP_MARKER
from .ordering import korean_sort_key
from .schema import CombinedOrder, OrderFragment, RawMessage

LINE_PATTERN = re.compile(r"^\[([^\]]+)\]\s*\[([^\]]+)\]\s*(.*)$")


def _is_noise(line: str) -> bool:
    return line.startswith("-") or not line


def read_messages(transcript: str) -> List[RawMessage]:
    """Return every bracketed message with its continuation lines folded in.

    Continuation lines are joined with a single space until the next line that
    starts with ``[``. System lines (``-``) and blank lines never break a
    continuation. Bracketed lines without a sender, a time or opening text are
    dropped together with the lines that follow them.
    """
    lines = transcript.split("\n")
    messages: List[RawMessage] = []

    i = 0
    while i < len(lines):
        line = lines[i].strip()
        i += 1
        if line.startswith("-") or not line.startswith("["):
            continue

        match = LINE_PATTERN.match(line)
        if not match:
            logging.debug("Skipping malformed transcript line: %s", line)
            continue

        sender, time, text = match.groups()
        if not sender.strip() or not text.strip():
            logging.debug("Skipping empty transcript message: %s", line)
            continue

        parts = [text.strip()]
        while i < len(lines):
            next_line = lines[i].strip()
            if next_line.startswith("["):
                break
            i += 1
            if _is_noise(next_line):
                continue
            parts.append(next_line)

        messages.append(RawMessage(sender_id=sender.strip(), timestamp=time.strip(), text=" ".join(parts)))

    return messages


class ChatLogParser:
    """Turns a raw transcript into order fragments, dropping the shop's own messages."""

    def __init__(self, shop_marker: Optional[str] = DEFAULT_SHOP_MARKER) -> None:
        self.shop_marker = shop_marker or ""

    def is_shop(self, nickname: str) -> bool:
        return bool(self.shop_marker) and self.shop_marker in nickname

    def parse(self, transcript: str) -> List[OrderFragment]:
        fragments: List[OrderFragment] = []
        for message in read_messages(transcript):
            if self.is_shop(message.sender_id):
                logging.debug("Discarding shop message from %s", message.sender_id)
                continue
            fragments.append(
                OrderFragment(nickname=message.sender_id, time=message.timestamp, text=message.text)
            )
        return fragments


class OrderGrouper:
    def group(self, fragments: Iterable[OrderFragment]) -> List[CombinedOrder]:
        grouped: Dict[str, List[OrderFragment]] = {}
        for fragment in fragments:
            grouped.setdefault(fragment.nickname, []).append(fragment)

        combined: List[CombinedOrder] = []
        for nickname, members in grouped.items():
            order_text = "\n".join(f"[{member.time}] {member.text}" for member in members)
            latest = members[0].time
            for member in members[1:]:
                # Plain string comparison, the way the timestamps arrive.
                if member.time > latest:
                    latest = member.time
            combined.append(
                CombinedOrder(
                    nickname=nickname,
                    order_text=order_text,
                    first_time=members[0].time,
                    latest_time=latest,
                )
            )

        combined.sort(key=lambda order: korean_sort_key(order.nickname))
        return combined


def count_messages(order: CombinedOrder) -> int:
    """Number of timestamped messages folded into a combined order."""
    return len(re.findall(r"^\[[^\]]+\]", order.order_text, flags=re.MULTILINE))
