"""
Insight Ledger and Memo Synthesizer.

The ledger is an append-only, in-memory list of free-text business
insights. It resets on server restart; nothing is persisted.

The memo is never stored. synthesize_memo() rebuilds it from the ledger
contents on every read, so two reads with no append in between are
byte-identical.
"""

from __future__ import annotations

import logging
import threading
from typing import List, Sequence, Tuple

logger = logging.getLogger(__name__)

MEMO_URI = "memo://insights"
MEMO_NAME = "Business Insights Memo"

EMPTY_MEMO = "No business insights have been discovered yet."
MEMO_HEADER = "📊 Business Intelligence Memo 📊"
MEMO_SECTION = "Key Insights Discovered:"


class InsightLedger:
    """Ordered, append-only list of insights."""

    def __init__(self) -> None:
        self._items: List[str] = []
        self._lock = threading.Lock()

    def append(self, text: str) -> int:
        """Append an insight to the tail. Returns the new ledger length."""
        with self._lock:
            self._items.append(text)
            return len(self._items)

    def snapshot(self) -> Tuple[str, ...]:
        """Current contents in insertion order (a copy)."""
        with self._lock:
            return tuple(self._items)

    def __len__(self) -> int:
        with self._lock:
            return len(self._items)


def synthesize_memo(insights: Sequence[str]) -> str:
    """Render the business insights memo from ledger contents.

    Empty ledger gives the fixed "no insights" sentinel. Otherwise a
    header, one ``- <insight>`` bullet per entry in ledger order, and,
    once there is more than one insight, a summary stating the count.
    """
    logger.debug("Synthesizing memo with %d insights", len(insights))
    if not insights:
        return EMPTY_MEMO

    bullets = "\n".join(f"- {insight}" for insight in insights)

    memo = f"{MEMO_HEADER}\n\n"
    memo += f"{MEMO_SECTION}\n\n"
    memo += bullets

    if len(insights) > 1:
        memo += "\nSummary:\n"
        memo += (
            f"Analysis has revealed {len(insights)} key business insights "
            "that suggest opportunities for strategic optimization and growth."
        )

    return memo
