"""
rules.py  – reusable helpers for the EMA crossover strategy
===========================================================
Pure-function utilities only; no Redis, no side-effects.
"""

from __future__ import annotations
from enum import Enum
from typing import Sequence


class Signal(str, Enum):
    NONE   = "NONE"
    GOLDEN = "GOLDEN"      # fast crosses above slow
    DEATH  = "DEATH"       # fast crosses below slow


class Side(str, Enum):
    LONG  = "LONG"
    SHORT = "SHORT"

    @property
    def sign(self) -> int:
        return 1 if self is Side.LONG else -1

    @classmethod
    def for_entry(cls, signal: Signal) -> "Side | None":
        """GOLDEN → LONG, DEATH → SHORT, NONE → None."""
        return {Signal.GOLDEN: cls.LONG, Signal.DEATH: cls.SHORT}.get(signal)

    @property
    def exit_signal(self) -> Signal:
        """The exit crossover that closes a position on this side."""
        return Signal.DEATH if self is Side.LONG else Signal.GOLDEN


# ---------------------------------------------------------------------
def detect_cross(prev_fast: float, prev_slow: float,
                 fast: float, slow: float) -> Signal:
    """Classify the move between two samples; any equality is no cross."""
    if prev_fast < prev_slow and fast > slow:
        return Signal.GOLDEN
    if prev_fast > prev_slow and fast < slow:
        return Signal.DEATH
    return Signal.NONE


def cross_of(fast: Sequence[float], slow: Sequence[float]) -> Signal:
    """
    `detect_cross` over the last two values of each series.  A series with
    fewer than two values (window == slow period) yields NONE.
    """
    if len(fast) < 2 or len(slow) < 2:
        return Signal.NONE
    return detect_cross(fast[-2], slow[-2], fast[-1], slow[-1])


def pnl(side: Side, entry_price: float, exit_price: float, qty: float) -> float:
    """LONG: (exit − entry)·qty,  SHORT: (entry − exit)·qty."""
    return (exit_price - entry_price) * qty * side.sign
