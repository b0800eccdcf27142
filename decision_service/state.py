"""
state.py – in-RAM state owned by one StrategyLoop
-------------------------------------------------
Mutated only inside `tick()` or startup reconciliation.  Readers (REST)
get a whole `Snapshot` object; a tick swaps in a fresh one rather than
editing fields in place.
"""

from __future__ import annotations

import threading
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, Optional

from shared.utils import iso, now_utc
from .rules import Signal


@dataclass(frozen=True)
class Snapshot:
    price: Optional[float] = None
    ema_entry_fast: Optional[float] = None
    ema_entry_slow: Optional[float] = None
    ema_exit_fast: Optional[float] = None
    ema_exit_slow: Optional[float] = None
    entry_signal: Signal = Signal.NONE
    exit_signal: Signal = Signal.NONE
    last_tick_at: Optional[datetime] = None

    def is_stale(self, max_age: float, now: Optional[datetime] = None) -> bool:
        if self.last_tick_at is None:
            return True
        now = now or now_utc()
        return (now - self.last_tick_at).total_seconds() > max_age

    def as_dict(self) -> Dict[str, Any]:
        return {
            "price": self.price,
            "ema_entry_fast": self.ema_entry_fast,
            "ema_entry_slow": self.ema_entry_slow,
            "ema_exit_fast": self.ema_exit_fast,
            "ema_exit_slow": self.ema_exit_slow,
            "entry_signal": self.entry_signal.value,
            "exit_signal": self.exit_signal.value,
            "last_tick_at": iso(self.last_tick_at) if self.last_tick_at else None,
        }


@dataclass
class BotState:
    open_position: Optional[Dict[str, Any]] = None
    snapshot: Snapshot = field(default_factory=Snapshot)
    # non-reentrancy guard: acquire(blocking=False) only, never wait on it
    guard: threading.Lock = field(default_factory=threading.Lock, repr=False)
