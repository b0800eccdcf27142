"""
decision_service
================

EMA crossover decision core for one instrument.

Data-flow
---------
1. Pull the recent close window (market_data.klines).

2. Compute entry-fast/slow and exit-fast/slow EMAs and classify the
   last step of each pair as GOLDEN / DEATH / NONE.

3. Flat   → entry GOLDEN opens LONG, entry DEATH opens SHORT.
   Open   → exit DEATH closes LONG, exit GOLDEN closes SHORT.
   At most one position is OPEN at any time.

Modules
-------
rules.py             – pure signal / side / PnL helpers
state.py             – BotState (cache, snapshot, guard)
positions.py         – Redis position book + lifecycle manager
decision_service.py  – StrategyLoop (tick + scheduler)
"""

from decision_service.decision_service import (
    InsufficientData, StrategyLoop, binance_source, run_in_thread,
)
from decision_service.positions import PositionManager, PositionStore
from decision_service.rules import Side, Signal, cross_of, detect_cross, pnl
from decision_service.state import BotState, Snapshot

__all__ = [
    "BotState", "InsufficientData", "PositionManager", "PositionStore",
    "Side", "Signal", "Snapshot", "StrategyLoop", "binance_source",
    "cross_of", "detect_cross", "pnl", "run_in_thread",
]
