"""
decision_service.py – EMA crossover strategy loop
=================================================

One *tick*:

1. try-acquire the guard (busy → drop the trigger, never queue it)
2. fetch max(entry_slow, exit_slow) + margin closes
3. EMA entry-fast / entry-slow / exit-fast / exit-slow over the window
4. entry & exit crossovers from the last two values of each pair
5. refresh the cached Snapshot
6. flat  → GOLDEN opens LONG, DEATH opens SHORT   (entry pair)
   open  → LONG closes on DEATH, SHORT on GOLDEN  (exit pair)
7. release the guard

Every failure inside a tick is logged and swallowed so the scheduler
keeps its cadence; the position cache is only touched by a successful
store call.
"""

from __future__ import annotations

import threading
import time
from functools import partial
from typing import Callable, List, Optional, Sequence

import requests

from market_data      import ema, fetch_closes
from shared.config    import Settings
from shared.logging   import get_logger
from shared.utils     import interval_seconds, now_utc, seconds_to_boundary
from .positions import PositionManager
from .rules import Side, cross_of
from .state import BotState, Snapshot

log = get_logger("decision_service")

PriceSource = Callable[[int], List[float]]              # limit → closes
EmaEngine   = Callable[[int, Sequence[float]], List[float]]


class InsufficientData(RuntimeError):
    """Price window shorter than the slowest EMA period."""


def binance_source(settings: Settings,
                   session: requests.Session | None = None) -> PriceSource:
    """Bind the kline fetch to the configured instrument / interval."""
    return partial(
        fetch_closes,
        settings.klines_url,
        settings.symbol,
        settings.interval,
        timeout=settings.fetch_timeout,
        session=session,
    )


class StrategyLoop:
    def __init__(self, settings: Settings, state: BotState,
                 manager: PositionManager, source: PriceSource,
                 ema_fn: EmaEngine = ema) -> None:
        self.settings = settings
        self.state = state
        self.manager = manager
        self.source = source
        self.ema = ema_fn
        self.step = interval_seconds(settings.interval)    # ValueError on unknown

    # ───── one evaluation ──────────────────────────────────────────
    def tick(self) -> bool:
        """Run one evaluation; False when dropped (busy) or aborted."""
        if not self.state.guard.acquire(blocking=False):
            log.debug("tick already running – trigger dropped")
            return False
        try:
            self._evaluate()
            return True
        except InsufficientData as exc:
            log.warning("%s", exc)
        except requests.RequestException as exc:
            log.error("price fetch failed – %s", exc)
        except Exception:                                # noqa: BLE001
            log.exception("tick error")
        finally:
            self.state.guard.release()
        return False

    def _evaluate(self) -> None:
        s = self.settings
        closes = self.source(s.fetch_limit)
        if not closes or len(closes) < s.min_window:
            raise InsufficientData(
                f"not enough candles ({len(closes or [])} < {s.min_window})"
            )

        entry_fast = self.ema(s.entry_fast, closes)
        entry_slow = self.ema(s.entry_slow, closes)
        exit_fast  = self.ema(s.exit_fast, closes)
        exit_slow  = self.ema(s.exit_slow, closes)

        price = closes[-1]
        entry_signal = cross_of(entry_fast, entry_slow)
        exit_signal  = cross_of(exit_fast, exit_slow)

        snap = Snapshot(
            price=price,
            ema_entry_fast=entry_fast[-1],
            ema_entry_slow=entry_slow[-1],
            ema_exit_fast=exit_fast[-1],
            ema_exit_slow=exit_slow[-1],
            entry_signal=entry_signal,
            exit_signal=exit_signal,
            last_tick_at=now_utc(),
        )
        self.state.snapshot = snap

        pos = self.state.open_position
        if pos is None:
            side = Side.for_entry(entry_signal)
            if side is not None:
                self.manager.open(side, price, snap.ema_entry_fast, snap.ema_entry_slow)
        elif exit_signal is Side(pos["side"]).exit_signal:
            self.manager.close(price, snap.ema_exit_fast, snap.ema_exit_slow)

        self._log_tick(snap)

    def _log_tick(self, snap: Snapshot) -> None:
        s = self.settings
        pos = self.state.open_position
        pos_txt = f"{pos['side']} OPEN @ {pos['entry_price']}" if pos else "NONE"
        log.info(
            "Price=%s EntryEMA(%d/%d)=%.2f/%.2f ExitEMA(%d/%d)=%.2f/%.2f "
            "EntrySig=%s ExitSig=%s Position=%s",
            snap.price,
            s.entry_fast, s.entry_slow, snap.ema_entry_fast, snap.ema_entry_slow,
            s.exit_fast, s.exit_slow, snap.ema_exit_fast, snap.ema_exit_slow,
            snap.entry_signal.value, snap.exit_signal.value, pos_txt,
        )

    # ───── scheduler ───────────────────────────────────────────────
    def run_forever(self, stop: threading.Event,
                    clock: Callable[[], float] = time.time) -> None:
        """Tick at every interval boundary until `stop` is set."""
        log.info("%s strategy loop up – interval %s", self.settings.symbol,
                 self.settings.interval)
        while not stop.wait(seconds_to_boundary(clock(), self.step)):
            self.tick()
        log.info("strategy loop stopped")


def run_in_thread(loop: StrategyLoop, stop: Optional[threading.Event] = None
                  ) -> tuple[threading.Thread, threading.Event]:
    stop = stop or threading.Event()
    th = threading.Thread(target=loop.run_forever, args=(stop,),
                          name="strategy-loop", daemon=True)
    th.start()
    return th, stop
