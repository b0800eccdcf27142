"""
positions.py – durable position book + lifecycle manager
========================================================

Redis schema (prefix defaults to "ema")
---------------------------------------
ema:positions:seq                  INT    atomic id counter
ema:position:<id>                  STR    JSON document
ema:idx:status:<STATUS>:<SYM>      ZSET   id → created_at epoch
ema:idx:side:<SYM>:<SIDE>          ZSET   id → created_at epoch
ema:idx:symbol:<SYM>               ZSET   id → created_at epoch (history)

A position is inserted once (OPEN) and updated once (→ CLOSED).  The
close is a WATCH/MULTI/EXEC compare-and-swap on the document key, so it
only lands while the stored status is still OPEN.
"""

from __future__ import annotations

import json
from datetime import datetime
from typing import Any, Dict, List, Optional, Tuple

import redis

from shared.config    import Settings
from shared.constants import (
    DEFAULT_QTY, DRY_RUN_ID, KEY_IDX_SIDE, KEY_IDX_STATUS, KEY_IDX_SYMBOL,
    KEY_POSITION, KEY_SEQ, STATUS_CLOSED, STATUS_OPEN,
)
from shared.logging   import get_logger
from shared.utils     import iso, now_utc
from .rules import Side, pnl
from .state import BotState

log = get_logger("decision_service.positions")


def _score(doc: Dict[str, Any]) -> float:
    return datetime.fromisoformat(doc["created_at"]).timestamp()


class PositionStore:
    """Position documents in Redis, indexed for (status, symbol) and (symbol, side)."""

    def __init__(self, rds: redis.Redis, prefix: str = "ema") -> None:
        self.rds = rds
        self.prefix = prefix

    # ───── key helpers ─────────────────────────────────────────────
    def _key(self, pid: str) -> str:
        return KEY_POSITION.format(self.prefix, pid)

    def _status_idx(self, status: str, symbol: str) -> str:
        return KEY_IDX_STATUS.format(self.prefix, status, symbol)

    def _side_idx(self, symbol: str, side: str) -> str:
        return KEY_IDX_SIDE.format(self.prefix, symbol, side)

    def _symbol_idx(self, symbol: str) -> str:
        return KEY_IDX_SYMBOL.format(self.prefix, symbol)

    def _load(self, ids: List[str]) -> List[Dict[str, Any]]:
        if not ids:
            return []
        raw = self.rds.mget([self._key(i) for i in ids])
        return [json.loads(r) for r in raw if r]

    # ───── writes ──────────────────────────────────────────────────
    def insert(self, doc: Dict[str, Any]) -> Dict[str, Any]:
        """Assign an id and store `doc` plus its index entries atomically."""
        pid = str(self.rds.incr(KEY_SEQ.format(self.prefix)))
        doc = {"id": pid, **doc}
        score = _score(doc)
        sym = doc["symbol"]

        pipe = self.rds.pipeline()
        pipe.set(self._key(pid), json.dumps(doc))
        pipe.zadd(self._status_idx(doc["status"], sym), {pid: score})
        pipe.zadd(self._side_idx(sym, doc["side"]), {pid: score})
        pipe.zadd(self._symbol_idx(sym), {pid: score})
        pipe.execute()
        return doc

    def close_if_open(self, pid: str, changes: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        """
        Apply `changes` and flip status to CLOSED iff the stored document is
        still OPEN.  Returns the updated document, or None when it is
        missing / already closed.
        """
        key = self._key(pid)
        with self.rds.pipeline() as pipe:
            while True:
                try:
                    pipe.watch(key)
                    raw = pipe.get(key)
                    doc = json.loads(raw) if raw else None
                    if doc is None or doc.get("status") != STATUS_OPEN:
                        pipe.unwatch()
                        return None

                    doc.update(changes)
                    doc["status"] = STATUS_CLOSED
                    sym = doc["symbol"]

                    pipe.multi()
                    pipe.set(key, json.dumps(doc))
                    pipe.zrem(self._status_idx(STATUS_OPEN, sym), pid)
                    pipe.zadd(self._status_idx(STATUS_CLOSED, sym), {pid: _score(doc)})
                    pipe.execute()
                    return doc
                except redis.WatchError:
                    log.debug("position %s changed during close – retrying", pid)
                    continue

    # ───── reads ───────────────────────────────────────────────────
    def get(self, pid: str) -> Optional[Dict[str, Any]]:
        docs = self._load([pid])
        return docs[0] if docs else None

    def latest_open(self, symbol: str) -> Optional[Dict[str, Any]]:
        docs = self._load(self.rds.zrevrange(self._status_idx(STATUS_OPEN, symbol), 0, 0))
        return docs[0] if docs else None

    def open_positions(self, symbol: str) -> List[Dict[str, Any]]:
        return self._load(self.rds.zrevrange(self._status_idx(STATUS_OPEN, symbol), 0, -1))

    def _newest(self, idx: str, limit: int) -> List[Dict[str, Any]]:
        if limit < 1:
            raise ValueError(f"limit must be >= 1, got {limit}")
        return self._load(self.rds.zrevrange(idx, 0, limit - 1))

    def history(self, symbol: str, limit: int) -> List[Dict[str, Any]]:
        return self._newest(self._symbol_idx(symbol), limit)

    def by_side(self, symbol: str, side: Side, limit: int) -> List[Dict[str, Any]]:
        return self._newest(self._side_idx(symbol, side.value), limit)

    def total_pnl(self, symbol: str) -> Tuple[float, int]:
        """(sum of profit_loss, count) over CLOSED positions."""
        closed = self._load(self.rds.zrange(self._status_idx(STATUS_CLOSED, symbol), 0, -1))
        return sum(float(d.get("profit_loss") or 0.0) for d in closed), len(closed)


class PositionManager:
    """
    Open/close transitions for the single position of `settings.symbol`.

    `state.open_position` is the decision cache: it is replaced after a
    successful insert and cleared after any close attempt that reached
    the store.  With DRY_RUN (or no store) nothing is written and the
    cache is the only record.
    """

    def __init__(self, settings: Settings, state: BotState,
                 store: Optional[PositionStore] = None) -> None:
        self.settings = settings
        self.state = state
        self.store = store
        self.persist = store is not None and not settings.dry_run

    def restore(self) -> Optional[Dict[str, Any]]:
        """Startup reconciliation: cache the newest OPEN record, if any."""
        if not self.persist:
            return None
        doc = self.store.latest_open(self.settings.symbol)
        self.state.open_position = doc
        if doc:
            log.info("%s restored OPEN %s @ %s (id=%s)",
                     doc["symbol"], doc["side"], doc["entry_price"], doc["id"])
        else:
            log.info("%s no open position to restore", self.settings.symbol)
        return doc

    def open(self, side: Side, price: float,
             ema_fast: float, ema_slow: float) -> Optional[Dict[str, Any]]:
        if self.state.open_position is not None:
            log.warning("%s OPEN %s refused – position %s already open",
                        self.settings.symbol, side.value,
                        self.state.open_position.get("id"))
            return None

        ts = iso(now_utc())
        base = {
            "symbol": self.settings.symbol,
            "status": STATUS_OPEN,
            "qty": DEFAULT_QTY,
            "side": side.value,
            "entry_price": price,
            "entry_time": ts,
            "entry_ema_fast": ema_fast,
            "entry_ema_slow": ema_slow,
            "created_at": ts,
            "updated_at": ts,
        }
        if not self.persist:
            self.state.open_position = {"id": DRY_RUN_ID, **base}
            log.info("%s OPEN %s (DRY_RUN) @ %s", base["symbol"], side.value, price)
            return self.state.open_position

        doc = self.store.insert(base)
        self.state.open_position = doc
        log.info("%s OPEN %s @ %s (id=%s)", base["symbol"], side.value, price, doc["id"])
        return doc

    def close(self, price: float, ema_fast: float,
              ema_slow: float) -> Optional[Dict[str, Any]]:
        pos = self.state.open_position
        if pos is None:
            return None

        side = Side(pos["side"])
        qty = pos.get("qty") or DEFAULT_QTY
        profit = pnl(side, float(pos["entry_price"]), price, qty)
        ts = iso(now_utc())
        changes = {
            "exit_price": price,
            "exit_time": ts,
            "exit_ema_fast": ema_fast,
            "exit_ema_slow": ema_slow,
            "profit_loss": profit,
            "updated_at": ts,
        }

        if not self.persist:
            self.state.open_position = None
            log.info("%s CLOSE %s (DRY_RUN) @ %s | PnL %+.4f",
                     pos["symbol"], side.value, price, profit)
            return {**pos, **changes, "status": STATUS_CLOSED}

        doc = self.store.close_if_open(pos["id"], changes)
        # the cache is no longer trustworthy either way
        self.state.open_position = None
        if doc is None:
            log.warning("%s no OPEN position %s found to close",
                        pos["symbol"], pos["id"])
            return None
        log.info("%s CLOSE %s @ %s | PnL %+.4f (id=%s)",
                 doc["symbol"], side.value, price, profit, doc["id"])
        return doc
