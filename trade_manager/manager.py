#!/usr/bin/env python3
"""
manager.py – process bootstrap + read-only REST API
---------------------------------------------------
Environment (see shared.config.Settings for the full list)
-----------
SYMBOL           instrument                        (default: BTCUSDT)
INTERVAL         kline interval / tick cadence     (default: 1m)
                 1m 3m 5m 15m 30m 1h 2h 4h 6h 8h 12h 1d
DRY_RUN          1 = never write to Redis          (default: true)
REDIS_URL        redis://host:port/db              (default: redis://redis:6379/0)
API_PORT         REST port                         (default: 4444)
STALE_AFTER      /api/price re-ticks after N s     (default: 70)
"""

from __future__ import annotations

import sys
from typing import Any, Dict, Optional

import redis
import uvicorn
from fastapi import FastAPI, HTTPException, Query
from fastapi.middleware.cors import CORSMiddleware

from decision_service import (
    BotState, PositionManager, PositionStore, Side, StrategyLoop,
    binance_source, run_in_thread,
)
from shared.config       import Settings
from shared.constants    import HISTORY_LIMIT_DEFAULT, HISTORY_LIMIT_MAX
from shared.logging      import get_logger
from shared.redis_client import LazyRedis, StoreUnavailable, connect
from shared.utils        import iso

log = get_logger("trade_manager")


# ───── REST API ───────────────────────────────────────────────────────
def create_app(settings: Settings, state: BotState, loop: StrategyLoop,
               store: Optional[PositionStore] = None,
               rds: Optional[LazyRedis] = None) -> FastAPI:
    """Read surface over `state` / `store`; only /api/price and /api/tick may tick."""
    app = FastAPI(title="EMA Crossover Bot", docs_url=None, redoc_url=None)
    app.add_middleware(CORSMiddleware, allow_origins=["*"],
                       allow_methods=["*"], allow_headers=["*"])
    persist = store is not None and not settings.dry_run

    def _db_status() -> str:
        if not persist:
            return "SKIPPED"
        if rds is not None and not rds.connected:
            return "DISCONNECTED"
        return "CONNECTED"

    def _cached_open() -> list:
        pos = state.open_position
        return [pos] if pos else []

    @app.get("/api/health")
    def health() -> Dict[str, Any]:
        pos = state.open_position
        last = state.snapshot.last_tick_at
        return {
            "ok": True,
            "symbol": settings.symbol,
            "interval": settings.interval,
            "entry_ema_fast": settings.entry_fast,
            "entry_ema_slow": settings.entry_slow,
            "exit_ema_fast": settings.exit_fast,
            "exit_ema_slow": settings.exit_slow,
            "dry_run": settings.dry_run,
            "db": _db_status(),
            "position": {
                "side": pos["side"],
                "entry_price": pos["entry_price"],
                "entry_time": pos["entry_time"],
            } if pos else None,
            "last_tick_at": iso(last) if last else None,
        }

    @app.get("/api/price")
    def price() -> Dict[str, Any]:
        if state.snapshot.is_stale(settings.stale_after):
            loop.tick()
        return state.snapshot.as_dict()

    @app.get("/api/orders/history")
    def history(limit: int = Query(HISTORY_LIMIT_DEFAULT, ge=1),
                side: Optional[Side] = None) -> list:
        if not persist:
            return [p for p in _cached_open()
                    if side is None or p["side"] == side.value]
        limit = min(limit, HISTORY_LIMIT_MAX)
        try:
            if side is None:
                return store.history(settings.symbol, limit)
            return store.by_side(settings.symbol, side, limit)
        except redis.RedisError as exc:
            raise HTTPException(status_code=500, detail=str(exc)) from exc

    @app.get("/api/pnl/total")
    def pnl_total() -> Dict[str, Any]:
        if not persist:
            return {"total_pnl": 0.0, "count": 0}
        try:
            total, count = store.total_pnl(settings.symbol)
        except redis.RedisError as exc:
            raise HTTPException(status_code=500, detail=str(exc)) from exc
        return {"total_pnl": round(total, 4), "count": count}

    @app.get("/api/positions/open")
    def positions_open() -> list:
        if not persist:
            return _cached_open()
        try:
            return store.open_positions(settings.symbol)
        except redis.RedisError as exc:
            raise HTTPException(status_code=500, detail=str(exc)) from exc

    @app.api_route("/api/tick", methods=["GET", "POST"])
    def tick() -> Dict[str, Any]:
        ran = loop.tick()
        last = state.snapshot.last_tick_at
        return {"ok": True, "ran": ran, "last_tick_at": iso(last) if last else None}

    return app


# ───── BOOTSTRAP ──────────────────────────────────────────────────────
def build(settings: Settings, rds: Optional[LazyRedis] = None):
    """Wire state, store, manager and loop; reconciles the open position."""
    state = BotState()
    store = None
    if not settings.dry_run:
        if rds is None:
            rds = connect(settings.redis_url)         # StoreUnavailable → fatal
        store = PositionStore(rds, settings.key_prefix)
    manager = PositionManager(settings, state, store)
    manager.restore()
    loop = StrategyLoop(settings, state, manager, binance_source(settings))
    return state, store, loop, rds


def main() -> None:
    settings = Settings.from_env()
    settings.check_periods()
    if settings.dry_run:
        log.info("DRY_RUN enabled (no DB writes)")

    try:
        state, store, loop, rds = build(settings)
    except (StoreUnavailable, ValueError) as exc:
        log.error("startup aborted – %s", exc)
        sys.exit(1)

    app = create_app(settings, state, loop, store, rds)
    _, stop = run_in_thread(loop)

    server = uvicorn.Server(uvicorn.Config(app, host="0.0.0.0",
                                           port=settings.api_port,
                                           log_level="warning"))

    log.info("API server on http://0.0.0.0:%d", settings.api_port)
    try:
        server.run()                       # returns on SIGINT / SIGTERM
    finally:
        log.info("Shutting down…")
        stop.set()
        if rds is not None:
            rds.close()


if __name__ == "__main__":
    main()
