"""
klines.py – closing-price window from the Binance klines endpoint
=================================================================
GET {KLINES_URL}?symbol=BTCUSDT&interval=1m&limit=N returns rows

    [open_time, open, high, low, close, volume, close_time, …]

oldest first; the last row is the still-forming candle.
"""

from __future__ import annotations
from typing import Any, List

import requests

from shared.constants import KLINE_CLOSE
from shared.logging   import get_logger

log = get_logger("market_data.klines")


def fetch_closes(url: str, symbol: str, interval: str, limit: int,
                 timeout: float = 12.0,
                 session: requests.Session | None = None) -> List[float]:
    """
    Return the last `limit` closes, oldest → newest.

    Raises `requests.RequestException` on transport errors / timeouts /
    non-2xx answers and `RuntimeError` when the payload is not a kline list.
    """
    http = session or requests
    resp = http.get(
        url,
        params={"symbol": symbol, "interval": interval, "limit": limit},
        timeout=timeout,
    )
    resp.raise_for_status()
    rows: Any = resp.json()
    if not isinstance(rows, list):
        raise RuntimeError(f"unexpected kline payload for {symbol}: {rows!r}")

    try:
        closes = [float(k[KLINE_CLOSE]) for k in rows]
    except (IndexError, TypeError, ValueError) as exc:
        raise RuntimeError(f"malformed kline row for {symbol} – {exc}") from exc

    log.debug("%s %s fetched %d closes", symbol, interval, len(closes))
    return closes
