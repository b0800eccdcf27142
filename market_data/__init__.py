"""
market_data
===========

Pulls the recent closing-price window for the configured instrument
and turns it into EMA series for the decision_service.

Modules
-------
klines.py      – Binance kline fetch (closes only, oldest → newest)
indicators.py  – EMA engine backed by `ta`
"""

from market_data.indicators import ema
from market_data.klines import fetch_closes

__all__ = ["ema", "fetch_closes"]
