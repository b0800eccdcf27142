"""
indicators.py – EMA engine
--------------------------
Pure function, no I/O.  The EMA is seeded with the simple average of
the first `period` closes and then follows

    ema_t = a·x_t + (1 − a)·ema_{t−1},   a = 2 / (period + 1)

The first `period − 1` samples have no value and are dropped, so the
output has `max(0, len(series) − period + 1)` entries, each being the
EMA up to and including that sample.
"""

from __future__ import annotations
from typing import List, Sequence

import numpy as np
import pandas as pd
from ta.trend import EMAIndicator


def ema(period: int, series: Sequence[float]) -> List[float]:
    if period < 1:
        raise ValueError(f"EMA period must be >= 1, got {period}")
    if len(series) < period:
        return []

    close = pd.Series(np.asarray(series, dtype=float))
    # flat warm-up block → ewm(adjust=False) reaches bar period-1 at the SMA
    close.iloc[:period] = close.iloc[:period].mean()
    out = EMAIndicator(close, window=period, fillna=False).ema_indicator()
    return out.iloc[period - 1:].tolist()
