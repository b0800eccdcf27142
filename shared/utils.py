"""
utils.py – small generic helpers reused in multiple packages
"""

from __future__ import annotations
from datetime import datetime, timezone

from .constants import INTERVAL_SECONDS


def now_utc() -> datetime:
    return datetime.now(tz=timezone.utc)


def iso(ts: datetime) -> str:
    """ISO-8601, millisecond precision, always UTC."""
    return ts.astimezone(timezone.utc).isoformat(timespec="milliseconds")


def interval_seconds(interval: str) -> int:
    """'1m' → 60, '4h' → 14400; ValueError outside INTERVAL_SECONDS (1m … 1d)."""
    try:
        return INTERVAL_SECONDS[interval]
    except KeyError:
        raise ValueError(f"unsupported interval {interval!r}") from None


def seconds_to_boundary(now: float, interval_sec: int) -> float:
    """Seconds until the next multiple of `interval_sec` (epoch aligned)."""
    return interval_sec - (now % interval_sec)
