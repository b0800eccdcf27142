"""
config.py – centralised env-var handling
=======================================

• Loads the first `.env` file it finds (cwd or /app) exactly **once**.
• `env(key, default=None, cast=None)` helper for one-off lookups
  with automatic type-casting (int, float, bool).
• `Settings` – the frozen bag of knobs every package receives
  explicitly (no module-level globals outside this file).
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Optional

from dotenv import load_dotenv

from .constants import KLINES_URL
from .logging import get_logger

# ───── locate & load .env (first one wins) ────────────────────────────
for candidate in (Path.cwd() / ".env", Path("/app/.env")):
    if candidate.is_file():
        load_dotenv(dotenv_path=candidate, override=False)
        break

log = get_logger("shared.config")


def env(key: str, default: Any = None, cast: Optional[type] = None) -> Any:
    """`os.getenv` with optional cast; a failed cast falls back to `default`."""
    val = os.getenv(key, default)
    if cast is not None and val is not None:
        try:
            if cast is bool:
                return str(val).lower() in ("1", "true", "yes", "y")
            return cast(val)
        except (ValueError, TypeError):
            return default
    return val


# ───── Settings ───────────────────────────────────────────────────────
@dataclass(frozen=True)
class Settings:
    symbol: str = "BTCUSDT"
    interval: str = "1m"             # 1m 3m 5m 15m 30m 1h 2h 4h 6h 8h 12h 1d

    entry_fast: int = 20
    entry_slow: int = 50
    exit_fast: int = 9
    exit_slow: int = 21

    window_margin: int = 50          # warm-up bars on top of the slow period
    fetch_timeout: float = 12.0      # seconds
    klines_url: str = KLINES_URL

    dry_run: bool = True
    api_port: int = 4444
    stale_after: float = 70.0        # seconds before /api/price forces a tick

    redis_url: str = "redis://redis:6379/0"
    key_prefix: str = "ema"

    @property
    def min_window(self) -> int:
        """Shortest price window a tick accepts."""
        return max(self.entry_slow, self.exit_slow)

    @property
    def fetch_limit(self) -> int:
        return self.min_window + self.window_margin

    @classmethod
    def from_env(cls) -> "Settings":
        d = cls()
        return cls(
            symbol=env("SYMBOL", d.symbol),
            interval=env("INTERVAL", d.interval),
            entry_fast=env("EMA_ENTRY_FAST", d.entry_fast, int),
            entry_slow=env("EMA_ENTRY_SLOW", d.entry_slow, int),
            exit_fast=env("EMA_EXIT_FAST", d.exit_fast, int),
            exit_slow=env("EMA_EXIT_SLOW", d.exit_slow, int),
            window_margin=env("WINDOW_MARGIN", d.window_margin, int),
            fetch_timeout=env("FETCH_TIMEOUT", d.fetch_timeout, float),
            klines_url=env("KLINES_URL", d.klines_url),
            dry_run=env("DRY_RUN", d.dry_run, bool),
            api_port=env("API_PORT", d.api_port, int),
            stale_after=env("STALE_AFTER", d.stale_after, float),
            redis_url=env("REDIS_URL", d.redis_url),
            key_prefix=env("KEY_PREFIX", d.key_prefix),
        )

    def check_periods(self) -> None:
        """Warn (don’t fail) when a fast EMA is not faster than its slow one."""
        if self.entry_fast >= self.entry_slow:
            log.warning("EMA_ENTRY_FAST (%d) should be < EMA_ENTRY_SLOW (%d)",
                        self.entry_fast, self.entry_slow)
        if self.exit_fast >= self.exit_slow:
            log.warning("EMA_EXIT_FAST (%d) should be < EMA_EXIT_SLOW (%d)",
                        self.exit_fast, self.exit_slow)


__all__ = ["Settings", "env"]
