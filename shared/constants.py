"""
constants.py – single source of hard-coded names
"""

# Redis keys / templates (prefix is filled in from Settings.key_prefix)
KEY_SEQ          = "{}:positions:seq"             # INCR → position id
KEY_POSITION     = "{}:position:{}"               # prefix, id → JSON doc
KEY_IDX_STATUS   = "{}:idx:status:{}:{}"          # prefix, status, symbol
KEY_IDX_SIDE     = "{}:idx:side:{}:{}"            # prefix, symbol, side
KEY_IDX_SYMBOL   = "{}:idx:symbol:{}"             # prefix, symbol

STATUS_OPEN   = "OPEN"
STATUS_CLOSED = "CLOSED"

DEFAULT_QTY   = 1
DRY_RUN_ID    = "dryrun"

# Binance kline intervals → seconds (1s, 3d, 1w and 1M are rejected)
INTERVAL_SECONDS = {
    "1m": 60, "3m": 180, "5m": 300, "15m": 900, "30m": 1800,
    "1h": 3600, "2h": 7200, "4h": 14400, "6h": 21600, "8h": 28800,
    "12h": 43200, "1d": 86400,
}

KLINES_URL   = "https://api.binance.com/api/v3/klines"
KLINE_CLOSE  = 4                                  # close column in a kline row

HISTORY_LIMIT_DEFAULT = 100
HISTORY_LIMIT_MAX     = 1000
