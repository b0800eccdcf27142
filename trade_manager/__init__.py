"""
trade_manager
=============

Process entry-point and operator surface:

• Connects Redis (fatal when unreachable unless DRY_RUN), restores the
  open position, starts the strategy loop on the interval boundary.
• Publishes a read-only REST API (status, cached EMA snapshot, position
  history, realised PnL, open positions) for dashboards.
"""
