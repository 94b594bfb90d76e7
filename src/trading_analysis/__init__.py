"""Incremental technical analysis and trading-record backtesting."""
