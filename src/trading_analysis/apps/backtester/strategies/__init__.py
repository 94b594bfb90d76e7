"""Reference strategies for the backtest executor."""
