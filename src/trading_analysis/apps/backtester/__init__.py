"""Bar-by-bar backtest executor."""
