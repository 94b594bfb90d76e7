"""Trades, positions, trading records, and cost models."""
