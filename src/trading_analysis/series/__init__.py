"""Append-only bar series and the bar builder."""
