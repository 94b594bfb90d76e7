"""Cached, lag-aware technical indicators and the indicator context."""
