"""Performance criteria computed from trading records."""
