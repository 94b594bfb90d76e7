"""Applications built on the analysis engine."""
