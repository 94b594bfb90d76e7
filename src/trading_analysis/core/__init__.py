"""Core value objects, protocols, numerics, errors, and configuration."""
