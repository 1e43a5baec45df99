"""Shared helpers: typed errors and logging."""
