"""Shared helpers: logging, configuration, errors and caching."""
