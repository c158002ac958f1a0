"""Persistence adapters for the local store."""
