"""Catalog browsing and anonymous favorites served from a key-value store."""

__version__ = "0.1.0"
