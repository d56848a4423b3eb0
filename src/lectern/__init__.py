"""Lectern: record presentation and query composition for API responses."""

__version__ = "0.1.0"
