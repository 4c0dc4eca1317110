"""Expiring Messages - time-to-live expiration for posted content."""

__version__ = "0.1.0"
