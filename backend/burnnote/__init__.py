"""BurnNote: one-time, self-expiring encrypted messages."""

__version__ = "1.0.0"
