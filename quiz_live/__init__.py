"""Real-time quiz session engine: rooms, countdown, rank and live monitoring."""

__version__ = "0.1.0"
