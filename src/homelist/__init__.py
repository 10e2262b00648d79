"""Homelist - household task and shopping list with real-time sync."""

__version__ = "0.3.0"
