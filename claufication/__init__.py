"""Claufication - notify when Claude Code is waiting on you."""

__version__ = "1.0.0"
