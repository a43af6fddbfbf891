"""Helpdesk API — conversations, channels, engage messages and companies."""

__version__ = "1.0.0"
