"""Twitch chat queue and darts stats bot with a live display channel."""

__version__ = "1.0.0"
