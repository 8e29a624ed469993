"""Data models for the persisted documents."""

from .announcement import Announcement
from .app_config import AppConfig
from .custom_command import CustomCommand
from .queue import QueueState
from .stats import PlayerStats

__all__ = [
    "Announcement",
    "AppConfig",
    "CustomCommand",
    "PlayerStats",
    "QueueState",
]
