"""HTTP/WebSocket surface: display broadcast hub and operator control channel."""

from .app import Runtime, build_runtime, create_app
from .control import ControlChannelHandler
from .hub import BroadcastHub

__all__ = [
    "BroadcastHub",
    "ControlChannelHandler",
    "Runtime",
    "build_runtime",
    "create_app",
]
