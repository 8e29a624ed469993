"""Core modules: settings, logging, events, state and the chat session."""

from .config import (
    BOT_SCOPES,
    COMMAND_PREFIX,
    DATA_DIR,
    BotSettings,
    get_settings,
    validate_env_vars,
)
from .engine import Engine
from .events import (
    ChatConnected,
    ChatDisconnected,
    ChatLine,
    ClientConnected,
    OperatorMessage,
    OperatorRequest,
    Tick,
)
from .logging import setup_logging
from .session import ChatSession, SessionState
from .state import StateModel, generate_id, now_ms

__all__ = [
    # Settings
    "BotSettings",
    "get_settings",
    "validate_env_vars",
    # Constants
    "BOT_SCOPES",
    "COMMAND_PREFIX",
    "DATA_DIR",
    # Setup functions
    "setup_logging",
    # Events
    "ChatConnected",
    "ChatDisconnected",
    "ChatLine",
    "ClientConnected",
    "OperatorMessage",
    "OperatorRequest",
    "Tick",
    # Runtime
    "ChatSession",
    "Engine",
    "SessionState",
    "StateModel",
    "generate_id",
    "now_ms",
]
