"""Events fed into the engine's sequential mutation context."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from typing import Any


@dataclass(frozen=True)
class ChatLine:
    """One chat message as seen by the bot."""

    sender: str
    text: str
    elevated: bool = False  # moderator or broadcaster
    is_self: bool = False


@dataclass(frozen=True)
class OperatorMessage:
    """Raw frame received from a display/admin client."""

    raw: str | bytes


@dataclass(frozen=True)
class OperatorRequest:
    """Already-decoded operator action."""

    action: str
    payload: Any = None


@dataclass(frozen=True)
class Tick:
    pass


@dataclass(frozen=True, eq=False)
class ChatConnected:
    source: object


@dataclass(frozen=True, eq=False)
class ChatDisconnected:
    source: object


@dataclass(frozen=True, eq=False)
class ClientConnected:
    connection: Any


Event = (
    ChatLine
    | OperatorMessage
    | OperatorRequest
    | Tick
    | ChatConnected
    | ChatDisconnected
    | ClientConnected
)

Submit = Callable[[Event], None]
