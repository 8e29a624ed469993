"""Display/operator channel schemas."""

from __future__ import annotations

import math
from typing import Any

from pydantic import (
    AliasChoices,
    BaseModel,
    ConfigDict,
    Field,
    StrictFloat,
    StrictInt,
    field_validator,
)

from dartqueue.core.config import COMMAND_PREFIX
from dartqueue.core.state import StateModel
from dartqueue.shared.models import AppConfig


def _text(value: Any) -> str:
    """Loose string coercion: missing values become empty, everything is trimmed."""
    if value is None:
        return ""
    return str(value).strip()


# ============================================
# Outbound snapshot
# ============================================


class LoopMessageView(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: str
    message: str
    interval_minutes: int | float = Field(alias="intervalMinutes")
    enabled: bool
    next_send_in_seconds: int = Field(alias="nextSendInSeconds")


class CustomCommandView(BaseModel):
    id: str
    name: str
    response: str


class SettingsView(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    channel: str
    setup_completed: bool = Field(alias="setupCompleted")
    bot_connected: bool = Field(alias="botConnected")


class Snapshot(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    current: str | None
    next: str | None
    queue: list[str]
    loop_messages: list[LoopMessageView] = Field(alias="loopMessages")
    custom_commands: list[CustomCommandView] = Field(alias="customCommands")
    settings: SettingsView


def build_snapshot(
    state: StateModel, config: AppConfig, *, connected: bool, now_ms: int
) -> dict[str, Any]:
    """Full state as sent to display clients."""
    snapshot = Snapshot(
        current=state.current,
        next=state.next,
        queue=list(state.queue),
        loop_messages=[
            LoopMessageView(
                id=item.id,
                message=item.message,
                interval_minutes=item.interval_minutes,
                enabled=item.enabled,
                next_send_in_seconds=item.seconds_until_due(now_ms),
            )
            for item in state.announcements
        ],
        custom_commands=[
            CustomCommandView(id=c.id, name=c.name, response=c.response) for c in state.commands
        ],
        settings=SettingsView(
            channel=config.channel,
            setup_completed=config.setup_completed,
            bot_connected=connected,
        ),
    )
    return snapshot.model_dump(by_alias=True)


# ============================================
# Inbound operator requests
# ============================================


class OperatorFrame(BaseModel):
    action: str = ""
    payload: Any = None

    @field_validator("action", mode="before")
    @classmethod
    def normalize_action(cls, v: Any) -> str:
        return _text(v).lower().replace("-", "_")


class ResultPayload(BaseModel):
    """Finished match for the current player. Values must be JSON numbers."""

    model_config = ConfigDict(populate_by_name=True)

    legs_for: StrictInt | StrictFloat = Field(alias="legsFor")
    legs_against: StrictInt | StrictFloat = Field(alias="legsAgainst")
    average: StrictInt | StrictFloat = Field(validation_alias=AliasChoices("avg", "average"))

    @field_validator("legs_for", "legs_against", "average")
    @classmethod
    def validate_finite(cls, v: float) -> float:
        try:
            finite = math.isfinite(v)
        except OverflowError:
            finite = False
        if not finite:
            raise ValueError("must be a finite number")
        return v


class AnnouncementPayload(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: str = ""
    message: str
    interval_minutes: float = Field(alias="intervalMinutes")

    @field_validator("id", "message", mode="before")
    @classmethod
    def coerce_text(cls, v: Any) -> str:
        return _text(v)

    @field_validator("message")
    @classmethod
    def validate_message(cls, v: str) -> str:
        if not v:
            raise ValueError("message must not be empty")
        return v

    @field_validator("interval_minutes", mode="before")
    @classmethod
    def reject_bool(cls, v: Any) -> Any:
        if isinstance(v, bool):
            raise ValueError("interval must be a number")
        return v

    @field_validator("interval_minutes")
    @classmethod
    def validate_interval(cls, v: float) -> float:
        if not math.isfinite(v) or v <= 0:
            raise ValueError("interval must be a positive number")
        return v


class AnnouncementUpdatePayload(AnnouncementPayload):
    @field_validator("id")
    @classmethod
    def validate_id(cls, v: str) -> str:
        if not v:
            raise ValueError("id is required")
        return v


class AnnouncementTogglePayload(BaseModel):
    id: str
    enabled: bool = False

    @field_validator("id", mode="before")
    @classmethod
    def coerce_id(cls, v: Any) -> str:
        return _text(v)

    @field_validator("enabled", mode="before")
    @classmethod
    def truthy(cls, v: Any) -> bool:
        return bool(v)


class CommandPayload(BaseModel):
    id: str = ""
    name: str
    response: str

    @field_validator("id", "response", mode="before")
    @classmethod
    def coerce_text(cls, v: Any) -> str:
        return _text(v)

    @field_validator("name", mode="before")
    @classmethod
    def normalize_name(cls, v: Any) -> str:
        return _text(v).lower()

    @field_validator("name")
    @classmethod
    def validate_name(cls, v: str) -> str:
        if not v.startswith(COMMAND_PREFIX):
            raise ValueError(f"command name must start with '{COMMAND_PREFIX}'")
        return v

    @field_validator("response")
    @classmethod
    def validate_response(cls, v: str) -> str:
        if not v:
            raise ValueError("response must not be empty")
        return v


class CommandUpdatePayload(CommandPayload):
    @field_validator("id")
    @classmethod
    def validate_id(cls, v: str) -> str:
        if not v:
            raise ValueError("id is required")
        return v


class SettingsPayload(BaseModel):
    channel: str

    @field_validator("channel", mode="before")
    @classmethod
    def normalize_channel(cls, v: Any) -> str:
        return _text(v).lower()

    @field_validator("channel")
    @classmethod
    def validate_channel(cls, v: str) -> str:
        if not v:
            raise ValueError("channel must not be empty")
        return v


def payload_key(payload: Any, key: str) -> str:
    """Read a bare-string payload, or *key* from an object payload."""
    if isinstance(payload, dict):
        payload = payload.get(key)
    if payload is None or isinstance(payload, (dict, list)):
        return ""
    return str(payload)
