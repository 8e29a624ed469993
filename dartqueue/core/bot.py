"""Twitch chat transport: a twitchio Bot bound to a single channel."""

from __future__ import annotations

import logging

import twitchio
from twitchio import eventsub
from twitchio.ext import commands

from dartqueue.core.config import BOT_SCOPES, COMMAND_PREFIX, BotSettings
from dartqueue.core.events import ChatConnected, ChatLine, Submit

LOGGER: logging.Logger = logging.getLogger("Bot")


class ChatBot(commands.Bot):
    """Joins one channel's chat over EventSub and forwards every message as a ``ChatLine``.

    The bot does not run twitchio's command pipeline; interpretation happens in
    the engine's sequential context.
    """

    def __init__(self, *, settings: BotSettings, channel: str, submit: Submit) -> None:
        self._settings = settings
        self._channel_login = channel.lower()
        self._submit = submit
        self._broadcaster: twitchio.User | None = None

        init_kwargs: dict = dict(
            client_id=settings.client_id,
            client_secret=settings.client_secret,
            bot_id=settings.bot_id,
            prefix=COMMAND_PREFIX,
        )
        if settings.owner_id:
            init_kwargs["owner_id"] = settings.owner_id

        super().__init__(**init_kwargs)

    # ------------------------------------------------------------------
    # Transport interface
    # ------------------------------------------------------------------

    async def run(self) -> None:
        await self.start(with_adapter=False)

    async def say(self, text: str) -> None:
        if self._broadcaster is None:
            raise RuntimeError(f"Channel {self._channel_login} not resolved yet")
        await self._broadcaster.send_message(
            message=text,
            sender=self.bot_id,
            token_for=self.bot_id,
        )

    # ------------------------------------------------------------------
    # Setup
    # ------------------------------------------------------------------

    async def load_tokens(self, path: str | None = None) -> None:
        resp: twitchio.authentication.ValidateTokenPayload = await self.add_token(
            self._settings.bot_token, self._settings.bot_refresh_token
        )
        missing = sorted(set(BOT_SCOPES) - set(resp.scopes or []))
        if missing:
            LOGGER.warning(f"Bot token is missing scopes: {', '.join(missing)}")
        LOGGER.info(f"Loaded bot token: {resp.login or 'unknown'} ({resp.user_id})")

    async def save_tokens(self, path: str | None = None) -> None:
        # Tokens come from the environment; nothing is written back.
        return None

    async def setup_hook(self) -> None:
        users = await self.fetch_users(logins=[self._channel_login])
        if not users:
            raise RuntimeError(f"Twitch channel not found: {self._channel_login}")

        self._broadcaster = users[0]
        subscription = eventsub.ChatMessageSubscription(
            broadcaster_user_id=self._broadcaster.id, user_id=self.bot_id
        )
        await self.subscribe_websocket(payload=subscription)
        LOGGER.info(f"Subscribed to chat: #{self._channel_login} (ID: {self._broadcaster.id})")

    # ------------------------------------------------------------------
    # Events
    # ------------------------------------------------------------------

    async def event_ready(self) -> None:
        LOGGER.info("Successfully logged in as: %s", self.bot_id)
        self._submit(ChatConnected(self))

    async def event_message(self, payload: twitchio.ChatMessage) -> None:
        chatter = payload.chatter
        LOGGER.debug(f"[{chatter.name}#{self._channel_login}]: {payload.text}")

        self._submit(
            ChatLine(
                sender=chatter.display_name or chatter.name or "",
                text=payload.text or "",
                elevated=bool(chatter.moderator or chatter.broadcaster),
                is_self=chatter.id == self.bot_id,
            )
        )


def twitch_transport_factory(settings: BotSettings):
    """Build the ``(channel, submit) -> ChatBot`` factory used by the chat session."""

    def factory(channel: str, submit: Submit) -> ChatBot:
        return ChatBot(settings=settings, channel=channel, submit=submit)

    return factory
