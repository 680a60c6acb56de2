"""Lifecycle of one chat socket.

A session starts unauthenticated, becomes authenticated after a valid
``auth`` frame and is closed once the peer goes away. Frames of one session
are handled one at a time in arrival order; the caller must await
``handle_frame`` before reading the next frame.
"""
from __future__ import annotations

import json
import logging
from enum import Enum
from typing import Any

from pydantic import ValidationError

from nexus.application.dtos.chat_dto import (
    ChatMessageFrame,
    auth_error_frame,
    auth_success_frame,
    message_error_frame,
)
from nexus.application.use_cases.relay_message import MessageRelay
from nexus.domain.errors import (
    InvalidTokenError,
    MessagePersistenceError,
    MessageValidationError,
)
from nexus.domain.services.presence_registry import Channel, PresenceRegistry
from nexus.infrastructure.auth.token_service import TokenService

logger = logging.getLogger(__name__)


class SessionState(str, Enum):
    UNAUTHENTICATED = "unauthenticated"
    AUTHENTICATED = "authenticated"
    CLOSED = "closed"


class ChannelSession:
    def __init__(
        self,
        channel: Channel,
        presence: PresenceRegistry,
        tokens: TokenService,
        relay: MessageRelay,
    ) -> None:
        self.channel = channel
        self.presence = presence
        self.tokens = tokens
        self.relay = relay
        self.state = SessionState.UNAUTHENTICATED
        self.user_id: int | None = None

    @property
    def is_authenticated(self) -> bool:
        return self.state is SessionState.AUTHENTICATED

    async def handle_frame(self, raw: str | bytes) -> None:
        """React to one inbound frame. Malformed frames are logged and dropped."""
        if self.state is SessionState.CLOSED:
            return
        try:
            payload = json.loads(raw)
        except (ValueError, TypeError):
            logger.warning("Dropping unparseable chat frame (user=%s)", self.user_id)
            return
        if not isinstance(payload, dict):
            logger.warning("Dropping non-object chat frame (user=%s)", self.user_id)
            return

        kind = payload.get("type")
        if kind == "auth":
            await self._authenticate(payload)
        elif kind == "chat_message":
            await self._chat(payload)
        else:
            logger.debug("Ignoring chat frame of type %r", kind)

    async def _authenticate(self, payload: dict[str, Any]) -> None:
        try:
            claims = self.tokens.verify(payload.get("token"))
        except InvalidTokenError as exc:
            logger.info("Chat authentication rejected: %s", exc)
            await self.channel.send_frame(auth_error_frame(str(exc)))
            return

        # re-authentication as someone else releases the old binding
        if self.user_id is not None and self.user_id != claims.user_id:
            self.presence.unregister(self.user_id, self.channel)
        self.user_id = claims.user_id
        self.presence.register(claims.user_id, self.channel)
        self.state = SessionState.AUTHENTICATED
        logger.info("User %s connected to chat (%d online)", claims.user_id, len(self.presence))
        await self.channel.send_frame(auth_success_frame())

    async def _chat(self, payload: dict[str, Any]) -> None:
        if not self.is_authenticated or self.user_id is None:
            logger.debug("Ignoring chat_message on unauthenticated channel")
            return
        try:
            frame = ChatMessageFrame.model_validate(payload)
        except ValidationError as exc:
            logger.warning(
                "Dropping malformed chat_message from user %s: %s",
                self.user_id,
                exc.errors(include_url=False),
            )
            return

        try:
            await self.relay.relay(self.user_id, frame.receiverId, frame.content, self.channel)
        except MessageValidationError as exc:
            logger.info("Dropping chat_message from user %s: %s", self.user_id, exc)
        except MessagePersistenceError:
            logger.exception("Chat message from user %s was not stored", self.user_id)
            await self.channel.send_frame(message_error_frame("Message could not be sent"))

    def close(self) -> None:
        """Release the presence binding, if this channel still holds it."""
        if self.state is SessionState.AUTHENTICATED and self.user_id is not None:
            if self.presence.unregister(self.user_id, self.channel):
                logger.info(
                    "User %s left chat (%d online)", self.user_id, len(self.presence)
                )
        self.state = SessionState.CLOSED
