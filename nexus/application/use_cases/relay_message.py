from __future__ import annotations

import logging
from dataclasses import dataclass

from starlette.concurrency import run_in_threadpool

from nexus.application.dtos.chat_dto import (
    MessageWithSender,
    message_sent_frame,
    new_message_frame,
)
from nexus.domain.errors import MessagePersistenceError, MessageValidationError
from nexus.domain.services.presence_registry import Channel, PresenceRegistry
from nexus.infrastructure.database.repositories.message_repository import MessageRepository
from nexus.infrastructure.database.repositories.user_repository import UserRepository

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DeliveryOutcome:
    message: MessageWithSender
    delivered_live: bool  # True if a new_message frame reached the recipient's channel


@dataclass
class MessageRelay:
    """
    Persist a chat message, then push it to whoever should see it live.

    One durable write, zero or one push to the recipient, exactly one
    ``message_sent`` push back to the submitting channel. Repository calls run
    in the threadpool so a slow store never stalls other channels.
    """

    messages: MessageRepository
    users: UserRepository
    presence: PresenceRegistry

    async def relay(
        self, sender_id: int, receiver_id: int, content: str, reply_to: Channel
    ) -> DeliveryOutcome:
        """
        Args:
            sender_id: Authenticated user submitting the message
            receiver_id: Addressee; need not be online or even registered
            content: Message text, stored as sent
            reply_to: The channel that submitted the message

        Raises:
            MessageValidationError: If ``content`` is blank; nothing is stored or sent
            MessagePersistenceError: If the store rejected the write; nothing is sent
        """
        if not content or not content.strip():
            raise MessageValidationError("Message content cannot be empty")

        try:
            entity = await run_in_threadpool(
                self.messages.create, sender_id, receiver_id, content
            )
        except Exception as exc:
            raise MessagePersistenceError(f"Storing message failed: {exc}") from exc

        try:
            sender = await run_in_threadpool(self.users.get, sender_id)
        except Exception:
            logger.warning("Sender lookup failed for message %s", entity.id, exc_info=True)
            sender = None
        payload = MessageWithSender.from_entities(entity, sender)

        delivered = False
        if self.presence.is_online(receiver_id):
            recipient = self.presence.lookup(receiver_id)
            try:
                await recipient.send_frame(new_message_frame(payload))
                delivered = True
            except Exception:
                # best effort: the message is stored and shows up in chat history
                logger.warning(
                    "Live delivery of message %s to user %s failed",
                    entity.id,
                    receiver_id,
                    exc_info=True,
                )

        await reply_to.send_frame(message_sent_frame(payload))
        logger.debug(
            "Relayed message %s from %s to %s (live=%s)",
            entity.id,
            sender_id,
            receiver_id,
            delivered,
        )
        return DeliveryOutcome(message=payload, delivered_live=delivered)
