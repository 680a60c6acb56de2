"""Chat messages and the frames exchanged over the chat socket."""
from __future__ import annotations

from datetime import datetime
from typing import Any, Literal

from pydantic import BaseModel, Field, StrictInt, StrictStr

from nexus.application.dtos.common_dto import CamelModel
from nexus.application.dtos.user_dto import PublicUser
from nexus.domain.entities.message import MessageEntity
from nexus.domain.entities.user import UserEntity


class MessageWithSender(CamelModel):
    """A persisted message plus the sender's public fields."""
    id: int = Field(..., description="Server-assigned message id")
    sender_id: int
    receiver_id: int
    content: str
    timestamp: datetime = Field(..., description="Server timestamp of persistence")
    sender: PublicUser | None = None

    @classmethod
    def from_entities(cls, message: MessageEntity, sender: UserEntity | None) -> MessageWithSender:
        return cls(
            id=message.id,
            sender_id=message.sender_id,
            receiver_id=message.receiver_id,
            content=message.content,
            timestamp=message.timestamp,
            sender=PublicUser.from_entity(sender) if sender else None,
        )

    def to_wire(self) -> dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True)


# Inbound chat frame. Unknown keys are ignored; wrong types fail validation and
# the frame is dropped as malformed.
class ChatMessageFrame(BaseModel):
    type: Literal["chat_message"]
    receiverId: StrictInt
    content: StrictStr


# Outbound frames.
def auth_success_frame() -> dict[str, Any]:
    return {"type": "auth_success"}


def auth_error_frame(reason: str) -> dict[str, Any]:
    return {"type": "auth_error", "message": reason}


def new_message_frame(message: MessageWithSender) -> dict[str, Any]:
    return {"type": "new_message", "message": message.to_wire()}


def message_sent_frame(message: MessageWithSender) -> dict[str, Any]:
    return {"type": "message_sent", "message": message.to_wire()}


def message_error_frame(reason: str) -> dict[str, Any]:
    return {"type": "message_error", "message": reason}
