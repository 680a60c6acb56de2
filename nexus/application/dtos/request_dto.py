from __future__ import annotations

from datetime import datetime
from typing import Literal

from pydantic import Field

from nexus.application.dtos.common_dto import CamelModel
from nexus.application.dtos.user_dto import PublicUser
from nexus.domain.entities.collaboration_request import (
    CollaborationRequestEntity,
    RequestStatus,
)


class CreateRequestBody(CamelModel):
    receiver_id: int = Field(..., description="User the request is sent to", examples=[2])
    message: str | None = Field(None, max_length=2000, description="Optional note for the receiver")


class UpdateRequestStatusBody(CamelModel):
    status: Literal["accepted", "rejected"] = Field(..., description="New status of a pending request")


class CollaborationRequestResponse(CamelModel):
    id: int
    sender_id: int
    receiver_id: int
    message: str | None = None
    status: RequestStatus
    created_at: datetime

    @classmethod
    def from_entity(cls, entity: CollaborationRequestEntity) -> CollaborationRequestResponse:
        return cls(
            id=entity.id,
            sender_id=entity.sender_id,
            receiver_id=entity.receiver_id,
            message=entity.message,
            status=entity.status,
            created_at=entity.created_at,
        )


class CollaborationRequestWithUsers(CollaborationRequestResponse):
    sender: PublicUser | None = None
    receiver: PublicUser | None = None
