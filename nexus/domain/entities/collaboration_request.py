from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import datetime
from enum import Enum

from nexus.domain.errors import InvalidStatusTransitionError


class RequestStatus(str, Enum):
    PENDING = "pending"
    ACCEPTED = "accepted"
    REJECTED = "rejected"


@dataclass(frozen=True)
class CollaborationRequestEntity:
    id: int
    sender_id: int
    receiver_id: int
    status: RequestStatus
    created_at: datetime
    message: str | None = None

    @property
    def is_terminal(self) -> bool:
        return self.status is not RequestStatus.PENDING

    def transition_to(self, status: RequestStatus) -> CollaborationRequestEntity:
        """Return a copy moved to ``status``.

        Only pending requests may change, and only to accepted or rejected.
        """
        if status is RequestStatus.PENDING:
            raise InvalidStatusTransitionError("Requests can only be accepted or rejected")
        if self.is_terminal:
            raise InvalidStatusTransitionError(
                f"Request {self.id} is already {self.status.value}"
            )
        return replace(self, status=status)
