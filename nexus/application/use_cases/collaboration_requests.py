from __future__ import annotations

import logging
from dataclasses import dataclass

from nexus.domain.entities.collaboration_request import (
    CollaborationRequestEntity,
    RequestStatus,
)
from nexus.domain.errors import (
    InvalidStatusTransitionError,
    NotFoundError,
    PermissionDeniedError,
)
from nexus.infrastructure.database.repositories.collaboration_request_repository import (
    CollaborationRequestRepository,
)
from nexus.infrastructure.database.repositories.user_repository import UserRepository

logger = logging.getLogger(__name__)


@dataclass
class SendCollaborationRequestUseCase:
    requests: CollaborationRequestRepository
    users: UserRepository

    def execute(
        self, sender_id: int, receiver_id: int, message: str | None = None
    ) -> CollaborationRequestEntity:
        """
        Open a pending request from ``sender_id`` to ``receiver_id``.

        Raises:
            ValueError: If a user addresses themself
            NotFoundError: If the receiver does not exist
            ConflictError: If the same sender already has a pending request to the receiver
        """
        if sender_id == receiver_id:
            raise ValueError("Cannot send a collaboration request to yourself")
        if self.users.get(receiver_id) is None:
            raise NotFoundError("Receiver not found")
        # the repository enforces one pending request per sender/receiver pair
        request = self.requests.create(sender_id, receiver_id, message)
        logger.info("Collaboration request %s: %s -> %s", request.id, sender_id, receiver_id)
        return request


@dataclass
class RespondToCollaborationRequestUseCase:
    requests: CollaborationRequestRepository

    def execute(
        self, user_id: int, request_id: int, status: RequestStatus
    ) -> CollaborationRequestEntity:
        """Accept or reject a pending request addressed to ``user_id``."""
        request = self.requests.get(request_id)
        if request is None:
            raise NotFoundError("Request not found")
        if request.receiver_id != user_id:
            raise PermissionDeniedError("Only the receiver can respond to a request")
        # raises InvalidStatusTransitionError for terminal requests
        request.transition_to(status)
        updated = self.requests.update_status(request_id, status)
        if updated is None:
            # answered by a concurrent call since the read above
            current = self.requests.get(request_id)
            if current is None:
                raise NotFoundError("Request not found")
            raise InvalidStatusTransitionError(
                f"Request {request_id} is already {current.status.value}"
            )
        return updated
