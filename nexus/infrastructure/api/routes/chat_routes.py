from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, WebSocket, WebSocketDisconnect

from nexus.application.dtos.chat_dto import MessageWithSender
from nexus.application.use_cases.chat_session import ChannelSession
from nexus.application.use_cases.relay_message import MessageRelay
from nexus.domain.services.presence_registry import PresenceRegistry
from nexus.infrastructure.api.dependencies import (
    get_current_user,
    get_message_relay,
    get_message_repo,
    get_presence,
    get_token_service,
    get_user_repo,
)
from nexus.infrastructure.api.websocket_channel import WebSocketChannel
from nexus.infrastructure.auth.token_service import TokenClaims, TokenService
from nexus.infrastructure.database.repositories.message_repository import MessageRepository
from nexus.infrastructure.database.repositories.user_repository import UserRepository

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Chat"])


@router.get(
    "/api/chat/{user_id}",
    response_model=list[MessageWithSender],
    summary="Get Chat History",
    description="""
    Messages exchanged between the caller and `user_id`, oldest first, each
    with the sender's public fields. Messages sent while the other user was
    offline are only available here.

    **Authentication required**: Yes (Bearer token)
    """,
    responses={401: {"description": "Unauthorized - Invalid or missing authentication token"}},
)
def get_chat_history(
    user_id: int,
    claims: TokenClaims = Depends(get_current_user),
    messages: MessageRepository = Depends(get_message_repo),
    users: UserRepository = Depends(get_user_repo),
):
    senders = {}
    out = []
    for m in messages.list_between(claims.user_id, user_id):
        if m.sender_id not in senders:
            senders[m.sender_id] = users.get(m.sender_id)
        out.append(MessageWithSender.from_entities(m, senders[m.sender_id]))
    return out


@router.websocket("/ws")
async def chat_socket(
    websocket: WebSocket,
    presence: PresenceRegistry = Depends(get_presence),
    tokens: TokenService = Depends(get_token_service),
    relay: MessageRelay = Depends(get_message_relay),
):
    """Real-time chat channel; see ChannelSession for the frame protocol."""
    await websocket.accept()
    session = ChannelSession(WebSocketChannel(websocket), presence, tokens, relay)
    try:
        while True:
            event = await websocket.receive()
            if event["type"] == "websocket.disconnect":
                break
            raw = event.get("text")
            if raw is None:
                raw = event.get("bytes")
            if raw is None:
                continue
            await session.handle_frame(raw)
    except WebSocketDisconnect:
        # peer vanished while we were sending
        pass
    finally:
        session.close()
        logger.debug("Chat socket closed (user=%s)", session.user_id)
