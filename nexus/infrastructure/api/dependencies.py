from __future__ import annotations

from typing import Annotated

from fastapi import Depends, HTTPException, Security, status
from fastapi.requests import HTTPConnection
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from nexus.application.use_cases.relay_message import MessageRelay
from nexus.domain.errors import InvalidTokenError
from nexus.domain.services.presence_registry import PresenceRegistry
from nexus.infrastructure.auth.token_service import TokenClaims, TokenService
from nexus.infrastructure.database.repositories.collaboration_request_repository import (
    CollaborationRequestRepository,
)
from nexus.infrastructure.database.repositories.message_repository import MessageRepository
from nexus.infrastructure.database.repositories.profile_repository import ProfileRepository
from nexus.infrastructure.database.repositories.user_repository import UserRepository

_bearer_scheme = HTTPBearer(auto_error=False)

# Everything below reads from app.state, which create_app() fills once per
# application. HTTPConnection makes the getters usable from both HTTP routes
# and the chat WebSocket.


def get_token_service(conn: HTTPConnection) -> TokenService:
    return conn.app.state.tokens


def get_user_repo(conn: HTTPConnection) -> UserRepository:
    return conn.app.state.users


def get_profile_repo(conn: HTTPConnection) -> ProfileRepository:
    return conn.app.state.profiles


def get_request_repo(conn: HTTPConnection) -> CollaborationRequestRepository:
    return conn.app.state.requests


def get_message_repo(conn: HTTPConnection) -> MessageRepository:
    return conn.app.state.messages


def get_presence(conn: HTTPConnection) -> PresenceRegistry:
    return conn.app.state.presence


def get_message_relay(
    messages: Annotated[MessageRepository, Depends(get_message_repo)],
    users: Annotated[UserRepository, Depends(get_user_repo)],
    presence: Annotated[PresenceRegistry, Depends(get_presence)],
) -> MessageRelay:
    return MessageRelay(messages=messages, users=users, presence=presence)


def get_current_user(
    credentials: Annotated[HTTPAuthorizationCredentials | None, Security(_bearer_scheme)] = None,
    tokens: Annotated[TokenService, Depends(get_token_service)] = None,
) -> TokenClaims:
    if not credentials or not credentials.scheme or credentials.scheme.lower() != "bearer":
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Access token required")
    try:
        return tokens.verify(credentials.credentials)
    except InvalidTokenError as exc:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail=str(exc)) from exc
