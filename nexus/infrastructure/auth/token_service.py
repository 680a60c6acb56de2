from __future__ import annotations

import os
from dataclasses import dataclass
from datetime import UTC, datetime, timedelta

import jwt

from nexus.domain.entities.user import UserEntity, UserRole
from nexus.domain.errors import InvalidTokenError


@dataclass(slots=True, frozen=True)
class TokenClaims:
    user_id: int
    email: str
    role: UserRole


class TokenService:
    """Issues and verifies the bearer tokens used by the API and chat socket.

    ``JWT_SECRET`` signs tokens (HS256 unless ``JWT_ALGORITHM`` says
    otherwise). ``TOKEN_TTL_MINUTES=0`` issues tokens without expiry.
    """

    def __init__(
        self,
        secret: str | None = None,
        algorithm: str | None = None,
        ttl_minutes: int | None = None,
    ) -> None:
        self.secret = secret or os.getenv("JWT_SECRET", "business-nexus-secret-key")
        self.algorithm = algorithm or os.getenv("JWT_ALGORITHM", "HS256")
        if ttl_minutes is None:
            ttl_minutes = int(os.getenv("TOKEN_TTL_MINUTES", str(7 * 24 * 60)))
        self.ttl = timedelta(minutes=ttl_minutes) if ttl_minutes > 0 else None

    def issue(self, user: UserEntity) -> str:
        now = datetime.now(UTC)
        payload = {
            "userId": user.id,
            "email": user.email,
            "role": user.role.value,
            "iat": now,
        }
        if self.ttl is not None:
            payload["exp"] = now + self.ttl
        return jwt.encode(payload, self.secret, algorithm=self.algorithm)

    def verify(self, token: str) -> TokenClaims:
        if not token or not isinstance(token, str):
            raise InvalidTokenError("Missing access token")
        try:
            payload = jwt.decode(token, self.secret, algorithms=[self.algorithm])
        except jwt.ExpiredSignatureError as exc:
            raise InvalidTokenError("Token has expired") from exc
        except jwt.InvalidTokenError as exc:
            raise InvalidTokenError("Invalid token") from exc
        try:
            return TokenClaims(
                user_id=int(payload["userId"]),
                email=str(payload["email"]),
                role=UserRole(payload["role"]),
            )
        except (KeyError, TypeError, ValueError) as exc:
            raise InvalidTokenError("Invalid token") from exc
