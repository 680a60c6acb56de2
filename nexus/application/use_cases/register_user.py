from __future__ import annotations

import logging
from dataclasses import dataclass

from nexus.domain.entities.user import UserEntity, UserRole
from nexus.domain.errors import ConflictError
from nexus.infrastructure.auth.passwords import hash_password
from nexus.infrastructure.auth.token_service import TokenService
from nexus.infrastructure.database.repositories.user_repository import UserRepository

logger = logging.getLogger(__name__)


@dataclass
class RegisterUserUseCase:
    users: UserRepository
    tokens: TokenService

    def execute(
        self,
        first_name: str,
        last_name: str,
        email: str,
        password: str,
        role: UserRole,
        *,
        bio: str | None = None,
        location: str | None = None,
        avatar: str | None = None,
    ) -> tuple[UserEntity, str]:
        """
        Create an account and issue its first token.

        Emails are compared case-insensitively and stored lower-cased.

        Raises:
            ConflictError: If the email is already registered
        """
        email = email.strip().lower()
        if self.users.get_by_email(email) is not None:
            raise ConflictError("User already exists")
        user = self.users.create(
            first_name=first_name.strip(),
            last_name=last_name.strip(),
            email=email,
            password_hash=hash_password(password),
            role=role,
            bio=bio,
            location=location,
            avatar=avatar,
        )
        logger.info("Registered user %s as %s", user.id, user.role.value)
        return user, self.tokens.issue(user)
