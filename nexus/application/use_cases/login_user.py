from __future__ import annotations

from dataclasses import dataclass

from nexus.domain.entities.user import UserEntity
from nexus.domain.errors import InvalidCredentialsError
from nexus.infrastructure.auth.passwords import verify_password
from nexus.infrastructure.auth.token_service import TokenService
from nexus.infrastructure.database.repositories.user_repository import UserRepository


@dataclass
class LoginUserUseCase:
    users: UserRepository
    tokens: TokenService

    def execute(self, email: str, password: str) -> tuple[UserEntity, str]:
        user = self.users.get_by_email(email.strip().lower())
        # same error for unknown email and wrong password
        if user is None or not verify_password(password, user.password_hash):
            raise InvalidCredentialsError("Invalid credentials")
        return user, self.tokens.issue(user)
