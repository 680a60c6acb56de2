from __future__ import annotations

from datetime import datetime
from typing import Annotated

from pydantic import EmailStr, Field, StringConstraints

from nexus.application.dtos.common_dto import CamelModel
from nexus.application.dtos.profile_dto import ProfileResponse
from nexus.domain.entities.profile import ProfileEntity
from nexus.domain.entities.user import UserEntity, UserRole

# length is checked after stripping, so "   " is rejected rather than stored empty
PersonName = Annotated[str, StringConstraints(strip_whitespace=True, min_length=1, max_length=100)]


class PublicUser(CamelModel):
    """A user as other users see it; never carries the password hash."""
    id: int = Field(..., description="Unique identifier of the user", examples=[1])
    first_name: str = Field(..., description="Given name", examples=["Ada"])
    last_name: str = Field(..., description="Family name", examples=["Lovelace"])
    email: str = Field(..., description="Email address", examples=["ada@example.com"])
    role: UserRole = Field(..., description="investor or entrepreneur")
    bio: str | None = Field(None, description="Short biography")
    location: str | None = Field(None, description="City or region")
    avatar: str | None = Field(None, description="Avatar image URL")
    created_at: datetime = Field(..., description="ISO timestamp of registration")

    @classmethod
    def from_entity(cls, user: UserEntity) -> PublicUser:
        return cls(**user.public_fields())


class UserWithProfile(PublicUser):
    profile: ProfileResponse | None = Field(None, description="Profile details, if any were saved")

    @classmethod
    def from_entities(cls, user: UserEntity, profile: ProfileEntity | None) -> UserWithProfile:
        return cls(
            **user.public_fields(),
            profile=ProfileResponse.from_entity(profile) if profile else None,
        )


class RegisterRequest(CamelModel):
    """Request model for account registration."""
    first_name: PersonName = Field(..., examples=["Ada"])
    last_name: PersonName = Field(..., examples=["Lovelace"])
    email: EmailStr = Field(..., examples=["ada@example.com"])
    password: str = Field(..., min_length=6, max_length=128, description="Plain password, hashed before storage")
    role: UserRole = Field(..., description="investor or entrepreneur")
    bio: str | None = None
    location: str | None = None
    avatar: str | None = None


class LoginRequest(CamelModel):
    email: EmailStr
    password: str = Field(..., min_length=1)


class AuthResponse(CamelModel):
    """Returned by register and login."""
    user: PublicUser
    token: str = Field(..., description="Bearer token for the API and the chat socket")
