from __future__ import annotations

from dataclasses import asdict, dataclass
from datetime import datetime
from enum import Enum
from typing import Any


class UserRole(str, Enum):
    INVESTOR = "investor"
    ENTREPRENEUR = "entrepreneur"


@dataclass(frozen=True)
class UserEntity:
    id: int
    first_name: str
    last_name: str
    email: str
    password_hash: str
    role: UserRole
    created_at: datetime
    bio: str | None = None
    location: str | None = None
    avatar: str | None = None

    def public_fields(self) -> dict[str, Any]:
        """Everything except the password hash."""
        data = asdict(self)
        data.pop("password_hash")
        return data
