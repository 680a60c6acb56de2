from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from nexus.domain.entities.profile import PROFILE_FIELDS, ProfileEntity
from nexus.domain.entities.user import UserEntity
from nexus.domain.errors import NotFoundError
from nexus.infrastructure.database.repositories.profile_repository import ProfileRepository
from nexus.infrastructure.database.repositories.user_repository import (
    MUTABLE_USER_FIELDS,
    UserRepository,
)


@dataclass
class UpdateProfileUseCase:
    """
    Write the caller's profile.

    The first write creates the profile; later writes shallow-merge only the
    fields supplied, so omitted fields keep their stored values. ``bio``,
    ``location`` and ``avatar`` belong to the user record and are patched
    there.
    """

    users: UserRepository
    profiles: ProfileRepository

    def execute(self, user_id: int, fields: dict[str, Any]) -> tuple[UserEntity, ProfileEntity]:
        user = self.users.get(user_id)
        if user is None:
            raise NotFoundError("User not found")

        user_changes = {k: v for k, v in fields.items() if k in MUTABLE_USER_FIELDS}
        if user_changes:
            user = self.users.update(user_id, user_changes) or user

        profile_changes = {k: v for k, v in fields.items() if k in PROFILE_FIELDS}
        profile = self.profiles.upsert(user_id, profile_changes)
        return user, profile
