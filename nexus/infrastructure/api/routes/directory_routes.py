from __future__ import annotations

from fastapi import APIRouter, Depends

from nexus.application.dtos.user_dto import UserWithProfile
from nexus.domain.entities.user import UserRole
from nexus.infrastructure.api.dependencies import (
    get_current_user,
    get_profile_repo,
    get_user_repo,
)
from nexus.infrastructure.database.repositories.profile_repository import ProfileRepository
from nexus.infrastructure.database.repositories.user_repository import UserRepository

router = APIRouter(
    prefix="/api",
    tags=["Directory"],
    dependencies=[Depends(get_current_user)],
    responses={401: {"description": "Unauthorized - Invalid or missing authentication token"}},
)


def _directory(role: UserRole, users: UserRepository, profiles: ProfileRepository) -> list[UserWithProfile]:
    return [
        UserWithProfile.from_entities(user, profiles.get_by_user(user.id))
        for user in users.list_by_role(role)
    ]


@router.get(
    "/entrepreneurs",
    response_model=list[UserWithProfile],
    summary="List Entrepreneurs",
    description="Every entrepreneur with their profile, for investors browsing startups.",
)
def list_entrepreneurs(
    users: UserRepository = Depends(get_user_repo),
    profiles: ProfileRepository = Depends(get_profile_repo),
):
    return _directory(UserRole.ENTREPRENEUR, users, profiles)


@router.get(
    "/investors",
    response_model=list[UserWithProfile],
    summary="List Investors",
    description="Every investor with their profile, for entrepreneurs looking for funding.",
)
def list_investors(
    users: UserRepository = Depends(get_user_repo),
    profiles: ProfileRepository = Depends(get_profile_repo),
):
    return _directory(UserRole.INVESTOR, users, profiles)
